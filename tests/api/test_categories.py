"""Tests for category API endpoints."""

from collections.abc import Callable
from typing import Any

from fastapi.testclient import TestClient

CreateFn = Callable[..., dict[str, Any]]


def test_create_category(create_category: CreateFn) -> None:
    category = create_category("Home & Kitchen", description="Cookware", sortOrder=3)

    assert category["slug"] == "home-kitchen"
    assert category["description"] == "Cookware"
    assert category["sortOrder"] == 3
    assert category["isActive"] is True


def test_list_categories_in_display_order(
    client: TestClient, create_category: CreateFn
) -> None:
    create_category("Clothing", sortOrder=2)
    create_category("Toys", sortOrder=1)
    create_category("Books", sortOrder=2)

    response = client.get("/categories")

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert [c["name"] for c in data["categories"]] == ["Toys", "Books", "Clothing"]


def test_get_category_by_slug(client: TestClient, create_category: CreateFn) -> None:
    created = create_category("Shoes")

    response = client.get("/categories/shoes")

    assert response.status_code == 200
    assert response.json()["category"]["id"] == created["id"]


def test_unknown_category(client: TestClient) -> None:
    response = client.get("/categories/nope")

    assert response.status_code == 404
    assert response.json()["error_code"] == "CATEGORY_NOT_FOUND"


def test_duplicate_category(
    client: TestClient, auth_headers: dict[str, str], create_category: CreateFn
) -> None:
    create_category("Shoes")

    response = client.post("/categories", json={"name": "Shoes"}, headers=auth_headers)

    assert response.status_code == 409
    assert response.json()["error_code"] == "DUPLICATE_CATEGORY"


def test_products_filtered_by_category(
    client: TestClient,
    create_category: CreateFn,
    create_product: CreateFn,
) -> None:
    shoes = create_category("Shoes")
    bags = create_category("Bags")
    create_product(sku="A", category=shoes["id"])
    create_product(name="Tote", sku="B", category=bags["id"])

    response = client.get("/products", params={"category": bags["id"]})

    products = response.json()["products"]
    assert [p["sku"] for p in products] == ["B"]
    assert products[0]["category"]["slug"] == "bags"
