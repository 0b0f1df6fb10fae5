"""Tests for product API endpoints."""

from collections.abc import Callable
from typing import Any

from fastapi.testclient import TestClient

CreateFn = Callable[..., dict[str, Any]]


class TestListProducts:
    """Tests for GET /products."""

    def test_empty_catalog(self, client: TestClient) -> None:
        response = client.get("/products")

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["products"] == []
        assert data["pagination"] == {"page": 1, "pages": 0, "total": 0, "limit": 12}

    def test_pagination(self, client: TestClient, create_product: CreateFn) -> None:
        for index in range(25):
            create_product(name=f"Product {index:02d}", sku=f"SKU-{index:02d}")

        response = client.get("/products", params={"page": "3", "limit": "12", "sort": "name"})

        assert response.status_code == 200
        data = response.json()
        assert data["pagination"] == {"page": 3, "pages": 3, "total": 25, "limit": 12}
        assert [p["name"] for p in data["products"]] == ["Product 24"]

    def test_malformed_params_do_not_fail(
        self, client: TestClient, create_product: CreateFn
    ) -> None:
        create_product()

        response = client.get(
            "/products",
            params={"page": "abc", "limit": "-3", "minPrice": "cheap", "sort": "??"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["pagination"]["page"] == 1
        assert data["pagination"]["limit"] == 12
        assert data["pagination"]["total"] == 1

    def test_filters_and_camel_case_fields(
        self, client: TestClient, create_product: CreateFn
    ) -> None:
        create_product(name="Budget Tee", sku="A", price=9.5, tags=["cotton"])
        create_product(name="Luxury Tee", sku="B", price=120, isFeatured=True, salePrice=99)

        response = client.get("/products", params={"featured": "true"})
        products = response.json()["products"]
        assert [p["sku"] for p in products] == ["B"]
        assert products[0]["isFeatured"] is True
        assert products[0]["salePrice"] == 99.0
        assert products[0]["numReviews"] == 0
        assert "reviews" not in products[0]

        response = client.get("/products", params={"maxPrice": "10"})
        assert [p["sku"] for p in response.json()["products"]] == ["A"]

        response = client.get("/products", params={"search": "COTT"})
        assert [p["sku"] for p in response.json()["products"]] == ["A"]

    def test_limit_is_capped(self, client: TestClient, create_product: CreateFn) -> None:
        create_product()

        response = client.get("/products", params={"limit": "5000"})
        assert response.json()["pagination"]["limit"] == 100

    def test_huge_page_is_empty(self, client: TestClient, create_product: CreateFn) -> None:
        create_product()

        response = client.get("/products", params={"page": "99999999999999999999"})

        assert response.status_code == 200
        data = response.json()
        assert data["products"] == []
        assert data["pagination"]["total"] == 1


class TestGetProduct:
    """Tests for GET /products/{slug}."""

    def test_detail_includes_category_and_reviews(
        self,
        client: TestClient,
        auth_headers: dict[str, str],
        create_category: CreateFn,
        create_product: CreateFn,
        create_user: Callable[..., str],
    ) -> None:
        category = create_category("Shoes")
        product = create_product(category=category["id"])
        user_id = create_user("Grace", "Hopper")
        client.post(
            f"/products/{product['id']}/reviews",
            json={"rating": 5, "comment": "Perfect fit"},
            headers={**auth_headers, "X-User-ID": user_id},
        )

        response = client.get("/products/red-shoes")

        assert response.status_code == 200
        detail = response.json()["product"]
        assert detail["category"] == {"id": category["id"], "name": "Shoes", "slug": "shoes"}
        assert detail["rating"] == 5.0
        assert len(detail["reviews"]) == 1
        review = detail["reviews"][0]
        assert review["user"] == {"id": user_id, "firstName": "Grace", "lastName": "Hopper"}
        assert review["comment"] == "Perfect fit"
        assert "createdAt" in review

    def test_unknown_slug(self, client: TestClient) -> None:
        response = client.get("/products/missing")

        assert response.status_code == 404
        data = response.json()
        assert data["error_code"] == "PRODUCT_NOT_FOUND"
        assert "request_id" in data


class TestCreateProduct:
    """Tests for POST /products."""

    def test_requires_auth(self, client: TestClient) -> None:
        response = client.post("/products", json={"name": "X"})
        assert response.status_code == 401

    def test_create(self, client: TestClient, create_product: CreateFn) -> None:
        product = create_product(
            images=[{"url": "https://cdn.example.com/a.jpg", "alt": "Side", "isPrimary": True}],
            specifications=[{"name": "Material", "value": "Mesh"}],
            variants=[{"name": "Size", "value": "42", "price": 64.5, "stock": 2}],
            dimensions={"length": 30, "width": 12, "height": 10},
            weight=0.8,
            stock=3,
        )

        assert product["slug"] == "red-shoes"
        assert product["price"] == 59.99
        assert product["images"][0]["isPrimary"] is True
        assert product["specifications"] == [{"name": "Material", "value": "Mesh"}]
        assert product["variants"] == [{"name": "Size", "value": "42", "price": 64.5, "stock": 2}]
        assert product["dimensions"] == {"length": 30.0, "width": 12.0, "height": 10.0}
        assert product["isLowStock"] is True
        assert product["category"] is None

    def test_same_name_gets_suffix(self, client: TestClient, create_product: CreateFn) -> None:
        first = create_product(sku="A")
        second = create_product(sku="B")
        third = create_product(sku="C")

        assert [first["slug"], second["slug"], third["slug"]] == [
            "red-shoes",
            "red-shoes-2",
            "red-shoes-3",
        ]

    def test_duplicate_sku(
        self, client: TestClient, auth_headers: dict[str, str], create_product: CreateFn
    ) -> None:
        create_product()

        response = client.post(
            "/products",
            json={
                "name": "Other",
                "description": "d",
                "price": 1,
                "sku": "SKU-RED-001",
                "category": "c",
            },
            headers=auth_headers,
        )

        assert response.status_code == 409
        assert response.json()["error_code"] == "DUPLICATE_SKU"

    def test_unsluggable_name(self, client: TestClient, auth_headers: dict[str, str]) -> None:
        response = client.post(
            "/products",
            json={"name": "!!!", "description": "d", "price": 1, "sku": "S", "category": "c"},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_INPUT"

    def test_validation_error_shape(
        self, client: TestClient, auth_headers: dict[str, str]
    ) -> None:
        response = client.post(
            "/products",
            json={"name": "Shoes", "description": "d", "price": -1, "sku": "S", "category": "c"},
            headers=auth_headers,
        )

        assert response.status_code == 422
        data = response.json()
        assert data["error_code"] == "VALIDATION_ERROR"
        assert any(d["field"].endswith("price") for d in data["details"])


class TestUpdateProduct:
    """Tests for PUT /products/{id}."""

    def test_partial_update(
        self, client: TestClient, auth_headers: dict[str, str], create_product: CreateFn
    ) -> None:
        product = create_product(tags=["running"], isFeatured=True)

        response = client.put(
            f"/products/{product['id']}",
            json={"stock": 0, "isFeatured": False},
            headers=auth_headers,
        )

        assert response.status_code == 200
        updated = response.json()["product"]
        assert updated["stock"] == 0
        assert updated["isFeatured"] is False
        assert updated["name"] == "Red Shoes"
        assert updated["tags"] == ["running"]
        assert updated["price"] == 59.99

    def test_rename_changes_slug(
        self, client: TestClient, auth_headers: dict[str, str], create_product: CreateFn
    ) -> None:
        product = create_product()

        response = client.put(
            f"/products/{product['id']}",
            json={"name": "Crimson Shoes"},
            headers=auth_headers,
        )

        assert response.json()["product"]["slug"] == "crimson-shoes"
        assert client.get("/products/red-shoes").status_code == 404
        assert client.get("/products/crimson-shoes").status_code == 200

    def test_clear_sale_price(
        self, client: TestClient, auth_headers: dict[str, str], create_product: CreateFn
    ) -> None:
        product = create_product(salePrice=49.99)

        response = client.put(
            f"/products/{product['id']}",
            json={"salePrice": None},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["product"]["salePrice"] is None

    def test_null_for_required_field(
        self, client: TestClient, auth_headers: dict[str, str], create_product: CreateFn
    ) -> None:
        product = create_product()

        response = client.put(
            f"/products/{product['id']}",
            json={"name": None},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_INPUT"

    def test_unknown_product(self, client: TestClient, auth_headers: dict[str, str]) -> None:
        response = client.put("/products/missing", json={"stock": 1}, headers=auth_headers)
        assert response.status_code == 404


class TestDeleteProduct:
    """Tests for DELETE /products/{id}."""

    def test_delete(
        self, client: TestClient, auth_headers: dict[str, str], create_product: CreateFn
    ) -> None:
        product = create_product()

        response = client.delete(f"/products/{product['id']}", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Product deleted"}
        assert client.get("/products/red-shoes").status_code == 404

    def test_delete_unknown(self, client: TestClient, auth_headers: dict[str, str]) -> None:
        response = client.delete("/products/missing", headers=auth_headers)
        assert response.status_code == 404


class TestReviews:
    """Tests for POST /products/{id}/reviews."""

    def _review(
        self,
        client: TestClient,
        auth_headers: dict[str, str],
        product_id: str,
        user_id: str,
        rating: int,
    ) -> Any:
        return client.post(
            f"/products/{product_id}/reviews",
            json={"rating": rating, "comment": "Review text"},
            headers={**auth_headers, "X-User-ID": user_id},
        )

    def test_review_updates_rating(
        self, client: TestClient, auth_headers: dict[str, str], create_product: CreateFn
    ) -> None:
        product = create_product()

        for user_id, rating in [("u1", 4), ("u2", 4), ("u3", 4)]:
            self._review(client, auth_headers, product["id"], user_id, rating)
        response = self._review(client, auth_headers, product["id"], "u4", 5)

        assert response.status_code == 201
        assert response.json() == {
            "success": True,
            "message": "Review added",
            "rating": 4.3,
            "numReviews": 4,
        }

    def test_duplicate_review(
        self, client: TestClient, auth_headers: dict[str, str], create_product: CreateFn
    ) -> None:
        product = create_product()
        self._review(client, auth_headers, product["id"], "u1", 5)

        response = self._review(client, auth_headers, product["id"], "u1", 1)

        assert response.status_code == 409
        data = response.json()
        assert data["error_code"] == "DUPLICATE_REVIEW"
        assert data["message"] == "Product already reviewed"

        detail = client.get("/products/red-shoes").json()["product"]
        assert detail["numReviews"] == 1
        assert detail["rating"] == 5.0

    def test_missing_user(
        self, client: TestClient, auth_headers: dict[str, str], create_product: CreateFn
    ) -> None:
        product = create_product()

        response = client.post(
            f"/products/{product['id']}/reviews",
            json={"rating": 5, "comment": "Great"},
            headers=auth_headers,
        )

        assert response.status_code == 401
        assert response.json()["error_code"] == "USER_REQUIRED"

    def test_rating_out_of_range(
        self, client: TestClient, auth_headers: dict[str, str], create_product: CreateFn
    ) -> None:
        product = create_product()

        response = self._review(client, auth_headers, product["id"], "u1", 6)
        assert response.status_code == 422

    def test_overlong_user_id(
        self, client: TestClient, auth_headers: dict[str, str], create_product: CreateFn
    ) -> None:
        product = create_product()

        response = self._review(client, auth_headers, product["id"], "x" * 200, 5)

        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_INPUT"

    def test_unknown_product(self, client: TestClient, auth_headers: dict[str, str]) -> None:
        response = self._review(client, auth_headers, "missing", "u1", 5)
        assert response.status_code == 404
