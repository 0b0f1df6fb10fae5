#!/usr/bin/env python3
"""Seed product catalog script.

Creates demo categories and products through the catalog services, so
slugs and rating summaries are produced exactly as the API would
produce them.

Usage:
    python scripts/seed_catalog.py
    python scripts/seed_catalog.py --with-reviews
"""

import argparse
import asyncio
import sys
from decimal import Decimal
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from storefront.catalog.models import User
from storefront.catalog.service import CatalogService, CategoryService, ProductInput
from storefront.domain.exceptions import DuplicateCategoryError, DuplicateSkuError
from storefront.infrastructure.database import async_session_factory, create_tables

CATEGORIES = [
    {"name": "Electronics", "description": "Phones, audio and accessories", "sort_order": 1},
    {"name": "Clothing", "description": "Apparel for every season", "sort_order": 2},
    {"name": "Home & Kitchen", "description": "Cookware and home goods", "sort_order": 3},
]

PRODUCTS = [
    {
        "category": "Electronics",
        "name": "Wireless Headphones",
        "sku": "ELEC-HP-001",
        "price": "129.99",
        "sale_price": "99.99",
        "stock": 40,
        "tags": ["audio", "bluetooth", "noise-cancelling"],
        "is_featured": True,
        "specifications": [{"name": "Battery", "value": "30h"}],
    },
    {
        "category": "Electronics",
        "name": "USB-C Charger 65W",
        "sku": "ELEC-CH-065",
        "price": "39.00",
        "stock": 5,
        "tags": ["charger", "usb-c"],
    },
    {
        "category": "Clothing",
        "name": "Red Shoes",
        "sku": "CLO-SH-RED",
        "price": "59.50",
        "stock": 25,
        "tags": ["shoes", "red", "running"],
        "is_featured": True,
        "variants": [
            {"name": "Size", "value": "42", "price": 59.5, "stock": 10},
            {"name": "Size", "value": "44", "price": 62.0, "stock": 15},
        ],
    },
    {
        "category": "Clothing",
        "name": "Red Shoes",
        "sku": "CLO-SH-RED-KIDS",
        "price": "39.50",
        "stock": 12,
        "tags": ["shoes", "red", "kids"],
    },
    {
        "category": "Home & Kitchen",
        "name": "Cast Iron Skillet",
        "sku": "HOME-SK-10",
        "price": "34.95",
        "stock": 18,
        "tags": ["cookware"],
        "weight": 2.4,
        "dimensions": {"length": 40, "width": 26, "height": 5},
    },
]

USERS = [
    {"first_name": "Ada", "last_name": "Lovelace", "email": "ada@example.com"},
    {"first_name": "Grace", "last_name": "Hopper", "email": "grace@example.com"},
]

REVIEWS = [
    ("CLO-SH-RED", 0, 5, "Comfortable from day one."),
    ("CLO-SH-RED", 1, 4, "Runs a little small."),
    ("ELEC-HP-001", 0, 4, "Great sound, average microphone."),
]


async def seed_categories() -> dict[str, str]:
    """Create demo categories, skipping ones that exist.

    Returns:
        Category name to category id.
    """
    async with async_session_factory() as session:
        service = CategoryService(session)
        for data in CATEGORIES:
            try:
                category = await service.create_category(**data)
                print(f"  ✓ Category: {category.name} ({category.slug})")
            except DuplicateCategoryError:
                print(f"  - Category exists: {data['name']}")

        return {c.name: c.id for c in await service.list_categories()}


async def seed_products(category_ids: dict[str, str]) -> dict[str, str]:
    """Create demo products, skipping SKUs that exist.

    Returns:
        SKU to product id for the products created.
    """
    created: dict[str, str] = {}
    async with async_session_factory() as session:
        service = CatalogService(session)
        for data in PRODUCTS:
            fields = dict(data)
            category = fields.pop("category")
            fields["price"] = Decimal(fields["price"])
            if "sale_price" in fields:
                fields["sale_price"] = Decimal(fields["sale_price"])
            try:
                product = await service.create_product(
                    ProductInput(
                        description=f"{fields['name']} from the demo catalog.",
                        category_id=category_ids[category],
                        **fields,
                    )
                )
            except DuplicateSkuError:
                print(f"  - Product exists: {fields['sku']}")
                continue
            created[product.sku] = product.id
            print(f"  ✓ Product: {product.name} -> /products/{product.slug}")
    return created


async def seed_reviews(product_ids: dict[str, str]) -> None:
    """Create demo users and their reviews for freshly created products."""
    async with async_session_factory() as session:
        users = [User(**data) for data in USERS]
        session.add_all(users)
        await session.commit()

        service = CatalogService(session)
        for sku, user_index, rating, comment in REVIEWS:
            if sku not in product_ids:
                continue
            product = await service.add_review(
                product_ids[sku],
                user_id=users[user_index].id,
                rating=rating,
                comment=comment,
            )
            print(f"  ✓ Review on {product.slug}: rating now {product.rating}")


async def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Seed demo categories and products",
    )
    parser.add_argument(
        "--with-reviews",
        action="store_true",
        help="Also create demo users and reviews for newly created products",
    )

    args = parser.parse_args()

    print("=" * 60)
    print("Storefront Catalog Seeder")
    print("=" * 60)

    print("Creating database tables...")
    await create_tables()
    print("Tables ready.")
    print()

    print("Seeding categories...")
    category_ids = await seed_categories()
    print()

    print("Seeding products...")
    product_ids = await seed_products(category_ids)
    print()

    if args.with_reviews:
        print("Seeding reviews...")
        await seed_reviews(product_ids)
        print()

    print("=" * 60)
    print("Seeding complete!")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
