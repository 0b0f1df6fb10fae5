"""Shared fixtures for storefront tests.

Every test gets its own in-memory SQLite database, so tests never see
each other's rows.
"""

import os

# Must be set before storefront modules read settings
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["STOREFRONT_API_KEY"] = "test-api-key"
os.environ["LOG_JSON"] = "false"

from collections.abc import AsyncGenerator, Callable  # noqa: E402
from decimal import Decimal  # noqa: E402
from typing import Any  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker  # noqa: E402

from storefront.catalog.service import ProductInput  # noqa: E402
from storefront.infrastructure.database import build_engine, create_tables  # noqa: E402

TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create a fresh in-memory database with all tables."""
    test_engine = build_engine(TEST_DATABASE_URL)
    await create_tables(bind=test_engine)
    yield test_engine
    await test_engine.dispose()


@pytest_asyncio.fixture
async def session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Open a session on the test database."""
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as db_session:
        yield db_session


@pytest.fixture
def make_product_input() -> Callable[..., ProductInput]:
    """Build product input with sensible defaults."""

    def _make(**overrides: Any) -> ProductInput:
        fields: dict[str, Any] = {
            "name": "Red Shoes",
            "description": "Lightweight running shoes",
            "price": Decimal("59.99"),
            "sku": "SKU-RED-001",
            "category_id": "cat-shoes",
            "stock": 20,
        }
        fields.update(overrides)
        return ProductInput(**fields)

    return _make
