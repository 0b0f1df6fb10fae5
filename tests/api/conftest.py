"""Shared fixtures for API tests."""

from collections.abc import AsyncGenerator, Callable, Generator
from typing import Any

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from storefront.catalog.models import User
from storefront.infrastructure.config import settings
from storefront.infrastructure.database import build_engine, create_tables, get_session
from storefront.main import app


@pytest.fixture
def api_engine() -> AsyncEngine:
    """Engine for a fresh in-memory database."""
    return build_engine("sqlite+aiosqlite://")


@pytest.fixture
def session_factory(api_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test database."""
    return async_sessionmaker(
        api_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture
def client(
    api_engine: AsyncEngine,
    session_factory: async_sessionmaker[AsyncSession],
) -> Generator[TestClient, None, None]:
    """Create test client without authentication, backed by the test database."""

    async def override_get_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    with TestClient(app) as test_client:
        test_client.portal.call(create_tables, api_engine)
        yield test_client
        test_client.portal.call(api_engine.dispose)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> dict[str, str]:
    """Get authentication headers."""
    return {"Authorization": f"Bearer {settings.storefront_api_key}"}


@pytest.fixture
def create_category(
    client: TestClient, auth_headers: dict[str, str]
) -> Callable[..., dict[str, Any]]:
    """Create a category through the API and return it."""

    def _create(name: str = "Shoes", **fields: Any) -> dict[str, Any]:
        response = client.post(
            "/categories",
            json={"name": name, **fields},
            headers=auth_headers,
        )
        assert response.status_code == 201, response.text
        return response.json()["category"]

    return _create


@pytest.fixture
def create_product(
    client: TestClient, auth_headers: dict[str, str]
) -> Callable[..., dict[str, Any]]:
    """Create a product through the API and return it."""

    def _create(**fields: Any) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "name": "Red Shoes",
            "description": "Lightweight running shoes",
            "price": 59.99,
            "sku": "SKU-RED-001",
            "category": "cat-shoes",
            "stock": 20,
        }
        payload.update(fields)
        response = client.post("/products", json=payload, headers=auth_headers)
        assert response.status_code == 201, response.text
        return response.json()["product"]

    return _create


@pytest.fixture
def create_user(
    client: TestClient, session_factory: async_sessionmaker[AsyncSession]
) -> Callable[..., str]:
    """Insert a user row directly and return its id."""

    def _create(first_name: str = "Ada", last_name: str = "Lovelace") -> str:
        async def _insert() -> str:
            async with session_factory() as session:
                user = User(
                    first_name=first_name,
                    last_name=last_name,
                    email=f"{first_name.lower()}@example.com",
                )
                session.add(user)
                await session.commit()
                return user.id

        return client.portal.call(_insert)

    return _create
