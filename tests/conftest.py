"""
tests.conftest

Shared fixtures: a fresh app + SQLite file database per test, an HTTP client
bound to it through ASGITransport, and small API helpers for building data.
"""

from __future__ import annotations

import itertools
from collections.abc import AsyncIterator
from typing import Any

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI

from harvest_market.api.app import create_app
from harvest_market.settings import Settings

TEST_SECRET = "test-secret"
_emails = itertools.count(1)


@pytest.fixture()
def settings(tmp_path) -> Settings:
    return Settings(
        env="test",
        jwt_secret=TEST_SECRET,
        bcrypt_rounds=4,
        log_level="WARNING",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
    )


@pytest_asyncio.fixture()
async def app(settings: Settings) -> AsyncIterator[FastAPI]:
    application = create_app(settings=settings)
    # httpx ASGITransport does not run the lifespan; enter it explicitly.
    async with application.router.lifespan_context(application):
        yield application


@pytest_asyncio.fixture()
async def client(app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


async def signup(client: httpx.AsyncClient, **overrides: Any) -> dict[str, Any]:
    """Register a user and return `{"token", "user", "headers"}`."""
    body = {
        "firstName": "Test",
        "lastName": "User",
        "email": f"user{next(_emails)}@example.com",
        "password": "secret123",
        **overrides,
    }
    resp = await client.post("/api/auth/signup", json=body)
    assert resp.status_code == 201, resp.text
    data = resp.json()["data"]
    return {**data, "headers": auth(data["token"])}


async def create_category(
    client: httpx.AsyncClient, headers: dict[str, str], name: str = "Vegetables"
) -> dict[str, Any]:
    resp = await client.post("/api/categories", json={"name": name}, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]["category"]


def product_payload(category_id: str, **overrides: Any) -> dict[str, Any]:
    return {
        "title": "Heirloom Tomatoes",
        "description": "Vine-ripened, picked this morning.",
        "category": category_id,
        "images": ["https://img.example.com/tomato.jpg"],
        "price": 4.5,
        "unit": "kg",
        "quantityAvailable": 20,
        "location": {"address": "1 Farm Rd", "city": "Springfield", "state": "IL"},
        "isOrganic": True,
        "tags": ["tomato", "summer"],
        **overrides,
    }


async def create_product(
    client: httpx.AsyncClient,
    headers: dict[str, str],
    category_id: str,
    **overrides: Any,
) -> dict[str, Any]:
    resp = await client.post(
        "/api/products", json=product_payload(category_id, **overrides), headers=headers
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]["product"]


def order_payload(product_id: str, quantity: float = 1, **overrides: Any) -> dict[str, Any]:
    return {
        "items": [{"product": product_id, "quantity": quantity}],
        "deliveryAddress": {
            "street": "42 Main St",
            "city": "Springfield",
            "state": "IL",
            "zipCode": "62701",
            "country": "US",
        },
        "deliveryType": "delivery",
        **overrides,
    }


@pytest_asyncio.fixture()
async def seller(client: httpx.AsyncClient) -> dict[str, Any]:
    return await signup(client, firstName="Sam", lastName="Seller")


@pytest_asyncio.fixture()
async def buyer(client: httpx.AsyncClient) -> dict[str, Any]:
    return await signup(client, firstName="Bea", lastName="Buyer")


@pytest_asyncio.fixture()
async def category(client: httpx.AsyncClient, seller: dict[str, Any]) -> dict[str, Any]:
    return await create_category(client, seller["headers"])


@pytest_asyncio.fixture()
async def product(
    client: httpx.AsyncClient, seller: dict[str, Any], category: dict[str, Any]
) -> dict[str, Any]:
    return await create_product(client, seller["headers"], category["id"])
