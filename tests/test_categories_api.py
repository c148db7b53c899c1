"""
tests.test_categories_api

Category CRUD, parent references and the default seed.
"""

from __future__ import annotations

import pytest

from harvest_market.services.category_service import DEFAULT_CATEGORIES
from tests.conftest import create_category


@pytest.mark.asyncio
async def test_seed_is_idempotent(client) -> None:
    first = await client.post("/api/categories/seed")
    assert first.status_code == 201
    assert first.json()["message"] == f"{len(DEFAULT_CATEGORIES)} categories seeded successfully"

    second = await client.post("/api/categories/seed")
    assert second.json()["message"] == "0 categories seeded successfully"

    listed = (await client.get("/api/categories")).json()["data"]["categories"]
    names = [c["name"] for c in listed]
    assert names == sorted(name for name, _ in DEFAULT_CATEGORIES)


@pytest.mark.asyncio
async def test_writes_require_auth(client) -> None:
    resp = await client.post("/api/categories", json={"name": "Fungi"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_duplicate_name_is_case_insensitive(client, seller) -> None:
    await create_category(client, seller["headers"], "Herbs")
    resp = await client.post("/api/categories", json={"name": "herbs"}, headers=seller["headers"])
    assert resp.status_code == 400
    assert resp.json()["message"] == "Category already exists"


@pytest.mark.asyncio
async def test_parent_category(client, seller) -> None:
    parent = await create_category(client, seller["headers"], "Fruits")
    resp = await client.post(
        "/api/categories",
        json={"name": "Berries", "parentCategory": parent["id"]},
        headers=seller["headers"],
    )
    assert resp.status_code == 201
    child = resp.json()["data"]["category"]
    assert child["parentCategory"] == {"id": parent["id"], "name": "Fruits"}

    resp = await client.put(
        f"/api/categories/{parent['id']}",
        json={"parentCategory": parent["id"]},
        headers=seller["headers"],
    )
    assert resp.status_code == 400

    resp = await client.post(
        "/api/categories",
        json={"name": "Citrus", "parentCategory": "00000000-0000-0000-0000-000000000abc"},
        headers=seller["headers"],
    )
    assert resp.status_code == 404
    assert resp.json()["message"] == "Parent category not found"


@pytest.mark.asyncio
async def test_update_and_active_filter(client, seller) -> None:
    category = await create_category(client, seller["headers"], "Grains")
    resp = await client.put(
        f"/api/categories/{category['id']}",
        json={"isActive": False, "description": "Whole grains"},
        headers=seller["headers"],
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["category"]["isActive"] is False

    active = (await client.get("/api/categories", params={"active": "true"})).json()
    assert active["data"]["categories"] == []
    inactive = (await client.get("/api/categories", params={"active": "false"})).json()
    assert [c["description"] for c in inactive["data"]["categories"]] == ["Whole grains"]


@pytest.mark.asyncio
async def test_get_and_delete(client, seller) -> None:
    category = await create_category(client, seller["headers"], "Dairy")
    url = f"/api/categories/{category['id']}"

    resp = await client.get(url)
    assert resp.status_code == 200
    assert resp.json()["data"]["category"]["name"] == "Dairy"

    resp = await client.delete(url, headers=seller["headers"])
    assert resp.status_code == 200
    assert (await client.get(url)).status_code == 404
    assert (await client.get("/api/categories/xyz")).json()["message"] == "Invalid category ID"
