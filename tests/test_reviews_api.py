"""
tests.test_reviews_api

Verified-purchase reviews, rating aggregates and reviewer/reviewee permissions.
"""

from __future__ import annotations

import pytest
import pytest_asyncio

from tests.conftest import order_payload, signup

FULFILMENT = ("confirmed", "preparing", "ready-for-pickup", "delivered")


async def _order(client, buyer, product_id):
    resp = await client.post(
        "/api/orders", json=order_payload(product_id, 1), headers=buyer["headers"]
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]["order"]


async def _deliver(client, seller, order_id):
    for status in FULFILMENT:
        resp = await client.patch(
            f"/api/orders/{order_id}/status", json={"status": status}, headers=seller["headers"]
        )
        assert resp.status_code == 200, resp.text


@pytest_asyncio.fixture()
async def delivered_order(client, product, buyer, seller):
    order = await _order(client, buyer, product["id"])
    await _deliver(client, seller, order["id"])
    return order


async def _review(client, who, order_id, product_id, rating=5, **extra):
    return await client.post(
        "/api/reviews",
        json={"order": order_id, "product": product_id, "rating": rating, **extra},
        headers=who["headers"],
    )


@pytest.mark.asyncio
async def test_buyer_reviews_delivered_order(
    client, product, buyer, seller, delivered_order
) -> None:
    resp = await _review(client, buyer, delivered_order["id"], product["id"], 4, comment="Juicy")
    assert resp.status_code == 201
    review = resp.json()["data"]["review"]
    assert review["reviewer"] == buyer["user"]["id"]
    assert review["reviewee"] == seller["user"]["id"]
    assert review["isVerifiedPurchase"] is True
    assert review["response"] is None

    product_view = (await client.get(f"/api/products/{product['id']}")).json()["data"]["product"]
    assert product_view["rating"] == {"average": 4.0, "count": 1}
    assert product_view["seller"]["rating"] == {"average": 4.0, "count": 1}


@pytest.mark.asyncio
async def test_cannot_review_undelivered_order(client, product, buyer) -> None:
    order = await _order(client, buyer, product["id"])
    resp = await _review(client, buyer, order["id"], product["id"])
    assert resp.status_code == 400
    assert resp.json()["message"] == "You can only review delivered orders"


@pytest.mark.asyncio
async def test_only_the_buyer_can_review(client, product, seller, delivered_order) -> None:
    resp = await _review(client, seller, delivered_order["id"], product["id"])
    assert resp.status_code == 403
    assert resp.json()["message"] == "You are not authorized to review this order"


@pytest.mark.asyncio
async def test_duplicate_review_is_rejected(client, product, buyer, delivered_order) -> None:
    assert (await _review(client, buyer, delivered_order["id"], product["id"])).status_code == 201
    resp = await _review(client, buyer, delivered_order["id"], product["id"])
    assert resp.status_code == 400
    assert resp.json()["message"] == "Review already exists"


@pytest.mark.asyncio
async def test_rating_average_over_several_orders(client, product, buyer, seller) -> None:
    other_buyer = await signup(client)
    for who, rating in ((buyer, 5), (other_buyer, 2)):
        order = await _order(client, who, product["id"])
        await _deliver(client, seller, order["id"])
        assert (await _review(client, who, order["id"], product["id"], rating)).status_code == 201

    listed = (await client.get(f"/api/reviews/product/{product['id']}")).json()["data"]
    assert len(listed["reviews"]) == 2
    assert listed["pagination"]["totalReviews"] == 2

    view = (await client.get(f"/api/products/{product['id']}")).json()["data"]["product"]
    assert view["rating"] == {"average": 3.5, "count": 2}


@pytest.mark.asyncio
async def test_reviewer_edits_and_deletes(client, product, buyer, seller, delivered_order) -> None:
    created = await _review(client, buyer, delivered_order["id"], product["id"], 5)
    url = f"/api/reviews/{created.json()['data']['review']['id']}"

    resp = await client.put(url, json={"rating": 1}, headers=seller["headers"])
    assert resp.status_code == 403

    resp = await client.put(url, json={"rating": 2, "comment": "Bruised"}, headers=buyer["headers"])
    assert resp.status_code == 200
    assert resp.json()["data"]["review"]["rating"] == 2
    view = (await client.get(f"/api/products/{product['id']}")).json()["data"]["product"]
    assert view["rating"] == {"average": 2.0, "count": 1}

    assert (await client.delete(url, headers=seller["headers"])).status_code == 403
    assert (await client.delete(url, headers=buyer["headers"])).status_code == 200
    assert (await client.get(url)).status_code == 404
    view = (await client.get(f"/api/products/{product['id']}")).json()["data"]["product"]
    assert view["rating"] == {"average": 0.0, "count": 0}


@pytest.mark.asyncio
async def test_only_the_seller_responds(client, product, buyer, seller, delivered_order) -> None:
    created = await _review(client, buyer, delivered_order["id"], product["id"])
    url = f"/api/reviews/{created.json()['data']['review']['id']}/response"

    resp = await client.post(url, json={"text": "Thanks!"}, headers=buyer["headers"])
    assert resp.status_code == 403
    assert resp.json()["message"] == "You are not authorized to respond to this review"

    resp = await client.post(url, json={"text": "Thanks!"}, headers=seller["headers"])
    assert resp.status_code == 200
    response = resp.json()["data"]["review"]["response"]
    assert response["text"] == "Thanks!"
    assert response["date"] is not None


@pytest.mark.asyncio
async def test_rating_bounds(client, product, buyer, delivered_order) -> None:
    resp = await _review(client, buyer, delivered_order["id"], product["id"], rating=6)
    assert resp.status_code == 400
