"""Ownership guard unit tests."""

from __future__ import annotations

import uuid

import pytest

from harvest_market.auth.ownership import ensure_owner, ensure_participant, is_owner
from harvest_market.errors import ForbiddenError


def test_uuid_and_string_ids_compare_equal() -> None:
    uid = uuid.uuid4()
    assert is_owner(uid, str(uid))
    assert is_owner(str(uid), uid)


def test_missing_owner_never_matches() -> None:
    assert not is_owner(uuid.uuid4(), None)


def test_ensure_owner_rejects_other_user() -> None:
    with pytest.raises(ForbiddenError) as exc:
        ensure_owner(uuid.uuid4(), uuid.uuid4(), action="update", resource="product")
    assert exc.value.message == "You are not authorized to update this product"
    assert exc.value.status_code == 403


def test_ensure_owner_accepts_owner() -> None:
    uid = uuid.uuid4()
    ensure_owner(uid, uid, action="delete", resource="product")


def test_ensure_participant() -> None:
    buyer, seller, stranger = uuid.uuid4(), uuid.uuid4(), uuid.uuid4()
    ensure_participant(buyer, (buyer, seller), action="view", resource="order")
    ensure_participant(seller, (buyer, seller), action="view", resource="order")
    with pytest.raises(ForbiddenError, match="view this order"):
        ensure_participant(stranger, (buyer, seller), action="view", resource="order")
