"""
harvest_market.auth.ownership

Ownership guard for mutations on owned resources.

Responsibilities:
- Compare the acting user id with a resource's recorded owner id(s).
- Raise `ForbiddenError` with a uniform message when they differ.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from harvest_market.errors import ForbiddenError


def is_owner(actor_id: Any, owner_id: Any) -> bool:
    # Identifiers are compared as strings (UUID vs str must not matter).
    return owner_id is not None and str(actor_id) == str(owner_id)


def ensure_owner(actor_id: Any, owner_id: Any, *, action: str, resource: str) -> None:
    if not is_owner(actor_id, owner_id):
        raise ForbiddenError(f"You are not authorized to {action} this {resource}")


def ensure_participant(
    actor_id: Any, owner_ids: Iterable[Any], *, action: str, resource: str
) -> None:
    if not any(is_owner(actor_id, owner_id) for owner_id in owner_ids):
        raise ForbiddenError(f"You are not authorized to {action} this {resource}")


# --- Module Notes -----------------------------------------------------------
# Services call these after loading the target record and before any write.
