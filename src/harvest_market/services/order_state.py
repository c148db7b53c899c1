"""
harvest_market.services.order_state

Order status state machine.

Fulfilment moves forward only; `cancelled` is reachable from every
non-terminal state. `delivered` and `cancelled` are terminal.
"""

from __future__ import annotations

from harvest_market.db.models import OrderStatus
from harvest_market.errors import InvalidTransitionError, ValidationError

VALID_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.pending: frozenset({OrderStatus.confirmed, OrderStatus.cancelled}),
    OrderStatus.confirmed: frozenset({OrderStatus.preparing, OrderStatus.cancelled}),
    OrderStatus.preparing: frozenset(
        {OrderStatus.ready_for_pickup, OrderStatus.in_transit, OrderStatus.cancelled}
    ),
    OrderStatus.ready_for_pickup: frozenset({OrderStatus.delivered, OrderStatus.cancelled}),
    OrderStatus.in_transit: frozenset({OrderStatus.delivered, OrderStatus.cancelled}),
    OrderStatus.delivered: frozenset(),  # terminal
    OrderStatus.cancelled: frozenset(),  # terminal
}


def parse_status(value: str) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError as e:
        allowed = ", ".join(s.value for s in OrderStatus)
        raise ValidationError(f"Invalid order status '{value}'. Allowed: {allowed}") from e


def is_terminal(status: str) -> bool:
    return not VALID_TRANSITIONS[OrderStatus(status)]


def can_transition(current: str, target: str) -> bool:
    return OrderStatus(target) in VALID_TRANSITIONS[OrderStatus(current)]


def ensure_transition(current: str, target: str) -> None:
    if not can_transition(current, target):
        raise InvalidTransitionError(f"Cannot change order status from {current} to {target}")
