"""
harvest_market.services.order_service

Order placement and fulfilment.

Responsibilities:
- Place orders against a single seller's products, snapshotting prices and
  reserving stock in the same transaction.
- Restrict reads and edits to the order's participants (buyer, seller).
- Drive status changes through the state machine in `order_state`.
"""

from __future__ import annotations

import secrets
import string
import time
import uuid
from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from harvest_market.auth.ownership import ensure_owner, ensure_participant
from harvest_market.db.base import utcnow
from harvest_market.db.models import (
    DeliveryType,
    Order,
    OrderStatus,
    PaymentStatus,
    ProductStatus,
    User,
)
from harvest_market.db.repositories.orders import OrderRepo
from harvest_market.db.repositories.products import ProductRepo
from harvest_market.db.session import transaction
from harvest_market.errors import NotFoundError, ValidationError
from harvest_market.observability.logging import get_logger
from harvest_market.services import order_state
from harvest_market.services.ids import parse_id
from harvest_market.services.pagination import Page, PageRequest

log = get_logger(__name__)

ORDER_MUTABLE_FIELDS = frozenset(
    {"notes", "delivery_date", "payment_method", "payment_id", "payment_status"}
)
DELETABLE_STATUSES = frozenset({OrderStatus.pending.value, OrderStatus.cancelled.value})
MAX_NOTES_LENGTH = 500
ADDRESS_FIELDS = ("street", "city", "state", "zipCode", "country")

_ORDER_SUFFIX_ALPHABET = string.ascii_uppercase + string.digits


def generate_order_number() -> str:
    suffix = "".join(secrets.choice(_ORDER_SUFFIX_ALPHABET) for _ in range(9))
    return f"ORD-{int(time.time() * 1000)}-{suffix}"


class OrderService:
    def __init__(self, *, session: AsyncSession) -> None:
        self._session = session
        self._orders = OrderRepo(session)
        self._products = ProductRepo(session)

    async def create(
        self,
        *,
        buyer: User,
        items: Sequence[tuple[Any, float]],
        delivery_address: Mapping[str, Any],
        delivery_type: str,
        payment_method: str | None = None,
        delivery_date: datetime | None = None,
        notes: str | None = None,
    ) -> Order:
        if not items:
            raise ValidationError("Order must contain at least one item")
        if delivery_type not in {d.value for d in DeliveryType}:
            raise ValidationError(f"`{delivery_type}` is not a valid delivery type")
        missing = [f for f in ADDRESS_FIELDS if not delivery_address.get(f)]
        if missing:
            raise ValidationError(f"Delivery address {', '.join(missing)} required")
        if notes is not None and len(notes) > MAX_NOTES_LENGTH:
            raise ValidationError(f"Notes cannot exceed {MAX_NOTES_LENGTH} characters")

        # Repeated lines for the same product are merged.
        quantities: dict[uuid.UUID, float] = {}
        for raw_id, quantity in items:
            if quantity is None or quantity < 1:
                raise ValidationError("Item quantity must be at least 1")
            pid = parse_id(raw_id, "product")
            quantities[pid] = quantities.get(pid, 0) + quantity

        async with transaction(self._session):
            products = await self._products.get_many(set(quantities))
            lines: list[dict[str, Any]] = []
            sellers: set[uuid.UUID] = set()
            for pid, quantity in quantities.items():
                product = products.get(pid)
                if product is None:
                    raise NotFoundError("Product not found")
                if str(product.seller_id) == str(buyer.id):
                    raise ValidationError("You cannot order your own product")
                if product.status != ProductStatus.available.value:
                    raise ValidationError(f"{product.title} is not available")
                if quantity > product.quantity_available:
                    raise ValidationError(f"Insufficient quantity for {product.title}")
                sellers.add(product.seller_id)
                lines.append(
                    {
                        "product": str(product.id),
                        "productName": product.title,
                        "quantity": quantity,
                        "pricePerUnit": product.price,
                        "unit": product.unit,
                        "subtotal": round(product.price * quantity, 2),
                    }
                )
            if len(sellers) != 1:
                raise ValidationError("All items in an order must be from the same seller")

            for pid, quantity in quantities.items():
                product = products[pid]
                product.quantity_available = product.quantity_available - quantity
                product.buys = product.buys + 1
                if product.quantity_available <= 0:
                    product.status = ProductStatus.out_of_stock.value

            order = await self._orders.create(
                order_number=generate_order_number(),
                buyer_id=buyer.id,
                seller_id=sellers.pop(),
                items=lines,
                total_amount=round(sum(line["subtotal"] for line in lines), 2),
                status=OrderStatus.pending.value,
                payment_status=PaymentStatus.pending.value,
                payment_method=payment_method,
                delivery_address=dict(delivery_address),
                delivery_type=delivery_type,
                delivery_date=delivery_date,
                notes=notes,
            )

        log.info(
            "order_created",
            order_id=str(order.id),
            buyer_id=str(buyer.id),
            seller_id=str(order.seller_id),
            total=order.total_amount,
        )
        return order

    async def list_for_user(
        self,
        *,
        user: User,
        role: str = "buyer",
        status: str | None = None,
        page: PageRequest,
    ) -> Page[Order]:
        if role not in ("buyer", "seller"):
            raise ValidationError("role must be either buyer or seller")
        if status is not None:
            status = order_state.parse_status(status).value
        items, total = await self._orders.list_for_party(
            buyer_id=user.id if role == "buyer" else None,
            seller_id=user.id if role == "seller" else None,
            status=status,
            offset=page.offset,
            limit=page.limit,
        )
        return Page(items=items, page=page.page, limit=page.limit, total=total)

    async def get(self, *, actor: User, order_id: Any) -> Order:
        order = await self._load(order_id)
        ensure_participant(
            actor.id, (order.buyer_id, order.seller_id), action="view", resource="order"
        )
        return order

    async def update(self, *, actor: User, order_id: Any, changes: Mapping[str, Any]) -> Order:
        order = await self._load(order_id)
        ensure_participant(
            actor.id, (order.buyer_id, order.seller_id), action="update", resource="order"
        )

        updates = {k: v for k, v in changes.items() if k in ORDER_MUTABLE_FIELDS}
        if "payment_status" in updates and updates["payment_status"] not in {
            p.value for p in PaymentStatus
        }:
            raise ValidationError(f"`{updates['payment_status']}` is not a valid payment status")
        notes = updates.get("notes")
        if notes is not None and len(notes) > MAX_NOTES_LENGTH:
            raise ValidationError(f"Notes cannot exceed {MAX_NOTES_LENGTH} characters")

        async with transaction(self._session):
            for field, value in updates.items():
                setattr(order, field, value)
        return order

    async def transition(
        self,
        *,
        actor: User,
        order_id: Any,
        status: str,
        cancel_reason: str | None = None,
    ) -> Order:
        target = order_state.parse_status(status)
        order = await self._load(order_id, for_update=True)

        # Buyers may only cancel; every other step belongs to the seller.
        if target is OrderStatus.cancelled:
            ensure_participant(
                actor.id, (order.buyer_id, order.seller_id), action="cancel", resource="order"
            )
        else:
            ensure_owner(
                actor.id, order.seller_id, action="update the status of", resource="order"
            )

        previous = order.status
        order_state.ensure_transition(previous, target)

        async with transaction(self._session):
            order.status = target.value
            if target is OrderStatus.cancelled:
                order.cancel_reason = cancel_reason
                await self._restock(order)
            elif target is OrderStatus.delivered and order.delivery_date is None:
                order.delivery_date = utcnow()

        log.info(
            "order_status_changed",
            order_id=str(order.id),
            actor_id=str(actor.id),
            from_status=previous,
            to_status=target.value,
        )
        return order

    async def delete(self, *, actor: User, order_id: Any) -> None:
        order = await self._load(order_id, for_update=True)
        ensure_owner(actor.id, order.buyer_id, action="delete", resource="order")
        if order.status not in DELETABLE_STATUSES:
            raise ValidationError("Only pending or cancelled orders can be deleted")

        async with transaction(self._session):
            if order.status == OrderStatus.pending.value:
                await self._restock(order)
            await self._orders.delete(order)
        log.info("order_deleted", order_id=str(order.id), buyer_id=str(actor.id))

    async def _load(self, order_id: Any, *, for_update: bool = False) -> Order:
        order = await self._orders.get(parse_id(order_id, "order"), for_update=for_update)
        if order is None:
            raise NotFoundError("Order not found")
        return order

    async def _restock(self, order: Order) -> None:
        # Undoes the reservation made in `create`: stock and the per-order `buys` count.
        # Products deleted since the order was placed are skipped.
        products = await self._products.get_many({uuid.UUID(i["product"]) for i in order.items})
        for item in order.items:
            product = products.get(uuid.UUID(item["product"]))
            if product is None:
                continue
            product.quantity_available = product.quantity_available + item["quantity"]
            product.buys = max(product.buys - 1, 0)
            if product.status == ProductStatus.out_of_stock.value and product.quantity_available > 0:
                product.status = ProductStatus.available.value
