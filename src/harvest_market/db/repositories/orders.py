"""
harvest_market.db.repositories.orders

Repository for `Order` entities.
"""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from harvest_market.db.models import Order


class OrderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, **fields: Any) -> Order:
        order = Order(**fields)
        self._session.add(order)
        await self._session.flush()
        return order

    async def get(self, order_id: uuid.UUID, *, for_update: bool = False) -> Order | None:
        return await self._session.get(Order, order_id, with_for_update=for_update)

    async def list_for_party(
        self,
        *,
        buyer_id: uuid.UUID | None = None,
        seller_id: uuid.UUID | None = None,
        status: str | None = None,
        offset: int,
        limit: int,
    ) -> tuple[list[Order], int]:
        conditions = []
        if buyer_id is not None:
            conditions.append(Order.buyer_id == buyer_id)
        if seller_id is not None:
            conditions.append(Order.seller_id == seller_id)
        if status is not None:
            conditions.append(Order.status == status)

        stmt = (
            select(Order)
            .where(*conditions)
            .order_by(desc(Order.created_at), desc(Order.id))
            .offset(offset)
            .limit(limit)
        )
        count_stmt = select(func.count()).select_from(Order).where(*conditions)
        items = list((await self._session.execute(stmt)).scalars().all())
        total = int((await self._session.execute(count_stmt)).scalar_one())
        return items, total

    async def delete(self, order: Order) -> None:
        await self._session.delete(order)
        await self._session.flush()
