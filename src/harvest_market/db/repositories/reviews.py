"""
harvest_market.db.repositories.reviews

Repository for `Review` entities.

Responsibilities:
- Create, fetch, list and delete reviews.
- Aggregate ratings (average/count) per product and per reviewed seller.
"""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from harvest_market.db.models import Review


class ReviewRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, **fields: Any) -> Review:
        review = Review(**fields)
        self._session.add(review)
        await self._session.flush()
        return review

    async def get(self, review_id: uuid.UUID, *, for_update: bool = False) -> Review | None:
        return await self._session.get(Review, review_id, with_for_update=for_update)

    async def get_for_order_product(
        self, order_id: uuid.UUID, product_id: uuid.UUID
    ) -> Review | None:
        stmt = select(Review).where(Review.order_id == order_id, Review.product_id == product_id)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def list_for_product(
        self, product_id: uuid.UUID, *, offset: int, limit: int
    ) -> tuple[list[Review], int]:
        stmt = (
            select(Review)
            .where(Review.product_id == product_id)
            .order_by(desc(Review.created_at), desc(Review.id))
            .offset(offset)
            .limit(limit)
        )
        count_stmt = select(func.count()).select_from(Review).where(Review.product_id == product_id)
        items = list((await self._session.execute(stmt)).scalars().all())
        total = int((await self._session.execute(count_stmt)).scalar_one())
        return items, total

    async def rating_for_product(self, product_id: uuid.UUID) -> tuple[float, int]:
        return await self._aggregate(Review.product_id == product_id)

    async def rating_for_reviewee(self, reviewee_id: uuid.UUID) -> tuple[float, int]:
        return await self._aggregate(Review.reviewee_id == reviewee_id)

    async def _aggregate(self, condition: Any) -> tuple[float, int]:
        stmt = select(func.avg(Review.rating), func.count(Review.id)).where(condition)
        avg, count = (await self._session.execute(stmt)).one()
        return round(float(avg or 0.0), 2), int(count or 0)

    async def delete(self, review: Review) -> None:
        await self._session.delete(review)
        await self._session.flush()
