"""
harvest_market.db.repositories.categories

Repository for `Category` entities.
"""

from __future__ import annotations

import uuid

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from harvest_market.db.models import Category


class CategoryRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        *,
        name: str,
        description: str | None = None,
        image: str | None = None,
        parent_category_id: uuid.UUID | None = None,
        is_active: bool = True,
    ) -> Category:
        category = Category(
            name=name,
            description=description,
            image=image,
            parent_category_id=parent_category_id,
            is_active=is_active,
        )
        self._session.add(category)
        await self._session.flush()
        return category

    async def get(self, category_id: uuid.UUID) -> Category | None:
        return await self._session.get(Category, category_id)

    async def get_by_name(self, name: str) -> Category | None:
        # Names are unique case-insensitively.
        stmt = select(Category).where(func.lower(Category.name) == name.strip().lower())
        return (await self._session.execute(stmt)).scalars().first()

    async def get_many(self, category_ids: set[uuid.UUID]) -> dict[uuid.UUID, Category]:
        if not category_ids:
            return {}
        stmt = select(Category).where(Category.id.in_(category_ids))
        return {c.id: c for c in (await self._session.execute(stmt)).scalars().all()}

    async def list(self, *, active: bool | None = None) -> list[Category]:
        stmt = select(Category).order_by(Category.name.asc())
        if active is not None:
            stmt = stmt.where(Category.is_active.is_(active))
        return list((await self._session.execute(stmt)).scalars().all())

    async def delete(self, category: Category) -> None:
        await self._session.delete(category)
        await self._session.flush()
