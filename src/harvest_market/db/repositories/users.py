"""
harvest_market.db.repositories.users

Repository for `User` entities.

Responsibilities:
- Create and fetch users (by id and by e-mail).
- Maintain the seller's listed-products set.
"""

from __future__ import annotations

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from harvest_market.db.models import User


class UserRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        *,
        first_name: str,
        last_name: str,
        email: str,
        password_hash: str,
        phone_number: str | None = None,
    ) -> User:
        user = User(
            first_name=first_name,
            last_name=last_name,
            email=email,
            password_hash=password_hash,
            phone_number=phone_number,
            products_listed=[],
            rating_average=0.0,
            rating_count=0,
        )
        self._session.add(user)
        await self._session.flush()
        return user

    async def get(self, user_id: uuid.UUID, *, for_update: bool = False) -> User | None:
        return await self._session.get(User, user_id, with_for_update=for_update)

    async def get_by_email(self, email: str) -> User | None:
        stmt = select(User).where(User.email == email)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def get_many(self, user_ids: set[uuid.UUID]) -> dict[uuid.UUID, User]:
        if not user_ids:
            return {}
        stmt = select(User).where(User.id.in_(user_ids))
        return {u.id: u for u in (await self._session.execute(stmt)).scalars().all()}

    async def add_listed_product(self, user_id: uuid.UUID, product_id: uuid.UUID) -> None:
        user = await self.get(user_id, for_update=True)
        if user is None:
            return
        pid = str(product_id)
        if pid not in user.products_listed:
            user.products_listed = [*user.products_listed, pid]

    async def remove_listed_product(self, user_id: uuid.UUID, product_id: uuid.UUID) -> None:
        user = await self.get(user_id, for_update=True)
        if user is None:
            return
        pid = str(product_id)
        user.products_listed = [p for p in user.products_listed if p != pid]

    async def set_rating(self, user_id: uuid.UUID, *, average: float, count: int) -> None:
        user = await self.get(user_id, for_update=True)
        if user is None:
            return
        user.rating_average = average
        user.rating_count = count
