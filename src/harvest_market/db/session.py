"""
harvest_market.db.session

Engine, session factory and the transaction block used by services.

The engine and sessionmaker are built once per app (in the lifespan) and
parked on `app.state`; requests get their own `AsyncSession` from
`api.deps.db_session`.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from harvest_market.settings import Settings


def create_engine(settings: Settings) -> AsyncEngine:
    return create_async_engine(
        settings.database_url,
        echo=settings.db_echo,
        pool_pre_ping=True,
    )


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Objects stay readable after commit; serializers run after the service returns.
    return async_sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)


@asynccontextmanager
async def transaction(session: AsyncSession) -> AsyncIterator[AsyncSession]:
    """
    Commit everything staged inside the block, or roll all of it back.

    Services wrap every write spanning more than one record (product + seller
    listing, order + stock, review + ratings) in this block.
    """
    try:
        yield session
        await session.commit()
    except BaseException:
        await session.rollback()
        raise
