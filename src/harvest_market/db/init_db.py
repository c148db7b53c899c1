"""
harvest_market.db.init_db

Schema bootstrap for the `dev` and `test` environments.

`create_all` only adds missing tables; it never alters existing ones. Schema
changes for deployed databases go through Alembic (`alembic/env.py`).
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine

from harvest_market.db import models  # noqa: F401  # register models on Base.metadata
from harvest_market.db.base import Base
from harvest_market.observability.logging import get_logger

log = get_logger(__name__)


async def init_db(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    log.info("schema_ready", tables=sorted(Base.metadata.tables))
