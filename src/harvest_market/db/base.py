"""
harvest_market.db.base

SQLAlchemy declarative base and the columns every record shares.

Responsibilities:
- Provide a shared DeclarativeBase for all ORM models.
- Provide `Record`: UUID primary key plus created/updated timestamps.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import DateTime
from sqlalchemy import Uuid as SAUuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime:
    # Persist naive UTC timestamps for portability across SQLite/Postgres.
    return datetime.now(tz=UTC).replace(tzinfo=None)


class Base(DeclarativeBase):
    pass


class Record:
    """Mixin for top-level records: `id`, `created_at`, `updated_at`."""

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )


# --- Module Notes -----------------------------------------------------------
# Timestamps are set Python-side so freshly flushed objects never need a
# round-trip (no lazy loads under AsyncSession).
