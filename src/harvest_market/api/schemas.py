"""
harvest_market.api.schemas

Shared request-model plumbing.

Request bodies use camelCase keys on the wire; models expose snake_case
attributes that map directly onto service arguments.
"""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    # Unknown keys are ignored, which is what makes update allow-lists silent.
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
        extra="ignore",
    )


def naive_utc(value: datetime | None) -> datetime | None:
    # Columns store naive UTC; convert aware inputs instead of dropping the offset.
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)
