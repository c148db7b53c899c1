"""
harvest_market.services.ids

Parsing of client-supplied record identifiers.
"""

from __future__ import annotations

import uuid
from typing import Any

from harvest_market.errors import InvalidIdentifierError


def parse_id(value: Any, resource: str) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError, AttributeError) as e:
        raise InvalidIdentifierError(f"Invalid {resource} ID") from e
