"""
harvest_market.auth.models

Value types produced by the token service.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class TokenClaims:
    # `user_id` is the raw `sub` claim; the identity resolver parses and loads it.
    user_id: str
    issued_at: datetime
    expires_at: datetime
