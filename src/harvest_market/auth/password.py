"""
harvest_market.auth.password

Password hashing helpers (bcrypt).

bcrypt salts automatically; only the first 72 bytes of a password are
significant, so longer inputs are truncated before hashing and checking.
"""

from __future__ import annotations

import bcrypt

_ROUNDS = 12


def hash_password(password: str, *, rounds: int = _ROUNDS) -> str:
    pw_bytes = password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8")[:72], password_hash.encode("utf-8"))
    except (ValueError, TypeError):
        return False
