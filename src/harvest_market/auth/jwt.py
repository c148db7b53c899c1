"""
harvest_market.auth.jwt

Token service: JWT issuing and validation.

Responsibilities:
- Issue HS256 bearer tokens bound to a user id (7-day expiry by default).
- Decode and validate tokens with strict claim requirements (iss/aud/exp/iat/sub).
- Distinguish expired tokens from malformed ones.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from jwt import ExpiredSignatureError, InvalidTokenError

from harvest_market.auth.models import TokenClaims
from harvest_market.errors import TokenConfigError, TokenExpiredError, TokenInvalidError
from harvest_market.settings import Settings


@dataclass(frozen=True, slots=True)
class JwtConfig:
    # Algorithm/issuer/audience are enforced during decoding.
    alg: str
    issuer: str
    audience: str
    secret: str
    ttl: timedelta

    @classmethod
    def from_settings(cls, settings: Settings) -> JwtConfig:
        if not settings.jwt_secret:
            raise TokenConfigError("HARVEST_JWT_SECRET environment variable is not defined")
        return cls(
            alg=settings.jwt_alg,
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
            secret=settings.jwt_secret,
            ttl=timedelta(days=settings.token_ttl_days),
        )


class TokenService:
    def __init__(self, cfg: JwtConfig) -> None:
        if not cfg.secret:
            raise TokenConfigError("token signing secret is empty")
        self._cfg = cfg

    @classmethod
    def from_settings(cls, settings: Settings) -> TokenService:
        return cls(JwtConfig.from_settings(settings))

    def issue(self, user_id: str, *, ttl: timedelta | None = None) -> str:
        now = datetime.now(tz=UTC)
        expires = now + (ttl if ttl is not None else self._cfg.ttl)
        # Keep payload minimal; the identity resolver loads everything else from storage.
        payload: dict[str, Any] = {
            "iss": self._cfg.issuer,
            "aud": self._cfg.audience,
            "sub": str(user_id),
            "iat": int(now.timestamp()),
            "exp": int(expires.timestamp()),
        }
        return jwt.encode(payload, self._cfg.secret, algorithm=self._cfg.alg)

    def validate(self, token: str) -> TokenClaims:
        try:
            payload = jwt.decode(
                token,
                self._cfg.secret,
                algorithms=[self._cfg.alg],
                issuer=self._cfg.issuer,
                audience=self._cfg.audience,
                options={"require": ["exp", "iat", "iss", "aud", "sub"]},
            )
        except ExpiredSignatureError as e:
            raise TokenExpiredError() from e
        except InvalidTokenError as e:
            raise TokenInvalidError() from e

        subject = str(payload.get("sub") or "")
        if not subject:
            raise TokenInvalidError()
        return TokenClaims(
            user_id=subject,
            issued_at=datetime.fromtimestamp(payload["iat"], tz=UTC),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=UTC),
        )


# --- Module Notes -----------------------------------------------------------
# ExpiredSignatureError subclasses InvalidTokenError, so it must be caught first.
