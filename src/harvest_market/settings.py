"""
harvest_market.settings

Typed configuration read from `HARVEST_*` environment variables.

Responsibilities:
- Group server, auth and persistence knobs in one pydantic-settings model.
- Keep the token signing secret out of reprs and logs; it has no default.
- Offer a cached instance for the CLI entrypoint and migrations.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Env-driven configuration.

    `create_app` refuses to build an app when `jwt_secret` is unset, so a
    deployment cannot silently sign tokens with a well-known key.
    """

    model_config = SettingsConfigDict(env_prefix="HARVEST_", case_sensitive=False)

    # `dev`/`test` create tables on startup; `prod` expects Alembic migrations.
    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "harvest-market"
    log_level: str = "INFO"

    # Server
    api_host: str = "0.0.0.0"
    api_port: int = 8080
    # Comma-separated list, e.g. "http://localhost:3000,https://shop.example.com".
    cors_origins: str = "http://localhost:3000"

    # Tokens and passwords
    jwt_alg: str = "HS256"
    jwt_issuer: str = "harvest-market"
    jwt_audience: str = "harvest-market-api"
    jwt_secret: str | None = Field(default=None, repr=False)
    token_ttl_days: int = Field(default=7, ge=1)
    bcrypt_rounds: int = Field(default=12, ge=4, le=16)

    # Persistence
    database_url: str = "sqlite+aiosqlite:///./harvest.db"
    db_echo: bool = False

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


# --- Module Notes -----------------------------------------------------------
# Tests build `Settings(...)` directly and hand it to `create_app`; the cached
# instance is only used by the CLI entrypoint and Alembic.
