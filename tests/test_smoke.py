"""
tests.test_smoke

Minimal smoke tests to validate the service can boot and serve core endpoints.

Responsibilities:
- Ensure the FastAPI app starts and DB readiness probe works in test mode.
- Ensure unknown routes and the startup secret check behave.
"""

from __future__ import annotations

import pytest

from harvest_market.api.app import create_app
from harvest_market.errors import TokenConfigError
from harvest_market.settings import Settings


@pytest.mark.asyncio
async def test_health_endpoints(client) -> None:
    r = await client.get("/healthz")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"

    r = await client.get("/readyz")
    assert r.status_code == 200
    assert r.json()["status"] == "ready"


@pytest.mark.asyncio
async def test_request_id_header_is_echoed(client) -> None:
    r = await client.get("/healthz", headers={"x-request-id": "abc-123"})
    assert r.headers["x-request-id"] == "abc-123"


@pytest.mark.asyncio
async def test_unknown_route_uses_error_envelope(client) -> None:
    r = await client.get("/api/nope")
    assert r.status_code == 404
    assert r.json() == {"status": "error", "message": "Route /api/nope not found"}


def test_app_refuses_to_start_without_jwt_secret(tmp_path) -> None:
    settings = Settings(
        env="test", jwt_secret=None, database_url=f"sqlite+aiosqlite:///{tmp_path}/x.db"
    )
    with pytest.raises(TokenConfigError):
        create_app(settings=settings)


# --- Module Notes -----------------------------------------------------------
# Domain flows live in the per-resource `test_*_api.py` modules.
