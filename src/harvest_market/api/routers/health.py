"""
harvest_market.api.routers.health

Liveness and readiness probes.

`/healthz` answers as long as the process serves HTTP. `/readyz` also runs a
trivial query through a request-scoped session and reports 503 when the
database cannot be reached.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from harvest_market import __version__
from harvest_market.api.deps import db_session, settings_dep
from harvest_market.observability.logging import get_logger
from harvest_market.settings import Settings

router = APIRouter()
log = get_logger(__name__)


@router.get("/healthz")
async def healthz(settings: Settings = Depends(settings_dep)) -> dict[str, Any]:
    return {"status": "ok", "service": settings.service_name, "version": __version__}


@router.get("/readyz")
async def readyz(session: AsyncSession = Depends(db_session)) -> JSONResponse:
    try:
        await session.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        log.warning("readiness_failed", error=type(e).__name__)
        return JSONResponse(status_code=503, content={"status": "unavailable", "database": "down"})
    return JSONResponse(content={"status": "ready", "database": "up"})
