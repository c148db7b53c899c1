"""
harvest_market.api.errors

Central exception -> error-envelope mapping.

Responsibilities:
- Render `AppError` subclasses with their status codes.
- Map request validation failures to 400 with the messages joined.
- Map unique-constraint violations to 400 "<field> already exists".
- Hide unexpected failures behind a 500 while logging the traceback.
"""

from __future__ import annotations

import re
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from harvest_market.api.responses import error
from harvest_market.errors import AppError
from harvest_market.observability.logging import get_logger
from harvest_market.settings import Settings

log = get_logger(__name__)

# SQLite: "UNIQUE constraint failed: users.email";
# Postgres: "duplicate key value violates unique constraint ... Key (email)=(...)".
_SQLITE_UNIQUE = re.compile(r"UNIQUE constraint failed: \w+\.(\w+)")
_POSTGRES_UNIQUE = re.compile(
    r"duplicate key value violates unique constraint.*?Key \((\w+)\)=", re.S
)


def duplicate_field(exc: IntegrityError) -> str | None:
    """Column named by a unique-constraint violation; None for any other integrity error."""
    text = str(exc.orig) if exc.orig is not None else str(exc)
    match = _SQLITE_UNIQUE.search(text) or _POSTGRES_UNIQUE.search(text)
    return match.group(1) if match else None


def _validation_message(err: dict[str, Any]) -> str:
    # loc looks like ("body", "price") or ("query", "limit"); keep the field part.
    field = ".".join(str(p) for p in err.get("loc", ())[1:])
    msg = str(err.get("msg", "Invalid value"))
    return f"{field}: {msg}" if field else msg


def register_error_handlers(app: FastAPI, settings: Settings) -> None:
    debug = settings.env == "dev"

    @app.exception_handler(AppError)
    async def _app_error(request: Request, exc: AppError) -> JSONResponse:
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        extra = {"error": type(exc).__name__} if debug else {}
        if exc.status_code >= 500:
            log.error("app_error", error=type(exc).__name__, message=exc.message)
        return error(exc.message, status_code=exc.status_code, headers=headers, **extra)

    @app.exception_handler(RequestValidationError)
    async def _request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        message = ", ".join(_validation_message(e) for e in exc.errors()) or "Invalid request"
        return error(message, status_code=400)

    def _internal_error(exc: Exception) -> JSONResponse:
        log.error("unhandled_error", error=type(exc).__name__, exc_info=exc)
        extra = {"error": type(exc).__name__} if debug else {}
        return error("Internal Server Error", status_code=500, **extra)

    @app.exception_handler(IntegrityError)
    async def _integrity(request: Request, exc: IntegrityError) -> JSONResponse:
        field = duplicate_field(exc)
        if field is None:
            # NOT NULL / CHECK / foreign-key failures are server bugs, not client duplicates.
            return _internal_error(exc)
        return error(f"{field} already exists", status_code=400)

    @app.exception_handler(StarletteHTTPException)
    async def _http(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        message = str(exc.detail)
        if exc.status_code == 404 and message == "Not Found":
            message = f"Route {request.url.path} not found"
        return error(message, status_code=exc.status_code, headers=exc.headers)

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception) -> JSONResponse:
        return _internal_error(exc)


# --- Module Notes -----------------------------------------------------------
# Services raise `harvest_market.errors` types only; HTTP status codes live on
# those classes and are rendered here.
