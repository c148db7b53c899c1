"""
harvest_market.observability.middleware

Request-scoped logging context.

Every request gets an id (the caller's `x-request-id` when present), bound
into structlog contextvars together with path and method. One access line is
emitted per request; it names the authenticated user when the identity
resolver attached one to `request.state.user`.
"""

from __future__ import annotations

import time
import uuid
from typing import Any

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "x-request-id"

log = structlog.get_logger(__name__)


def _actor_id(request: Request) -> str | None:
    user: Any = getattr(request.state, "user", None)
    return str(user.id) if user is not None else None


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            path=request.url.path,
            method=request.method,
        )
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            log.exception("request_failed", user_id=_actor_id(request))
            raise
        else:
            log.info(
                "request_completed",
                status_code=response.status_code,
                user_id=_actor_id(request),
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
        finally:
            structlog.contextvars.clear_contextvars()

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
