"""
harvest_market.api.responses

The response envelope: `{"status": "success"|"error", "message"?, "data"?}`.
"""

from __future__ import annotations

from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def success(
    data: dict[str, Any] | None = None,
    *,
    message: str | None = None,
    status_code: int = 200,
) -> JSONResponse:
    body: dict[str, Any] = {"status": "success"}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = data
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


def error(
    message: str,
    *,
    status_code: int,
    headers: dict[str, str] | None = None,
    **extra: Any,
) -> JSONResponse:
    body: dict[str, Any] = {"status": "error", "message": message, **extra}
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body), headers=headers)
