"""
harvest_market.api.__main__

Entrypoint for `python -m harvest_market.api` (also installed as the
`harvest-market` console script).

Reads `HARVEST_*` settings, builds the app (which fails fast without
`HARVEST_JWT_SECRET`) and serves it with uvicorn.
"""

from __future__ import annotations

import uvicorn

from harvest_market.api.app import create_app
from harvest_market.observability.logging import get_logger
from harvest_market.settings import get_settings

log = get_logger(__name__)


def main() -> None:
    settings = get_settings()
    app = create_app(settings=settings)
    log.info("serving", host=settings.api_host, port=settings.api_port, env=settings.env)

    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_config=None,  # structlog owns the root logger
        access_log=False,  # RequestContextMiddleware logs each request
    )


if __name__ == "__main__":
    main()
