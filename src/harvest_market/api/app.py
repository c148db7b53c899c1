"""
harvest_market.api.app

FastAPI app factory for the Harvest Market service.

Responsibilities:
- Build the FastAPI application and register routers/middleware/error handlers.
- Build the token service eagerly (a missing signing secret aborts startup).
- Initialize and dispose shared infrastructure (DB engine/session factory).
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from harvest_market import __version__
from harvest_market.api.errors import register_error_handlers
from harvest_market.api.routers.auth import router as auth_router
from harvest_market.api.routers.categories import router as categories_router
from harvest_market.api.routers.health import router as health_router
from harvest_market.api.routers.orders import router as orders_router
from harvest_market.api.routers.products import router as products_router
from harvest_market.api.routers.reviews import router as reviews_router
from harvest_market.auth.jwt import TokenService
from harvest_market.db.init_db import init_db
from harvest_market.db.session import create_engine, create_sessionmaker
from harvest_market.observability.logging import configure_logging, get_logger
from harvest_market.observability.middleware import RequestContextMiddleware
from harvest_market.settings import Settings

log = get_logger(__name__)


def create_app(*, settings: Settings) -> FastAPI:
    # Configure structured logging once at process startup (before app serves requests).
    configure_logging(
        service_name=settings.service_name, level=settings.log_level, env=settings.env
    )

    # Raises TokenConfigError when HARVEST_JWT_SECRET is unset.
    tokens = TokenService.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env)
        # Create the async DB engine and session factory once and stash them on app.state.
        # Routers obtain sessions via dependencies (see `harvest_market.api.deps`).
        engine = create_engine(settings)
        app.state.engine = engine
        app.state.sessionmaker = create_sessionmaker(engine)
        if settings.env in ("dev", "test"):
            # Dev/test convenience: create tables automatically. Prod uses Alembic migrations.
            await init_db(engine)
        try:
            yield
        finally:
            # Dispose the engine to close pools/FDs gracefully.
            await engine.dispose()
            log.info("shutdown")

    app = FastAPI(
        title="Harvest Market API",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.tokens = tokens

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestContextMiddleware)
    register_error_handlers(app, settings)

    app.include_router(health_router, tags=["health"])
    app.include_router(auth_router)
    app.include_router(categories_router)
    app.include_router(products_router)
    app.include_router(orders_router)
    app.include_router(reviews_router)

    return app


# --- Module Notes -----------------------------------------------------------
# App composition only: rules live in services, request parsing in routers.
