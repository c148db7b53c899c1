"""
harvest_market.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Provide dependency functions for settings, the token service and DB sessions.
- Build request-scoped service objects around the injected session.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from harvest_market.auth.jwt import TokenService
from harvest_market.services.auth_service import AuthService
from harvest_market.services.category_service import CategoryService
from harvest_market.services.order_service import OrderService
from harvest_market.services.product_service import ProductService
from harvest_market.services.review_service import ReviewService
from harvest_market.settings import Settings


def settings_dep(request: Request) -> Settings:
    # Settings are attached by `harvest_market.api.app.create_app`.
    return request.app.state.settings  # type: ignore[attr-defined]


def token_service_dep(request: Request) -> TokenService:
    return request.app.state.tokens  # type: ignore[attr-defined]


def sessionmaker_from_app(request: Request) -> async_sessionmaker[AsyncSession]:
    # The sessionmaker is created in the app lifespan (see `create_app`).
    return request.app.state.sessionmaker  # type: ignore[attr-defined]


async def db_session(
    session_factory: async_sessionmaker[AsyncSession] = Depends(sessionmaker_from_app),
) -> AsyncIterator[AsyncSession]:
    # Request-scoped DB session. Commit/rollback is managed explicitly by the service layer.
    async with session_factory() as session:
        yield session


def auth_service(
    session: AsyncSession = Depends(db_session),
    tokens: TokenService = Depends(token_service_dep),
    settings: Settings = Depends(settings_dep),
) -> AuthService:
    return AuthService(session=session, tokens=tokens, bcrypt_rounds=settings.bcrypt_rounds)


def category_service(session: AsyncSession = Depends(db_session)) -> CategoryService:
    return CategoryService(session=session)


def product_service(session: AsyncSession = Depends(db_session)) -> ProductService:
    return ProductService(session=session)


def order_service(session: AsyncSession = Depends(db_session)) -> OrderService:
    return OrderService(session=session)


def review_service(session: AsyncSession = Depends(db_session)) -> ReviewService:
    return ReviewService(session=session)


# --- Module Notes -----------------------------------------------------------
# FastAPI caches dependencies per request, so the identity resolver and the
# service objects share one AsyncSession.
