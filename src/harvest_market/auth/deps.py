"""
harvest_market.auth.deps

FastAPI dependency functions for authentication (the identity resolver).

Responsibilities:
- Convert a bearer token into the persisted `User` it names.
- Attach the resolved user to `request.state.user` for downstream use.
"""

from __future__ import annotations

import uuid

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from harvest_market.api.deps import db_session, token_service_dep
from harvest_market.auth.jwt import TokenService
from harvest_market.db.models import User
from harvest_market.db.repositories.users import UserRepo
from harvest_market.errors import TokenInvalidError, UnauthenticatedError

# auto_error=False: a missing/non-bearer header reaches us as None and is
# reported through the error envelope instead of FastAPI's default 403.
_bearer = HTTPBearer(auto_error=False)


async def get_current_user(
    request: Request,
    creds: HTTPAuthorizationCredentials | None = Depends(_bearer),
    session: AsyncSession = Depends(db_session),
    tokens: TokenService = Depends(token_service_dep),
) -> User:
    # Authn: require a bearer token.
    if creds is None or not creds.credentials:
        raise UnauthenticatedError("No token provided. Please login to access this resource")

    # Raises TokenExpiredError / TokenInvalidError (both 401).
    claims = tokens.validate(creds.credentials)
    try:
        user_id = uuid.UUID(claims.user_id)
    except ValueError as e:
        raise TokenInvalidError() from e

    user = await UserRepo(session).get(user_id)
    if user is None:
        raise UnauthenticatedError("User not found. Token is invalid")

    request.state.user = user
    return user


async def get_current_user_optional(
    request: Request,
    creds: HTTPAuthorizationCredentials | None = Depends(_bearer),
    session: AsyncSession = Depends(db_session),
    tokens: TokenService = Depends(token_service_dep),
) -> User | None:
    if creds is None or not creds.credentials:
        return None
    # Public reads treat a stale or unusable token as an anonymous caller.
    try:
        return await get_current_user(request, creds, session, tokens)
    except UnauthenticatedError:
        return None


# --- Module Notes -----------------------------------------------------------
# Ownership checks happen in the service layer (`auth.ownership`), after the
# target record is loaded; this module only answers "who is calling".
