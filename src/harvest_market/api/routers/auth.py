"""
harvest_market.api.routers.auth

Account endpoints.

Responsibilities:
- Sign up and log in (both return a bearer token).
- Return the authenticated user's profile.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import Field

from harvest_market.api.deps import auth_service
from harvest_market.api.responses import success
from harvest_market.api.schemas import ApiModel
from harvest_market.api.serializers import user_brief, user_out
from harvest_market.auth.deps import get_current_user
from harvest_market.db.models import User
from harvest_market.services.auth_service import AuthService

router = APIRouter(prefix="/api/auth", tags=["auth"])

_EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class SignupRequest(ApiModel):
    first_name: str = Field(min_length=1, max_length=64)
    last_name: str = Field(min_length=1, max_length=64)
    email: str = Field(pattern=_EMAIL_PATTERN, max_length=254)
    password: str = Field(min_length=6, max_length=128)
    phone_number: str | None = Field(default=None, max_length=32)


class LoginRequest(ApiModel):
    email: str = ""
    password: str = ""


@router.post("/signup", status_code=201)
async def signup(
    body: SignupRequest,
    svc: AuthService = Depends(auth_service),
) -> JSONResponse:
    user, token = await svc.signup(
        first_name=body.first_name,
        last_name=body.last_name,
        email=body.email,
        password=body.password,
        phone_number=body.phone_number,
    )
    return success(
        {"token": token, "user": user_brief(user)},
        message="User registered successfully",
        status_code=201,
    )


@router.post("/login")
async def login(
    body: LoginRequest,
    svc: AuthService = Depends(auth_service),
) -> JSONResponse:
    user, token = await svc.login(email=body.email, password=body.password)
    return success({"token": token, "user": user_brief(user)}, message="Login successful")


@router.get("/me")
async def me(user: User = Depends(get_current_user)) -> JSONResponse:
    return success({"user": user_out(user)})
