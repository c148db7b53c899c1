"""
harvest_market.services.auth_service

Account lifecycle: signup and login.

Responsibilities:
- Register users with a bcrypt password hash and unique e-mail.
- Check credentials and issue bearer tokens through the token service.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from harvest_market.auth.jwt import TokenService
from harvest_market.auth.password import hash_password, verify_password
from harvest_market.db.models import User
from harvest_market.db.repositories.users import UserRepo
from harvest_market.db.session import transaction
from harvest_market.errors import UnauthenticatedError, ValidationError
from harvest_market.observability.logging import get_logger

log = get_logger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class AuthService:
    def __init__(
        self,
        *,
        session: AsyncSession,
        tokens: TokenService,
        bcrypt_rounds: int = 12,
    ) -> None:
        self._session = session
        self._tokens = tokens
        self._rounds = bcrypt_rounds
        self._users = UserRepo(session)

    async def signup(
        self,
        *,
        first_name: str,
        last_name: str,
        email: str,
        password: str,
        phone_number: str | None = None,
    ) -> tuple[User, str]:
        email = normalize_email(email)
        if await self._users.get_by_email(email) is not None:
            raise ValidationError("Email already registered")

        async with transaction(self._session):
            user = await self._users.create(
                first_name=first_name.strip(),
                last_name=last_name.strip(),
                email=email,
                password_hash=hash_password(password, rounds=self._rounds),
                phone_number=phone_number,
            )

        log.info("user_signed_up", user_id=str(user.id))
        return user, self._tokens.issue(str(user.id))

    async def login(self, *, email: str, password: str) -> tuple[User, str]:
        if not email or not password:
            raise ValidationError("Please provide email and password")

        user = await self._users.get_by_email(normalize_email(email))
        # Same message for unknown e-mail and wrong password.
        if user is None or not verify_password(password, user.password_hash):
            log.info("login_failed")
            raise UnauthenticatedError("Invalid email or password")

        log.info("user_logged_in", user_id=str(user.id))
        return user, self._tokens.issue(str(user.id))
