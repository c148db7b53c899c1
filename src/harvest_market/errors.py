"""
harvest_market.errors

Application error hierarchy.

Responsibilities:
- Carry a human-readable message and the HTTP status it maps to.
- Keep services free of HTTP types: routers and the central handlers in
  `api.errors` translate these into the error envelope.
"""

from __future__ import annotations


class AppError(Exception):
    status_code: int = 500

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(AppError):
    status_code = 400


class InvalidIdentifierError(ValidationError):
    pass


class DuplicateError(ValidationError):
    def __init__(self, field: str) -> None:
        super().__init__(f"{field} already exists")
        self.field = field


class UnauthenticatedError(AppError):
    status_code = 401


class TokenExpiredError(UnauthenticatedError):
    def __init__(self) -> None:
        super().__init__("Token expired. Please login again")


class TokenInvalidError(UnauthenticatedError):
    def __init__(self) -> None:
        super().__init__("Invalid token. Please login again")


class ForbiddenError(AppError):
    status_code = 403


class NotFoundError(AppError):
    status_code = 404


class InvalidTransitionError(AppError):
    status_code = 409


class TokenConfigError(RuntimeError):
    """Raised at startup when no token signing secret is configured."""


# --- Module Notes -----------------------------------------------------------
# TokenConfigError sits outside AppError: it is raised at boot, never while
# serving a request.
