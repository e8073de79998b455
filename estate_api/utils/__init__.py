"""
Utility modules for the Estate Marketplace API.
"""

from .auth import (
    create_access_token,
    create_refresh_token,
    verify_token,
    TokenPayload
)

from .exceptions import (
    APIException,
    ValidationError,
    NotFoundError,
    UnauthorizedError,
    ForbiddenError,
    ConflictError,
    BadRequestError,
    InternalServerError,
    InvalidCredentialsError,
    TokenExpiredError,
    InvalidTokenError,
    InactiveUserError,
    InsufficientPermissionsError
)

# Dependencies are imported directly where needed to avoid circular imports

__all__ = [
    "create_access_token",
    "create_refresh_token",
    "verify_token",
    "TokenPayload",
    "APIException",
    "ValidationError",
    "NotFoundError",
    "UnauthorizedError",
    "ForbiddenError",
    "ConflictError",
    "BadRequestError",
    "InternalServerError",
    "InvalidCredentialsError",
    "TokenExpiredError",
    "InvalidTokenError",
    "InactiveUserError",
    "InsufficientPermissionsError"
]
