"""
Exception hierarchy for the Estate Marketplace API.

Every exception raised towards a client is an ``APIException``: an
``HTTPException`` that also carries a stable ``error_code``. Subclasses only
set class-level defaults; ``ErrorHandlerService`` turns any of them into the
standard error envelope.
"""

from typing import Any, Dict, Optional
from fastapi import HTTPException, status


class APIException(HTTPException):
    """HTTPException with a machine-readable error code."""

    default_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code: str = "API_ERROR"
    default_detail: str = "Request failed"

    def __init__(
        self,
        detail: Optional[str] = None,
        *,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            status_code=status_code or self.default_status,
            detail=detail or self.default_detail,
            headers=headers
        )
        self.error_code = error_code or self.default_code


class ValidationError(APIException):
    default_status = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_code = "VALIDATION_ERROR"
    default_detail = "Validation failed"


class BadRequestError(APIException):
    default_status = status.HTTP_400_BAD_REQUEST
    default_code = "BAD_REQUEST"
    default_detail = "Bad request"


class UnauthorizedError(APIException):
    default_status = status.HTTP_401_UNAUTHORIZED
    default_code = "UNAUTHORIZED"
    default_detail = "Authentication required"

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class ForbiddenError(APIException):
    default_status = status.HTTP_403_FORBIDDEN
    default_code = "FORBIDDEN"
    default_detail = "Access forbidden"


class NotFoundError(APIException):
    default_status = status.HTTP_404_NOT_FOUND
    default_code = "NOT_FOUND"

    def __init__(self, resource: str, resource_id: Optional[str] = None):
        suffix = f" with ID: {resource_id}" if resource_id else ""
        super().__init__(f"{resource} not found{suffix}")


class ConflictError(APIException):
    default_status = status.HTTP_409_CONFLICT
    default_code = "CONFLICT"
    default_detail = "Resource conflict"


class InternalServerError(APIException):
    default_code = "INTERNAL_SERVER_ERROR"
    default_detail = "Internal server error"


# Authentication
class InvalidCredentialsError(UnauthorizedError):
    default_detail = "Invalid email or password"


class TokenExpiredError(UnauthorizedError):
    default_detail = "Token has expired"


class InvalidTokenError(UnauthorizedError):
    default_detail = "Invalid token"


class InactiveUserError(ForbiddenError):
    default_detail = "User account is inactive"


class InsufficientPermissionsError(ForbiddenError):

    def __init__(self, action: str):
        super().__init__(f"Insufficient permissions to {action}")


# Domain
class UserNotFoundError(NotFoundError):

    def __init__(self, user_id: str):
        super().__init__("User", user_id)


class PropertyNotFoundError(NotFoundError):

    def __init__(self, property_id: str):
        super().__init__("Property", property_id)


class PropertyNotAvailableError(ConflictError):
    """A purchase was attempted on a listing that is not ``available``."""

    def __init__(self, property_id: str, current_status: str):
        super().__init__(f"Property {property_id} is not available for purchase (status: {current_status})")


class DuplicateResourceError(ConflictError):

    def __init__(self, resource: str, identifier: str):
        super().__init__(f"{resource} with identifier '{identifier}' already exists")


class InvalidCursorError(BadRequestError):
    default_detail = "Invalid pagination cursor"


class WebhookSignatureError(BadRequestError):
    """Payment webhook payload failed signature verification."""

    default_detail = "Invalid webhook signature"


class DataIntegrityError(Exception):
    """
    A stored reference points at a row that no longer exists.
    Raised from the data layer and turned into a 500 by the calling service.
    """
