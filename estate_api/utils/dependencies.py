"""
FastAPI dependency injection utilities for authentication and services.
Role checks happen here so route handlers receive an already-authorized user.
"""

from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from estate_api.config import settings
from estate_api.database import get_db
from estate_api.models.user import User, UserRole
from estate_api.services.auth import AuthService
from estate_api.services.admin import AdminService
from estate_api.services.analytics import AnalyticsService
from estate_api.services.buyer import BuyerService
from estate_api.services.feedback import FeedbackService
from estate_api.services.payment import (
    PaymentService,
    PaymentWebhookVerifier,
    HmacWebhookVerifier
)
from estate_api.utils.exceptions import (
    UnauthorizedError,
    InactiveUserError,
    InsufficientPermissionsError
)
import logging

logger = logging.getLogger(__name__)

# HTTP Bearer token security scheme
security = HTTPBearer(auto_error=False)


async def get_auth_service(db: AsyncSession = Depends(get_db)) -> AuthService:
    return AuthService(db)


async def get_admin_service(db: AsyncSession = Depends(get_db)) -> AdminService:
    return AdminService(db)


async def get_analytics_service(db: AsyncSession = Depends(get_db)) -> AnalyticsService:
    return AnalyticsService(db)


async def get_buyer_service(db: AsyncSession = Depends(get_db)) -> BuyerService:
    return BuyerService(db)


async def get_feedback_service(db: AsyncSession = Depends(get_db)) -> FeedbackService:
    return FeedbackService(db)


def get_payment_verifier() -> PaymentWebhookVerifier:
    """Verifier for the configured payment provider."""
    return HmacWebhookVerifier(settings.payment_webhook_secret)


async def get_payment_service(
    db: AsyncSession = Depends(get_db),
    verifier: PaymentWebhookVerifier = Depends(get_payment_verifier)
) -> PaymentService:
    return PaymentService(db, verifier)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> User:
    """
    Get current authenticated user from JWT token.

    Raises:
        UnauthorizedError: If no token provided or token is invalid
        TokenExpiredError: If token is expired
        InactiveUserError: If user account is inactive
    """
    if not credentials:
        raise UnauthorizedError("Authentication token required")

    return await auth_service.get_current_user(credentials.credentials)


async def get_current_active_user(
    current_user: User = Depends(get_current_user)
) -> User:
    if not current_user.is_active:
        raise InactiveUserError()

    return current_user


def require_roles(*roles: UserRole):
    """
    Create a dependency that admits only the given roles.

    Args:
        roles: Roles allowed to call the endpoint

    Returns:
        Dependency function resolving to the authorized user
    """
    allowed = set(roles)
    action = "access " + "/".join(sorted(role.value for role in allowed)) + " resources"

    async def role_dependency(
        current_user: User = Depends(get_current_active_user)
    ) -> User:
        if current_user.role not in allowed:
            logger.warning(f"User {current_user.id} ({current_user.role.value}) denied: {action}")
            raise InsufficientPermissionsError(action)
        return current_user

    return role_dependency


get_current_admin_user = require_roles(UserRole.ADMIN)
get_current_buyer_user = require_roles(UserRole.BUYER)


async def get_optional_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> Optional[User]:
    """
    Get current user if a valid token is provided, otherwise None.
    Used by public endpoints that record who called them when known.
    """
    if not credentials:
        return None

    try:
        return await auth_service.get_current_user(credentials.credentials)
    except (UnauthorizedError, InactiveUserError) as e:
        logger.debug(f"Ignoring unusable bearer token on public endpoint: {e.detail}")
        return None
