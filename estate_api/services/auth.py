"""
Account registration, password login and bearer-token resolution.

Route dependencies call ``get_current_user`` for every protected request, so a
user deactivated by an administrator loses access on their next call even when
their token has not expired yet.
"""

from typing import Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from estate_api.config import settings
from estate_api.repositories.user import UserRepository
from estate_api.models.user import User
from estate_api.schemas.user import UserCreate
from estate_api.utils.auth import (
    ACCESS,
    REFRESH,
    create_access_token,
    create_refresh_token,
    verify_token
)
from estate_api.utils.exceptions import (
    InvalidCredentialsError,
    InvalidTokenError,
    TokenExpiredError,
    InactiveUserError,
    ValidationError,
    DuplicateResourceError,
    BadRequestError
)
from jose import JWTError
import uuid
import logging

logger = logging.getLogger(__name__)


class AuthService:

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.user_repo = UserRepository(db_session)

    @property
    def access_token_lifetime(self) -> int:
        """Seconds, as reported in ``expiresIn``."""
        return settings.access_token_expire_minutes * 60

    async def register(self, user_data: UserCreate) -> User:
        """
        Raises:
            DuplicateResourceError: Email already taken
            BadRequestError: Model-level validation rejected the data
        """
        if await self.user_repo.get_by_email(user_data.email) is not None:
            raise DuplicateResourceError("User", user_data.email)

        try:
            user = await self.user_repo.create_user(user_data.model_dump())
        except ValueError as e:
            raise BadRequestError(str(e))

        logger.info(f"Registered {user.role.value} account {user.email}")
        return user

    async def authenticate_user(self, email: str, password: str) -> User:
        """
        Check a login attempt.

        Unknown email and wrong password produce the same error so the
        response does not reveal which addresses are registered.

        Raises:
            ValidationError: Blank email or password
            InvalidCredentialsError: No match
            InactiveUserError: Correct credentials on a deactivated account
        """
        for field, value in (("Email", email), ("Password", password)):
            if not (value or "").strip():
                raise ValidationError(f"{field} is required")

        user = await self.user_repo.get_by_email(email)
        if user is None or not user.verify_password(password):
            logger.warning(f"Rejected login for {email}")
            raise InvalidCredentialsError()

        if not user.is_active:
            logger.warning(f"Login refused for inactive account {email}")
            raise InactiveUserError()

        return user

    def create_tokens(self, user: User) -> Tuple[str, str]:
        return (
            create_access_token(user_id=user.id, email=user.email, role=user.role),
            create_refresh_token(user_id=user.id, email=user.email),
        )

    async def login(self, email: str, password: str) -> Tuple[User, str, str]:
        user = await self.authenticate_user(email, password)
        access_token, refresh_token = self.create_tokens(user)
        logger.info(f"Login: {user.email}")
        return user, access_token, refresh_token

    async def refresh_access_token(self, refresh_token: str) -> str:
        user = await self._resolve_token(refresh_token, REFRESH)
        return create_access_token(user_id=user.id, email=user.email, role=user.role)

    async def get_current_user(self, token: str) -> User:
        return await self._resolve_token(token, ACCESS)

    async def _resolve_token(self, token: str, token_type: str) -> User:
        """
        Map a token to a live, active account.

        Raises:
            TokenExpiredError: Past its ``exp``
            InvalidTokenError: Bad signature, wrong type or deleted user
            InactiveUserError: Account deactivated since the token was issued
        """
        try:
            user_id = uuid.UUID(verify_token(token, token_type=token_type).user_id)
        except JWTError as e:
            if "expired" in str(e).lower():
                raise TokenExpiredError()
            raise InvalidTokenError(str(e))
        except ValueError:
            raise InvalidTokenError("Invalid token subject")

        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise InvalidTokenError("User no longer exists")
        if not user.is_active:
            raise InactiveUserError()

        return user
