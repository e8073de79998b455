"""
User repository for authentication and user administration.
Provides user creation with password hashing, filtered listings and role/status updates.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_, or_, desc
from estate_api.repositories.base import BaseRepository
from estate_api.models.user import User, UserRole, UserStatus
from typing import Optional, List, Dict, Any, Tuple
from datetime import datetime
import uuid
import logging

logger = logging.getLogger(__name__)


class UserFilters:
    """Filter set for user listings. ``None`` means no constraint."""

    def __init__(
        self,
        created_from: Optional[datetime] = None,
        created_to: Optional[datetime] = None,
        role: Optional[UserRole] = None
    ):
        self.created_from = created_from
        self.created_to = created_to
        self.role = role


class UserRepository(BaseRepository[User]):
    """
    Repository for user management with authentication support.
    Listings never expose the password hash beyond the ORM object itself.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    async def create_user(self, user_data: Dict[str, Any]) -> User:
        """
        Create a new user with email validation and password hashing.

        Args:
            user_data: Must include email, password and name.
                       Optional: role (defaults to BUYER), status (defaults to ACTIVE)

        Returns:
            Created user instance

        Raises:
            ValueError: If validation fails or the email is taken
        """
        try:
            data = dict(user_data)
            email = User.validate_email_format(data["email"])

            existing_user = await self.get_by_email(email)
            if existing_user:
                raise ValueError(f"User with email {email} already exists")

            password = data.pop("password")

            create_data = {
                **data,
                "email": email,
                "hashed_password": User.hash_password(password),
                "role": data.get("role") or UserRole.BUYER,
                "status": data.get("status") or UserStatus.ACTIVE,
            }

            created_user = await self.create(create_data)
            logger.info(f"Created user: {created_user.email} (ID: {created_user.id})")
            return created_user
        except ValueError as e:
            logger.error(f"User validation failed: {e}")
            raise

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by (normalized) email address."""
        try:
            normalized_email = email.lower().strip()
            result = await self.db.execute(select(User).where(User.email == normalized_email))
            return result.scalar_one_or_none()
        except Exception as e:
            logger.error(f"Failed to get user by email {email}: {e}")
            raise

    def _build_filter_conditions(self, filters: Optional[UserFilters]) -> list:
        conditions = []
        if filters is None:
            return conditions

        if filters.created_from is not None:
            conditions.append(User.created_at >= filters.created_from)
        if filters.created_to is not None:
            conditions.append(User.created_at <= filters.created_to)
        if filters.role is not None:
            conditions.append(User.role == filters.role)

        return conditions

    async def list_users(self, filters: Optional[UserFilters] = None) -> List[User]:
        """
        Get every user matching the filters, newest first.

        Returns:
            List of users (unpaginated)
        """
        try:
            query = select(User)
            conditions = self._build_filter_conditions(filters)
            if conditions:
                query = query.where(and_(*conditions))

            query = query.order_by(desc(User.created_at), desc(User.id))

            result = await self.db.execute(query)
            users = list(result.scalars().all())

            logger.debug(f"Retrieved {len(users)} users")
            return users
        except Exception as e:
            logger.error(f"Failed to list users: {e}")
            raise

    async def list_users_page(
        self,
        limit: int,
        after: Optional[Tuple[datetime, uuid.UUID]] = None
    ) -> Tuple[List[User], bool]:
        """
        Keyset page of users, newest first.

        Args:
            limit: Maximum number of users to return
            after: ``(created_at, id)`` of the last user on the previous page

        Returns:
            Tuple of (users, has_more)
        """
        try:
            query = select(User)

            if after is not None:
                created_at, last_id = after
                query = query.where(
                    or_(
                        User.created_at < created_at,
                        and_(User.created_at == created_at, User.id < last_id)
                    )
                )

            query = query.order_by(desc(User.created_at), desc(User.id)).limit(limit + 1)

            result = await self.db.execute(query)
            rows = list(result.scalars().all())

            has_more = len(rows) > limit
            return rows[:limit], has_more
        except Exception as e:
            logger.error(f"Failed to page users: {e}")
            raise

    async def update_user_status(self, user_id: uuid.UUID, status: UserStatus) -> Optional[User]:
        """
        Update user's account status.

        Returns:
            Updated user instance or None if not found
        """
        updated_user = await self.update(user_id, {"status": status})

        if updated_user:
            logger.info(f"User {updated_user.email} status set to {status.value}")

        return updated_user

    async def update_user_role(self, user_id: uuid.UUID, new_role: UserRole) -> Optional[User]:
        """
        Update user's role.

        Returns:
            Updated user instance or None if not found
        """
        updated_user = await self.update(user_id, {"role": new_role})

        if updated_user:
            logger.info(f"User {updated_user.email} role updated to {new_role.value}")

        return updated_user

