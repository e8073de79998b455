"""
Admin service: dashboard assembly and user administration.
Every operation is a read or a single write wrapped in one error boundary; there are no partial results.
"""

from typing import Optional, List, Tuple
from collections import Counter
from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession
from estate_api.config import settings
from estate_api.models.user import User, UserRole, UserStatus
from estate_api.models.property import PropertyStatus
from estate_api.repositories.user import UserRepository, UserFilters
from estate_api.repositories.property import PropertyRepository, PropertyFilters
from estate_api.repositories.feedback import FeedbackRepository
from estate_api.schemas.dashboard import (
    DashboardResponse,
    TotalCounts,
    EmployeeStats,
    PropertyStatusCounts
)
from estate_api.schemas.user import UserResponse
from estate_api.schemas.property import PropertyResponse
from estate_api.schemas.feedback import FeedbackResponse
from estate_api.utils.dates import inclusive_range
from estate_api.utils.pagination import encode_cursor, decode_cursor
from estate_api.utils.exceptions import InternalServerError, UserNotFoundError
import uuid
import logging

logger = logging.getLogger(__name__)


class DashboardFilters:
    """
    Optional dashboard filters as received from the query string.
    Both ``..._to`` bounds are inclusive of their whole calendar day.
    """

    def __init__(
        self,
        user_date_from: Optional[datetime] = None,
        user_date_to: Optional[datetime] = None,
        property_date_from: Optional[datetime] = None,
        property_date_to: Optional[datetime] = None,
        property_status: Optional[PropertyStatus] = None,
        user_role: Optional[UserRole] = None
    ):
        self.user_date_from = user_date_from
        self.user_date_to = user_date_to
        self.property_date_from = property_date_from
        self.property_date_to = property_date_to
        self.property_status = property_status
        self.user_role = user_role

    def user_filters(self) -> UserFilters:
        created_from, created_to = inclusive_range(self.user_date_from, self.user_date_to)
        return UserFilters(created_from=created_from, created_to=created_to, role=self.user_role)

    def property_filters(self) -> PropertyFilters:
        created_from, created_to = inclusive_range(self.property_date_from, self.property_date_to)
        return PropertyFilters(
            created_from=created_from,
            created_to=created_to,
            status=self.property_status
        )


class AdminService:
    """
    Admin-facing reads and user administration.
    Callers are already authorized as admins; nothing here re-checks identity.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.user_repo = UserRepository(db_session)
        self.property_repo = PropertyRepository(db_session)
        self.feedback_repo = FeedbackRepository(db_session)

    async def get_dashboard(self, filters: Optional[DashboardFilters] = None) -> DashboardResponse:
        """
        Assemble the dashboard payload.

        Args:
            filters: Optional filters; ``None`` returns the unfiltered dashboard

        Returns:
            DashboardResponse

        Raises:
            InternalServerError: With the underlying error message if any query fails
        """
        filters = filters or DashboardFilters()

        try:
            users = await self.user_repo.list_users(filters.user_filters())
            properties = await self.property_repo.list_properties(filters.property_filters())
            feedbacks = await self.feedback_repo.get_recent(settings.dashboard_feedback_limit)
            return self._assemble(users, properties, feedbacks)
        except Exception as e:
            logger.error(f"Dashboard stats error: {e}", exc_info=True)
            raise InternalServerError(str(e))

    def _assemble(self, users, properties, feedbacks) -> DashboardResponse:
        user_items = [UserResponse.model_validate(u.to_dict()) for u in users]
        property_items = [PropertyResponse.model_validate(p.to_dict()) for p in properties]

        employees = [u for u in user_items if u.role == UserRole.EMPLOYEE]
        role_counts = Counter(u.role for u in user_items)
        employee_status = Counter(e.status for e in employees)
        property_status = Counter(p.status for p in property_items)

        return DashboardResponse(
            users=user_items,
            properties=property_items,
            feedbacks=[FeedbackResponse.model_validate(f.to_dict()) for f in feedbacks],
            employees=employees,
            total_counts=TotalCounts(
                properties=len(property_items),
                buyers=role_counts[UserRole.BUYER],
                sellers=role_counts[UserRole.SELLER],
                employees=len(employees)
            ),
            employee_stats=EmployeeStats(
                active=employee_status[UserStatus.ACTIVE],
                inactive=employee_status[UserStatus.INACTIVE],
                total=len(employees)
            ),
            property_status=PropertyStatusCounts(
                available=property_status[PropertyStatus.AVAILABLE],
                pending=property_status[PropertyStatus.PENDING],
                sold=property_status[PropertyStatus.SOLD]
            ),
            recent_properties=property_items[:settings.dashboard_recent_properties_limit]
        )

    async def list_users(
        self,
        limit: Optional[int] = None,
        cursor: Optional[str] = None
    ) -> Tuple[List[User], Optional[str]]:
        """
        List users newest first.

        Without ``limit`` every user is returned and the next cursor is None.

        Returns:
            Tuple of (users, next_cursor)

        Raises:
            InvalidCursorError: If ``cursor`` cannot be decoded
            InternalServerError: If the query fails
        """
        after = decode_cursor(cursor) if cursor else None

        try:
            if limit is None and after is None:
                return await self.user_repo.list_users(), None

            page_size = limit or settings.max_page_size
            users, has_more = await self.user_repo.list_users_page(page_size, after)
        except Exception as e:
            logger.error(f"Failed to fetch users: {e}", exc_info=True)
            raise InternalServerError("Failed to fetch users")

        next_cursor = None
        if has_more and users:
            last = users[-1]
            next_cursor = encode_cursor(last.created_at, last.id)

        return users, next_cursor

    async def delete_user(self, user_id: uuid.UUID) -> bool:
        """
        Hard-delete a user.

        Deleting an ID that does not exist is not an error; callers report
        success either way. Properties and purchases referencing the user are
        left untouched.

        Returns:
            True if a row was removed
        """
        deleted = await self.user_repo.delete(user_id)
        logger.info(f"Delete requested for user {user_id} (removed: {deleted})")
        return deleted

    async def update_user_status(self, user_id: uuid.UUID, status: UserStatus) -> User:
        user = await self.user_repo.update_user_status(user_id, status)
        if user is None:
            raise UserNotFoundError(str(user_id))
        return user

    async def update_user_role(self, user_id: uuid.UUID, role: UserRole) -> User:
        user = await self.user_repo.update_user_role(user_id, role)
        if user is None:
            raise UserNotFoundError(str(user_id))
        return user
