"""
Admin API endpoints: dashboard, analytics and user administration.
Every route requires an authenticated admin.
"""

from fastapi import APIRouter, Depends, Query, Path, Response, status
from fastapi.responses import JSONResponse
from typing import Optional, List
from datetime import datetime
from uuid import UUID
import uuid
import logging

from estate_api.models.user import User, UserRole
from estate_api.models.property import PropertyStatus
from estate_api.services.admin import AdminService, DashboardFilters
from estate_api.services.analytics import AnalyticsService
from estate_api.schemas.dashboard import (
    DashboardResponse,
    PropertyAnalyticsResponse,
    TransactionAnalyticsResponse
)
from estate_api.schemas.user import (
    UserResponse,
    UserStatusUpdate,
    UserRoleUpdate,
    DeleteUserResponse
)
from estate_api.schemas.error import get_admin_error_responses, get_error_responses
from estate_api.utils.dependencies import (
    get_admin_service,
    get_analytics_service,
    get_current_admin_user
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
    dependencies=[Depends(get_current_admin_user)]
)


@router.get(
    "/dashboard",
    response_model=DashboardResponse,
    status_code=status.HTTP_200_OK,
    summary="Admin dashboard",
    description=(
        "Users, properties, recent feedback and derived counts in one payload. "
        "All filters are optional; date upper bounds include the whole day."
    ),
    responses=get_admin_error_responses()
)
async def get_dashboard(
    user_date_from: Optional[datetime] = Query(None, alias="userDateFrom"),
    user_date_to: Optional[datetime] = Query(None, alias="userDateTo"),
    property_date_from: Optional[datetime] = Query(None, alias="propertyDateFrom"),
    property_date_to: Optional[datetime] = Query(None, alias="propertyDateTo"),
    property_status: Optional[PropertyStatus] = Query(None, alias="propertyStatus"),
    user_role: Optional[UserRole] = Query(None, alias="userRole"),
    admin_service: AdminService = Depends(get_admin_service)
) -> DashboardResponse:
    filters = DashboardFilters(
        user_date_from=user_date_from,
        user_date_to=user_date_to,
        property_date_from=property_date_from,
        property_date_to=property_date_to,
        property_status=property_status,
        user_role=user_role
    )
    return await admin_service.get_dashboard(filters)


@router.get(
    "/users",
    response_model=List[UserResponse],
    status_code=status.HTTP_200_OK,
    summary="List users",
    description=(
        "All users, newest first. Pass `limit` to page through them; the "
        "next page's cursor is returned in the `X-Next-Cursor` header."
    ),
    responses=get_error_responses(400, 401, 403, 422, 500)
)
async def get_all_users(
    response: Response,
    limit: Optional[int] = Query(None, ge=1, le=500, description="Page size"),
    cursor: Optional[str] = Query(None, description="Cursor from a previous X-Next-Cursor header"),
    admin_service: AdminService = Depends(get_admin_service)
) -> List[UserResponse]:
    users, next_cursor = await admin_service.list_users(limit=limit, cursor=cursor)

    if next_cursor:
        response.headers["X-Next-Cursor"] = next_cursor

    return [UserResponse.model_validate(user.to_dict()) for user in users]


@router.delete(
    "/users/{user_id}",
    response_model=DeleteUserResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete user",
    description="Hard delete. Succeeds whether or not the user existed.",
    responses={400: {"model": DeleteUserResponse, "description": "Delete failed"}}
)
async def delete_user(
    user_id: str = Path(..., description="User ID"),
    admin_service: AdminService = Depends(get_admin_service)
):
    try:
        await admin_service.delete_user(uuid.UUID(user_id))
    except Exception as e:
        logger.error(f"Delete user error for {user_id}: {e}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=DeleteUserResponse(success=False, message="Failed to delete user").model_dump()
        )

    return DeleteUserResponse(success=True, message="User deleted successfully")


@router.patch(
    "/users/{user_id}/status",
    response_model=UserResponse,
    status_code=status.HTTP_200_OK,
    summary="Activate or deactivate a user",
    responses=get_error_responses(401, 403, 404, 422)
)
async def update_user_status(
    status_update: UserStatusUpdate,
    user_id: UUID = Path(..., description="User ID"),
    admin_service: AdminService = Depends(get_admin_service)
) -> UserResponse:
    user = await admin_service.update_user_status(user_id, status_update.status)
    return UserResponse.model_validate(user.to_dict())


@router.patch(
    "/users/{user_id}/role",
    response_model=UserResponse,
    status_code=status.HTTP_200_OK,
    summary="Change a user's role",
    responses=get_error_responses(401, 403, 404, 422)
)
async def update_user_role(
    role_update: UserRoleUpdate,
    user_id: UUID = Path(..., description="User ID"),
    current_user: User = Depends(get_current_admin_user),
    admin_service: AdminService = Depends(get_admin_service)
) -> UserResponse:
    user = await admin_service.update_user_role(user_id, role_update.role)
    logger.info(f"User {user_id} role set to {role_update.role.value} by {current_user.email}")
    return UserResponse.model_validate(user.to_dict())


@router.get(
    "/analytics/properties",
    response_model=PropertyAnalyticsResponse,
    status_code=status.HTTP_200_OK,
    summary="Property analytics",
    description="Listings per type, price statistics per type and listings per month (last 12 months with data)",
    responses=get_admin_error_responses()
)
async def get_property_analytics(
    analytics_service: AnalyticsService = Depends(get_analytics_service)
) -> PropertyAnalyticsResponse:
    return await analytics_service.get_property_analytics()


@router.get(
    "/analytics/transactions",
    response_model=TransactionAnalyticsResponse,
    status_code=status.HTTP_200_OK,
    summary="Transaction analytics",
    description="Sales per month (last 12 months with data) and the top five sellers by sold listings",
    responses=get_admin_error_responses()
)
async def get_transaction_analytics(
    analytics_service: AnalyticsService = Depends(get_analytics_service)
) -> TransactionAnalyticsResponse:
    return await analytics_service.get_transaction_analytics()
