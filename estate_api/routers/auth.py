"""
``/auth`` routes. Registration is open to buyers and sellers only; employee
and admin accounts are provisioned by ``migrate.py`` or an administrator.
"""

from fastapi import APIRouter, Depends, status
from estate_api.models.user import User
from estate_api.services.auth import AuthService
from estate_api.schemas.auth import (
    LoginRequest,
    LoginResponse,
    RefreshTokenRequest,
    AccessTokenResponse
)
from estate_api.schemas.user import UserCreate, UserResponse
from estate_api.schemas.error import get_error_responses, get_auth_error_responses
from estate_api.utils.dependencies import get_auth_service, get_current_active_user


router = APIRouter(prefix="/auth", tags=["Authentication"])


def _public(user: User) -> UserResponse:
    return UserResponse.model_validate(user.to_dict())


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a buyer or seller account",
    responses=get_error_responses(400, 409, 422)
)
async def register(
    user_data: UserCreate,
    auth_service: AuthService = Depends(get_auth_service)
) -> UserResponse:
    return _public(await auth_service.register(user_data))


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Exchange email and password for tokens",
    responses=get_error_responses(401, 403, 422)
)
async def login(
    login_data: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> LoginResponse:
    """Inactive accounts get 403 even with the right password."""
    user, access_token, refresh_token = await auth_service.login(login_data.email, login_data.password)

    return LoginResponse(
        user=_public(user),
        access_token=access_token,
        refresh_token=refresh_token,
        expires_in=auth_service.access_token_lifetime
    )


@router.post(
    "/refresh",
    response_model=AccessTokenResponse,
    summary="Issue a new access token from a refresh token",
    responses=get_auth_error_responses()
)
async def refresh_token(
    refresh_data: RefreshTokenRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> AccessTokenResponse:
    return AccessTokenResponse(
        access_token=await auth_service.refresh_access_token(refresh_data.refresh_token),
        expires_in=auth_service.access_token_lifetime
    )


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Current account",
    responses=get_auth_error_responses()
)
async def get_current_user_info(current_user: User = Depends(get_current_active_user)) -> UserResponse:
    return _public(current_user)
