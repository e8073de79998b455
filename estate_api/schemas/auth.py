"""
Pydantic schemas for authentication requests and responses.
"""

from pydantic import EmailStr, Field, field_validator
from estate_api.schemas.common import CamelModel
from estate_api.schemas.user import UserResponse


class LoginRequest(CamelModel):
    """Login credentials."""

    email: EmailStr = Field(..., examples=["admin@example.com"])
    password: str = Field(..., min_length=1, examples=["securepassword123"])

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        return v.lower().strip()


class RefreshTokenRequest(CamelModel):
    refresh_token: str


class AccessTokenResponse(CamelModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Access token lifetime in seconds", examples=[1800])


class LoginResponse(CamelModel):
    """Complete login response schema."""

    user: UserResponse
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int
