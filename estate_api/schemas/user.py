"""
Pydantic schemas for user requests and responses.
Responses never carry the password hash.
"""

from pydantic import EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime
from estate_api.models.user import UserRole, UserStatus
from estate_api.schemas.common import CamelModel


class UserCreate(CamelModel):
    """Self-registration payload."""

    name: str = Field(..., min_length=1, max_length=255, examples=["Jane Doe"])
    email: EmailStr = Field(..., examples=["jane@example.com"])
    password: str = Field(..., min_length=8, max_length=128, examples=["securepassword123"])
    role: UserRole = Field(UserRole.BUYER, description="buyer or seller", examples=["buyer"])

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("Name cannot be empty")
        return v.strip()

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        return v.lower().strip()

    @field_validator('password')
    @classmethod
    def validate_password(cls, v):
        """Require at least one letter and one number."""
        if not any(c.isalpha() for c in v):
            raise ValueError("Password must contain at least one letter")
        if not any(c.isdigit() for c in v):
            raise ValueError("Password must contain at least one number")
        return v

    @field_validator('role')
    @classmethod
    def validate_self_service_role(cls, v):
        if v not in (UserRole.BUYER, UserRole.SELLER):
            raise ValueError("Only buyer or seller accounts can be self-registered")
        return v


class UserContact(CamelModel):
    """Populated reference: the user's name and email."""

    id: str
    name: str
    email: str


class UserResponse(CamelModel):
    """User record as returned by listings (password excluded)."""

    id: str = Field(..., examples=["123e4567-e89b-12d3-a456-426614174000"])
    name: str
    email: str
    role: UserRole
    status: UserStatus
    created_at: datetime
    updated_at: datetime


class UserStatusUpdate(CamelModel):
    status: UserStatus


class UserRoleUpdate(CamelModel):
    role: UserRole


class DeleteUserResponse(CamelModel):
    success: bool
    message: str
