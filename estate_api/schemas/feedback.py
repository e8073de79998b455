"""
Pydantic schemas for the public feedback form.
"""

from pydantic import EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime
from estate_api.schemas.common import CamelModel
from estate_api.schemas.user import UserContact


class FeedbackCreate(CamelModel):
    """
    Contact form submission.
    The browser validates the same fields first; this is the authoritative check.
    """

    name: str = Field(..., max_length=255, examples=["Jane Doe"])
    email: EmailStr = Field(..., examples=["jane@example.com"])
    message: str = Field(..., max_length=5000, examples=["I'd like to know more about your listings."])

    @field_validator('name', 'message')
    @classmethod
    def not_blank(cls, v, info):
        if not v or not v.strip():
            raise ValueError(f"{info.field_name.capitalize()} is required")
        return v.strip()

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        return v.lower().strip()


class FeedbackSubmitResponse(CamelModel):
    message: str = Field(..., examples=["Feedback submitted successfully"])


class FeedbackResponse(CamelModel):
    """Feedback entry with the submitting user populated when known."""

    id: str
    name: str
    email: str
    message: str
    user: Optional[UserContact] = None
    created_at: datetime
