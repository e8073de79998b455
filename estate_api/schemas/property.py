"""
Pydantic schemas for property responses.
"""

from pydantic import Field
from typing import Optional
from datetime import datetime
from estate_api.models.property import PropertyType, PropertyStatus
from estate_api.schemas.common import CamelModel
from estate_api.schemas.user import UserContact


class PropertyResponse(CamelModel):
    """Property listing with the seller's name and email populated."""

    id: str
    title: str
    description: str
    location: str
    property_type: PropertyType
    price: float = Field(..., examples=[350000.0])
    status: PropertyStatus
    seller_id: str
    seller: Optional[UserContact] = Field(
        None,
        description="Seller name and email; null when the seller no longer exists"
    )
    created_at: datetime
    updated_at: datetime
