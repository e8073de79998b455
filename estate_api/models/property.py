"""
Property model for marketplace listings.
Handles listing data, pricing, sale status and the seller reference.
"""

from sqlalchemy import String, Text, Numeric, Enum as SQLEnum, Index, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from estate_api.database import Base
from decimal import Decimal
import enum
import uuid
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from estate_api.models.user import User


class PropertyType(str, enum.Enum):
    """Kind of real estate being listed."""
    HOUSE = "house"
    APARTMENT = "apartment"
    CONDO = "condo"
    TOWNHOUSE = "townhouse"
    LAND = "land"
    COMMERCIAL = "commercial"


class PropertyStatus(str, enum.Enum):
    """Sale lifecycle of a listing."""
    AVAILABLE = "available"
    PENDING = "pending"
    SOLD = "sold"


class Property(Base):
    """
    Property listing owned by exactly one seller.

    ``seller_id`` is a plain reference rather than a database foreign key:
    deleting a seller leaves the listing in place, and readers must cope with
    a seller that no longer resolves.
    """

    __tablename__ = "properties"

    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Property listing title"
    )

    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
        comment="Detailed property description"
    )

    location: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        default="",
        comment="Property location/address"
    )

    property_type: Mapped[PropertyType] = mapped_column(
        SQLEnum(PropertyType, name="property_type", validate_strings=True),
        nullable=False,
        index=True,
        comment="Kind of property"
    )

    price: Mapped[Decimal] = mapped_column(
        Numeric(precision=12, scale=2),
        nullable=False,
        comment="Asking price"
    )

    status: Mapped[PropertyStatus] = mapped_column(
        SQLEnum(PropertyStatus, name="property_status", validate_strings=True),
        nullable=False,
        default=PropertyStatus.AVAILABLE,
        index=True,
        comment="available, pending or sold"
    )

    seller_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        nullable=False,
        index=True,
        comment="ID of the seller who listed this property"
    )

    seller: Mapped[Optional["User"]] = relationship(
        "User",
        primaryjoin="foreign(Property.seller_id) == User.id",
        viewonly=True,
        lazy="selectin"
    )

    def __repr__(self) -> str:
        return f"<Property(id={self.id}, title={self.title[:30]}, status={self.status})>"

    def to_dict(self, include_seller: bool = True) -> dict:
        """
        Convert property to dictionary.

        Args:
            include_seller: Whether to embed the seller's name and email
        """
        result = {
            "id": str(self.id),
            "title": self.title,
            "description": self.description,
            "location": self.location,
            "property_type": self.property_type.value,
            "price": float(self.price),
            "status": self.status.value,
            "seller_id": str(self.seller_id),
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

        if include_seller:
            result["seller"] = self.seller.to_contact_dict() if self.seller else None

        return result


# Dashboard filters combine status with a creation-date range
status_created_index = Index(
    'idx_properties_status_created',
    Property.status,
    Property.created_at.desc()
)

# Top sellers groups sold listings by seller
seller_status_index = Index(
    'idx_properties_seller_status',
    Property.seller_id,
    Property.status
)
