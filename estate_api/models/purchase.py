"""
Purchase and Favorite models for the buyer workflows.
"""

from sqlalchemy import String, Numeric, DateTime, Uuid, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from estate_api.database import Base, utcnow
from datetime import datetime
from decimal import Decimal
from typing import Optional, TYPE_CHECKING
import uuid

if TYPE_CHECKING:
    from estate_api.models.property import Property


class Purchase(Base):
    """
    Completed transaction recorded by the payment webhook.
    Read-only from the analytics side.
    """

    __tablename__ = "purchases"

    buyer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        nullable=False,
        index=True
    )

    property_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        nullable=False,
        index=True
    )

    amount: Mapped[Decimal] = mapped_column(
        Numeric(precision=12, scale=2),
        nullable=False
    )

    purchase_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        index=True
    )

    payment_reference: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        unique=True,
        comment="Payment provider reference, used to make webhook delivery idempotent"
    )

    property_rel: Mapped[Optional["Property"]] = relationship(
        "Property",
        primaryjoin="foreign(Purchase.property_id) == Property.id",
        viewonly=True,
        lazy="selectin"
    )

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "buyer_id": str(self.buyer_id),
            "property_id": str(self.property_id),
            "amount": float(self.amount),
            "purchase_date": self.purchase_date,
            "payment_reference": self.payment_reference,
            "property": self.property_rel.to_dict() if self.property_rel else None,
        }


class Favorite(Base):
    """A property saved by a buyer."""

    __tablename__ = "favorites"
    __table_args__ = (
        UniqueConstraint("buyer_id", "property_id", name="uq_favorites_buyer_property"),
    )

    buyer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        nullable=False,
        index=True
    )

    property_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        nullable=False
    )

    property_rel: Mapped[Optional["Property"]] = relationship(
        "Property",
        primaryjoin="foreign(Favorite.property_id) == Property.id",
        viewonly=True,
        lazy="selectin"
    )
