"""
Feedback model for messages submitted through the public contact form.
"""

from sqlalchemy import String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from estate_api.database import Base
from typing import Optional, TYPE_CHECKING
import uuid

if TYPE_CHECKING:
    from estate_api.models.user import User


class Feedback(Base):
    """Append-only feedback entry, optionally linked to the submitting user."""

    __tablename__ = "feedback"

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    email: Mapped[str] = mapped_column(String(255), nullable=False)

    message: Mapped[str] = mapped_column(Text, nullable=False)

    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        nullable=True,
        index=True,
        comment="Submitting user when the form was sent while logged in"
    )

    user: Mapped[Optional["User"]] = relationship(
        "User",
        primaryjoin="foreign(Feedback.user_id) == User.id",
        viewonly=True,
        lazy="selectin"
    )

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "name": self.name,
            "email": self.email,
            "message": self.message,
            "user": self.user.to_contact_dict() if self.user else None,
            "created_at": self.created_at,
        }
