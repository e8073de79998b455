"""
Marketplace accounts. Every buyer, seller, employee and administrator is a
``User`` row; the role decides which routes accept the account.
"""

from sqlalchemy import String, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column
from estate_api.database import Base
from passlib.context import CryptContext
from email_validator import validate_email, EmailNotValidError
import enum

MIN_PASSWORD_LENGTH = 8

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class UserRole(str, enum.Enum):
    """User role enumeration for role-based access control."""
    BUYER = "buyer"
    SELLER = "seller"
    EMPLOYEE = "employee"
    ADMIN = "admin"


class UserStatus(str, enum.Enum):
    """Account status managed by administrators."""
    ACTIVE = "active"
    INACTIVE = "inactive"


class User(Base):
    """
    User model for authentication and authorization.

    Deleting a user is a hard delete that does not touch the properties or
    purchases referencing it.
    """

    __tablename__ = "users"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Display name"
    )

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
        comment="Lowercased login address"
    )

    hashed_password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="bcrypt hash"
    )

    role: Mapped[UserRole] = mapped_column(
        SQLEnum(UserRole, name="user_role", validate_strings=True),
        nullable=False,
        default=UserRole.BUYER,
        index=True,
        comment="buyer, seller, employee or admin"
    )

    status: Mapped[UserStatus] = mapped_column(
        SQLEnum(UserStatus, name="user_status", validate_strings=True),
        nullable=False,
        default=UserStatus.ACTIVE,
        index=True,
        comment="Whether the account is active or inactive"
    )

    def __repr__(self) -> str:
        return f"<User {self.email} [{self.role.value}/{self.status.value}]>"

    @classmethod
    def validate_email_format(cls, email: str) -> str:
        """Return the lowercased normalized address or raise ``ValueError``."""
        try:
            checked = validate_email(email, check_deliverability=False)
        except EmailNotValidError as e:
            raise ValueError(f"Invalid email format: {e}")
        return checked.normalized.lower()

    @classmethod
    def hash_password(cls, password: str) -> str:
        if len(password or "") < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
        return pwd_context.hash(password)

    def verify_password(self, password: str) -> bool:
        return pwd_context.verify(password, self.hashed_password)

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE

    def to_dict(self) -> dict:
        """Public representation; the password hash never leaves the model."""
        return {
            **self.to_contact_dict(),
            "role": self.role.value,
            "status": self.status.value,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    def to_contact_dict(self) -> dict:
        """Name and email only, as embedded in populated references."""
        return {"id": str(self.id), "name": self.name, "email": self.email}
