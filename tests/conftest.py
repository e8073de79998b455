"""
Test configuration and fixtures for the Estate Marketplace API.
Provides an in-memory database per test, data factories and auth helpers.
"""

import os

os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-with-at-least-32-characters")
os.environ.setdefault("PAYMENT_WEBHOOK_SECRET", "whsec-test-secret")

import pytest
import uuid
from typing import AsyncGenerator, Optional, Dict
from datetime import datetime, timezone
from decimal import Decimal
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool
from httpx import AsyncClient, ASGITransport

from estate_api.main import app
from estate_api.database import Base, get_db
from estate_api.models.user import User, UserRole, UserStatus
from estate_api.models.property import Property, PropertyType, PropertyStatus
from estate_api.models.feedback import Feedback
from estate_api.models.purchase import Purchase
from estate_api.repositories.user import UserRepository
from estate_api.repositories.property import PropertyRepository
from estate_api.repositories.feedback import FeedbackRepository
from estate_api.repositories.purchase import PurchaseRepository, FavoriteRepository
from estate_api.utils.auth import create_access_token

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_PASSWORD = "testpassword123"

# Hashing once keeps factories fast; bcrypt is deliberately slow.
TEST_PASSWORD_HASH = User.hash_password(TEST_PASSWORD)


@pytest.fixture
async def db_engine():
    """Fresh in-memory schema for every test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False}
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = async_sessionmaker(
        bind=db_engine,
        class_=AsyncSession,
        expire_on_commit=False
    )
    async with session_factory() as session:
        yield session


@pytest.fixture
async def async_client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Async test client sharing the test's database session."""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# Repository fixtures
@pytest.fixture
def user_repository(db_session: AsyncSession) -> UserRepository:
    return UserRepository(db_session)


@pytest.fixture
def property_repository(db_session: AsyncSession) -> PropertyRepository:
    return PropertyRepository(db_session)


@pytest.fixture
def feedback_repository(db_session: AsyncSession) -> FeedbackRepository:
    return FeedbackRepository(db_session)


@pytest.fixture
def purchase_repository(db_session: AsyncSession) -> PurchaseRepository:
    return PurchaseRepository(db_session)


@pytest.fixture
def favorite_repository(db_session: AsyncSession) -> FavoriteRepository:
    return FavoriteRepository(db_session)


def at(year: int, month: int, day: int, hour: int = 12, minute: int = 0, second: int = 0) -> datetime:
    """UTC timestamp shorthand."""
    return datetime(year, month, day, hour, minute, second, tzinfo=timezone.utc)


# Test data factories
class UserFactory:
    """Factory for creating test users."""

    @staticmethod
    def create_user_data(
        email: str = None,
        password: str = TEST_PASSWORD,
        name: str = "Test User",
        role: UserRole = UserRole.BUYER,
        status: UserStatus = UserStatus.ACTIVE,
        created_at: Optional[datetime] = None
    ) -> dict:
        data = {
            "email": email or f"test{uuid.uuid4().hex[:8]}@example.com",
            "password": password,
            "name": name,
            "role": role,
            "status": status
        }
        if created_at is not None:
            data["created_at"] = created_at
        return data

    @staticmethod
    async def create_user(
        user_repo: UserRepository,
        email: str = None,
        name: str = "Test User",
        role: UserRole = UserRole.BUYER,
        status: UserStatus = UserStatus.ACTIVE,
        created_at: Optional[datetime] = None
    ) -> User:
        """Insert a user with the shared test password hash."""
        data = UserFactory.create_user_data(
            email=email,
            name=name,
            role=role,
            status=status,
            created_at=created_at
        )
        data.pop("password")
        data["hashed_password"] = TEST_PASSWORD_HASH
        return await user_repo.create(data)


class PropertyFactory:
    """Factory for creating test properties."""

    @staticmethod
    def create_property_data(
        seller_id: uuid.UUID,
        title: str = "Test Property",
        description: str = "A lovely test property",
        location: str = "Test City",
        property_type: PropertyType = PropertyType.HOUSE,
        price: Decimal = Decimal("250000.00"),
        status: PropertyStatus = PropertyStatus.AVAILABLE,
        created_at: Optional[datetime] = None
    ) -> dict:
        data = {
            "title": title,
            "description": description,
            "location": location,
            "property_type": property_type,
            "price": price,
            "status": status,
            "seller_id": seller_id
        }
        if created_at is not None:
            data["created_at"] = created_at
        return data

    @staticmethod
    async def create_property(
        property_repo: PropertyRepository,
        seller_id: uuid.UUID,
        **kwargs
    ) -> Property:
        return await property_repo.create(
            PropertyFactory.create_property_data(seller_id, **kwargs)
        )


class FeedbackFactory:

    @staticmethod
    async def create_feedback(
        feedback_repo: FeedbackRepository,
        name: str = "Visitor",
        email: str = "visitor@example.com",
        message: str = "Hello there",
        user_id: Optional[uuid.UUID] = None,
        created_at: Optional[datetime] = None
    ) -> Feedback:
        data = {"name": name, "email": email, "message": message, "user_id": user_id}
        if created_at is not None:
            data["created_at"] = created_at
        return await feedback_repo.create(data)


class PurchaseFactory:

    @staticmethod
    async def create_purchase(
        purchase_repo: PurchaseRepository,
        buyer_id: uuid.UUID,
        property_id: uuid.UUID,
        amount: Decimal = Decimal("250000.00"),
        purchase_date: Optional[datetime] = None,
        payment_reference: Optional[str] = None
    ) -> Purchase:
        data = {
            "buyer_id": buyer_id,
            "property_id": property_id,
            "amount": amount,
            "payment_reference": payment_reference or f"pay_{uuid.uuid4().hex[:12]}"
        }
        if purchase_date is not None:
            data["purchase_date"] = purchase_date
        return await purchase_repo.create(data)


def auth_headers(user: User) -> Dict[str, str]:
    """Bearer header for ``user``."""
    token = create_access_token(user_id=user.id, email=user.email, role=user.role)
    return {"Authorization": f"Bearer {token}"}


# Common test fixtures
@pytest.fixture
async def test_admin(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(
        user_repository,
        email="admin@test.com",
        name="Test Admin",
        role=UserRole.ADMIN
    )


@pytest.fixture
async def test_seller(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(
        user_repository,
        email="seller@test.com",
        name="Test Seller",
        role=UserRole.SELLER
    )


@pytest.fixture
async def test_buyer(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(
        user_repository,
        email="buyer@test.com",
        name="Test Buyer",
        role=UserRole.BUYER
    )


@pytest.fixture
async def test_property(property_repository: PropertyRepository, test_seller: User) -> Property:
    return await PropertyFactory.create_property(
        property_repository,
        test_seller.id,
        title="Test Property",
        price=Decimal("300000.00")
    )


@pytest.fixture
def admin_headers(test_admin: User) -> Dict[str, str]:
    return auth_headers(test_admin)


@pytest.fixture
def buyer_headers(test_buyer: User) -> Dict[str, str]:
    return auth_headers(test_buyer)
