"""
Async engine, session factory and declarative base.
PostgreSQL (asyncpg) in deployment, SQLite (aiosqlite) for tests and local runs.
"""

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy import text, DateTime, Uuid, func
from estate_api.config import settings
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Dict
import logging
import uuid

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def engine_options(database_url: str) -> Dict[str, Any]:
    """
    Build engine keyword arguments for the configured backend.
    SQLite does not accept the pool sizing arguments used for PostgreSQL.
    """
    if database_url.startswith("sqlite"):
        return {"echo": settings.debug}

    return {
        "echo": settings.debug,
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
        "pool_pre_ping": True,
        "pool_recycle": 3600,
        "pool_timeout": settings.db_pool_timeout,
        "connect_args": {
            "server_settings": {
                "application_name": "estate_marketplace_api",
                "statement_timeout": str(settings.db_statement_timeout_ms),
            }
        },
    }


engine = create_async_engine(settings.database_url, **engine_options(settings.database_url))

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Every table gets a UUID primary key plus UTC created_at/updated_at."""

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        index=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
        index=True
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
        nullable=False
    )

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(id={self.id})>"


async def get_db() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency: one session per request, rolled back if the handler raises."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def ping_database() -> bool:
    """``SELECT 1`` against the configured database; False (and an error log) when unreachable."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Database unreachable: {e}")
        return False
    return True


async def create_tables() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"Ensured {len(Base.metadata.tables)} tables exist")


async def drop_tables() -> None:
    """Drop every table. Refused outside development and testing."""
    if not (settings.is_testing or settings.is_development):
        raise RuntimeError(f"Refusing to drop tables in {settings.environment}")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    logger.warning("All tables dropped")


async def close_db_connection() -> None:
    await engine.dispose()
    logger.info("Database engine disposed")
