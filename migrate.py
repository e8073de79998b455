#!/usr/bin/env python3
"""
Database management script.
Creates tables, seeds demo data and resets development databases.
"""

import asyncio
import sys
import argparse
import logging
from decimal import Decimal

from sqlalchemy import select

from estate_api.config import settings
from estate_api.database import AsyncSessionLocal, create_tables, drop_tables
from estate_api.models.user import User, UserRole, UserStatus
from estate_api.models.property import Property, PropertyType, PropertyStatus

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "admin123456"

DEMO_USERS = [
    ("Sam Seller", "seller@example.com", UserRole.SELLER, UserStatus.ACTIVE),
    ("Bea Buyer", "buyer@example.com", UserRole.BUYER, UserStatus.ACTIVE),
    ("Erin Employee", "employee@example.com", UserRole.EMPLOYEE, UserStatus.ACTIVE),
    ("Ian Inactive", "former.employee@example.com", UserRole.EMPLOYEE, UserStatus.INACTIVE),
]

DEMO_PROPERTIES = [
    ("Family house with garden", "Springfield", PropertyType.HOUSE, "425000.00", PropertyStatus.AVAILABLE),
    ("City centre apartment", "Springfield", PropertyType.APARTMENT, "210000.00", PropertyStatus.AVAILABLE),
    ("Lakeside condo", "Shelbyville", PropertyType.CONDO, "305000.00", PropertyStatus.PENDING),
    ("Corner townhouse", "Capital City", PropertyType.TOWNHOUSE, "350000.00", PropertyStatus.SOLD),
]


class MigrationManager:
    """Manages schema creation and demo data."""

    async def create_tables(self) -> None:
        logger.info(f"Creating tables on {settings.database_url.split('@')[-1]}")
        await create_tables()

    async def seed_database(self) -> None:
        """Seed an admin account plus a handful of demo users and listings."""
        logger.info("Seeding database with initial data")

        async with AsyncSessionLocal() as session:
            try:
                result = await session.execute(select(User).where(User.email == ADMIN_EMAIL))
                if result.scalar_one_or_none():
                    logger.info("Admin user already exists, skipping seed")
                    return

                session.add(User(
                    name="System Administrator",
                    email=ADMIN_EMAIL,
                    hashed_password=User.hash_password(ADMIN_PASSWORD),
                    role=UserRole.ADMIN,
                    status=UserStatus.ACTIVE
                ))

                seller = None
                for name, email, role, status in DEMO_USERS:
                    user = User(
                        name=name,
                        email=email,
                        hashed_password=User.hash_password("password123"),
                        role=role,
                        status=status
                    )
                    session.add(user)
                    if role == UserRole.SELLER:
                        seller = user

                await session.flush()

                for title, location, property_type, price, status in DEMO_PROPERTIES:
                    session.add(Property(
                        title=title,
                        description=f"{title} in {location}.",
                        location=location,
                        property_type=property_type,
                        price=Decimal(price),
                        status=status,
                        seller_id=seller.id
                    ))

                await session.commit()

                logger.info("Database seeded successfully")
                logger.info(f"  Admin: {ADMIN_EMAIL} / {ADMIN_PASSWORD}")
                logger.warning("Please change the admin password in production!")
            except Exception as e:
                await session.rollback()
                logger.error(f"Failed to seed database: {e}")
                raise

    async def reset_database(self) -> None:
        """Drop and recreate all tables, then seed."""
        logger.warning("Resetting database - all data will be lost!")

        if not settings.is_testing and not settings.is_development:
            raise RuntimeError("Database reset is only allowed in development or test mode")

        await drop_tables()
        await create_tables()

        await self.seed_database()
        logger.info("Database reset completed")


def main():
    parser = argparse.ArgumentParser(description="Database management")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("create-tables", help="Create all tables")
    subparsers.add_parser("seed", help="Seed database with demo data")

    reset_parser = subparsers.add_parser("reset", help="Reset database (development only)")
    reset_parser.add_argument("--confirm", action="store_true", help="Confirm database reset")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return

    manager = MigrationManager()

    try:
        if args.command == "create-tables":
            asyncio.run(manager.create_tables())

        elif args.command == "seed":
            asyncio.run(manager.seed_database())

        elif args.command == "reset":
            if not args.confirm:
                print("Database reset requires --confirm flag")
                return
            asyncio.run(manager.reset_database())

    except Exception as e:
        logger.error(f"Command failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
