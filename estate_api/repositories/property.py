"""
Property repository for listing queries and grouped listing statistics.
Provides filtered listings, status transitions and the aggregations behind the admin analytics.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, and_, func, desc, asc
from estate_api.repositories.base import BaseRepository
from estate_api.repositories.aggregations import year_month, newest_months_first
from estate_api.models.property import Property, PropertyStatus, PropertyType
from typing import Optional, List, Tuple
from datetime import datetime
from decimal import Decimal
import uuid
import logging

logger = logging.getLogger(__name__)


class PropertyFilters:
    """Data class for property listing filters. ``None`` means no constraint."""

    def __init__(
        self,
        created_from: Optional[datetime] = None,
        created_to: Optional[datetime] = None,
        status: Optional[PropertyStatus] = None
    ):
        self.created_from = created_from
        self.created_to = created_to
        self.status = status


class PropertyRepository(BaseRepository[Property]):
    """
    Repository for property listings and their grouped statistics.
    Sellers are loaded with each property (``selectin``) so listings arrive populated.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Property, db)

    def _build_filter_conditions(self, filters: Optional[PropertyFilters]) -> list:
        conditions = []
        if filters is None:
            return conditions

        if filters.created_from is not None:
            conditions.append(Property.created_at >= filters.created_from)
        if filters.created_to is not None:
            conditions.append(Property.created_at <= filters.created_to)
        if filters.status is not None:
            conditions.append(Property.status == filters.status)

        return conditions

    async def list_properties(self, filters: Optional[PropertyFilters] = None) -> List[Property]:
        """
        Get every property matching the filters, newest first (ties by id).

        Returns:
            List of properties with sellers loaded
        """
        try:
            query = select(Property)
            conditions = self._build_filter_conditions(filters)
            if conditions:
                query = query.where(and_(*conditions))

            query = query.order_by(desc(Property.created_at), desc(Property.id))

            result = await self.db.execute(query)
            properties = list(result.scalars().all())

            logger.debug(f"Retrieved {len(properties)} properties")
            return properties
        except Exception as e:
            logger.error(f"Failed to list properties: {e}")
            raise

    async def set_status(
        self,
        property_id: uuid.UUID,
        new_status: PropertyStatus,
        expected_status: Optional[PropertyStatus] = None
    ) -> bool:
        """
        Move a property to ``new_status``.

        When ``expected_status`` is given the update only applies if the row is
        currently in that status, which makes the transition a single atomic
        compare-and-set.

        Returns:
            True if a row was updated
        """
        try:
            conditions = [Property.id == property_id]
            if expected_status is not None:
                conditions.append(Property.status == expected_status)

            stmt = (
                update(Property)
                .where(and_(*conditions))
                .values(status=new_status)
                .execution_options(synchronize_session="fetch")
            )
            result = await self.db.execute(stmt)
            await self.db.commit()

            changed = result.rowcount > 0
            if changed:
                logger.info(f"Property {property_id} status set to {new_status.value}")
            return changed
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to update status of property {property_id}: {e}")
            raise

    async def count_by_type(self) -> List[Tuple[PropertyType, int]]:
        """Number of listings per property type."""
        try:
            query = (
                select(Property.property_type, func.count(Property.id))
                .group_by(Property.property_type)
                .order_by(asc(Property.property_type))
            )
            result = await self.db.execute(query)
            return [(row[0], row[1]) for row in result.all()]
        except Exception as e:
            logger.error(f"Failed to count properties by type: {e}")
            raise

    async def price_stats_by_type(self) -> List[Tuple[PropertyType, Decimal, Decimal, Decimal]]:
        """Average, minimum and maximum price per property type."""
        try:
            query = (
                select(
                    Property.property_type,
                    func.avg(Property.price),
                    func.min(Property.price),
                    func.max(Property.price)
                )
                .group_by(Property.property_type)
                .order_by(asc(Property.property_type))
            )
            result = await self.db.execute(query)
            return [(row[0], row[1], row[2], row[3]) for row in result.all()]
        except Exception as e:
            logger.error(f"Failed to compute price statistics: {e}")
            raise

    async def monthly_listing_counts(self, months: int = 12) -> List[Tuple[int, int, int]]:
        """
        Listings created per calendar month, newest month first.
        Months without listings do not appear.

        Returns:
            List of (year, month, count)
        """
        try:
            year, month = year_month(Property.created_at)
            query = newest_months_first(
                select(year, month, func.count(Property.id)),
                year, month, months
            )
            result = await self.db.execute(query)
            return [(int(row[0]), int(row[1]), row[2]) for row in result.all()]
        except Exception as e:
            logger.error(f"Failed to compute monthly listings: {e}")
            raise

    async def top_seller_counts(self, limit: int = 5) -> List[Tuple[uuid.UUID, int]]:
        """
        Sellers ranked by number of sold properties.
        Ties are ordered by seller id so the ranking is stable.

        Returns:
            List of (seller_id, properties_sold)
        """
        try:
            sold_count = func.count(Property.id).label("properties_sold")
            query = (
                select(Property.seller_id, sold_count)
                .where(Property.status == PropertyStatus.SOLD)
                .group_by(Property.seller_id)
                .order_by(desc(sold_count), asc(Property.seller_id))
                .limit(limit)
            )
            result = await self.db.execute(query)
            return [(row[0], row[1]) for row in result.all()]
        except Exception as e:
            logger.error(f"Failed to rank sellers: {e}")
            raise
