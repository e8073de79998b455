"""
Purchase and favorite repositories for the buyer workflows and sales analytics.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, and_, func, desc
from estate_api.repositories.base import BaseRepository
from estate_api.repositories.aggregations import year_month, newest_months_first
from estate_api.models.property import Property, PropertyStatus
from estate_api.models.purchase import Purchase, Favorite
from typing import Optional, List, Dict, Any, Tuple
from decimal import Decimal
import uuid
import logging

logger = logging.getLogger(__name__)


class PurchaseRepository(BaseRepository[Purchase]):
    """Purchases are written once by the payment webhook and only read afterwards."""

    def __init__(self, db: AsyncSession):
        super().__init__(Purchase, db)

    async def get_by_payment_reference(self, reference: str) -> Optional[Purchase]:
        try:
            result = await self.db.execute(
                select(Purchase).where(Purchase.payment_reference == reference)
            )
            return result.scalar_one_or_none()
        except Exception as e:
            logger.error(f"Failed to get purchase by reference {reference}: {e}")
            raise

    async def record_sale(self, purchase_data: Dict[str, Any]) -> Optional[Purchase]:
        """
        Mark the reserved property ``sold`` and insert the purchase in one transaction.

        The status change is a compare-and-set from ``pending``, so a property
        that is available, already sold or missing is left alone and nothing
        is written. A failed insert rolls the status change back with it.

        Returns:
            The new purchase, or None when the property was not pending
        """
        purchase = Purchase(**purchase_data)
        async with self._transaction("record sale for"):
            reserved = await self.db.execute(
                update(Property)
                .where(and_(
                    Property.id == purchase.property_id,
                    Property.status == PropertyStatus.PENDING
                ))
                .values(status=PropertyStatus.SOLD)
                .execution_options(synchronize_session="fetch")
            )
            if reserved.rowcount == 0:
                return None
            self.db.add(purchase)

        await self.db.refresh(purchase)
        logger.info(f"Property {purchase.property_id} sold (payment {purchase.payment_reference})")
        return purchase

    async def list_by_buyer(self, buyer_id: uuid.UUID) -> List[Purchase]:
        """Buyer's purchase history, most recent first."""
        try:
            query = (
                select(Purchase)
                .where(Purchase.buyer_id == buyer_id)
                .order_by(desc(Purchase.purchase_date), desc(Purchase.id))
            )
            result = await self.db.execute(query)
            return list(result.scalars().all())
        except Exception as e:
            logger.error(f"Failed to list purchases for buyer {buyer_id}: {e}")
            raise

    async def monthly_sales(self, months: int = 12) -> List[Tuple[int, int, int, Decimal]]:
        """
        Purchases per calendar month of ``purchase_date``, newest month first.
        Months without sales do not appear.

        Returns:
            List of (year, month, total_sales, total_value)
        """
        try:
            year, month = year_month(Purchase.purchase_date)
            query = newest_months_first(
                select(year, month, func.count(Purchase.id), func.sum(Purchase.amount)),
                year, month, months
            )
            result = await self.db.execute(query)
            return [
                (int(row[0]), int(row[1]), row[2], row[3] or Decimal("0"))
                for row in result.all()
            ]
        except Exception as e:
            logger.error(f"Failed to compute monthly sales: {e}")
            raise


class FavoriteRepository(BaseRepository[Favorite]):

    def __init__(self, db: AsyncSession):
        super().__init__(Favorite, db)

    async def get_for_buyer(self, buyer_id: uuid.UUID, property_id: uuid.UUID) -> Optional[Favorite]:
        result = await self.db.execute(
            select(Favorite).where(
                and_(Favorite.buyer_id == buyer_id, Favorite.property_id == property_id)
            )
        )
        return result.scalar_one_or_none()

    async def list_by_buyer(self, buyer_id: uuid.UUID) -> List[Favorite]:
        try:
            query = (
                select(Favorite)
                .where(Favorite.buyer_id == buyer_id)
                .order_by(desc(Favorite.created_at), desc(Favorite.id))
            )
            result = await self.db.execute(query)
            return list(result.scalars().all())
        except Exception as e:
            logger.error(f"Failed to list favorites for buyer {buyer_id}: {e}")
            raise

    async def remove(self, buyer_id: uuid.UUID, property_id: uuid.UUID) -> bool:
        """
        Remove a property from a buyer's favorites.

        Returns:
            True if a favorite was removed
        """
        try:
            result = await self.db.execute(
                delete(Favorite).where(
                    and_(Favorite.buyer_id == buyer_id, Favorite.property_id == property_id)
                )
            )
            await self.db.commit()
            return result.rowcount > 0
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to remove favorite {property_id} for buyer {buyer_id}: {e}")
            raise
