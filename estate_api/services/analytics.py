"""
Analytics service: grouped statistics over listings and completed sales.
"""

from typing import List
from sqlalchemy.ext.asyncio import AsyncSession
from estate_api.config import settings
from estate_api.repositories.property import PropertyRepository
from estate_api.repositories.purchase import PurchaseRepository
from estate_api.repositories.user import UserRepository
from estate_api.schemas.dashboard import (
    PropertyAnalyticsResponse,
    PropertyTypeCount,
    PriceAnalytics,
    MonthlyListings,
    TransactionAnalyticsResponse,
    MonthlySales,
    TopSeller
)
from estate_api.schemas.user import UserResponse
from estate_api.utils.exceptions import InternalServerError, DataIntegrityError
import logging

logger = logging.getLogger(__name__)


class AnalyticsService:
    """
    Read-only statistics for the admin analytics views.

    Each view is computed from independent grouped queries and either
    succeeds as a whole or fails with a 500.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.property_repo = PropertyRepository(db_session)
        self.purchase_repo = PurchaseRepository(db_session)
        self.user_repo = UserRepository(db_session)

    async def get_property_analytics(self) -> PropertyAnalyticsResponse:
        """
        Listing counts and price statistics per type, plus listings per month.

        Raises:
            InternalServerError: If any aggregation fails
        """
        try:
            type_counts = await self.property_repo.count_by_type()
            price_stats = await self.property_repo.price_stats_by_type()
            monthly = await self.property_repo.monthly_listing_counts(settings.analytics_month_buckets)
        except Exception as e:
            logger.error(f"Property analytics error: {e}", exc_info=True)
            raise InternalServerError("Failed to fetch property analytics")

        return PropertyAnalyticsResponse(
            property_types=[
                PropertyTypeCount(property_type=property_type, count=count)
                for property_type, count in type_counts
            ],
            price_analytics=[
                PriceAnalytics(
                    property_type=property_type,
                    average_price=float(avg_price),
                    min_price=float(min_price),
                    max_price=float(max_price)
                )
                for property_type, avg_price, min_price, max_price in price_stats
            ],
            monthly_listings=[
                MonthlyListings(year=year, month=month, count=count)
                for year, month, count in monthly
            ]
        )

    async def get_transaction_analytics(self) -> TransactionAnalyticsResponse:
        """
        Sales per month and the sellers with the most sold listings.

        Raises:
            InternalServerError: If any aggregation fails, including a top
                seller whose user record no longer exists
        """
        try:
            monthly = await self.purchase_repo.monthly_sales(settings.analytics_month_buckets)
            top_sellers = await self._top_sellers()
        except Exception as e:
            logger.error(f"Transaction analytics error: {e}", exc_info=True)
            raise InternalServerError("Failed to fetch transaction analytics")

        return TransactionAnalyticsResponse(
            monthly_sales=[
                MonthlySales(
                    year=year,
                    month=month,
                    total_sales=total_sales,
                    total_value=float(total_value)
                )
                for year, month, total_sales, total_value in monthly
            ],
            top_sellers=top_sellers
        )

    async def _top_sellers(self) -> List[TopSeller]:
        ranking = await self.property_repo.top_seller_counts(settings.top_sellers_limit)
        sellers = await self.user_repo.get_by_ids([seller_id for seller_id, _ in ranking])

        top_sellers = []
        for seller_id, sold in ranking:
            seller = sellers.get(seller_id)
            if seller is None:
                raise DataIntegrityError(f"Seller {seller_id} referenced by sold properties does not exist")

            top_sellers.append(
                TopSeller(
                    seller_id=str(seller_id),
                    properties_sold=sold,
                    seller_details=UserResponse.model_validate(seller.to_dict())
                )
            )

        return top_sellers
