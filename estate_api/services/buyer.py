"""
Buyer service: browsing available listings, favorites and starting purchases.
Purchases are completed by the payment webhook, not here.
"""

from typing import List
from sqlalchemy.ext.asyncio import AsyncSession
from estate_api.models.user import User
from estate_api.models.property import Property, PropertyStatus
from estate_api.models.purchase import Purchase, Favorite
from estate_api.repositories.property import PropertyRepository, PropertyFilters
from estate_api.repositories.purchase import PurchaseRepository, FavoriteRepository
from estate_api.schemas.purchase import CheckoutResponse
from estate_api.utils.exceptions import (
    NotFoundError,
    PropertyNotFoundError,
    PropertyNotAvailableError
)
import uuid
import logging

logger = logging.getLogger(__name__)


class BuyerService:
    """
    Operations available to an authenticated buyer.
    The buyer is always passed in already resolved from the bearer token.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.property_repo = PropertyRepository(db_session)
        self.purchase_repo = PurchaseRepository(db_session)
        self.favorite_repo = FavoriteRepository(db_session)

    async def list_available_properties(self) -> List[Property]:
        return await self.property_repo.list_properties(
            PropertyFilters(status=PropertyStatus.AVAILABLE)
        )

    async def _get_property(self, property_id: uuid.UUID) -> Property:
        property_obj = await self.property_repo.get_by_id(property_id)
        if property_obj is None:
            raise PropertyNotFoundError(str(property_id))
        return property_obj

    async def list_favorites(self, buyer: User) -> List[Favorite]:
        return await self.favorite_repo.list_by_buyer(buyer.id)

    async def add_favorite(self, buyer: User, property_id: uuid.UUID) -> Favorite:
        """
        Save a property to the buyer's favorites.
        Adding a property that is already a favorite returns the existing entry.

        Raises:
            PropertyNotFoundError: If the property does not exist
        """
        await self._get_property(property_id)

        existing = await self.favorite_repo.get_for_buyer(buyer.id, property_id)
        if existing:
            return existing

        favorite = await self.favorite_repo.create({
            "buyer_id": buyer.id,
            "property_id": property_id
        })
        logger.info(f"Buyer {buyer.id} added property {property_id} to favorites")
        return favorite

    async def remove_favorite(self, buyer: User, property_id: uuid.UUID) -> None:
        """
        Raises:
            NotFoundError: If the property is not among the buyer's favorites
        """
        removed = await self.favorite_repo.remove(buyer.id, property_id)
        if not removed:
            raise NotFoundError("Favorite", str(property_id))
        logger.info(f"Buyer {buyer.id} removed property {property_id} from favorites")

    async def start_purchase(self, buyer: User, property_id: uuid.UUID) -> CheckoutResponse:
        """
        Reserve an available property and open a checkout.

        The property moves from ``available`` to ``pending`` in a single
        conditional update, so two buyers cannot reserve the same listing.
        The payment webhook later marks it ``sold`` or releases it.

        Args:
            buyer: Authenticated buyer
            property_id: Property to purchase

        Returns:
            CheckoutResponse carrying the reference the payment provider echoes back

        Raises:
            PropertyNotFoundError: If the property does not exist
            PropertyNotAvailableError: If the property is not available
        """
        property_obj = await self._get_property(property_id)

        reserved = await self.property_repo.set_status(
            property_id,
            PropertyStatus.PENDING,
            expected_status=PropertyStatus.AVAILABLE
        )
        if not reserved:
            await self.db.refresh(property_obj)
            raise PropertyNotAvailableError(str(property_id), property_obj.status.value)

        checkout_reference = f"chk_{uuid.uuid4().hex}"
        logger.info(
            f"Checkout {checkout_reference} opened by buyer {buyer.id} for property {property_id}"
        )

        return CheckoutResponse(
            property_id=str(property_id),
            checkout_reference=checkout_reference,
            amount=float(property_obj.price),
            status=PropertyStatus.PENDING.value
        )

    async def list_purchases(self, buyer: User) -> List[Purchase]:
        return await self.purchase_repo.list_by_buyer(buyer.id)

    async def list_purchased_properties(self, buyer: User) -> List[Property]:
        """Properties the buyer has paid for. Purchases of deleted listings are skipped."""
        purchases = await self.purchase_repo.list_by_buyer(buyer.id)
        return [p.property_rel for p in purchases if p.property_rel is not None]
