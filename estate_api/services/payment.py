"""
Payment webhook verification and event handling.
Completes or releases the purchases opened by the buyer service.
"""

from typing import Optional, Tuple
from abc import ABC, abstractmethod
from decimal import Decimal
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from pydantic import ValidationError as PydanticValidationError
from estate_api.models.property import PropertyStatus
from estate_api.repositories.property import PropertyRepository
from estate_api.repositories.purchase import PurchaseRepository
from estate_api.schemas.purchase import PaymentEvent, WebhookAck
from estate_api.utils.exceptions import (
    BadRequestError,
    PropertyNotFoundError,
    WebhookSignatureError
)
import hashlib
import hmac
import uuid
import logging

logger = logging.getLogger(__name__)

PAYMENT_SUCCEEDED = "payment.succeeded"
PAYMENT_FAILED = "payment.failed"


class PaymentWebhookVerifier(ABC):
    """
    Turns a raw webhook delivery into a trusted PaymentEvent.
    One implementation per payment provider.
    """

    @abstractmethod
    def verify(self, payload: bytes, signature: Optional[str]) -> PaymentEvent:
        """
        Args:
            payload: Raw request body, exactly as received
            signature: Value of the provider's signature header

        Raises:
            WebhookSignatureError: If the payload is not authentic
            BadRequestError: If the payload is not a valid event
        """


class HmacWebhookVerifier(PaymentWebhookVerifier):
    """Hex HMAC-SHA256 of the raw body, optionally prefixed with ``sha256=``."""

    def __init__(self, secret: str):
        self.secret = secret.encode()

    def sign(self, payload: bytes) -> str:
        return hmac.new(self.secret, payload, hashlib.sha256).hexdigest()

    def verify(self, payload: bytes, signature: Optional[str]) -> PaymentEvent:
        if not signature:
            raise WebhookSignatureError("Missing webhook signature")

        provided = signature.strip()
        if provided.startswith("sha256="):
            provided = provided[len("sha256="):]

        if not hmac.compare_digest(self.sign(payload), provided):
            raise WebhookSignatureError()

        try:
            return PaymentEvent.model_validate_json(payload)
        except PydanticValidationError as e:
            logger.warning(f"Rejected malformed webhook payload: {e.error_count()} errors")
            raise BadRequestError("Invalid webhook payload")


class PaymentService:
    """
    Applies verified payment events to properties and purchases.

    Deliveries may be retried by the provider; a succeeded event whose
    reference is already recorded is acknowledged without side effects.
    Only a ``pending`` property can be sold; anything else is acknowledged
    with ``handled: false``.
    """

    def __init__(self, db_session: AsyncSession, verifier: PaymentWebhookVerifier):
        self.db = db_session
        self.verifier = verifier
        self.property_repo = PropertyRepository(db_session)
        self.purchase_repo = PurchaseRepository(db_session)

    async def handle_webhook(self, payload: bytes, signature: Optional[str]) -> WebhookAck:
        event = self.verifier.verify(payload, signature)
        logger.info(f"Payment webhook received: {event.type} ({event.id})")

        if event.type == PAYMENT_SUCCEEDED:
            return WebhookAck(handled=await self._handle_succeeded(event))

        if event.type == PAYMENT_FAILED:
            await self._handle_failed(event)
            return WebhookAck(handled=True)

        logger.info(f"Ignoring unhandled payment event type: {event.type}")
        return WebhookAck(handled=False)

    @staticmethod
    def _metadata_ids(event: PaymentEvent) -> Tuple[uuid.UUID, Optional[uuid.UUID]]:
        property_id = event.metadata.get("propertyId")
        buyer_id = event.metadata.get("buyerId")
        if not property_id:
            raise BadRequestError("Payment event metadata must include propertyId")

        try:
            return uuid.UUID(str(property_id)), uuid.UUID(str(buyer_id)) if buyer_id else None
        except ValueError:
            raise BadRequestError("Payment event metadata contains an invalid ID")

    async def _handle_succeeded(self, event: PaymentEvent) -> bool:
        """
        Returns:
            False when the property was not pending, so no sale was recorded
        """
        reference = event.reference or event.id

        if await self.purchase_repo.get_by_payment_reference(reference):
            logger.info(f"Payment {reference} already recorded")
            return True

        property_id, buyer_id = self._metadata_ids(event)
        if buyer_id is None:
            raise BadRequestError("Payment event metadata must include buyerId")

        property_obj = await self.property_repo.get_by_id(property_id)
        if property_obj is None:
            raise PropertyNotFoundError(str(property_id))

        amount = Decimal(str(event.amount)) if event.amount is not None else property_obj.price

        try:
            purchase = await self.purchase_repo.record_sale({
                "buyer_id": buyer_id,
                "property_id": property_id,
                "amount": amount,
                "payment_reference": reference
            })
        except IntegrityError:
            # A concurrent delivery of the same event won the insert.
            logger.info(f"Payment {reference} recorded by a concurrent delivery")
            return True

        if purchase is None:
            logger.warning(
                f"Payment {reference} ignored: property {property_id} is "
                f"{property_obj.status.value}, not pending"
            )
            return False

        logger.info(f"Property {property_id} sold to buyer {buyer_id} (payment {reference})")
        return True

    async def _handle_failed(self, event: PaymentEvent) -> None:
        property_id, _ = self._metadata_ids(event)

        released = await self.property_repo.set_status(
            property_id,
            PropertyStatus.AVAILABLE,
            expected_status=PropertyStatus.PENDING
        )
        if released:
            logger.info(f"Property {property_id} released after failed payment {event.id}")
        else:
            logger.info(f"Failed payment {event.id}: property {property_id} was not pending")
