"""
Schemas for buyer favorites, purchases and payment webhook events.
"""

from pydantic import Field
from typing import Optional, Dict, Any
from datetime import datetime
from uuid import UUID
from estate_api.schemas.common import CamelModel
from estate_api.schemas.property import PropertyResponse


class PropertyReference(CamelModel):
    """Request body naming a property (``{"propertyId": ...}``)."""

    property_id: UUID


class CheckoutResponse(CamelModel):
    """Returned when a purchase is started; the payment provider completes it."""

    property_id: str
    checkout_reference: str
    amount: float
    status: str = Field("pending", examples=["pending"])


class PurchaseResponse(CamelModel):
    id: str
    buyer_id: str
    property_id: str
    amount: float
    purchase_date: datetime
    payment_reference: Optional[str] = None
    property: Optional[PropertyResponse] = None


class FavoriteResponse(CamelModel):
    property_id: str
    property: Optional[PropertyResponse] = None
    created_at: datetime


class MessageResponse(CamelModel):
    success: bool = True
    message: str


class PaymentEvent(CamelModel):
    """
    Verified payment provider event.

    ``metadata`` carries the ``propertyId``/``buyerId`` set when checkout was
    created; ``amount`` is in major currency units.
    """

    id: str
    type: str
    reference: Optional[str] = None
    amount: Optional[float] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


class WebhookAck(CamelModel):
    received: bool = True
    handled: bool
