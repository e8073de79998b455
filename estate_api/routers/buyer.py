"""
Buyer API endpoints: browsing, favorites, purchases and the payment webhook.
"""

from fastapi import APIRouter, Depends, Path, Request, status
from typing import List
from uuid import UUID

from estate_api.config import settings
from estate_api.models.user import User
from estate_api.services.buyer import BuyerService
from estate_api.services.payment import PaymentService
from estate_api.schemas.property import PropertyResponse
from estate_api.schemas.purchase import (
    PropertyReference,
    CheckoutResponse,
    PurchaseResponse,
    FavoriteResponse,
    MessageResponse,
    WebhookAck
)
from estate_api.schemas.error import get_error_responses
from estate_api.utils.dependencies import (
    get_buyer_service,
    get_payment_service,
    get_current_buyer_user
)


router = APIRouter(prefix="/buyer", tags=["Buyer"])


def _favorite_response(favorite) -> FavoriteResponse:
    return FavoriteResponse(
        property_id=str(favorite.property_id),
        property=favorite.property_rel.to_dict() if favorite.property_rel else None,
        created_at=favorite.created_at
    )


@router.get(
    "/properties",
    response_model=List[PropertyResponse],
    summary="Available properties",
    description="Properties currently available for purchase, newest first",
    responses=get_error_responses(401, 403)
)
async def list_available_properties(
    current_user: User = Depends(get_current_buyer_user),
    buyer_service: BuyerService = Depends(get_buyer_service)
) -> List[PropertyResponse]:
    properties = await buyer_service.list_available_properties()
    return [PropertyResponse.model_validate(p.to_dict()) for p in properties]


@router.get(
    "/favorites",
    response_model=List[FavoriteResponse],
    summary="List favorites",
    responses=get_error_responses(401, 403)
)
async def list_favorites(
    current_user: User = Depends(get_current_buyer_user),
    buyer_service: BuyerService = Depends(get_buyer_service)
) -> List[FavoriteResponse]:
    favorites = await buyer_service.list_favorites(current_user)
    return [_favorite_response(f) for f in favorites]


@router.post(
    "/favorites",
    response_model=FavoriteResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add favorite",
    responses=get_error_responses(401, 403, 404, 422)
)
async def add_favorite(
    reference: PropertyReference,
    current_user: User = Depends(get_current_buyer_user),
    buyer_service: BuyerService = Depends(get_buyer_service)
) -> FavoriteResponse:
    favorite = await buyer_service.add_favorite(current_user, reference.property_id)
    return _favorite_response(favorite)


@router.delete(
    "/favorites/{property_id}",
    response_model=MessageResponse,
    summary="Remove favorite",
    responses=get_error_responses(401, 403, 404, 422)
)
async def remove_favorite(
    property_id: UUID = Path(..., description="Property ID"),
    current_user: User = Depends(get_current_buyer_user),
    buyer_service: BuyerService = Depends(get_buyer_service)
) -> MessageResponse:
    await buyer_service.remove_favorite(current_user, property_id)
    return MessageResponse(message="Property removed from favorites")


@router.post(
    "/purchase",
    response_model=CheckoutResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Start a purchase",
    description=(
        "Reserves an available property (it becomes pending) and returns the "
        "checkout reference to pass to the payment provider."
    ),
    responses=get_error_responses(401, 403, 404, 409, 422)
)
async def start_purchase(
    reference: PropertyReference,
    current_user: User = Depends(get_current_buyer_user),
    buyer_service: BuyerService = Depends(get_buyer_service)
) -> CheckoutResponse:
    return await buyer_service.start_purchase(current_user, reference.property_id)


@router.get(
    "/purchases",
    response_model=List[PurchaseResponse],
    summary="Purchase history",
    responses=get_error_responses(401, 403)
)
async def list_purchases(
    current_user: User = Depends(get_current_buyer_user),
    buyer_service: BuyerService = Depends(get_buyer_service)
) -> List[PurchaseResponse]:
    purchases = await buyer_service.list_purchases(current_user)
    return [PurchaseResponse.model_validate(p.to_dict()) for p in purchases]


@router.get(
    "/purchased-properties",
    response_model=List[PropertyResponse],
    summary="Purchased properties",
    responses=get_error_responses(401, 403)
)
@router.get("/purchased", response_model=List[PropertyResponse], include_in_schema=False)
async def list_purchased_properties(
    current_user: User = Depends(get_current_buyer_user),
    buyer_service: BuyerService = Depends(get_buyer_service)
) -> List[PropertyResponse]:
    properties = await buyer_service.list_purchased_properties(current_user)
    return [PropertyResponse.model_validate(p.to_dict()) for p in properties]


@router.post(
    "/webhook",
    response_model=WebhookAck,
    summary="Payment provider webhook",
    description=(
        f"Signed with HMAC-SHA256 of the raw body in the `{settings.payment_signature_header}` "
        "header. Unknown event types are acknowledged and ignored."
    ),
    responses=get_error_responses(400, 404)
)
async def payment_webhook(
    request: Request,
    payment_service: PaymentService = Depends(get_payment_service)
) -> WebhookAck:
    payload = await request.body()
    signature = request.headers.get(settings.payment_signature_header)
    return await payment_service.handle_webhook(payload, signature)
