"""
Pydantic schemas for request/response validation.
"""

from .auth import (
    LoginRequest,
    RefreshTokenRequest,
    AccessTokenResponse,
    LoginResponse
)

from .user import (
    UserCreate,
    UserContact,
    UserResponse,
    UserStatusUpdate,
    UserRoleUpdate,
    DeleteUserResponse
)

from .property import PropertyResponse

from .feedback import (
    FeedbackCreate,
    FeedbackSubmitResponse,
    FeedbackResponse
)

from .dashboard import (
    DashboardResponse,
    PropertyAnalyticsResponse,
    TransactionAnalyticsResponse
)

from .purchase import (
    PropertyReference,
    CheckoutResponse,
    PurchaseResponse,
    FavoriteResponse,
    MessageResponse,
    PaymentEvent,
    WebhookAck
)

__all__ = [
    "LoginRequest",
    "RefreshTokenRequest",
    "AccessTokenResponse",
    "LoginResponse",
    "UserCreate",
    "UserContact",
    "UserResponse",
    "UserStatusUpdate",
    "UserRoleUpdate",
    "DeleteUserResponse",
    "PropertyResponse",
    "FeedbackCreate",
    "FeedbackSubmitResponse",
    "FeedbackResponse",
    "DashboardResponse",
    "PropertyAnalyticsResponse",
    "TransactionAnalyticsResponse",
    "PropertyReference",
    "CheckoutResponse",
    "PurchaseResponse",
    "FavoriteResponse",
    "MessageResponse",
    "PaymentEvent",
    "WebhookAck",
]
