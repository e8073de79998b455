"""
Service layer for business logic implementation.
Contains services for the admin views, buyer workflows, payments, feedback and authentication.
"""

from .auth import AuthService
from .admin import AdminService, DashboardFilters
from .analytics import AnalyticsService
from .buyer import BuyerService
from .feedback import FeedbackService
from .payment import PaymentService, PaymentWebhookVerifier, HmacWebhookVerifier
from .error_handler import ErrorHandlerService

__all__ = [
    "AuthService",
    "AdminService",
    "DashboardFilters",
    "AnalyticsService",
    "BuyerService",
    "FeedbackService",
    "PaymentService",
    "PaymentWebhookVerifier",
    "HmacWebhookVerifier",
    "ErrorHandlerService"
]
