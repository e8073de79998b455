"""
API route handlers for the Estate Marketplace API.
"""

from .admin import router as admin_router
from .auth import router as auth_router
from .buyer import router as buyer_router
from .feedback import router as feedback_router

__all__ = ["admin_router", "auth_router", "buyer_router", "feedback_router"]
