"""
Repository layer for data access operations.
"""

from estate_api.repositories.base import BaseRepository
from estate_api.repositories.user import UserRepository, UserFilters
from estate_api.repositories.property import PropertyRepository, PropertyFilters
from estate_api.repositories.feedback import FeedbackRepository
from estate_api.repositories.purchase import PurchaseRepository, FavoriteRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "UserFilters",
    "PropertyRepository",
    "PropertyFilters",
    "FeedbackRepository",
    "PurchaseRepository",
    "FavoriteRepository",
]
