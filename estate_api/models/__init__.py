"""
Database models for the Estate Marketplace API.
Includes User, Property, Feedback, Purchase and Favorite models.
"""

from estate_api.models.user import User, UserRole, UserStatus
from estate_api.models.property import Property, PropertyType, PropertyStatus
from estate_api.models.feedback import Feedback
from estate_api.models.purchase import Purchase, Favorite

__all__ = [
    "User",
    "UserRole",
    "UserStatus",
    "Property",
    "PropertyType",
    "PropertyStatus",
    "Feedback",
    "Purchase",
    "Favorite",
]
