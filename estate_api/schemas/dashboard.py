"""
Schemas for the admin dashboard payload and the analytics views.
"""

from pydantic import Field
from typing import List
from estate_api.models.property import PropertyType
from estate_api.schemas.common import CamelModel
from estate_api.schemas.user import UserResponse
from estate_api.schemas.property import PropertyResponse
from estate_api.schemas.feedback import FeedbackResponse


class TotalCounts(CamelModel):
    properties: int
    buyers: int
    sellers: int
    employees: int


class EmployeeStats(CamelModel):
    active: int
    inactive: int
    total: int


class PropertyStatusCounts(CamelModel):
    available: int
    pending: int
    sold: int


class DashboardResponse(CamelModel):
    """
    Everything the admin dashboard renders in one payload.

    ``recent_properties`` is the first five entries of ``properties``, which
    is ordered newest first.
    """

    users: List[UserResponse]
    properties: List[PropertyResponse]
    feedbacks: List[FeedbackResponse]
    employees: List[UserResponse]
    total_counts: TotalCounts
    employee_stats: EmployeeStats
    property_status: PropertyStatusCounts
    recent_properties: List[PropertyResponse]


class PropertyTypeCount(CamelModel):
    property_type: PropertyType
    count: int


class PriceAnalytics(CamelModel):
    property_type: PropertyType
    average_price: float
    min_price: float
    max_price: float


class MonthlyListings(CamelModel):
    year: int
    month: int = Field(..., ge=1, le=12)
    count: int


class PropertyAnalyticsResponse(CamelModel):
    property_types: List[PropertyTypeCount]
    price_analytics: List[PriceAnalytics]
    monthly_listings: List[MonthlyListings] = Field(..., max_length=12)


class MonthlySales(CamelModel):
    year: int
    month: int = Field(..., ge=1, le=12)
    total_sales: int
    total_value: float


class TopSeller(CamelModel):
    seller_id: str
    properties_sold: int
    seller_details: UserResponse


class TransactionAnalyticsResponse(CamelModel):
    monthly_sales: List[MonthlySales] = Field(..., max_length=12)
    top_sellers: List[TopSeller]
