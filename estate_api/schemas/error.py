"""
Error response schemas for API documentation and consistent error formatting.
"""

from pydantic import BaseModel, Field
from typing import List, Optional, Any, Dict


class ErrorDetail(BaseModel):
    """Schema for individual error detail."""

    field: Optional[str] = Field(None, description="Field name that caused the error", examples=["email"])
    message: str = Field(..., description="Human-readable error message", examples=["Invalid email format"])
    type: Optional[str] = Field(None, description="Error type identifier", examples=["value_error"])
    input: Optional[Any] = Field(None, description="Input value that caused the error")


class ErrorResponse(BaseModel):
    """Schema for standardized error responses."""

    code: str = Field(..., description="Error code identifier", examples=["VALIDATION_ERROR"])
    message: str = Field(..., description="Human-readable error message")
    timestamp: str = Field(..., description="Error timestamp in ISO format")
    request_id: Optional[str] = Field(None, description="Unique request identifier for tracking")
    details: Optional[List[ErrorDetail]] = Field(None, description="Field errors for validation failures")


class APIErrorResponse(BaseModel):
    """Schema for API error response wrapper."""

    error: ErrorResponse


_DESCRIPTIONS = {
    400: "Bad Request - Invalid request parameters",
    401: "Unauthorized - Authentication required",
    403: "Forbidden - Insufficient permissions",
    404: "Not Found - Resource does not exist",
    409: "Conflict - Resource state does not allow the operation",
    422: "Validation Error - Request data validation failed",
    500: "Internal Server Error - Query or aggregation failed",
}


def get_error_responses(*status_codes: int) -> Dict[int, Dict[str, Any]]:
    """
    Get error response schemas for specific status codes.

    Args:
        status_codes: HTTP status codes to include

    Returns:
        Dictionary of error response schemas
    """
    return {
        code: {"description": _DESCRIPTIONS[code], "model": APIErrorResponse}
        for code in status_codes
        if code in _DESCRIPTIONS
    }


def get_auth_error_responses() -> Dict[int, Dict[str, Any]]:
    """Get authentication and authorization error response schemas."""
    return get_error_responses(401, 403)


def get_admin_error_responses() -> Dict[int, Dict[str, Any]]:
    """Error responses shared by the admin endpoints."""
    return get_error_responses(401, 403, 422, 500)
