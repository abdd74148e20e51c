"""
Common API Response Schemas

Standardized error responses and pagination models for consistent API behavior.
"""
from datetime import datetime
from typing import Any, Dict, Generic, List, Optional, TypeVar
from pydantic import BaseModel, Field, field_validator


# ============================================================================
# Error Response Models
# ============================================================================

class ErrorDetail(BaseModel):
    """One failed field from request validation."""
    field: Optional[str] = Field(None, description="Field that caused the error")
    message: Optional[str] = Field(None, description="Detailed error message")
    type: Optional[str] = Field(None, description="Error type")


class ErrorResponse(BaseModel):
    """
    Standardized error response for all API errors.

    Error Codes:
        - VALIDATION_ERROR: Request validation failed (400)
        - INVALID_LENS_VARIANTS: Unknown or inactive lens variant (400)
        - INVALID_STATE: Operation not allowed in current state (400)
        - INVALID_STATUS_TRANSITION: Status change not allowed (400)
        - BUSINESS_RULE_ERROR: Business rule violation (400)
        - INSUFFICIENT_STOCK: Not enough stock for a lens variant (400)
        - PAYMENT_EXCEEDS_BALANCE: Payment larger than invoice balance (400)
        - NOT_FOUND: Resource not found (404)
        - CONFLICT: Resource conflict (409)
        - DATABASE_CONSTRAINT_VIOLATION: Unique or foreign key violation (409)
        - DATABASE_ERROR: Database operation failed (500)
        - INTERNAL_ERROR: Unexpected internal error (500)

    Example:
        {
            "error": "NOT_FOUND",
            "message": "Sale order with ID 123 not found",
            "details": {
                "resource": "Sale order",
                "resource_id": "123"
            },
            "timestamp": "2026-03-02T10:30:00Z"
        }
    """
    error: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[Dict[str, Any]] = Field(
        None,
        description="Additional error context for debugging"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the error occurred (UTC)"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "error": "NOT_FOUND",
                "message": "Sale order with ID 123 not found",
                "details": {
                    "resource": "Sale order",
                    "resource_id": "123"
                },
                "timestamp": "2026-03-02T10:30:00Z"
            }
        }


class ValidationErrorResponse(ErrorResponse):
    """
    Error response for request validation failures, listing every field
    that failed and why.
    """
    error: str = Field(default="VALIDATION_ERROR", description="Always VALIDATION_ERROR")
    details: Dict[str, Any] = Field(
        ...,
        description="Validation error details with 'errors' list"
    )


# ============================================================================
# Pagination Models
# ============================================================================

class PaginationParams(BaseModel):
    """
    Standardized offset-based pagination parameters for list endpoints.
    """
    offset: int = Field(
        default=0,
        ge=0,
        description="Number of records to skip (for pagination)"
    )
    limit: int = Field(
        default=50,
        ge=1,
        le=500,
        description="Maximum number of records to return (1-500)"
    )

    @field_validator('limit')
    @classmethod
    def validate_limit(cls, v: int) -> int:
        """Ensure limit is within acceptable range."""
        if v < 1:
            return 1
        if v > 500:
            return 500
        return v

    @field_validator('offset')
    @classmethod
    def validate_offset(cls, v: int) -> int:
        return max(0, v)


class PaginationMeta(BaseModel):
    """Pagination metadata included in list responses."""
    total: int = Field(..., description="Total number of records matching the query")
    offset: int = Field(..., description="Current offset (number of records skipped)")
    limit: int = Field(..., description="Maximum records per page")
    returned: int = Field(..., description="Number of records in this response")


# ============================================================================
# Generic Response Wrappers
# ============================================================================

T = TypeVar('T')


class ListResponse(BaseModel, Generic[T]):
    """
    Standardized list response wrapper with pagination.

    Example:
        {
            "items": [...],
            "pagination": {
                "total": 150,
                "offset": 0,
                "limit": 50,
                "returned": 50
            }
        }
    """
    items: List[T] = Field(..., description="List of items")
    pagination: PaginationMeta = Field(..., description="Pagination metadata")


class MessageResponse(BaseModel):
    """Confirmation for operations that return no data (delete etc.)."""
    message: str = Field(..., description="Operation result message")


class StatusResponse(BaseModel):
    """Health check response."""
    status: str = Field(..., description="Service status")
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="Status check timestamp (UTC)"
    )
