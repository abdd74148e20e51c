"""
LensFlow ERP - Custom Exception Hierarchy

Provides structured, typed exceptions with error codes for consistent
error handling across the application.

Usage:
    from app.exceptions import NotFoundError, ValidationError

    # In a service
    raise NotFoundError("Customer", customer_id)

    # With custom message
    raise ValidationError("Discount must be between 0 and 100", field="discount")
"""
from typing import Any, Dict, List, Optional


class LensFlowException(Exception):
    """
    Base exception for all LensFlow ERP errors.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code (e.g., "NOT_FOUND", "VALIDATION_ERROR")
        status_code: HTTP status code to return
        details: Additional context for debugging
    """

    error_code: str = "LENSFLOW_ERROR"
    status_code: int = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API response."""
        result = {
            "error": self.error_code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


# ===================
# 400 Bad Request Errors
# ===================


class ValidationError(LensFlowException):
    """Raised when input validation fails."""

    error_code = "VALIDATION_ERROR"
    status_code = 400

    def __init__(
        self,
        message: str = "Validation failed",
        *,
        field: Optional[str] = None,
        value: Any = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        details = details or {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)
        super().__init__(message, details=details)


class InvalidVariantError(ValidationError):
    """Raised when order items reference unknown or inactive lens variants."""

    error_code = "INVALID_LENS_VARIANTS"

    def __init__(self, variant_ids: List[int]):
        super().__init__(
            "One or more lens variants are invalid",
            field="items",
            details={"invalid_variant_ids": sorted(variant_ids)},
        )


class InvalidStateError(LensFlowException):
    """Raised when an operation is invalid for the current state."""

    error_code = "INVALID_STATE"
    status_code = 400

    def __init__(
        self,
        message: str = "Operation not allowed in current state",
        *,
        current_state: Optional[str] = None,
        allowed_states: Optional[list] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        details = details or {}
        if current_state:
            details["current_state"] = current_state
        if allowed_states:
            details["allowed_states"] = allowed_states
        super().__init__(message, details=details)


class InvalidStatusTransitionError(LensFlowException):
    """Raised when a state machine is asked to make a move it does not allow."""

    error_code = "INVALID_STATUS_TRANSITION"
    status_code = 400

    def __init__(self, entity: str, current: str, requested: str, allowed: List[str]):
        # Status enums format as "Class.MEMBER"; report plain values
        current = getattr(current, "value", current)
        requested = getattr(requested, "value", requested)
        self.entity = entity
        self.current = current
        self.requested = requested
        self.allowed = allowed
        super().__init__(
            f"Invalid {entity} status transition: '{current}' -> '{requested}'. "
            f"Allowed: {allowed if allowed else 'none (terminal state)'}",
            details={
                "entity": entity,
                "current_status": current,
                "requested_status": requested,
                "allowed": allowed,
            },
        )


class BusinessRuleError(LensFlowException):
    """Raised when a business rule is violated."""

    error_code = "BUSINESS_RULE_ERROR"
    status_code = 400

    def __init__(
        self,
        message: str = "Business rule violation",
        *,
        rule: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        details = details or {}
        if rule:
            details["rule"] = rule
        super().__init__(message, details=details)


class InsufficientStockError(BusinessRuleError):
    """Raised when a lens variant does not have enough stock on hand."""

    error_code = "INSUFFICIENT_STOCK"

    def __init__(
        self,
        variant_name: str,
        *,
        requested: int,
        available: int,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.requested = requested
        self.available = available
        details = details or {}
        details["lens_variant"] = variant_name
        details["requested"] = requested
        details["available"] = available
        message = f"Insufficient stock for {variant_name}: requested {requested}, available {available}"
        super().__init__(message, details=details)


class PaymentExceedsBalanceError(BusinessRuleError):
    """Raised when a payment is larger than the invoice's outstanding balance."""

    error_code = "PAYMENT_EXCEEDS_BALANCE"

    def __init__(self, invoice_no: str, *, amount, remaining):
        super().__init__(
            f"Payment of {amount} exceeds remaining balance {remaining} on invoice {invoice_no}",
            details={
                "invoice_no": invoice_no,
                "amount": str(amount),
                "remaining": str(remaining),
            },
        )


# ===================
# 404 Not Found Errors
# ===================


class NotFoundError(LensFlowException):
    """Raised when a resource is not found."""

    error_code = "NOT_FOUND"
    status_code = 404

    def __init__(
        self,
        resource: str = "Resource",
        resource_id: Any = None,
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        details = details or {}
        details["resource"] = resource
        if resource_id is not None:
            details["resource_id"] = str(resource_id)
        message = f"{resource} not found"
        if resource_id is not None:
            message = f"{resource} with ID {resource_id} not found"
        super().__init__(message, details=details)


# ===================
# 409 Conflict Errors
# ===================


class ConflictError(LensFlowException):
    """Raised when there's a resource conflict."""

    error_code = "CONFLICT"
    status_code = 409

    def __init__(
        self,
        message: str = "Resource conflict",
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details=details)


class DatabaseConstraintError(ConflictError):
    """Raised when the store rejects a write on a uniqueness or foreign-key constraint."""

    error_code = "DATABASE_CONSTRAINT_VIOLATION"

    def __init__(
        self,
        message: str = "Database constraint violated",
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details=details)

