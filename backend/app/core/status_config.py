"""Status Configuration and Transition Rules

This module defines valid status values and allowed transitions for
Sale Orders, Purchase Orders and Dispatches. Every status change in the
service layer goes through one of the validate_* helpers below so the
allowed moves are defined in exactly one place.
"""
from enum import Enum
from typing import Dict, List, Set

from app.exceptions import InvalidStatusTransitionError


# =============================================================================
# Sale Order Status
# =============================================================================

class SaleOrderStatus(str, Enum):
    """Valid status values for Sale Orders"""
    DRAFT = "DRAFT"
    CONFIRMED = "CONFIRMED"  # Waiting on stock (prescription / backordered items)
    IN_PRODUCTION = "IN_PRODUCTION"
    READY_FOR_DISPATCH = "READY_FOR_DISPATCH"
    DISPATCHED = "DISPATCHED"  # Set when a Dispatch record is created
    DELIVERED = "DELIVERED"


# Orders only ever move one step forward
SALE_ORDER_TRANSITIONS: Dict[str, Set[str]] = {
    SaleOrderStatus.DRAFT: {SaleOrderStatus.CONFIRMED},
    SaleOrderStatus.CONFIRMED: {SaleOrderStatus.IN_PRODUCTION},
    SaleOrderStatus.IN_PRODUCTION: {SaleOrderStatus.READY_FOR_DISPATCH},
    SaleOrderStatus.READY_FOR_DISPATCH: {SaleOrderStatus.DISPATCHED},
    SaleOrderStatus.DISPATCHED: {SaleOrderStatus.DELIVERED},
    SaleOrderStatus.DELIVERED: set(),  # Terminal
}

# Only the dispatch workflow moves an order into these
SALE_ORDER_DISPATCH_STATUSES: Set[str] = {
    SaleOrderStatus.DISPATCHED,
    SaleOrderStatus.DELIVERED,
}

# Soft delete is only allowed before any stock or documents are attached
SALE_ORDER_DELETABLE_STATUSES: Set[str] = {
    SaleOrderStatus.DRAFT,
    SaleOrderStatus.CONFIRMED,
}


class OrderDispatchStatus(str, Enum):
    """Courier assignment tracking kept on the Sale Order header"""
    PENDING = "Pending"
    ASSIGNED = "Assigned"
    IN_TRANSIT = "In Transit"
    DELIVERED = "Delivered"


def get_allowed_sale_order_transitions(current_status: str) -> List[str]:
    """Get list of allowed next statuses for a sale order"""
    return sorted(s.value for s in SALE_ORDER_TRANSITIONS.get(current_status, set()))


def is_valid_sale_order_transition(current_status: str, new_status: str) -> bool:
    """Check if a sale order status transition is valid"""
    if current_status == new_status:
        return True  # No change is always valid
    allowed = SALE_ORDER_TRANSITIONS.get(current_status, set())
    return new_status in allowed


# =============================================================================
# Purchase Order Status
# =============================================================================

class PurchaseOrderStatus(str, Enum):
    """Valid status values for Purchase Orders"""
    PENDING = "PENDING"
    ORDERED = "ORDERED"
    RECEIVED = "RECEIVED"
    CANCELLED = "CANCELLED"


PURCHASE_ORDER_TRANSITIONS: Dict[str, Set[str]] = {
    PurchaseOrderStatus.PENDING: {
        PurchaseOrderStatus.ORDERED,
        PurchaseOrderStatus.CANCELLED,
    },
    PurchaseOrderStatus.ORDERED: {
        PurchaseOrderStatus.RECEIVED,
        PurchaseOrderStatus.CANCELLED,
    },
    PurchaseOrderStatus.RECEIVED: set(),  # Terminal
    PurchaseOrderStatus.CANCELLED: set(),  # Terminal
}


def get_allowed_purchase_order_transitions(current_status: str) -> List[str]:
    """Get list of allowed next statuses for a purchase order"""
    return sorted(s.value for s in PURCHASE_ORDER_TRANSITIONS.get(current_status, set()))


def is_valid_purchase_order_transition(current_status: str, new_status: str) -> bool:
    """Check if a purchase order status transition is valid"""
    return new_status in PURCHASE_ORDER_TRANSITIONS.get(current_status, set())


# =============================================================================
# Dispatch Status
# =============================================================================

class DispatchStatus(str, Enum):
    """Valid status values for Dispatch (delivery challan) records"""
    PENDING = "PENDING"
    IN_TRANSIT = "IN_TRANSIT"
    DELIVERED = "DELIVERED"


DISPATCH_TRANSITIONS: Dict[str, Set[str]] = {
    DispatchStatus.PENDING: {DispatchStatus.IN_TRANSIT},
    DispatchStatus.IN_TRANSIT: {DispatchStatus.DELIVERED},
    DispatchStatus.DELIVERED: set(),  # Terminal
}


def get_allowed_dispatch_transitions(current_status: str) -> List[str]:
    """Get list of allowed next statuses for a dispatch"""
    return sorted(s.value for s in DISPATCH_TRANSITIONS.get(current_status, set()))


def is_valid_dispatch_transition(current_status: str, new_status: str) -> bool:
    """Check if a dispatch status transition is valid"""
    return new_status in DISPATCH_TRANSITIONS.get(current_status, set())


# =============================================================================
# Ledger vocabularies
# =============================================================================

class InvoiceLedgerStatus(str, Enum):
    """Derived settlement status of an invoice"""
    PENDING = "PENDING"
    PAID = "PAID"


class PaymentMode(str, Enum):
    """Accepted payment modes"""
    CASH = "CASH"
    UPI = "UPI"
    CARD = "CARD"
    BANK_TRANSFER = "BANK_TRANSFER"
    CHECK = "CHECK"


class ExpenseType(str, Enum):
    """Expense classification used by the profit and loss statement"""
    DIRECT = "DIRECT"
    INDIRECT = "INDIRECT"


class StockMovementType(str, Enum):
    """Direction of a stock ledger entry"""
    IN = "IN"
    OUT = "OUT"


# =============================================================================
# Validation Helpers
# =============================================================================

def validate_sale_order_transition(current: str, new: str) -> None:
    """Validate and raise error if transition is invalid"""
    if not is_valid_sale_order_transition(current, new):
        raise InvalidStatusTransitionError(
            "sale order",
            current,
            new,
            get_allowed_sale_order_transitions(current),
        )


def validate_manual_sale_order_transition(current: str, new: str) -> None:
    """Validate a status change requested directly on the order.

    DISPATCHED and DELIVERED are reached through a dispatch record only.
    """
    if new in SALE_ORDER_DISPATCH_STATUSES and new != current:
        raise InvalidStatusTransitionError(
            "sale order",
            current,
            new,
            [s for s in get_allowed_sale_order_transitions(current) if s not in SALE_ORDER_DISPATCH_STATUSES],
        )
    validate_sale_order_transition(current, new)


def validate_purchase_order_transition(current: str, new: str) -> None:
    """Validate and raise error if transition is invalid"""
    if not is_valid_purchase_order_transition(current, new):
        raise InvalidStatusTransitionError(
            "purchase order",
            current,
            new,
            get_allowed_purchase_order_transitions(current),
        )


def validate_dispatch_transition(current: str, new: str) -> None:
    """Validate and raise error if transition is invalid"""
    if not is_valid_dispatch_transition(current, new):
        raise InvalidStatusTransitionError(
            "dispatch",
            current,
            new,
            get_allowed_dispatch_transitions(current),
        )
