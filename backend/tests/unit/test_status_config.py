"""
Unit tests for status transition rules
"""
import pytest

from app.core.status_config import (
    DispatchStatus,
    SaleOrderStatus,
    get_allowed_sale_order_transitions,
    is_valid_dispatch_transition,
    is_valid_purchase_order_transition,
    is_valid_sale_order_transition,
    validate_dispatch_transition,
    validate_manual_sale_order_transition,
    validate_purchase_order_transition,
    validate_sale_order_transition,
)
from app.exceptions import InvalidStatusTransitionError


SALE_ORDER_PATH = [
    "DRAFT",
    "CONFIRMED",
    "IN_PRODUCTION",
    "READY_FOR_DISPATCH",
    "DISPATCHED",
    "DELIVERED",
]


class TestSaleOrderTransitions:

    @pytest.mark.parametrize("current,new", list(zip(SALE_ORDER_PATH, SALE_ORDER_PATH[1:])))
    def test_one_step_forward_is_allowed(self, current, new):
        assert is_valid_sale_order_transition(current, new)

    def test_skipping_a_step_is_rejected(self):
        assert not is_valid_sale_order_transition("IN_PRODUCTION", "DISPATCHED")
        assert not is_valid_sale_order_transition("CONFIRMED", "DELIVERED")

    def test_moving_backwards_is_rejected(self):
        assert not is_valid_sale_order_transition("READY_FOR_DISPATCH", "IN_PRODUCTION")
        assert not is_valid_sale_order_transition("DELIVERED", "DRAFT")

    def test_same_status_is_a_no_op(self):
        for status in SALE_ORDER_PATH:
            assert is_valid_sale_order_transition(status, status)

    def test_delivered_is_terminal(self):
        assert get_allowed_sale_order_transitions("DELIVERED") == []

    def test_validate_raises_with_allowed_moves(self):
        with pytest.raises(InvalidStatusTransitionError) as exc:
            validate_sale_order_transition("IN_PRODUCTION", SaleOrderStatus.DELIVERED)

        assert exc.value.status_code == 400
        assert exc.value.details["current_status"] == "IN_PRODUCTION"
        assert exc.value.details["requested_status"] == "DELIVERED"
        assert exc.value.details["allowed"] == ["READY_FOR_DISPATCH"]
        assert "'IN_PRODUCTION' -> 'DELIVERED'" in exc.value.message

    @pytest.mark.parametrize("current,new", [
        ("READY_FOR_DISPATCH", "DISPATCHED"),
        ("DISPATCHED", "DELIVERED"),
    ])
    def test_dispatch_owned_statuses_cannot_be_set_directly(self, current, new):
        with pytest.raises(InvalidStatusTransitionError) as exc:
            validate_manual_sale_order_transition(current, new)

        assert exc.value.details["allowed"] == []

    def test_direct_moves_before_dispatch_still_validate(self):
        validate_manual_sale_order_transition("IN_PRODUCTION", "READY_FOR_DISPATCH")
        validate_manual_sale_order_transition("DISPATCHED", "DISPATCHED")

        with pytest.raises(InvalidStatusTransitionError):
            validate_manual_sale_order_transition("DRAFT", "IN_PRODUCTION")


class TestPurchaseOrderTransitions:

    @pytest.mark.parametrize("current,new", [
        ("PENDING", "ORDERED"),
        ("PENDING", "CANCELLED"),
        ("ORDERED", "RECEIVED"),
        ("ORDERED", "CANCELLED"),
    ])
    def test_allowed(self, current, new):
        assert is_valid_purchase_order_transition(current, new)
        validate_purchase_order_transition(current, new)

    @pytest.mark.parametrize("current,new", [
        ("PENDING", "RECEIVED"),
        ("PENDING", "PENDING"),
        ("ORDERED", "PENDING"),
        ("RECEIVED", "CANCELLED"),
        ("RECEIVED", "ORDERED"),
        ("CANCELLED", "ORDERED"),
        ("CANCELLED", "PENDING"),
    ])
    def test_everything_else_is_rejected(self, current, new):
        assert not is_valid_purchase_order_transition(current, new)
        with pytest.raises(InvalidStatusTransitionError):
            validate_purchase_order_transition(current, new)


class TestDispatchTransitions:

    def test_forward_path(self):
        assert is_valid_dispatch_transition(DispatchStatus.PENDING, DispatchStatus.IN_TRANSIT)
        assert is_valid_dispatch_transition(DispatchStatus.IN_TRANSIT, DispatchStatus.DELIVERED)

    def test_cannot_skip_in_transit(self):
        with pytest.raises(InvalidStatusTransitionError) as exc:
            validate_dispatch_transition("PENDING", "DELIVERED")
        assert exc.value.details["entity"] == "dispatch"

    def test_delivered_is_terminal(self):
        with pytest.raises(InvalidStatusTransitionError):
            validate_dispatch_transition("DELIVERED", "IN_TRANSIT")
