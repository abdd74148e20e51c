"""
Unit tests for the stock ledger
"""
import pytest

from app.exceptions import InsufficientStockError, NotFoundError, ValidationError
from app.models.inventory import StockMovement
from app.services import stock_ledger
from tests.factories import create_test_variant, reset_sequences


class TestDecrementIncrement:

    @pytest.fixture(autouse=True)
    def setup(self, db_session):
        reset_sequences()
        self.db = db_session

    def test_decrement_takes_stock_and_writes_movement(self):
        lens = create_test_variant(self.db, stock=5)

        movement = stock_ledger.decrement(
            self.db, lens.id, 2, reference_type="sale_order", reference_id=99, user_id=7
        )

        assert lens.stock == 3
        assert movement.movement_type == "OUT"
        assert movement.quantity == 2
        assert movement.stock_after == 3
        assert movement.reference_type == "sale_order"
        assert movement.reference_id == 99
        assert movement.created_by == 7

    def test_decrement_to_exactly_zero(self):
        lens = create_test_variant(self.db, stock=2)
        stock_ledger.decrement(self.db, lens.id, 2)
        assert lens.stock == 0

    def test_insufficient_stock(self):
        lens = create_test_variant(self.db, name="SV 1.56 HC", stock=1)

        with pytest.raises(InsufficientStockError) as exc:
            stock_ledger.decrement(self.db, lens.id, 2)

        assert exc.value.requested == 2
        assert exc.value.available == 1
        assert exc.value.details["lens_variant"] == "SV 1.56 HC"
        assert lens.stock == 1
        assert self.db.query(StockMovement).count() == 0

    def test_rx_variant_is_never_decremented(self):
        lens = create_test_variant(self.db, stock=0, is_rx=True)

        assert stock_ledger.decrement(self.db, lens.id, 3) is None
        assert lens.stock == 0
        assert self.db.query(StockMovement).count() == 0

    def test_increment_has_no_upper_bound(self):
        lens = create_test_variant(self.db, stock=3)

        movement = stock_ledger.increment(self.db, lens.id, 10_000, reference_type="purchase_order", reference_id=1)

        assert lens.stock == 10_003
        assert movement.movement_type == "IN"
        assert movement.stock_after == 10_003

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_quantity_must_be_positive(self, quantity):
        lens = create_test_variant(self.db, stock=3)
        with pytest.raises(ValidationError):
            stock_ledger.decrement(self.db, lens.id, quantity)
        with pytest.raises(ValidationError):
            stock_ledger.increment(self.db, lens.id, quantity)

    def test_unknown_variant(self):
        with pytest.raises(NotFoundError):
            stock_ledger.decrement(self.db, 9999, 1)


class TestReadSide:

    @pytest.fixture(autouse=True)
    def setup(self, db_session):
        reset_sequences()
        self.db = db_session

    def test_check_availability(self):
        plenty = create_test_variant(self.db, stock=10)
        short = create_test_variant(self.db, stock=1)
        rx = create_test_variant(self.db, is_rx=True)

        result = stock_ledger.check_availability(self.db, [
            {"lens_variant_id": plenty.id, "quantity": 4},
            {"lens_variant_id": short.id, "quantity": 2},
            {"lens_variant_id": rx.id, "quantity": 1},
            {"lens_variant_id": 9999, "quantity": 1},
        ])

        assert result["all_available"] is False
        messages = [item["message"] for item in result["items"]]
        assert messages == ["In stock", "Insufficient stock", "Requires purchase order", "Lens variant not found"]
        assert result["items"][1]["current_stock"] == 1
        assert result["items"][1]["required"] == 2

    def test_check_availability_all_in_stock(self):
        lens = create_test_variant(self.db, stock=2)
        result = stock_ledger.check_availability(self.db, [{"lens_variant_id": lens.id, "quantity": 2}])
        assert result["all_available"] is True

    def test_low_stock_variants(self):
        low = create_test_variant(self.db, stock=2, min_stock=5)
        at_min = create_test_variant(self.db, stock=5, min_stock=5)
        create_test_variant(self.db, stock=50, min_stock=5)
        create_test_variant(self.db, stock=0, min_stock=5, is_rx=True)
        create_test_variant(self.db, stock=0, min_stock=5, is_active=False)

        ids = [v.id for v in stock_ledger.low_stock_variants(self.db)]
        assert ids == [low.id, at_min.id]

    def test_low_stock_can_include_rx(self):
        rx = create_test_variant(self.db, stock=0, min_stock=1, is_rx=True)
        ids = [v.id for v in stock_ledger.low_stock_variants(self.db, include_rx=True)]
        assert rx.id in ids

    def test_movement_history_newest_first(self):
        lens = create_test_variant(self.db, stock=10)
        stock_ledger.decrement(self.db, lens.id, 1)
        stock_ledger.increment(self.db, lens.id, 5)

        history = stock_ledger.movement_history(self.db, lens.id)
        assert [m.movement_type for m in history] == ["IN", "OUT"]
        assert history[0].stock_after == 14

    def test_movement_history_unknown_variant(self):
        with pytest.raises(NotFoundError):
            stock_ledger.movement_history(self.db, 9999)
