"""
Unit tests for the financial report service

Records are inserted directly so their created_at / date can be placed in
specific months.
"""
import pytest
from datetime import date, datetime
from decimal import Decimal

from app.exceptions import ValidationError
from app.models.expense import Expense
from app.models.invoice import Invoice
from app.models.payment import Payment
from app.models.purchase_order import PurchaseOrder
from app.services import financial_report_service as reports
from tests.factories import create_test_vendor, reset_sequences


class _Books:
    """Small helper for inserting dated financial records."""

    def __init__(self, db):
        self.db = db
        self.vendor = create_test_vendor(db)
        self._count = 0

    def _no(self):
        self._count += 1
        return self._count

    def invoice(self, amount, created_at, paid=None):
        invoice = Invoice(invoice_no=f"INV-T-{self._no():04d}", total_amount=Decimal(amount), created_at=created_at)
        self.db.add(invoice)
        self.db.flush()
        if paid:
            self.db.add(Payment(invoice_id=invoice.id, amount=Decimal(paid), mode="CASH", paid_at=created_at))
            self.db.flush()
        return invoice

    def purchase(self, amount, created_at, status="RECEIVED"):
        po = PurchaseOrder(
            po_number=f"PO-T-{self._no():04d}",
            vendor_id=self.vendor.id,
            status=status,
            total_value=Decimal(amount),
            created_at=created_at,
        )
        self.db.add(po)
        self.db.flush()
        return po

    def expense(self, amount, on, type="INDIRECT", description="Shop rent"):
        expense = Expense(description=description, amount=Decimal(amount), type=type, date=on)
        self.db.add(expense)
        self.db.flush()
        return expense


class TestHelpers:

    def test_month_window(self):
        assert reports.month_window(2026, 3) == (datetime(2026, 3, 1), datetime(2026, 4, 1))

    def test_month_window_december(self):
        assert reports.month_window(2025, 12) == (datetime(2025, 12, 1), datetime(2026, 1, 1))

    @pytest.mark.parametrize("month", [0, 13])
    def test_month_window_rejects_bad_month(self, month):
        with pytest.raises(ValidationError):
            reports.month_window(2026, month)

    @pytest.mark.parametrize("days,bucket", [
        (0, "current"),
        (30, "current"),
        (31, "30days"),
        (60, "30days"),
        (61, "60days"),
        (90, "60days"),
        (91, "90days"),
        (120, "90days"),
        (121, "above90"),
        (400, "above90"),
    ])
    def test_aging_bucket_boundaries(self, days, bucket):
        assert reports.aging_bucket(days) == bucket


class TestMonthlySummary:

    @pytest.fixture(autouse=True)
    def setup(self, db_session):
        reset_sequences()
        self.db = db_session
        self.books = _Books(db_session)

    def test_summary_figures(self):
        self.books.invoice("1000.00", datetime(2026, 3, 2), paid="600.00")
        self.books.invoice("500.00", datetime(2026, 3, 31, 23, 59))
        self.books.invoice("700.00", datetime(2026, 4, 1))  # next month
        self.books.purchase("300.00", datetime(2026, 3, 10))
        self.books.purchase("999.00", datetime(2026, 3, 11), status="CANCELLED")
        self.books.expense("100.00", date(2026, 3, 5), type="DIRECT")
        self.books.expense("250.00", date(2026, 3, 20))
        self.books.expense("80.00", date(2026, 2, 28))

        result = reports.monthly_summary(self.db, 2026, 3, as_of=datetime(2026, 4, 1))
        summary = result["summary"]

        assert result["period"] == {"year": 2026, "month": 3}
        assert summary["total_sales"] == Decimal("1500.00")
        assert summary["total_payments_received"] == Decimal("600.00")
        assert summary["total_purchases"] == Decimal("300.00")
        assert summary["direct_expenses"] == Decimal("100.00")
        assert summary["indirect_expenses"] == Decimal("250.00")
        assert summary["total_expenses"] == Decimal("350.00")
        assert summary["net_gain"] == Decimal("850.00")
        assert summary["pending_payments"] == Decimal("900.00")

    def test_empty_month(self):
        result = reports.monthly_summary(self.db, 2026, 3, as_of=datetime(2026, 4, 1))

        assert result["summary"]["total_sales"] == Decimal("0.00")
        assert result["summary"]["net_gain"] == Decimal("0.00")
        assert set(result["aging_summary"]) == {"current", "30days", "60days", "90days", "above90"}

    def test_aging_covers_all_unpaid_invoices(self):
        as_of = datetime(2026, 6, 30)
        self.books.invoice("100.00", datetime(2026, 6, 10))                  # 20 days
        self.books.invoice("200.00", datetime(2026, 5, 1), paid="50.00")     # 60 days
        self.books.invoice("300.00", datetime(2026, 3, 1))                   # 121 days
        self.books.invoice("400.00", datetime(2026, 4, 1), paid="400.00")    # settled

        aging = reports.aging_summary(self.db, as_of=as_of)

        assert aging == {
            "current": Decimal("100.00"),
            "30days": Decimal("150.00"),
            "60days": Decimal("0.00"),
            "90days": Decimal("0.00"),
            "above90": Decimal("300.00"),
        }

    def test_trend_is_six_months_oldest_first(self):
        self.books.invoice("100.00", datetime(2025, 10, 15))
        self.books.invoice("250.00", datetime(2026, 3, 1))
        self.books.expense("40.00", date(2026, 1, 31))
        self.books.invoice("999.00", datetime(2025, 9, 30))  # outside the window

        trend = reports.monthly_trend(self.db, 2026, 3)

        assert [(p["month"], p["year"]) for p in trend] == [
            ("Oct", 2025), ("Nov", 2025), ("Dec", 2025), ("Jan", 2026), ("Feb", 2026), ("Mar", 2026),
        ]
        assert trend[0]["sales"] == Decimal("100.00")
        assert trend[3]["expenses"] == Decimal("40.00")
        assert trend[5]["sales"] == Decimal("250.00")
        assert sum(p["sales"] for p in trend) == Decimal("350.00")


class TestProfitAndLoss:

    @pytest.fixture(autouse=True)
    def setup(self, db_session):
        reset_sequences()
        self.db = db_session
        self.books = _Books(db_session)

    def test_statement_and_margins(self):
        self.books.invoice("1000.00", datetime(2026, 3, 15))
        self.books.purchase("300.00", datetime(2026, 3, 16))
        self.books.expense("100.00", date(2026, 3, 17), type="DIRECT")
        self.books.expense("150.00", date(2026, 3, 18), description="Rent")
        self.books.expense("50.00", date(2026, 3, 31), description="Electricity")

        result = reports.profit_and_loss(self.db, date(2026, 3, 1), date(2026, 3, 31))
        statement = result["statement"]

        assert statement["revenue"]["total"] == Decimal("1000.00")
        assert statement["direct_costs"]["total"] == Decimal("400.00")
        assert statement["direct_costs"]["items"] == [
            {"label": "Purchases", "amount": Decimal("300.00")},
            {"label": "Direct Expenses", "amount": Decimal("100.00")},
        ]
        assert statement["gross_profit"] == Decimal("600.00")
        assert [i["label"] for i in statement["indirect_expenses"]["items"]] == ["Rent", "Electricity"]
        assert statement["indirect_expenses"]["total"] == Decimal("200.00")
        assert statement["net_profit"] == Decimal("400.00")
        assert result["metrics"] == {
            "gross_profit_margin": Decimal("60.00"),
            "net_profit_margin": Decimal("40.00"),
        }

    def test_end_date_is_inclusive(self):
        self.books.invoice("100.00", datetime(2026, 3, 31, 18, 30))
        self.books.invoice("100.00", datetime(2026, 4, 1))

        result = reports.profit_and_loss(self.db, date(2026, 3, 31), date(2026, 3, 31))
        assert result["statement"]["revenue"]["total"] == Decimal("100.00")

    def test_zero_revenue_has_no_margins(self):
        self.books.expense("75.00", date(2026, 3, 3))

        result = reports.profit_and_loss(self.db, date(2026, 3, 1), date(2026, 3, 31))

        assert result["statement"]["net_profit"] == Decimal("-75.00")
        assert result["metrics"] == {"gross_profit_margin": None, "net_profit_margin": None}

    def test_start_after_end(self):
        with pytest.raises(ValidationError):
            reports.profit_and_loss(self.db, date(2026, 4, 1), date(2026, 3, 1))
