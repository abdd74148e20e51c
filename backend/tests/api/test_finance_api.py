"""
Tests for invoices, payments, expenses and financial report endpoints
"""
import pytest
from datetime import date
from decimal import Decimal

from tests.factories import (
    create_test_customer,
    create_test_sale_order,
    create_test_variant,
    deliver_sale_order,
    reset_sequences,
)

INVOICE_URL = "/api/v1/invoices"
EXPENSE_URL = "/api/v1/expenses"
REPORT_URL = "/api/v1/financial-reports"


class TestInvoiceEndpoints:

    @pytest.fixture(autouse=True)
    def setup(self, db_session):
        reset_sequences()
        self.customer = create_test_customer(db_session)
        self.lens = create_test_variant(db_session, price=Decimal("100.00"), stock=10)
        db_session.commit()

    def _invoice(self, client, db_session, auth_headers):
        order = deliver_sale_order(db_session, create_test_sale_order(db_session, self.customer, [(self.lens, 2, 10)]))
        response = client.post(f"{INVOICE_URL}/", headers=auth_headers, json={"sale_order_ids": [order.id]})
        assert response.status_code == 201
        return order, response.json()

    def test_create_and_get(self, client, db_session, auth_headers):
        order, invoice = self._invoice(client, db_session, auth_headers)

        assert invoice["invoice_no"].startswith("INV-")
        assert Decimal(invoice["total_amount"]) == Decimal("180.00")
        assert Decimal(invoice["balance"]) == Decimal("180.00")
        assert invoice["sale_orders"][0]["order_no"] == order.order_no

        response = client.get(f"{INVOICE_URL}/{invoice['id']}", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["invoice_no"] == invoice["invoice_no"]

    def test_undelivered_order(self, client, db_session, auth_headers):
        order = create_test_sale_order(db_session, self.customer, [(self.lens, 1)])

        response = client.post(f"{INVOICE_URL}/", headers=auth_headers, json={"sale_order_ids": [order.id]})

        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR"

    def test_double_billing(self, client, db_session, auth_headers):
        order, _ = self._invoice(client, db_session, auth_headers)

        response = client.post(f"{INVOICE_URL}/", headers=auth_headers, json={"sale_order_ids": [order.id]})

        assert response.status_code == 409
        assert response.json()["error"] == "CONFLICT"

    def test_payments_and_ledger(self, client, db_session, auth_headers):
        _, invoice = self._invoice(client, db_session, auth_headers)

        response = client.post(f"{INVOICE_URL}/payments", headers=auth_headers, json={
            "invoice_id": invoice["id"], "amount": "200.00", "mode": "CASH",
        })
        assert response.status_code == 400
        assert response.json()["error"] == "PAYMENT_EXCEEDS_BALANCE"

        response = client.post(f"{INVOICE_URL}/payments", headers=auth_headers, json={
            "invoice_id": invoice["id"], "amount": "180.00", "mode": "UPI", "reference": "UTR-99812",
        })
        assert response.status_code == 201
        assert response.json()["mode"] == "UPI"

        response = client.get(f"{INVOICE_URL}/customers/{self.customer.id}/ledger", headers=auth_headers)
        assert response.status_code == 200
        ledger = response.json()
        assert ledger["invoices"][0]["status"] == "PAID"
        assert Decimal(ledger["invoices"][0]["balance"]) == Decimal("0")
        assert Decimal(ledger["outstanding"]) == Decimal("0")

    def test_bad_payment_mode(self, client, db_session, auth_headers):
        _, invoice = self._invoice(client, db_session, auth_headers)

        response = client.post(f"{INVOICE_URL}/payments", headers=auth_headers, json={
            "invoice_id": invoice["id"], "amount": "10.00", "mode": "BARTER",
        })
        assert response.status_code == 422

    def test_ledger_unknown_customer(self, client, auth_headers):
        response = client.get(f"{INVOICE_URL}/customers/9999/ledger", headers=auth_headers)
        assert response.status_code == 404


class TestExpenseEndpoints:

    def test_create_list_and_summary(self, client, auth_headers):
        for payload in (
            {"description": "Edging wheel", "amount": "1200.00", "type": "DIRECT", "date": "2026-03-04"},
            {"description": "Shop rent", "amount": "15000.00", "type": "INDIRECT", "category": "Rent", "date": "2026-03-01"},
            {"description": "Courier", "amount": "300.00", "type": "INDIRECT", "date": "2026-04-02"},
        ):
            response = client.post(f"{EXPENSE_URL}/", headers=auth_headers, json=payload)
            assert response.status_code == 201

        response = client.get(
            f"{EXPENSE_URL}/", headers=auth_headers, params={"start_date": "2026-03-01", "end_date": "2026-03-31"}
        )
        assert response.status_code == 200
        data = response.json()
        assert [e["description"] for e in data["expenses"]] == ["Edging wheel", "Shop rent"]
        assert Decimal(data["totals"]["total"]) == Decimal("16200.00")
        assert Decimal(data["totals"]["direct"]) == Decimal("1200.00")

        response = client.get(f"{EXPENSE_URL}/monthly-summary", headers=auth_headers, params={"year": 2026, "month": 4})
        assert response.status_code == 200
        data = response.json()
        assert data["summary"]["INDIRECT"]["count"] == 1
        assert Decimal(data["total_expense"]) == Decimal("300.00")

    def test_create_defaults_date(self, client, auth_headers):
        response = client.post(f"{EXPENSE_URL}/", headers=auth_headers, json={
            "description": "Tea", "amount": "45.00", "type": "INDIRECT",
        })
        assert response.status_code == 201
        assert response.json()["date"] == date.today().isoformat()

    @pytest.mark.parametrize("payload", [
        {"description": "Refund", "amount": "-5.00", "type": "INDIRECT"},
        {"description": "Misc", "amount": "5.00", "type": "OTHER"},
    ])
    def test_create_rejects_bad_input(self, client, auth_headers, payload):
        response = client.post(f"{EXPENSE_URL}/", headers=auth_headers, json=payload)
        assert response.status_code == 422

    def test_summary_month_out_of_range(self, client, auth_headers):
        response = client.get(f"{EXPENSE_URL}/monthly-summary", headers=auth_headers, params={"year": 2026, "month": 13})
        assert response.status_code == 422


class TestFinancialReportEndpoints:

    def test_summary_shape(self, client, auth_headers):
        response = client.get(f"{REPORT_URL}/summary", headers=auth_headers, params={"year": 2026, "month": 1})

        assert response.status_code == 200
        data = response.json()
        assert data["period"] == {"year": 2026, "month": 1}
        assert set(data["aging_summary"]) == {"current", "30days", "60days", "90days", "above90"}
        assert len(data["trends"]) == 6
        assert data["trends"][0]["month"] == "Aug"
        assert data["trends"][0]["year"] == 2025
        assert Decimal(data["summary"]["net_gain"]) == Decimal("0")

    def test_profit_loss(self, client, auth_headers):
        client.post(f"{EXPENSE_URL}/", headers=auth_headers, json={
            "description": "Shop rent", "amount": "500.00", "type": "INDIRECT", "date": "2026-02-01",
        })

        response = client.get(
            f"{REPORT_URL}/profit-loss", headers=auth_headers,
            params={"start_date": "2026-02-01", "end_date": "2026-02-28"},
        )

        assert response.status_code == 200
        data = response.json()
        assert Decimal(data["statement"]["net_profit"]) == Decimal("-500.00")
        assert data["statement"]["indirect_expenses"]["items"][0]["label"] == "Shop rent"
        assert data["metrics"]["gross_profit_margin"] is None

    def test_profit_loss_reversed_range(self, client, auth_headers):
        response = client.get(
            f"{REPORT_URL}/profit-loss", headers=auth_headers,
            params={"start_date": "2026-03-01", "end_date": "2026-02-01"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR"
