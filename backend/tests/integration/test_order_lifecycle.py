"""
End-to-end order lifecycle through the API

Walks a stock order from entry to settled invoice, and a prescription
order from entry through purchase receipt to delivery.
"""
import pytest
from decimal import Decimal

from app.models.lens import LensVariant
from tests.factories import create_test_customer, create_test_variant, create_test_vendor, reset_sequences

API = "/api/v1"


class TestStockOrderToPayment:

    @pytest.fixture(autouse=True)
    def setup(self, db_session):
        reset_sequences()
        self.customer = create_test_customer(db_session)
        self.lens = create_test_variant(db_session, price=Decimal("100.00"), stock=5)
        db_session.commit()

    def test_full_cycle(self, client, db_session, auth_headers):
        # Order entry takes stock straight away
        response = client.post(f"{API}/sale-orders/", headers=auth_headers, json={
            "customer_id": self.customer.id,
            "items": [{"lens_variant_id": self.lens.id, "quantity": 2, "discount": "10"}],
        })
        assert response.status_code == 201
        order = response.json()
        assert order["status"] == "IN_PRODUCTION"
        assert Decimal(order["items"][0]["line_total"]) == Decimal("180.00")
        assert db_session.get(LensVariant, self.lens.id).stock == 3

        # Not billable until delivered
        response = client.post(f"{API}/invoices/", headers=auth_headers, json={"sale_order_ids": [order["id"]]})
        assert response.status_code == 400

        response = client.patch(
            f"{API}/sale-orders/{order['id']}/status", headers=auth_headers, json={"status": "READY_FOR_DISPATCH"}
        )
        assert response.status_code == 200

        response = client.post(f"{API}/dispatches/", headers=auth_headers, json={"sale_order_id": order["id"]})
        assert response.status_code == 201
        dispatch_id = response.json()["id"]
        for status in ("IN_TRANSIT", "DELIVERED"):
            response = client.patch(
                f"{API}/dispatches/{dispatch_id}/status", headers=auth_headers, json={"status": status}
            )
            assert response.status_code == 200

        response = client.post(f"{API}/invoices/", headers=auth_headers, json={"sale_order_ids": [order["id"]]})
        assert response.status_code == 201
        invoice = response.json()
        assert Decimal(invoice["total_amount"]) == Decimal("180.00")

        response = client.post(f"{API}/invoices/payments", headers=auth_headers, json={
            "invoice_id": invoice["id"], "amount": "200.00", "mode": "CASH",
        })
        assert response.status_code == 400

        response = client.post(f"{API}/invoices/payments", headers=auth_headers, json={
            "invoice_id": invoice["id"], "amount": "180.00", "mode": "CASH",
        })
        assert response.status_code == 201

        response = client.get(f"{API}/invoices/{invoice['id']}", headers=auth_headers)
        assert Decimal(response.json()["balance"]) == Decimal("0")

        ledger = client.get(f"{API}/invoices/customers/{self.customer.id}/ledger", headers=auth_headers).json()
        assert ledger["invoices"][0]["status"] == "PAID"
        assert Decimal(ledger["total_invoiced"]) == Decimal("180.00")

        # The sale shows up in the month's figures
        invoiced_at = invoice["created_at"]
        year, month = int(invoiced_at[:4]), int(invoiced_at[5:7])
        summary = client.get(
            f"{API}/financial-reports/summary", headers=auth_headers, params={"year": year, "month": month}
        ).json()
        assert Decimal(summary["summary"]["total_sales"]) == Decimal("180.00")
        assert Decimal(summary["summary"]["total_payments_received"]) == Decimal("180.00")
        assert Decimal(summary["summary"]["pending_payments"]) == Decimal("0")


class TestPrescriptionOrderThroughPurchase:

    @pytest.fixture(autouse=True)
    def setup(self, db_session):
        reset_sequences()
        self.customer = create_test_customer(db_session)
        self.vendor = create_test_vendor(db_session)
        self.rx_lens = create_test_variant(db_session, price=Decimal("4200.00"), is_rx=True)
        db_session.commit()

    def test_receipt_releases_order(self, client, db_session, auth_headers):
        response = client.post(f"{API}/sale-orders/", headers=auth_headers, json={
            "customer_id": self.customer.id,
            "left_eye": True,
            "left_spherical": "+2.00",
            "items": [{"lens_variant_id": self.rx_lens.id, "quantity": 1}],
        })
        order = response.json()
        assert order["status"] == "CONFIRMED"

        response = client.post(f"{API}/purchase-orders/", headers=auth_headers, json={
            "vendor_id": self.vendor.id,
            "sale_order_id": order["id"],
            "items": [{"lens_variant_id": self.rx_lens.id, "quantity": 10, "price": "2900.00"}],
        })
        assert response.status_code == 201
        po = response.json()

        # Linked to a purchase order, so the order can no longer be deleted
        response = client.delete(f"{API}/sale-orders/{order['id']}", headers=auth_headers)
        assert response.status_code == 400

        for status in ("ORDERED", "RECEIVED"):
            response = client.patch(
                f"{API}/purchase-orders/{po['id']}/status", headers=auth_headers, json={"status": status}
            )
            assert response.status_code == 200

        assert db_session.get(LensVariant, self.rx_lens.id).stock == 10

        order = client.get(f"{API}/sale-orders/{order['id']}", headers=auth_headers).json()
        assert order["status"] == "IN_PRODUCTION"
        assert order["items"][0]["stock_deducted"] is False

        movements = client.get(f"{API}/inventory/variants/{self.rx_lens.id}/movements", headers=auth_headers).json()
        assert [(m["movement_type"], m["quantity"]) for m in movements] == [("IN", 10)]
