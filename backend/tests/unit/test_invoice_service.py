"""
Unit tests for invoicing, payments and the customer ledger
"""
import re

import pytest
from decimal import Decimal

from app.exceptions import ConflictError, NotFoundError, PaymentExceedsBalanceError, ValidationError
from app.models.invoice import Invoice
from app.schemas.invoice import InvoiceCreate, PaymentCreate
from app.services import invoice_service
from tests.factories import (
    create_test_customer,
    create_test_sale_order,
    create_test_variant,
    deliver_sale_order,
    reset_sequences,
)


def pay(db, invoice, amount, mode="CASH"):
    return invoice_service.record_payment(db, PaymentCreate(invoice_id=invoice.id, amount=Decimal(amount), mode=mode))


class TestCreateInvoice:

    @pytest.fixture(autouse=True)
    def setup(self, db_session):
        reset_sequences()
        self.db = db_session
        self.customer = create_test_customer(db_session)
        self.lens = create_test_variant(db_session, price=Decimal("100.00"), stock=20)
        db_session.commit()

    def _delivered(self, *lines):
        order = create_test_sale_order(self.db, self.customer, list(lines))
        return deliver_sale_order(self.db, order)

    def test_single_order(self):
        order = self._delivered((self.lens, 2, 10))

        invoice = invoice_service.create_invoice(self.db, InvoiceCreate(sale_order_ids=[order.id]))

        assert re.fullmatch(r"INV-\d{4}-0001", invoice.invoice_no)
        assert invoice.total_amount == Decimal("180.00")
        assert invoice.total_paid == Decimal("0")
        assert invoice.balance == Decimal("180.00")
        assert [o.id for o in invoice.sale_orders] == [order.id]

    def test_several_orders(self):
        first = self._delivered((self.lens, 1))
        second = self._delivered((self.lens, 3, 50))

        invoice = invoice_service.create_invoice(self.db, InvoiceCreate(sale_order_ids=[first.id, second.id, first.id]))

        assert invoice.total_amount == Decimal("250.00")
        assert len(invoice.sale_orders) == 2

    def test_order_not_delivered(self):
        order = create_test_sale_order(self.db, self.customer, [(self.lens, 1)])

        with pytest.raises(ValidationError) as exc:
            invoice_service.create_invoice(self.db, InvoiceCreate(sale_order_ids=[order.id]))
        assert exc.value.details["not_delivered"] == [order.order_no]
        assert self.db.query(Invoice).count() == 0

    def test_missing_order(self):
        order = self._delivered((self.lens, 1))

        with pytest.raises(ValidationError) as exc:
            invoice_service.create_invoice(self.db, InvoiceCreate(sale_order_ids=[order.id, 9999]))
        assert exc.value.details["missing_sale_order_ids"] == [9999]

    def test_order_billed_once(self):
        order = self._delivered((self.lens, 1))
        invoice_service.create_invoice(self.db, InvoiceCreate(sale_order_ids=[order.id]))

        with pytest.raises(ConflictError) as exc:
            invoice_service.create_invoice(self.db, InvoiceCreate(sale_order_ids=[order.id]))
        assert order.order_no in exc.value.details["already_invoiced"]

    def test_orders_of_different_customers(self):
        mine = self._delivered((self.lens, 1))
        other_customer = create_test_customer(self.db)
        self.db.commit()
        theirs = deliver_sale_order(self.db, create_test_sale_order(self.db, other_customer, [(self.lens, 1)]))

        with pytest.raises(ValidationError) as exc:
            invoice_service.create_invoice(self.db, InvoiceCreate(sale_order_ids=[mine.id, theirs.id]))

        assert exc.value.details["customer_ids"] == sorted([self.customer.id, other_customer.id])
        assert self.db.query(Invoice).count() == 0


class TestPayments:

    @pytest.fixture(autouse=True)
    def setup(self, db_session):
        reset_sequences()
        self.db = db_session
        self.customer = create_test_customer(db_session)
        lens = create_test_variant(db_session, price=Decimal("100.00"), stock=20)
        db_session.commit()
        order = deliver_sale_order(db_session, create_test_sale_order(db_session, self.customer, [(lens, 2, 10)]))
        self.invoice = invoice_service.create_invoice(db_session, InvoiceCreate(sale_order_ids=[order.id]))

    def test_overpayment_rejected(self):
        with pytest.raises(PaymentExceedsBalanceError) as exc:
            pay(self.db, self.invoice, "200")
        assert exc.value.details["remaining"] == "180.00"

        self.db.refresh(self.invoice)
        assert self.invoice.payments == []

    def test_full_payment_settles(self):
        payment = pay(self.db, self.invoice, "180", mode="UPI")

        assert payment.mode == "UPI"
        assert payment.paid_at is not None
        self.db.refresh(self.invoice)
        assert self.invoice.balance == Decimal("0.00")

    def test_partial_payments_accumulate(self):
        pay(self.db, self.invoice, "100")
        pay(self.db, self.invoice, "50.50")

        self.db.refresh(self.invoice)
        assert self.invoice.total_paid == Decimal("150.50")
        assert self.invoice.balance == Decimal("29.50")

        with pytest.raises(PaymentExceedsBalanceError):
            pay(self.db, self.invoice, "29.51")
        pay(self.db, self.invoice, "29.50")

    def test_unknown_invoice(self):
        with pytest.raises(NotFoundError):
            invoice_service.record_payment(
                self.db, PaymentCreate(invoice_id=9999, amount=Decimal("1"), mode="CASH")
            )


class TestCustomerLedger:

    @pytest.fixture(autouse=True)
    def setup(self, db_session):
        reset_sequences()
        self.db = db_session
        self.customer = create_test_customer(db_session)
        self.lens = create_test_variant(db_session, price=Decimal("100.00"), stock=20)
        db_session.commit()

    def _invoice(self, customer, quantity):
        order = deliver_sale_order(self.db, create_test_sale_order(self.db, customer, [(self.lens, quantity)]))
        return invoice_service.create_invoice(self.db, InvoiceCreate(sale_order_ids=[order.id]))

    def test_ledger_totals_and_status(self):
        settled = self._invoice(self.customer, 1)
        open_invoice = self._invoice(self.customer, 3)
        pay(self.db, settled, "100")
        pay(self.db, open_invoice, "120")

        ledger = invoice_service.customer_ledger(self.db, self.customer.id)

        assert ledger["customer_id"] == self.customer.id
        assert ledger["total_invoiced"] == Decimal("400.00")
        assert ledger["total_paid"] == Decimal("220.00")
        assert ledger["outstanding"] == Decimal("180.00")
        rows = {row["invoice_no"]: row for row in ledger["invoices"]}
        assert rows[settled.invoice_no]["status"] == "PAID"
        assert rows[open_invoice.invoice_no]["status"] == "PENDING"
        assert rows[open_invoice.invoice_no]["balance"] == Decimal("180.00")

    def test_ledger_only_lists_own_invoices(self):
        other = create_test_customer(self.db)
        self.db.commit()
        self._invoice(other, 1)

        ledger = invoice_service.customer_ledger(self.db, self.customer.id)
        assert ledger["invoices"] == []
        assert ledger["outstanding"] == Decimal("0.00")

    def test_unknown_customer(self):
        with pytest.raises(NotFoundError):
            invoice_service.customer_ledger(self.db, 9999)
