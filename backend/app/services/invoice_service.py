"""
Invoice & Payment Ledger

Invoices are created once from a closed set of DELIVERED sale orders and
are never changed afterwards except by appending payments. The sum of
payments on an invoice never exceeds its total.
"""
from datetime import datetime
from decimal import Decimal
from typing import Dict, Optional

from sqlalchemy.orm import Session

from app.core.status_config import InvoiceLedgerStatus, SaleOrderStatus
from app.db.session import transaction
from app.exceptions import ConflictError, NotFoundError, PaymentExceedsBalanceError, ValidationError
from app.logging_config import get_logger
from app.models.invoice import Invoice
from app.models.payment import Payment
from app.models.sales_order import SaleOrder
from app.schemas.invoice import InvoiceCreate, PaymentCreate
from app.services.sales_order_service import get_customer, line_amounts, to_money
from app.services.sequence_service import next_number

logger = get_logger(__name__)

ZERO = Decimal("0.00")


def invoice_total(orders) -> Decimal:
    """Sum of price x quantity x (1 - discount/100) over every line of every order."""
    total = ZERO
    for order in orders:
        for item in order.items:
            _, line_total = line_amounts(item.price, item.quantity, item.discount)
            total += line_total
    return to_money(total)


def get_invoice(db: Session, invoice_id: int) -> Invoice:
    invoice = db.query(Invoice).filter(Invoice.id == invoice_id).first()
    if not invoice:
        raise NotFoundError("Invoice", invoice_id)
    return invoice


def create_invoice(db: Session, data: InvoiceCreate, user_id: Optional[int] = None) -> Invoice:
    """
    Bill a set of delivered sale orders.

    Raises:
        ValidationError: an order is missing or not DELIVERED, or the orders
            belong to more than one customer
        ConflictError: an order is already on another invoice
    """
    order_ids = list(dict.fromkeys(data.sale_order_ids))

    with transaction(db):
        orders = (
            db.query(SaleOrder)
            .filter(SaleOrder.id.in_(order_ids), SaleOrder.is_deleted.is_(False))
            .with_for_update()
            .populate_existing()
            .all()
        )
        found = {order.id: order for order in orders}

        missing = [oid for oid in order_ids if oid not in found]
        if missing:
            raise ValidationError(
                "One or more sale orders were not found",
                field="sale_order_ids",
                details={"missing_sale_order_ids": missing},
            )

        customer_ids = sorted({found[oid].customer_id for oid in order_ids})
        if len(customer_ids) > 1:
            raise ValidationError(
                "All sale orders on an invoice must belong to one customer",
                field="sale_order_ids",
                details={"customer_ids": customer_ids},
            )

        not_delivered = [
            found[oid].order_no for oid in order_ids if found[oid].status != SaleOrderStatus.DELIVERED
        ]
        if not_delivered:
            raise ValidationError(
                "All sale orders must be DELIVERED before invoicing",
                field="sale_order_ids",
                details={"not_delivered": not_delivered},
            )

        already_billed = {
            found[oid].order_no: found[oid].invoices[0].invoice_no
            for oid in order_ids
            if found[oid].invoices
        }
        if already_billed:
            raise ConflictError(
                "One or more sale orders are already invoiced",
                details={"already_invoiced": already_billed},
            )

        ordered = [found[oid] for oid in order_ids]
        invoice_no = next_number(db, "INV")
        invoice = Invoice(
            invoice_no=invoice_no,
            total_amount=invoice_total(ordered),
            due_date=data.due_date,
            notes=data.notes,
            created_by=user_id,
        )
        invoice.sale_orders.extend(ordered)
        db.add(invoice)

    db.refresh(invoice)
    logger.info(
        f"Created invoice {invoice.invoice_no} for {len(order_ids)} sale order(s)",
        extra={"invoice_id": invoice.id, "total_amount": invoice.total_amount},
    )
    return invoice


def record_payment(db: Session, data: PaymentCreate, user_id: Optional[int] = None) -> Payment:
    """
    Append a payment to an invoice.

    Raises:
        NotFoundError: invoice does not exist
        PaymentExceedsBalanceError: amount > total_amount - payments so far
    """
    with transaction(db):
        invoice = (
            db.query(Invoice)
            .filter(Invoice.id == data.invoice_id)
            .with_for_update()
            .populate_existing()
            .first()
        )
        if not invoice:
            raise NotFoundError("Invoice", data.invoice_id)

        remaining = Decimal(invoice.total_amount) - invoice.total_paid
        if data.amount > remaining:
            raise PaymentExceedsBalanceError(invoice.invoice_no, amount=data.amount, remaining=remaining)

        payment = Payment(
            invoice_id=invoice.id,
            amount=to_money(data.amount),
            mode=data.mode.value,
            reference=data.reference,
            notes=data.notes,
            paid_at=data.paid_at or datetime.utcnow(),
            recorded_by=user_id,
        )
        db.add(payment)

    db.refresh(payment)
    logger.info(
        f"Recorded {payment.mode} payment of {payment.amount} on invoice {invoice.invoice_no}",
        extra={"invoice_id": invoice.id, "payment_id": payment.id, "remaining": remaining - payment.amount},
    )
    return payment


def customer_ledger(db: Session, customer_id: int) -> Dict:
    """All invoices billing any of a customer's orders, newest first, with balances."""
    customer = get_customer(db, customer_id)

    invoices = (
        db.query(Invoice)
        .join(Invoice.sale_orders)
        .filter(SaleOrder.customer_id == customer_id)
        .distinct()
        .order_by(Invoice.created_at.desc(), Invoice.id.desc())
        .all()
    )

    rows = []
    total_invoiced = ZERO
    total_paid = ZERO
    for invoice in invoices:
        paid = invoice.total_paid
        balance = Decimal(invoice.total_amount) - paid
        rows.append({
            "id": invoice.id,
            "invoice_no": invoice.invoice_no,
            "created_at": invoice.created_at,
            "due_date": invoice.due_date,
            "total_amount": invoice.total_amount,
            "total_paid": paid,
            "balance": balance,
            "status": (InvoiceLedgerStatus.PAID if balance <= 0 else InvoiceLedgerStatus.PENDING).value,
            "sale_order_nos": [order.order_no for order in invoice.sale_orders],
        })
        total_invoiced += Decimal(invoice.total_amount)
        total_paid += paid

    return {
        "customer_id": customer.id,
        "customer_name": customer.name,
        "invoices": rows,
        "total_invoiced": total_invoiced,
        "total_paid": total_paid,
        "outstanding": total_invoiced - total_paid,
    }
