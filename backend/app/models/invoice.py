"""
Invoice Model

An invoice bills one or more delivered sale orders. Its total is fixed
at creation; afterwards only payments are appended.
"""
from decimal import Decimal

from sqlalchemy import Column, Integer, String, Numeric, DateTime, Date, ForeignKey, Text, Table
from sqlalchemy.orm import relationship
from datetime import datetime

from app.db.base import Base


invoice_sale_orders = Table(
    "invoice_sale_orders",
    Base.metadata,
    Column("invoice_id", Integer, ForeignKey("invoices.id", ondelete="CASCADE"), primary_key=True),
    # A sale order is billed at most once
    Column("sale_order_id", Integer, ForeignKey("sale_orders.id"), primary_key=True, unique=True),
)


class Invoice(Base):
    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True, index=True)

    invoice_no = Column(String(50), unique=True, nullable=False, index=True)  # INV-2026-0001

    total_amount = Column(Numeric(12, 2), nullable=False)
    due_date = Column(Date, nullable=True)
    notes = Column(Text, nullable=True)

    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    sale_orders = relationship("SaleOrder", secondary=invoice_sale_orders, back_populates="invoices")
    payments = relationship(
        "Payment",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="Payment.id",
    )

    def __repr__(self):
        return f"<Invoice {self.invoice_no}: {self.total_amount}>"

    @property
    def total_paid(self) -> Decimal:
        return sum((p.amount for p in self.payments), Decimal("0.00"))

    @property
    def balance(self) -> Decimal:
        return Decimal(self.total_amount) - self.total_paid
