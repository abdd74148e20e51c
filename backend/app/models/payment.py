"""
Payment Model

Append-only record of money received against an invoice.
"""
from sqlalchemy import Column, Integer, String, Numeric, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship
from datetime import datetime

from app.db.base import Base


class Payment(Base):
    """
    Payment record for invoices.

    Several partial payments may be recorded per invoice; their sum never
    exceeds the invoice total. There is no refund or correction path.
    """
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True)

    invoice_id = Column(Integer, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True)

    amount = Column(Numeric(12, 2), nullable=False)

    # CASH, UPI, CARD, BANK_TRANSFER, CHECK
    mode = Column(String(30), nullable=False)

    reference = Column(String(255), nullable=True)  # UTR, cheque number, card slip...
    notes = Column(Text, nullable=True)

    paid_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    recorded_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    invoice = relationship("Invoice", back_populates="payments")

    def __repr__(self):
        return f"<Payment {self.amount} ({self.mode}) on invoice {self.invoice_id}>"
