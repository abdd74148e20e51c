"""
Invoice and Payment Schemas
"""
from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import date, datetime
from decimal import Decimal

from app.core.status_config import PaymentMode


# ============================================================================
# Request Schemas
# ============================================================================

class InvoiceCreate(BaseModel):
    """Bill one or more delivered sale orders"""
    sale_order_ids: List[int] = Field(..., min_length=1, description="Delivered sale orders to bill")
    due_date: Optional[date] = None
    notes: Optional[str] = Field(None, max_length=5000)

    @field_validator("sale_order_ids")
    @classmethod
    def dedupe_ids(cls, v: List[int]) -> List[int]:
        """Keep first occurrence order, drop repeats"""
        return list(dict.fromkeys(v))


class PaymentCreate(BaseModel):
    """Record money received against an invoice"""
    invoice_id: int
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    mode: PaymentMode
    reference: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = Field(None, max_length=5000)
    paid_at: Optional[datetime] = None


# ============================================================================
# Response Schemas
# ============================================================================

class PaymentResponse(BaseModel):
    id: int
    invoice_id: int
    amount: Decimal
    mode: str
    reference: Optional[str] = None
    notes: Optional[str] = None
    paid_at: datetime
    recorded_by: Optional[int] = None

    class Config:
        from_attributes = True


class InvoiceSaleOrderSummary(BaseModel):
    id: int
    order_no: str
    customer_id: int
    total_amount: Decimal

    class Config:
        from_attributes = True


class InvoiceResponse(BaseModel):
    id: int
    invoice_no: str
    total_amount: Decimal
    total_paid: Decimal
    balance: Decimal
    due_date: Optional[date] = None
    notes: Optional[str] = None
    created_at: datetime
    sale_orders: List[InvoiceSaleOrderSummary] = []
    payments: List[PaymentResponse] = []

    class Config:
        from_attributes = True


class LedgerInvoice(BaseModel):
    """One invoice line on a customer ledger"""
    id: int
    invoice_no: str
    created_at: datetime
    due_date: Optional[date] = None
    total_amount: Decimal
    total_paid: Decimal
    balance: Decimal
    status: str
    sale_order_nos: List[str]


class CustomerLedgerResponse(BaseModel):
    customer_id: int
    customer_name: str
    invoices: List[LedgerInvoice]
    total_invoiced: Decimal
    total_paid: Decimal
    outstanding: Decimal
