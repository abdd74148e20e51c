"""
Purchasing Pydantic Schemas

Covers:
- Purchase Orders
- PO Lines
- Auto reorder
"""
from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from decimal import Decimal

from app.core.status_config import PurchaseOrderStatus


# ============================================================================
# Purchase Order Line Schemas
# ============================================================================

class PurchaseOrderItemCreate(BaseModel):
    """Create a PO line"""
    lens_variant_id: int = Field(..., description="Lens variant ID")
    quantity: int = Field(..., gt=0, description="Quantity ordered")
    price: Decimal = Field(..., ge=0, description="Unit cost")


class PurchaseOrderItemResponse(BaseModel):
    """PO line response"""
    id: int
    lens_variant_id: int
    quantity: int
    price: Decimal
    line_total: Decimal

    class Config:
        from_attributes = True


# ============================================================================
# Purchase Order Schemas
# ============================================================================

class PurchaseOrderCreate(BaseModel):
    """Create a new purchase order"""
    vendor_id: int = Field(..., description="Vendor ID")
    items: List[PurchaseOrderItemCreate] = Field(..., min_length=1, description="PO lines")
    sale_order_id: Optional[int] = Field(None, description="Sale order this PO is raised for")
    notes: Optional[str] = Field(None, max_length=5000)


class PurchaseOrderStatusUpdate(BaseModel):
    """Update PO status"""
    status: PurchaseOrderStatus


class ReorderRequest(BaseModel):
    """Raise a PO for all low-stock variants"""
    vendor_id: Optional[int] = Field(None, description="Vendor to order from (first active vendor if omitted)")


class PurchaseOrderListResponse(BaseModel):
    """PO list response"""
    id: int
    po_number: str
    vendor_id: int
    sale_order_id: Optional[int] = None
    status: str
    total_value: Decimal
    created_at: datetime

    class Config:
        from_attributes = True


class PurchaseOrderResponse(BaseModel):
    """Full PO response"""
    id: int
    po_number: str
    vendor_id: int
    sale_order_id: Optional[int] = None
    status: str
    total_value: Decimal
    notes: Optional[str] = None
    ordered_at: Optional[datetime] = None
    received_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    created_by: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    items: List[PurchaseOrderItemResponse] = []

    class Config:
        from_attributes = True
