"""
Sale Order Pydantic Schemas
"""
from pydantic import BaseModel, Field
from typing import Dict, Optional, List
from datetime import date, datetime
from decimal import Decimal

from app.core.status_config import OrderDispatchStatus, SaleOrderStatus


# ============================================================================
# Request Schemas
# ============================================================================

class SaleOrderItemCreate(BaseModel):
    """Line item on a sale order"""
    lens_variant_id: int = Field(..., description="Lens variant ID")
    quantity: int = Field(..., ge=1, le=10000, description="Quantity (1-10000)")
    discount: Decimal = Field(Decimal("0"), ge=0, le=100, description="Discount percent (0-100)")
    price: Optional[Decimal] = Field(None, ge=0, description="Unit price (uses variant price if not specified)")


class SaleOrderHeader(BaseModel):
    """Header fields shared by create and update"""
    customer_ref_no: Optional[str] = Field(None, max_length=100)
    order_date: Optional[date] = None
    order_type: Optional[str] = Field(None, max_length=50)
    delivery_schedule: Optional[datetime] = None
    remark: Optional[str] = Field(None, max_length=5000)
    item_ref_no: Optional[str] = Field(None, max_length=100)
    free_lens: Optional[bool] = None
    urgent_order: Optional[bool] = None
    free_fitting: Optional[bool] = None

    # Prescription
    right_eye: Optional[bool] = None
    left_eye: Optional[bool] = None
    right_spherical: Optional[str] = Field(None, max_length=20)
    right_cylindrical: Optional[str] = Field(None, max_length=20)
    right_axis: Optional[str] = Field(None, max_length=20)
    right_add: Optional[str] = Field(None, max_length=20)
    right_dia: Optional[str] = Field(None, max_length=20)
    left_spherical: Optional[str] = Field(None, max_length=20)
    left_cylindrical: Optional[str] = Field(None, max_length=20)
    left_axis: Optional[str] = Field(None, max_length=20)
    left_add: Optional[str] = Field(None, max_length=20)
    left_dia: Optional[str] = Field(None, max_length=20)

    # Header pricing
    lens_price: Optional[Decimal] = Field(None, ge=0)
    fitting_price: Optional[Decimal] = Field(None, ge=0)
    discount: Optional[Decimal] = Field(None, ge=0)


class SaleOrderCreate(SaleOrderHeader):
    """Create a sale order"""
    customer_id: int = Field(..., description="Customer ID")
    items: List[SaleOrderItemCreate] = Field(..., min_length=1, description="Order lines")
    draft: bool = Field(False, description="Save as DRAFT without touching stock")


class SaleOrderUpdate(SaleOrderHeader):
    """Full update of a sale order header (items only while DRAFT)"""
    customer_id: Optional[int] = None
    items: Optional[List[SaleOrderItemCreate]] = Field(None, min_length=1)


class SaleOrderStatusUpdate(BaseModel):
    status: SaleOrderStatus = Field(..., description="New order status")


class SaleOrderDispatchUpdate(BaseModel):
    """Courier assignment fields"""
    dispatch_status: Optional[OrderDispatchStatus] = None
    assigned_person_id: Optional[int] = None
    dispatch_reference: Optional[str] = Field(None, max_length=100)
    estimated_date: Optional[date] = None
    estimated_time: Optional[str] = Field(None, max_length=20)
    actual_date: Optional[date] = None
    actual_time: Optional[str] = Field(None, max_length=20)
    dispatch_notes: Optional[str] = Field(None, max_length=5000)


# ============================================================================
# Response Schemas
# ============================================================================

class SaleOrderItemResponse(BaseModel):
    id: int
    lens_variant_id: int
    quantity: int
    price: Decimal
    discount: Decimal
    effective_price: Decimal
    line_total: Decimal
    is_rx: bool
    stock_deducted: bool

    class Config:
        from_attributes = True


class SaleOrderListResponse(BaseModel):
    """Sale order summary for list views"""
    id: int
    order_no: str
    customer_id: int
    status: str
    dispatch_status: str
    order_date: Optional[date] = None
    customer_ref_no: Optional[str] = None
    total_amount: Decimal
    created_at: datetime

    class Config:
        from_attributes = True


class SaleOrderResponse(BaseModel):
    """Full sale order details"""
    id: int
    order_no: str
    customer_id: int
    status: str

    customer_ref_no: Optional[str] = None
    order_date: Optional[date] = None
    order_type: Optional[str] = None
    delivery_schedule: Optional[datetime] = None
    remark: Optional[str] = None
    item_ref_no: Optional[str] = None
    free_lens: bool
    urgent_order: bool
    free_fitting: bool

    right_eye: bool
    left_eye: bool
    right_spherical: Optional[str] = None
    right_cylindrical: Optional[str] = None
    right_axis: Optional[str] = None
    right_add: Optional[str] = None
    right_dia: Optional[str] = None
    left_spherical: Optional[str] = None
    left_cylindrical: Optional[str] = None
    left_axis: Optional[str] = None
    left_add: Optional[str] = None
    left_dia: Optional[str] = None

    dispatch_status: str
    assigned_person_id: Optional[int] = None
    dispatch_reference: Optional[str] = None
    estimated_date: Optional[date] = None
    estimated_time: Optional[str] = None
    actual_date: Optional[date] = None
    actual_time: Optional[str] = None
    dispatch_notes: Optional[str] = None

    lens_price: Decimal
    fitting_price: Decimal
    discount: Decimal
    total_amount: Decimal

    items: List[SaleOrderItemResponse] = []

    confirmed_at: Optional[datetime] = None
    production_started_at: Optional[datetime] = None
    ready_at: Optional[datetime] = None
    dispatched_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None

    created_by: Optional[int] = None
    updated_by: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class SaleOrderStatistics(BaseModel):
    total_orders: int
    by_status: Dict[str, int]
    by_dispatch_status: Dict[str, int]
    total_value: Decimal
