"""
Inventory Schemas

Lens variant stock levels, availability checks and the movement ledger.
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from decimal import Decimal


class LensVariantStockResponse(BaseModel):
    id: int
    sku: str
    name: str
    is_rx: bool
    stock: int
    min_stock: int
    price: Decimal
    cost_price: Optional[Decimal] = None

    class Config:
        from_attributes = True


class AvailabilityItem(BaseModel):
    lens_variant_id: int
    quantity: int = Field(..., ge=1)


class AvailabilityRequest(BaseModel):
    items: List[AvailabilityItem] = Field(..., min_length=1)


class AvailabilityResult(BaseModel):
    lens_variant_id: int
    available: bool
    current_stock: int
    required: int
    message: str


class AvailabilityResponse(BaseModel):
    all_available: bool
    items: List[AvailabilityResult]


class StockMovementResponse(BaseModel):
    id: int
    lens_variant_id: int
    movement_type: str
    quantity: int
    stock_after: int
    reference_type: Optional[str] = None
    reference_id: Optional[int] = None
    notes: Optional[str] = None
    created_at: datetime
    created_by: Optional[int] = None

    class Config:
        from_attributes = True
