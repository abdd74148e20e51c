"""
Dispatch (delivery challan) Schemas
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from app.core.status_config import DispatchStatus


class DispatchItem(BaseModel):
    """One line on the challan packing list"""
    description: str = Field(..., min_length=1, max_length=500)
    quantity: int = Field(..., ge=1)
    remarks: Optional[str] = Field(None, max_length=500)


class DispatchCreate(BaseModel):
    sale_order_id: int = Field(..., description="Sale order being dispatched")
    customer_name: Optional[str] = Field(None, max_length=200, description="Defaults to the customer's name")
    customer_address: Optional[str] = Field(None, max_length=2000)
    customer_phone: Optional[str] = Field(None, max_length=30)
    items: List[DispatchItem] = Field(default_factory=list)
    delivery_method: Optional[str] = Field(None, max_length=50)
    dispatch_date: Optional[datetime] = None
    remarks: Optional[str] = Field(None, max_length=5000)


class DispatchStatusUpdate(BaseModel):
    status: DispatchStatus
    remarks: Optional[str] = Field(None, max_length=5000)


class DispatchResponse(BaseModel):
    id: int
    dc_number: str
    sale_order_id: int
    customer_name: str
    customer_address: Optional[str] = None
    customer_phone: Optional[str] = None
    items: List[DispatchItem] = []
    delivery_method: Optional[str] = None
    dispatch_date: datetime
    remarks: Optional[str] = None
    status: str
    delivered_at: Optional[datetime] = None
    created_by: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
