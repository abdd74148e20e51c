"""
Dispatch (delivery challan) model

One dispatch per sale order. Items are a free-form packing list printed
on the challan, so they are kept as JSON rather than linked rows.
"""
from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey, JSON
from sqlalchemy.orm import relationship
from datetime import datetime

from app.db.base import Base


class Dispatch(Base):
    __tablename__ = "dispatches"

    id = Column(Integer, primary_key=True, index=True)

    # DC-2610-001 (year + month scoped)
    dc_number = Column(String(50), unique=True, nullable=False, index=True)

    sale_order_id = Column(Integer, ForeignKey("sale_orders.id"), unique=True, nullable=False)

    # Ship-to (defaults from the customer record)
    customer_name = Column(String(200), nullable=False)
    customer_address = Column(Text, nullable=True)
    customer_phone = Column(String(30), nullable=True)

    # [{"description": ..., "quantity": ..., "remarks": ...}]
    items = Column(JSON, nullable=False, default=list)

    delivery_method = Column(String(50), nullable=True)  # Courier, Hand delivery, ...
    dispatch_date = Column(DateTime, default=datetime.utcnow, nullable=False)
    remarks = Column(Text, nullable=True)

    # PENDING -> IN_TRANSIT -> DELIVERED
    status = Column(String(30), default="PENDING", nullable=False, index=True)
    delivered_at = Column(DateTime, nullable=True)

    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    sale_order = relationship("SaleOrder", back_populates="dispatch")

    def __repr__(self):
        return f"<Dispatch {self.dc_number}: {self.status}>"
