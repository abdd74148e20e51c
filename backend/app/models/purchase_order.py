"""
Purchase Order models for purchasing module
"""
from sqlalchemy import Column, Integer, String, DateTime, Text, Numeric, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime

from app.db.base import Base


class PurchaseOrder(Base):
    """Purchase Order header model"""
    __tablename__ = "purchase_orders"

    id = Column(Integer, primary_key=True, index=True)

    # PO Number - auto-generated (PO-2026-0001)
    po_number = Column(String(50), unique=True, nullable=False, index=True)

    vendor_id = Column(Integer, ForeignKey('vendors.id'), nullable=False, index=True)

    # Raised to cover a specific sale order's shortfall (optional)
    sale_order_id = Column(Integer, ForeignKey('sale_orders.id'), nullable=True, index=True)

    # Status workflow: PENDING -> ORDERED -> RECEIVED, or -> CANCELLED
    status = Column(String(50), default="PENDING", nullable=False, index=True)

    # sum(item.price * item.quantity)
    total_value = Column(Numeric(12, 2), default=0, nullable=False)

    notes = Column(Text, nullable=True)

    # Status timestamps
    ordered_at = Column(DateTime, nullable=True)
    received_at = Column(DateTime, nullable=True)
    cancelled_at = Column(DateTime, nullable=True)

    # Audit
    created_by = Column(Integer, ForeignKey('users.id'), nullable=True)
    updated_by = Column(Integer, ForeignKey('users.id'), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    vendor = relationship("Vendor")
    sale_order = relationship("SaleOrder", back_populates="purchase_orders")
    items = relationship(
        "PurchaseOrderItem",
        back_populates="purchase_order",
        cascade="all, delete-orphan",
        order_by="PurchaseOrderItem.id",
    )

    def __repr__(self):
        return f"<PurchaseOrder {self.po_number}: {self.status}>"


class PurchaseOrderItem(Base):
    """Purchase Order line item model"""
    __tablename__ = "purchase_order_items"

    id = Column(Integer, primary_key=True, index=True)

    purchase_order_id = Column(Integer, ForeignKey('purchase_orders.id', ondelete='CASCADE'), nullable=False)
    lens_variant_id = Column(Integer, ForeignKey('lens_variants.id'), nullable=False)

    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(12, 2), nullable=False)  # Unit cost
    line_total = Column(Numeric(12, 2), nullable=False)  # quantity * price

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    purchase_order = relationship("PurchaseOrder", back_populates="items")
    lens_variant = relationship("LensVariant")

    def __repr__(self):
        return f"<PurchaseOrderItem variant={self.lens_variant_id} x{self.quantity}>"
