"""
Sale Order Model

Represents a customer's order for one or more lens variants, together
with the prescription it was written against and the courier assignment
used for delivery.
"""
from sqlalchemy import Column, Integer, String, Numeric, DateTime, Date, ForeignKey, Text, Boolean
from sqlalchemy.orm import relationship
from datetime import datetime

from app.db.base import Base


class SaleOrder(Base):
    """Sale Order - customer order moving DRAFT -> ... -> DELIVERED"""
    __tablename__ = "sale_orders"

    # Primary Key
    id = Column(Integer, primary_key=True, index=True)

    # Order Identification
    order_no = Column(String(50), unique=True, nullable=False, index=True)  # SO-2026-001

    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)

    # Lifecycle: DRAFT -> CONFIRMED -> IN_PRODUCTION -> READY_FOR_DISPATCH -> DISPATCHED -> DELIVERED
    # See app.core.status_config.SALE_ORDER_TRANSITIONS
    status = Column(String(50), nullable=False, default="DRAFT", index=True)

    # Order header
    customer_ref_no = Column(String(100), nullable=True)
    order_date = Column(Date, nullable=True)
    order_type = Column(String(50), nullable=True)  # Stock / Rx / Fitting
    delivery_schedule = Column(DateTime, nullable=True)
    remark = Column(Text, nullable=True)
    item_ref_no = Column(String(100), nullable=True)
    free_lens = Column(Boolean, default=False, nullable=False)
    urgent_order = Column(Boolean, default=False, nullable=False)
    free_fitting = Column(Boolean, default=False, nullable=False)

    # Prescription
    right_eye = Column(Boolean, default=False, nullable=False)
    left_eye = Column(Boolean, default=False, nullable=False)
    right_spherical = Column(String(20), nullable=True)
    right_cylindrical = Column(String(20), nullable=True)
    right_axis = Column(String(20), nullable=True)
    right_add = Column(String(20), nullable=True)
    right_dia = Column(String(20), nullable=True)
    left_spherical = Column(String(20), nullable=True)
    left_cylindrical = Column(String(20), nullable=True)
    left_axis = Column(String(20), nullable=True)
    left_add = Column(String(20), nullable=True)
    left_dia = Column(String(20), nullable=True)

    # Courier assignment (Pending / Assigned / In Transit / Delivered)
    dispatch_status = Column(String(30), nullable=False, default="Pending", index=True)
    assigned_person_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    dispatch_reference = Column(String(100), nullable=True)
    estimated_date = Column(Date, nullable=True)
    estimated_time = Column(String(20), nullable=True)
    actual_date = Column(Date, nullable=True)
    actual_time = Column(String(20), nullable=True)
    dispatch_notes = Column(Text, nullable=True)

    # Header pricing (informational; invoice totals come from the items)
    lens_price = Column(Numeric(12, 2), nullable=False, default=0)
    fitting_price = Column(Numeric(12, 2), nullable=False, default=0)
    discount = Column(Numeric(12, 2), nullable=False, default=0)

    # Status timestamps
    confirmed_at = Column(DateTime, nullable=True)
    production_started_at = Column(DateTime, nullable=True)
    ready_at = Column(DateTime, nullable=True)
    dispatched_at = Column(DateTime, nullable=True)
    delivered_at = Column(DateTime, nullable=True)

    # Soft delete
    is_deleted = Column(Boolean, default=False, nullable=False, index=True)
    deleted_at = Column(DateTime, nullable=True)

    # Audit
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    updated_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    customer = relationship("Customer")
    items = relationship(
        "SaleOrderItem",
        back_populates="sale_order",
        cascade="all, delete-orphan",
        order_by="SaleOrderItem.id",
    )
    purchase_orders = relationship("PurchaseOrder", back_populates="sale_order")
    dispatch = relationship("Dispatch", back_populates="sale_order", uselist=False)
    invoices = relationship("Invoice", secondary="invoice_sale_orders", back_populates="sale_orders")

    def __repr__(self):
        return f"<SaleOrder {self.order_no}: {self.status}>"

    @property
    def has_rx_items(self) -> bool:
        return any(item.is_rx for item in self.items)

    @property
    def total_amount(self):
        return sum((item.line_total for item in self.items), 0)


class SaleOrderItem(Base):
    """One lens variant line on a sale order"""
    __tablename__ = "sale_order_items"

    id = Column(Integer, primary_key=True, index=True)

    sale_order_id = Column(Integer, ForeignKey("sale_orders.id", ondelete="CASCADE"), nullable=False, index=True)
    lens_variant_id = Column(Integer, ForeignKey("lens_variants.id"), nullable=False, index=True)

    quantity = Column(Integer, nullable=False)

    # Pricing: discount is a percentage (0-100)
    price = Column(Numeric(12, 2), nullable=False)
    discount = Column(Numeric(5, 2), nullable=False, default=0)
    effective_price = Column(Numeric(12, 2), nullable=False)  # price x (1 - discount/100)
    line_total = Column(Numeric(12, 2), nullable=False)  # effective_price x quantity

    # Snapshot of the variant's prescription flag when the order was taken
    is_rx = Column(Boolean, default=False, nullable=False)

    # Set once stock has been taken for this line
    stock_deducted = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    sale_order = relationship("SaleOrder", back_populates="items")
    lens_variant = relationship("LensVariant")

    def __repr__(self):
        return f"<SaleOrderItem variant={self.lens_variant_id} x{self.quantity}>"
