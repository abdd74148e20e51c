"""
Lens variant model

A variant is one sellable lens configuration (product + index + coating +
power range). It carries its own on-hand stock counter.
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Numeric, CheckConstraint
from sqlalchemy.orm import relationship
from datetime import datetime

from app.db.base import Base


class LensVariant(Base):
    """Sellable lens configuration with its stock level"""
    __tablename__ = "lens_variants"
    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_lens_variants_stock_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)

    sku = Column(String(50), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)

    # Pricing
    price = Column(Numeric(12, 2), nullable=False)  # Selling price
    cost_price = Column(Numeric(12, 2), nullable=True)  # Last purchase cost

    # Prescription lenses are made to order and never held in stock
    is_rx = Column(Boolean, default=False, nullable=False)

    # Stock level
    stock = Column(Integer, default=0, nullable=False)
    min_stock = Column(Integer, default=0, nullable=False)

    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    movements = relationship("StockMovement", back_populates="lens_variant", order_by="StockMovement.id")

    def __repr__(self):
        return f"<LensVariant {self.sku}: stock={self.stock}>"

    @property
    def is_low_stock(self) -> bool:
        return self.stock <= self.min_stock
