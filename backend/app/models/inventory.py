"""
Stock ledger entries
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship
from datetime import datetime

from app.db.base import Base


class StockMovement(Base):
    """One row per change to a lens variant's stock counter"""
    __tablename__ = "stock_movements"

    id = Column(Integer, primary_key=True, index=True)

    lens_variant_id = Column(Integer, ForeignKey('lens_variants.id'), nullable=False, index=True)

    # IN (purchase receipt) or OUT (sale order deduction)
    movement_type = Column(String(10), nullable=False)
    quantity = Column(Integer, nullable=False)
    stock_after = Column(Integer, nullable=False)

    reference_type = Column(String(50), nullable=True)
    # sale_order, purchase_order

    reference_id = Column(Integer, nullable=True)

    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    created_by = Column(Integer, nullable=True)

    lens_variant = relationship("LensVariant", back_populates="movements")

    def __repr__(self):
        return f"<StockMovement {self.movement_type} {self.quantity} of variant {self.lens_variant_id}>"
