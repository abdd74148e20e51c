"""
Customer master record

Only what the order chain needs lives here; the full customer master
(business categories, credit terms, etc.) is maintained elsewhere.
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text
from datetime import datetime

from app.db.base import Base


class Customer(Base):
    """Optical shop or walk-in customer"""
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)

    # Customer code (CUST-001)
    code = Column(String(50), unique=True, nullable=False, index=True)
    name = Column(String(200), nullable=False)
    shop_name = Column(String(200), nullable=True)

    # Contact
    phone = Column(String(30), nullable=True)
    email = Column(String(255), nullable=True)
    address = Column(Text, nullable=True)

    # Soft-delete flags
    is_active = Column(Boolean, default=True, nullable=False)
    is_deleted = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<Customer {self.code}: {self.name}>"
