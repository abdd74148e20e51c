"""
Operating expenses (input to the financial reports)
"""
from sqlalchemy import Column, Integer, String, DateTime, Date, Numeric, Text
from datetime import datetime

from app.db.base import Base


class Expense(Base):
    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True, index=True)

    description = Column(Text, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)

    # DIRECT (cost of sales) or INDIRECT (overheads)
    type = Column(String(20), nullable=False, index=True)
    category = Column(String(100), nullable=True)  # Rent, Salaries, Freight...

    date = Column(Date, nullable=False, index=True)

    created_by = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<Expense {self.type} {self.amount} on {self.date}>"
