"""
Sequence counters for human-readable document numbers
"""
from sqlalchemy import Column, Integer, String, DateTime
from datetime import datetime

from app.db.base import Base


class SequenceCounter(Base):
    """Last issued value for one numbering scope, e.g. 'SO-2026' or 'DC-2610'"""
    __tablename__ = "sequence_counters"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), unique=True, nullable=False, index=True)
    current_value = Column(Integer, default=0, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<SequenceCounter {self.name}={self.current_value}>"
