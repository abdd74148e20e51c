"""
Staff user model

Credentials and sessions are managed by the identity service; this table
only backs token lookups and the audit columns on business records.
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime
from datetime import datetime

from app.db.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)

    email = Column(String(255), unique=True, nullable=False, index=True)
    full_name = Column(String(200), nullable=True)

    # admin, sales, inventory, accounts, delivery
    role = Column(String(30), nullable=False, default="sales")
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<User {self.email} ({self.role})>"
