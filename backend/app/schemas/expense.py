"""
Expense Schemas
"""
from pydantic import BaseModel, Field
from typing import Dict, List, Optional
import datetime as dt
from decimal import Decimal

from app.core.status_config import ExpenseType


class ExpenseCreate(BaseModel):
    description: str = Field(..., min_length=1, max_length=2000)
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    type: ExpenseType
    category: Optional[str] = Field(None, max_length=100)
    date: Optional[dt.date] = Field(None, description="Defaults to today")


class ExpenseResponse(BaseModel):
    id: int
    description: str
    amount: Decimal
    type: str
    category: Optional[str] = None
    date: dt.date
    created_at: dt.datetime

    class Config:
        from_attributes = True


class ExpenseTotals(BaseModel):
    total: Decimal
    direct: Decimal
    indirect: Decimal


class ExpenseListResponse(BaseModel):
    expenses: List[ExpenseResponse]
    totals: ExpenseTotals


class ExpenseTypeSummary(BaseModel):
    count: int
    total: Decimal
    items: List[ExpenseResponse]


class ExpenseMonthlySummary(BaseModel):
    year: int
    month: int
    summary: Dict[str, ExpenseTypeSummary]
    total_expense: Decimal
