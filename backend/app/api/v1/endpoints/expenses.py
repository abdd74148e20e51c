"""
Expense Endpoints
"""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.v1.deps import get_current_user
from app.core.status_config import ExpenseType
from app.db.session import get_db
from app.models.user import User
from app.schemas.expense import (
    ExpenseCreate,
    ExpenseListResponse,
    ExpenseMonthlySummary,
    ExpenseResponse,
)
from app.services import expense_service

router = APIRouter()


@router.post("/", response_model=ExpenseResponse, status_code=status.HTTP_201_CREATED)
async def create_expense(
    request: ExpenseCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return expense_service.create_expense(db, request, current_user.id)


@router.get("/", response_model=ExpenseListResponse)
async def list_expenses(
    type: Optional[ExpenseType] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    List expenses, newest first, with totals

    - **type**: DIRECT or INDIRECT
    - **start_date** / **end_date**: inclusive
    """
    return expense_service.list_expenses(
        db,
        type=type.value if type else None,
        start_date=start_date,
        end_date=end_date,
    )


@router.get("/monthly-summary", response_model=ExpenseMonthlySummary)
async def get_monthly_summary(
    year: int = Query(..., ge=2000, le=2100),
    month: int = Query(..., ge=1, le=12),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Expenses for one month grouped by type"""
    return expense_service.monthly_summary(db, year, month)
