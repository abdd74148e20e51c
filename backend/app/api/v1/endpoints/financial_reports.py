"""
Financial Report Endpoints
"""
from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.v1.deps import get_current_user
from app.db.session import get_db
from app.models.user import User
from app.schemas.financial_report import FinancialSummaryResponse, ProfitLossResponse
from app.services import financial_report_service

router = APIRouter()


@router.get("/summary", response_model=FinancialSummaryResponse)
async def get_financial_summary(
    year: int = Query(..., ge=2000, le=2100),
    month: int = Query(..., ge=1, le=12),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Monthly sales, receipts, purchases and expenses, with receivables aging
    and a six-month sales / expense trend.
    """
    return financial_report_service.monthly_summary(db, year, month)


@router.get("/profit-loss", response_model=ProfitLossResponse)
async def get_profit_loss(
    start_date: date,
    end_date: date,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Profit and loss statement for an inclusive date range"""
    return financial_report_service.profit_and_loss(db, start_date, end_date)
