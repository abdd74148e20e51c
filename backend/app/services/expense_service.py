"""
Expense Service
"""
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from app.core.status_config import ExpenseType
from app.db.session import transaction
from app.logging_config import get_logger
from app.models.expense import Expense
from app.schemas.expense import ExpenseCreate
from app.services.financial_report_service import month_window

logger = get_logger(__name__)

ZERO = Decimal("0.00")


def create_expense(db: Session, data: ExpenseCreate, user_id: Optional[int] = None) -> Expense:
    with transaction(db):
        expense = Expense(
            description=data.description,
            amount=data.amount,
            type=data.type.value,
            category=data.category,
            date=data.date or date.today(),
            created_by=user_id,
        )
        db.add(expense)

    db.refresh(expense)
    logger.info(
        f"Recorded {expense.type} expense of {expense.amount}",
        extra={"expense_id": expense.id, "date": expense.date},
    )
    return expense


def _totals(expenses: List[Expense]) -> Dict[str, Decimal]:
    totals = {"total": ZERO, "direct": ZERO, "indirect": ZERO}
    for expense in expenses:
        totals["total"] += expense.amount
        if expense.type == ExpenseType.DIRECT:
            totals["direct"] += expense.amount
        else:
            totals["indirect"] += expense.amount
    return totals


def list_expenses(
    db: Session,
    *,
    type: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> Dict:
    """Expenses newest first, with total / direct / indirect sums. Dates are inclusive."""
    query = db.query(Expense)
    if type:
        query = query.filter(Expense.type == type)
    if start_date:
        query = query.filter(Expense.date >= start_date)
    if end_date:
        query = query.filter(Expense.date <= end_date)

    expenses = query.order_by(Expense.date.desc(), Expense.id.desc()).all()
    return {"expenses": expenses, "totals": _totals(expenses)}


def monthly_summary(db: Session, year: int, month: int) -> Dict:
    """Expenses of one calendar month grouped by type."""
    start, end = month_window(year, month)
    expenses = (
        db.query(Expense)
        .filter(Expense.date >= start.date(), Expense.date < end.date())
        .order_by(Expense.date.asc(), Expense.id.asc())
        .all()
    )

    summary: Dict[str, Dict] = {}
    for expense in expenses:
        group = summary.setdefault(expense.type, {"count": 0, "total": ZERO, "items": []})
        group["count"] += 1
        group["total"] += expense.amount
        group["items"].append(expense)

    return {
        "year": year,
        "month": month,
        "summary": summary,
        "total_expense": sum((e.amount for e in expenses), ZERO),
    }
