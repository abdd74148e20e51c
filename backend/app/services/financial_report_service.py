"""
Financial Report Service

Read-only aggregation over invoices, payments, purchase orders and
expenses. Nothing here writes to the database.

Monthly windows are half-open: [first day of month, first day of next
month). Invoices and purchase orders are assigned to a window by
created_at, expenses by their date.
"""
import calendar
from datetime import date, datetime, time, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional, Tuple

from sqlalchemy.orm import Session, selectinload

from app.core.status_config import ExpenseType, PurchaseOrderStatus
from app.exceptions import ValidationError
from app.logging_config import get_logger
from app.models.expense import Expense
from app.models.invoice import Invoice
from app.models.purchase_order import PurchaseOrder

logger = get_logger(__name__)

ZERO = Decimal("0.00")
MONEY = Decimal("0.01")

TREND_MONTHS = 6

# (upper bound in days, bucket); anything older lands in "above90"
AGING_BUCKETS = [
    (30, "current"),
    (60, "30days"),
    (90, "60days"),
    (120, "90days"),
]


def month_window(year: int, month: int) -> Tuple[datetime, datetime]:
    """Return [start, end) datetimes covering one calendar month."""
    if not 1 <= month <= 12:
        raise ValidationError("Month must be between 1 and 12", field="month", value=month)
    start = datetime(year, month, 1)
    if month == 12:
        end = datetime(year + 1, 1, 1)
    else:
        end = datetime(year, month + 1, 1)
    return start, end


def _shift_month(year: int, month: int, delta: int) -> Tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def _sum(values) -> Decimal:
    return sum((Decimal(v) for v in values), ZERO)


# =============================================================================
# Window queries
# =============================================================================

def _invoices_between(db: Session, start: datetime, end: datetime) -> List[Invoice]:
    return (
        db.query(Invoice)
        .options(selectinload(Invoice.payments))
        .filter(Invoice.created_at >= start, Invoice.created_at < end)
        .all()
    )


def _purchases_between(db: Session, start: datetime, end: datetime) -> Decimal:
    pos = (
        db.query(PurchaseOrder.total_value)
        .filter(
            PurchaseOrder.created_at >= start,
            PurchaseOrder.created_at < end,
            PurchaseOrder.status != PurchaseOrderStatus.CANCELLED.value,
        )
        .all()
    )
    return _sum(row.total_value for row in pos)


def _expenses_between(db: Session, start: date, end: date) -> List[Expense]:
    """Expenses with start <= date < end"""
    return (
        db.query(Expense)
        .filter(Expense.date >= start, Expense.date < end)
        .order_by(Expense.date.asc(), Expense.id.asc())
        .all()
    )


# =============================================================================
# Aging
# =============================================================================

def aging_bucket(days: int) -> str:
    for limit, bucket in AGING_BUCKETS:
        if days <= limit:
            return bucket
    return "above90"


def aging_summary(db: Session, as_of: Optional[datetime] = None) -> Dict[str, Decimal]:
    """
    Outstanding balance of every unpaid invoice, bucketed by age.

    Age is whole days between the invoice's created_at and as_of.
    """
    as_of = as_of or datetime.utcnow()
    buckets = {bucket: ZERO for _, bucket in AGING_BUCKETS}
    buckets["above90"] = ZERO

    invoices = db.query(Invoice).options(selectinload(Invoice.payments)).all()
    for invoice in invoices:
        pending = invoice.balance
        if pending <= 0:
            continue
        days = (as_of - invoice.created_at).days
        buckets[aging_bucket(days)] += pending

    return buckets


# =============================================================================
# Reports
# =============================================================================

def monthly_trend(db: Session, year: int, month: int) -> List[Dict]:
    """Sales and expenses for the given month and the five before it, oldest first."""
    points = []
    for delta in range(-(TREND_MONTHS - 1), 1):
        y, m = _shift_month(year, month, delta)
        start, end = month_window(y, m)
        invoices = _invoices_between(db, start, end)
        expenses = _expenses_between(db, start.date(), end.date())
        points.append({
            "month": calendar.month_abbr[m],
            "year": y,
            "sales": _sum(inv.total_amount for inv in invoices),
            "expenses": _sum(e.amount for e in expenses),
        })
    return points


def monthly_summary(
    db: Session,
    year: int,
    month: int,
    as_of: Optional[datetime] = None,
) -> Dict:
    """
    Sales, receipts, purchases and expenses for one month, with the
    receivables aging and a six-month trend.
    """
    start, end = month_window(year, month)

    invoices = _invoices_between(db, start, end)
    total_sales = _sum(inv.total_amount for inv in invoices)
    total_received = _sum(inv.total_paid for inv in invoices)
    total_purchases = _purchases_between(db, start, end)

    expenses = _expenses_between(db, start.date(), end.date())
    direct = _sum(e.amount for e in expenses if e.type == ExpenseType.DIRECT)
    indirect = _sum(e.amount for e in expenses if e.type == ExpenseType.INDIRECT)
    total_expenses = direct + indirect

    logger.debug(
        f"Financial summary {year}-{month:02d}: {len(invoices)} invoices, {len(expenses)} expenses"
    )

    return {
        "period": {"year": year, "month": month},
        "summary": {
            "total_sales": total_sales,
            "total_payments_received": total_received,
            "total_purchases": total_purchases,
            "total_expenses": total_expenses,
            "direct_expenses": direct,
            "indirect_expenses": indirect,
            "net_gain": total_sales - (total_purchases + total_expenses),
            "pending_payments": total_sales - total_received,
        },
        "aging_summary": aging_summary(db, as_of),
        "trends": monthly_trend(db, year, month),
    }


def _margin(profit: Decimal, revenue: Decimal) -> Optional[Decimal]:
    if revenue == 0:
        return None
    return (profit / revenue * 100).quantize(MONEY, rounding=ROUND_HALF_UP)


def profit_and_loss(db: Session, start_date: date, end_date: date) -> Dict:
    """
    Profit and loss statement for an inclusive date range.

    Purchases and DIRECT expenses are direct costs; INDIRECT expenses are
    listed individually below gross profit.
    """
    if start_date > end_date:
        raise ValidationError(
            "start_date must be on or before end_date",
            field="start_date",
            value=str(start_date),
        )

    start = datetime.combine(start_date, time.min)
    end = datetime.combine(end_date + timedelta(days=1), time.min)

    invoices = _invoices_between(db, start, end)
    revenue = _sum(inv.total_amount for inv in invoices)
    purchases = _purchases_between(db, start, end)

    expenses = _expenses_between(db, start_date, end_date + timedelta(days=1))
    direct_items = [e for e in expenses if e.type == ExpenseType.DIRECT]
    indirect_items = [e for e in expenses if e.type == ExpenseType.INDIRECT]
    direct_total = _sum(e.amount for e in direct_items)
    indirect_total = _sum(e.amount for e in indirect_items)

    gross_profit = revenue - (purchases + direct_total)
    net_profit = gross_profit - indirect_total

    return {
        "period": {"start_date": start_date, "end_date": end_date},
        "statement": {
            "revenue": {
                "total": revenue,
                "items": [{"label": "Sales", "amount": revenue}],
            },
            "direct_costs": {
                "total": purchases + direct_total,
                "items": [
                    {"label": "Purchases", "amount": purchases},
                    {"label": "Direct Expenses", "amount": direct_total},
                ],
            },
            "gross_profit": gross_profit,
            "indirect_expenses": {
                "total": indirect_total,
                "items": [{"label": e.description, "amount": e.amount} for e in indirect_items],
            },
            "net_profit": net_profit,
        },
        "metrics": {
            "gross_profit_margin": _margin(gross_profit, revenue),
            "net_profit_margin": _margin(net_profit, revenue),
        },
    }
