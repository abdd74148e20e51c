"""
Financial Report Schemas
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date
from decimal import Decimal


class ReportPeriod(BaseModel):
    year: int
    month: int


class MonthlyTotals(BaseModel):
    total_sales: Decimal
    total_payments_received: Decimal
    total_purchases: Decimal
    total_expenses: Decimal
    direct_expenses: Decimal
    indirect_expenses: Decimal
    net_gain: Decimal
    pending_payments: Decimal


class AgingSummary(BaseModel):
    """Outstanding balances bucketed by invoice age in days"""
    current: Decimal
    days_30: Decimal = Field(..., alias="30days")
    days_60: Decimal = Field(..., alias="60days")
    days_90: Decimal = Field(..., alias="90days")
    above_90: Decimal = Field(..., alias="above90")

    class Config:
        populate_by_name = True


class TrendPoint(BaseModel):
    month: str
    year: int
    sales: Decimal
    expenses: Decimal


class FinancialSummaryResponse(BaseModel):
    period: ReportPeriod
    summary: MonthlyTotals
    aging_summary: AgingSummary
    trends: List[TrendPoint]


class StatementLine(BaseModel):
    label: str
    amount: Decimal


class StatementSection(BaseModel):
    total: Decimal
    items: List[StatementLine]


class ProfitLossStatement(BaseModel):
    revenue: StatementSection
    direct_costs: StatementSection
    gross_profit: Decimal
    indirect_expenses: StatementSection
    net_profit: Decimal


class ProfitLossMetrics(BaseModel):
    gross_profit_margin: Optional[Decimal] = None
    net_profit_margin: Optional[Decimal] = None


class ProfitLossPeriod(BaseModel):
    start_date: date
    end_date: date


class ProfitLossResponse(BaseModel):
    period: ProfitLossPeriod
    statement: ProfitLossStatement
    metrics: ProfitLossMetrics
