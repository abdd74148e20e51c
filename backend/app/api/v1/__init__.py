"""
API v1 Router - LensFlow ERP
"""
from fastapi import APIRouter
from app.api.v1.endpoints import (
    sale_orders,
    purchase_orders,
    dispatches,
    invoices,
    expenses,
    financial_reports,
    inventory,
)

router = APIRouter()

# Sale Orders
router.include_router(
    sale_orders.router,
    prefix="/sale-orders",
    tags=["sale-orders"]
)

# Purchase Orders
router.include_router(
    purchase_orders.router,
    prefix="/purchase-orders",
    tags=["purchasing"]
)

# Dispatch (delivery challans)
router.include_router(
    dispatches.router,
    prefix="/dispatches",
    tags=["dispatch"]
)

# Invoices & Payments
router.include_router(
    invoices.router,
    prefix="/invoices",
    tags=["invoices"]
)

# Expenses
router.include_router(
    expenses.router,
    prefix="/expenses",
    tags=["expenses"]
)

# Financial Reports
router.include_router(
    financial_reports.router,
    prefix="/financial-reports",
    tags=["reports"]
)

# Inventory
router.include_router(
    inventory.router,
    prefix="/inventory",
    tags=["inventory"]
)
