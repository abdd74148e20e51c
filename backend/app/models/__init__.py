"""Database models"""
from app.models.user import User
from app.models.customer import Customer
from app.models.vendor import Vendor
from app.models.lens import LensVariant
from app.models.inventory import StockMovement
from app.models.sales_order import SaleOrder, SaleOrderItem
from app.models.purchase_order import PurchaseOrder, PurchaseOrderItem
from app.models.dispatch import Dispatch
from app.models.invoice import Invoice, invoice_sale_orders
from app.models.payment import Payment
from app.models.expense import Expense
from app.models.sequence import SequenceCounter

__all__ = [
    # Users
    "User",
    # Masters
    "Customer",
    "Vendor",
    "LensVariant",
    # Inventory
    "StockMovement",
    # Sales
    "SaleOrder",
    "SaleOrderItem",
    "Dispatch",
    # Purchasing
    "PurchaseOrder",
    "PurchaseOrderItem",
    # Billing
    "Invoice",
    "invoice_sale_orders",
    "Payment",
    # Finance
    "Expense",
    # Numbering
    "SequenceCounter",
]
