#!/usr/bin/env python3
"""
LensFlow - Sample Data Seeder

Creates master data and a few orders so the order chain can be exercised
end to end from the API docs:
- Staff user (prints an access token)
- Customers and vendors
- Stock and prescription (Rx) lens variants
- One stock order (goes straight to IN_PRODUCTION) and one Rx order with
  its purchase order
- A couple of expenses

Usage:
  cd backend
  python scripts/seed_sample_data.py

Idempotent for master data; orders are only created on an empty database.
"""
import sys
import os
from decimal import Decimal

# Add project root to path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.core.config import settings
from app.core.security import create_access_token
from app.core.status_config import ExpenseType
from app.db.session import Database
from app.logging_config import setup_logging
from app.models import Customer, LensVariant, SaleOrder, User, Vendor
from app.schemas.expense import ExpenseCreate
from app.schemas.purchasing import PurchaseOrderCreate, PurchaseOrderItemCreate
from app.schemas.sales_order import SaleOrderCreate, SaleOrderItemCreate
from app.services import expense_service, purchase_order_service, sales_order_service

CUSTOMERS = [
    {"code": "CUST-001", "name": "Ravi Kumar", "shop_name": "Vision Plus Opticals",
     "phone": "9840012345", "address": "12 Anna Salai, Chennai"},
    {"code": "CUST-002", "name": "Meena Iyer", "shop_name": "Clear Sight",
     "phone": "9841198765", "address": "4 MG Road, Bengaluru"},
]

VENDORS = [
    {"code": "VND-001", "name": "Essilor Lens Lab", "phone": "04424567890"},
    {"code": "VND-002", "name": "Hoya Rx Services", "phone": "08022334455"},
]

VARIANTS = [
    {"sku": "SV-156-HC", "name": "Single Vision 1.56 Hard Coat", "price": Decimal("450.00"),
     "cost_price": Decimal("210.00"), "stock": 120, "min_stock": 20},
    {"sku": "SV-160-ARC", "name": "Single Vision 1.60 Anti-Reflective", "price": Decimal("1200.00"),
     "cost_price": Decimal("640.00"), "stock": 40, "min_stock": 10},
    {"sku": "BF-KT-156", "name": "Bifocal KT 1.56", "price": Decimal("900.00"),
     "cost_price": None, "stock": 5, "min_stock": 10},
    {"sku": "PAL-RX-167", "name": "Progressive 1.67 (Rx)", "price": Decimal("6500.00"),
     "cost_price": Decimal("3900.00"), "stock": 0, "min_stock": 0, "is_rx": True},
]


def _get_or_create(db, model, key, values):
    instance = db.query(model).filter(getattr(model, key) == values[key]).first()
    if instance:
        return instance, False
    instance = model(**values)
    db.add(instance)
    return instance, True


def create_sample_data():
    """Create master data, then sample orders if none exist"""
    setup_logging()
    database = Database(settings.database_url).open()
    database.create_all()
    db = database.session()

    try:
        print("Creating LensFlow sample data...")
        print("=" * 50)

        user, _ = _get_or_create(db, User, "email", {
            "email": "admin@lensflow.local", "full_name": "Store Admin", "role": "admin",
        })
        for values in CUSTOMERS:
            _get_or_create(db, Customer, "code", values)
        for values in VENDORS:
            _get_or_create(db, Vendor, "code", values)
        for values in VARIANTS:
            _get_or_create(db, LensVariant, "sku", values)
        db.commit()
        print(f"   • Customers: {len(CUSTOMERS)}")
        print(f"   • Vendors: {len(VENDORS)}")
        print(f"   • Lens variants: {len(VARIANTS)}")

        if db.query(SaleOrder).count() == 0:
            customer = db.query(Customer).filter(Customer.code == "CUST-001").one()
            vendor = db.query(Vendor).filter(Vendor.code == "VND-002").one()
            stock_lens = db.query(LensVariant).filter(LensVariant.sku == "SV-156-HC").one()
            rx_lens = db.query(LensVariant).filter(LensVariant.sku == "PAL-RX-167").one()

            stock_order = sales_order_service.create_sale_order(db, SaleOrderCreate(
                customer_id=customer.id,
                items=[SaleOrderItemCreate(lens_variant_id=stock_lens.id, quantity=2)],
            ), user.id)

            rx_order = sales_order_service.create_sale_order(db, SaleOrderCreate(
                customer_id=customer.id,
                right_eye=True, left_eye=True,
                right_spherical="-1.25", left_spherical="-1.50", right_add="+2.00", left_add="+2.00",
                items=[SaleOrderItemCreate(lens_variant_id=rx_lens.id, quantity=1, discount=Decimal("10"))],
            ), user.id)

            po = purchase_order_service.create_purchase_order(db, PurchaseOrderCreate(
                vendor_id=vendor.id,
                sale_order_id=rx_order.id,
                items=[PurchaseOrderItemCreate(lens_variant_id=rx_lens.id, quantity=1, price=rx_lens.cost_price)],
            ), user.id)

            for description, amount, kind in (
                ("Courier charges", Decimal("850.00"), ExpenseType.DIRECT),
                ("Shop rent", Decimal("25000.00"), ExpenseType.INDIRECT),
            ):
                expense_service.create_expense(db, ExpenseCreate(
                    description=description, amount=amount, type=kind,
                ), user.id)

            print(f"   • Sale orders: {stock_order.order_no} ({stock_order.status}), "
                  f"{rx_order.order_no} ({rx_order.status})")
            print(f"   • Purchase order: {po.po_number} for {rx_order.order_no}")
            print("   • Expenses: 2")

        print("\nAccess token for the API docs (Authorize button):")
        print(f"   {create_access_token(user.id)}")

    except Exception as e:
        print(f"\nError creating sample data: {e}")
        db.rollback()
        raise
    finally:
        db.close()
        database.close()


if __name__ == "__main__":
    create_sample_data()
