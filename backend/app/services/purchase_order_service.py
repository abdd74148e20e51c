"""
Purchase Order Service

Procurement workflow: PENDING -> ORDERED -> RECEIVED, with CANCELLED
reachable from either open status.

Receiving a PO is one transaction: the PO is marked RECEIVED, every line's
quantity is added to stock, and a linked sale order waiting in CONFIRMED is
moved to IN_PRODUCTION.
"""
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.status_config import (
    PurchaseOrderStatus,
    SaleOrderStatus,
    validate_purchase_order_transition,
)
from app.db.session import transaction
from app.exceptions import NotFoundError, ValidationError
from app.logging_config import get_logger
from app.models.purchase_order import PurchaseOrder, PurchaseOrderItem
from app.models.sales_order import SaleOrder
from app.models.vendor import Vendor
from app.schemas.purchasing import PurchaseOrderCreate, PurchaseOrderItemCreate
from app.services import stock_ledger
from app.services.sales_order_service import apply_status, resolve_variants, to_money
from app.services.sequence_service import next_number

logger = get_logger(__name__)

STATUS_TIMESTAMPS = {
    PurchaseOrderStatus.ORDERED: "ordered_at",
    PurchaseOrderStatus.RECEIVED: "received_at",
    PurchaseOrderStatus.CANCELLED: "cancelled_at",
}


def _get_vendor(db: Session, vendor_id: int) -> Vendor:
    vendor = db.query(Vendor).filter(Vendor.id == vendor_id).first()
    if not vendor:
        raise NotFoundError("Vendor", vendor_id)
    return vendor


def _calculate_totals(po: PurchaseOrder) -> None:
    """Recalculate PO total from lines"""
    po.total_value = to_money(sum((item.line_total for item in po.items), Decimal("0")))


def _add_items(po: PurchaseOrder, items: List[PurchaseOrderItemCreate]) -> None:
    for item in items:
        po.items.append(
            PurchaseOrderItem(
                lens_variant_id=item.lens_variant_id,
                quantity=item.quantity,
                price=to_money(item.price),
                line_total=to_money(Decimal(item.price) * item.quantity),
            )
        )


def get_purchase_order(db: Session, po_id: int) -> PurchaseOrder:
    po = db.query(PurchaseOrder).filter(PurchaseOrder.id == po_id).first()
    if not po:
        raise NotFoundError("Purchase order", po_id)
    return po


def create_purchase_order(
    db: Session,
    data: PurchaseOrderCreate,
    user_id: Optional[int] = None,
) -> PurchaseOrder:
    """
    Create a PENDING purchase order.

    Raises:
        NotFoundError: vendor or linked sale order does not exist
        InvalidVariantError: unknown or inactive lens variant
    """
    with transaction(db):
        _get_vendor(db, data.vendor_id)
        resolve_variants(db, (item.lens_variant_id for item in data.items))

        if data.sale_order_id is not None:
            linked = (
                db.query(SaleOrder.id)
                .filter(SaleOrder.id == data.sale_order_id, SaleOrder.is_deleted.is_(False))
                .first()
            )
            if not linked:
                raise NotFoundError("Sale order", data.sale_order_id)

        po_number = next_number(db, "PO")
        po = PurchaseOrder(
            po_number=po_number,
            vendor_id=data.vendor_id,
            sale_order_id=data.sale_order_id,
            status=PurchaseOrderStatus.PENDING.value,
            notes=data.notes,
            created_by=user_id,
            updated_by=user_id,
        )
        _add_items(po, data.items)
        _calculate_totals(po)
        db.add(po)

    db.refresh(po)
    logger.info(
        f"Created purchase order {po.po_number}",
        extra={"purchase_order_id": po.id, "vendor_id": po.vendor_id, "total_value": po.total_value},
    )
    return po


def list_purchase_orders(
    db: Session,
    *,
    status: Optional[str] = None,
    vendor_id: Optional[int] = None,
    from_date: Optional[date] = None,
    to_date: Optional[date] = None,
    offset: int = 0,
    limit: int = 50,
) -> Tuple[List[PurchaseOrder], int]:
    query = db.query(PurchaseOrder)

    if status:
        query = query.filter(PurchaseOrder.status == status)
    if vendor_id:
        query = query.filter(PurchaseOrder.vendor_id == vendor_id)
    if from_date:
        query = query.filter(PurchaseOrder.created_at >= datetime.combine(from_date, time.min))
    if to_date:
        query = query.filter(PurchaseOrder.created_at < datetime.combine(to_date + timedelta(days=1), time.min))

    total = query.count()
    pos = query.order_by(PurchaseOrder.created_at.desc(), PurchaseOrder.id.desc()).offset(offset).limit(limit).all()
    return pos, total


def _receive(db: Session, po: PurchaseOrder, user_id: Optional[int]) -> None:
    """Add every line to stock and unblock a linked CONFIRMED sale order."""
    for item in po.items:
        stock_ledger.increment(
            db,
            item.lens_variant_id,
            item.quantity,
            reference_type="purchase_order",
            reference_id=po.id,
            user_id=user_id,
        )

    if po.sale_order_id is None:
        return

    sale_order = (
        db.query(SaleOrder)
        .filter(SaleOrder.id == po.sale_order_id)
        .with_for_update()
        .populate_existing()
        .first()
    )
    if sale_order and sale_order.status == SaleOrderStatus.CONFIRMED:
        # Rx lines are skipped; any stock lines on the order are taken now
        apply_status(db, sale_order, SaleOrderStatus.IN_PRODUCTION, user_id)
        logger.info(f"PO {po.po_number} received, released SO {sale_order.order_no} to production")


def update_status(
    db: Session,
    po_id: int,
    new_status: str,
    user_id: Optional[int] = None,
) -> PurchaseOrder:
    """
    Move a purchase order along its workflow.

    Raises:
        InvalidStatusTransitionError: move not in the transition table
        InsufficientStockError: receipt releases a sale order whose stock lines
            cannot be filled (nothing is saved)
    """
    with transaction(db):
        po = (
            db.query(PurchaseOrder)
            .filter(PurchaseOrder.id == po_id)
            .with_for_update()
            .populate_existing()
            .first()
        )
        if not po:
            raise NotFoundError("Purchase order", po_id)

        old_status = po.status
        validate_purchase_order_transition(old_status, new_status)

        po.status = PurchaseOrderStatus(new_status).value
        setattr(po, STATUS_TIMESTAMPS[new_status], datetime.utcnow())
        po.updated_by = user_id
        po.updated_at = datetime.utcnow()

        if new_status == PurchaseOrderStatus.RECEIVED:
            _receive(db, po, user_id)

    db.refresh(po)
    logger.info(f"PO {po.po_number} status: {old_status} -> {po.status}", extra={"purchase_order_id": po.id})
    return po


def create_reorder_purchase_order(
    db: Session,
    vendor_id: Optional[int] = None,
    user_id: Optional[int] = None,
) -> Optional[PurchaseOrder]:
    """
    Raise one PENDING PO covering every low-stock, non-Rx variant.

    Each line tops the variant up to min_stock x REORDER_TARGET_MULTIPLIER,
    priced at cost_price, or selling price x REORDER_COST_RATIO when no cost
    is known. Returns None when nothing needs reordering.
    """
    low = [v for v in stock_ledger.low_stock_variants(db) if v.min_stock > 0]
    if not low:
        logger.info("Auto reorder: no low-stock variants")
        return None

    if vendor_id is None:
        vendor = db.query(Vendor).filter(Vendor.is_active.is_(True)).order_by(Vendor.id).first()
        if not vendor:
            raise ValidationError("No active vendor available for reorder", field="vendor_id")
        vendor_id = vendor.id

    items = []
    for variant in low:
        quantity = variant.min_stock * settings.REORDER_TARGET_MULTIPLIER - variant.stock
        if quantity <= 0:
            continue
        price = variant.cost_price
        if price is None:
            price = Decimal(variant.price) * settings.reorder_cost_ratio
        items.append(PurchaseOrderItemCreate(lens_variant_id=variant.id, quantity=quantity, price=to_money(price)))

    if not items:
        return None

    data = PurchaseOrderCreate(
        vendor_id=vendor_id,
        items=items,
        notes=f"Auto reorder for {len(items)} low-stock variant(s)",
    )
    return create_purchase_order(db, data, user_id)
