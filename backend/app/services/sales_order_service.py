"""
Sale Order Service

Creation, status workflow, dispatch-info updates, soft delete and
statistics for sale orders.

Stock rules:
- An order containing any prescription (Rx) line starts CONFIRMED and takes
  no stock; it waits for a purchase order to be received.
- Otherwise the order starts IN_PRODUCTION and every line is taken from
  stock in the same transaction. If any line is short, nothing is saved.
- Moving an order into IN_PRODUCTION later takes stock for every non-Rx
  line that has not been deducted yet, so a line is never deducted twice.
"""
from datetime import date, datetime, time, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from app.core.status_config import (
    SALE_ORDER_DELETABLE_STATUSES,
    SaleOrderStatus,
    validate_manual_sale_order_transition,
    validate_sale_order_transition,
)
from app.db.session import transaction
from app.exceptions import InvalidStateError, InvalidVariantError, NotFoundError
from app.logging_config import get_logger
from app.models.customer import Customer
from app.models.lens import LensVariant
from app.models.sales_order import SaleOrder, SaleOrderItem
from app.schemas.sales_order import (
    SaleOrderCreate,
    SaleOrderDispatchUpdate,
    SaleOrderItemCreate,
    SaleOrderUpdate,
)
from app.services import stock_ledger
from app.services.sequence_service import next_number

logger = get_logger(__name__)

MONEY = Decimal("0.01")

# Header columns copied straight from the create/update payloads
HEADER_FIELDS = (
    "customer_ref_no",
    "order_date",
    "order_type",
    "delivery_schedule",
    "remark",
    "item_ref_no",
    "free_lens",
    "urgent_order",
    "free_fitting",
    "right_eye",
    "left_eye",
    "right_spherical",
    "right_cylindrical",
    "right_axis",
    "right_add",
    "right_dia",
    "left_spherical",
    "left_cylindrical",
    "left_axis",
    "left_add",
    "left_dia",
    "lens_price",
    "fitting_price",
    "discount",
)

# Flags and prices cannot be cleared, only changed
NOT_NULL_HEADER_FIELDS = {
    "free_lens",
    "urgent_order",
    "free_fitting",
    "right_eye",
    "left_eye",
    "lens_price",
    "fitting_price",
    "discount",
}

DISPATCH_FIELDS = (
    "dispatch_status",
    "assigned_person_id",
    "dispatch_reference",
    "estimated_date",
    "estimated_time",
    "actual_date",
    "actual_time",
    "dispatch_notes",
)

# Timestamp stamped when an order enters each status
STATUS_TIMESTAMPS = {
    SaleOrderStatus.CONFIRMED: "confirmed_at",
    SaleOrderStatus.IN_PRODUCTION: "production_started_at",
    SaleOrderStatus.READY_FOR_DISPATCH: "ready_at",
    SaleOrderStatus.DISPATCHED: "dispatched_at",
    SaleOrderStatus.DELIVERED: "delivered_at",
}


# =============================================================================
# Pricing
# =============================================================================

def to_money(value) -> Decimal:
    return Decimal(value).quantize(MONEY, rounding=ROUND_HALF_UP)


def line_amounts(price, quantity: int, discount_percent) -> Tuple[Decimal, Decimal]:
    """
    Return (effective_price, line_total) for a line.

    effective_price = price x (1 - discount/100)
    line_total      = price x quantity x (1 - discount/100)
    """
    factor = Decimal(1) - Decimal(discount_percent or 0) / Decimal(100)
    effective = Decimal(price) * factor
    return to_money(effective), to_money(effective * quantity)


# =============================================================================
# Lookups
# =============================================================================

def get_customer(db: Session, customer_id: int) -> Customer:
    customer = (
        db.query(Customer)
        .filter(Customer.id == customer_id, Customer.is_deleted.is_(False))
        .first()
    )
    if not customer:
        raise NotFoundError("Customer", customer_id)
    return customer


def resolve_variants(db: Session, variant_ids: Iterable[int]) -> Dict[int, LensVariant]:
    """Load active variants by id; any missing or inactive id is an InvalidVariantError."""
    wanted = set(variant_ids)
    variants = {
        v.id: v
        for v in db.query(LensVariant)
        .filter(LensVariant.id.in_(wanted), LensVariant.is_active.is_(True))
        .all()
    }
    missing = wanted - set(variants)
    if missing:
        raise InvalidVariantError(list(missing))
    return variants


def get_sale_order(db: Session, order_id: int) -> SaleOrder:
    order = (
        db.query(SaleOrder)
        .filter(SaleOrder.id == order_id, SaleOrder.is_deleted.is_(False))
        .first()
    )
    if not order:
        raise NotFoundError("Sale order", order_id)
    return order


def _lock_sale_order(db: Session, order_id: int) -> SaleOrder:
    order = (
        db.query(SaleOrder)
        .filter(SaleOrder.id == order_id, SaleOrder.is_deleted.is_(False))
        .with_for_update()
        .populate_existing()
        .first()
    )
    if not order:
        raise NotFoundError("Sale order", order_id)
    return order


# =============================================================================
# Internal helpers
# =============================================================================

def _build_items(
    order: SaleOrder,
    items: List[SaleOrderItemCreate],
    variants: Dict[int, LensVariant],
) -> None:
    for item in items:
        variant = variants[item.lens_variant_id]
        price = item.price if item.price is not None else variant.price
        effective_price, line_total = line_amounts(price, item.quantity, item.discount)
        order.items.append(
            SaleOrderItem(
                lens_variant_id=variant.id,
                quantity=item.quantity,
                price=to_money(price),
                discount=item.discount,
                effective_price=effective_price,
                line_total=line_total,
                is_rx=variant.is_rx,
            )
        )


def _deduct_stock(db: Session, order: SaleOrder, user_id: Optional[int]) -> None:
    """Take stock for every non-Rx line not yet deducted."""
    for item in order.items:
        if item.is_rx or item.stock_deducted:
            continue
        stock_ledger.decrement(
            db,
            item.lens_variant_id,
            item.quantity,
            reference_type="sale_order",
            reference_id=order.id,
            user_id=user_id,
        )
        item.stock_deducted = True


def apply_status(
    db: Session,
    order: SaleOrder,
    new_status: str,
    user_id: Optional[int] = None,
) -> SaleOrder:
    """
    Move an order to a new status inside the caller's transaction.

    Entering IN_PRODUCTION takes stock for outstanding non-Rx lines.
    """
    old_status = order.status
    validate_sale_order_transition(old_status, new_status)
    if old_status == new_status:
        return order

    if new_status == SaleOrderStatus.IN_PRODUCTION:
        _deduct_stock(db, order, user_id)

    order.status = SaleOrderStatus(new_status).value
    stamp = STATUS_TIMESTAMPS.get(new_status)
    if stamp:
        setattr(order, stamp, datetime.utcnow())
    order.updated_by = user_id or order.updated_by
    order.updated_at = datetime.utcnow()

    logger.info(
        f"SO {order.order_no}: {old_status} -> {order.status}",
        extra={"sale_order_id": order.id, "user_id": user_id},
    )
    return order


# =============================================================================
# Operations
# =============================================================================

def create_sale_order(db: Session, data: SaleOrderCreate, user_id: Optional[int] = None) -> SaleOrder:
    """
    Create a sale order and, for stock-only orders, deduct stock.

    Raises:
        NotFoundError: customer does not exist
        InvalidVariantError: unknown or inactive lens variant
        InsufficientStockError: a non-Rx line cannot be filled (nothing is saved)
    """
    with transaction(db):
        get_customer(db, data.customer_id)
        variants = resolve_variants(db, (item.lens_variant_id for item in data.items))

        has_rx = any(variants[item.lens_variant_id].is_rx for item in data.items)
        if data.draft:
            status = SaleOrderStatus.DRAFT
        elif has_rx:
            status = SaleOrderStatus.CONFIRMED
        else:
            status = SaleOrderStatus.IN_PRODUCTION

        # Allocate the number before anything is pending in the session
        order_no = next_number(db, "SO")

        order = SaleOrder(
            order_no=order_no,
            customer_id=data.customer_id,
            status=status.value,
            created_by=user_id,
            updated_by=user_id,
        )
        for field in HEADER_FIELDS:
            value = getattr(data, field)
            if value is not None:
                setattr(order, field, value)
        if order.order_date is None:
            order.order_date = date.today()

        now = datetime.utcnow()
        if status != SaleOrderStatus.DRAFT:
            order.confirmed_at = now
        if status == SaleOrderStatus.IN_PRODUCTION:
            order.production_started_at = now

        _build_items(order, data.items, variants)
        db.add(order)
        db.flush()

        if status == SaleOrderStatus.IN_PRODUCTION:
            _deduct_stock(db, order, user_id)

    db.refresh(order)
    logger.info(
        f"Created sale order {order.order_no} ({order.status})",
        extra={"sale_order_id": order.id, "customer_id": order.customer_id, "items": len(order.items)},
    )
    return order


def list_sale_orders(
    db: Session,
    *,
    status: Optional[str] = None,
    customer_id: Optional[int] = None,
    dispatch_status: Optional[str] = None,
    search: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    offset: int = 0,
    limit: int = 50,
) -> Tuple[List[SaleOrder], int]:
    query = db.query(SaleOrder).filter(SaleOrder.is_deleted.is_(False))

    if status:
        query = query.filter(SaleOrder.status == status)
    if customer_id:
        query = query.filter(SaleOrder.customer_id == customer_id)
    if dispatch_status:
        query = query.filter(SaleOrder.dispatch_status == dispatch_status)
    if search:
        pattern = f"%{search}%"
        query = query.filter(
            or_(
                SaleOrder.order_no.ilike(pattern),
                SaleOrder.customer_ref_no.ilike(pattern),
                SaleOrder.item_ref_no.ilike(pattern),
            )
        )
    if start_date:
        query = query.filter(SaleOrder.created_at >= datetime.combine(start_date, time.min))
    if end_date:
        query = query.filter(SaleOrder.created_at < datetime.combine(end_date + timedelta(days=1), time.min))

    total = query.count()
    orders = query.order_by(SaleOrder.created_at.desc(), SaleOrder.id.desc()).offset(offset).limit(limit).all()
    return orders, total


def update_sale_order(
    db: Session,
    order_id: int,
    data: SaleOrderUpdate,
    user_id: Optional[int] = None,
) -> SaleOrder:
    """
    Full header update. Line items may only be replaced while the order is
    still a DRAFT, because later statuses may already hold stock.
    """
    changes = data.model_dump(exclude_unset=True)

    with transaction(db):
        order = _lock_sale_order(db, order_id)

        if changes.get("customer_id") is not None and changes["customer_id"] != order.customer_id:
            get_customer(db, changes["customer_id"])
            order.customer_id = changes["customer_id"]

        for field in HEADER_FIELDS:
            if field not in changes:
                continue
            if changes[field] is None and field in NOT_NULL_HEADER_FIELDS:
                continue
            setattr(order, field, changes[field])

        if data.items is not None:
            if order.status != SaleOrderStatus.DRAFT:
                raise InvalidStateError(
                    f"Items of sale order {order.order_no} can only be changed while it is a draft",
                    current_state=order.status,
                    allowed_states=[SaleOrderStatus.DRAFT.value],
                )
            variants = resolve_variants(db, (item.lens_variant_id for item in data.items))
            order.items.clear()
            db.flush()
            _build_items(order, data.items, variants)

        order.updated_by = user_id
        order.updated_at = datetime.utcnow()

    db.refresh(order)
    logger.info(f"Updated sale order {order.order_no}", extra={"sale_order_id": order.id})
    return order


def update_status(
    db: Session,
    order_id: int,
    new_status: str,
    user_id: Optional[int] = None,
) -> SaleOrder:
    """
    Validate and apply a status change.

    Raises:
        InvalidStatusTransitionError: the move is not one step forward
            or targets DISPATCHED/DELIVERED, which belong to the dispatch workflow
        InsufficientStockError: entering IN_PRODUCTION without enough stock
    """
    with transaction(db):
        order = _lock_sale_order(db, order_id)
        validate_manual_sale_order_transition(order.status, new_status)
        apply_status(db, order, new_status, user_id)

    db.refresh(order)
    return order


def update_dispatch_info(
    db: Session,
    order_id: int,
    data: SaleOrderDispatchUpdate,
    user_id: Optional[int] = None,
) -> SaleOrder:
    """Update the courier assignment fields kept on the order header."""
    changes = data.model_dump(exclude_unset=True)

    with transaction(db):
        order = _lock_sale_order(db, order_id)
        for field in DISPATCH_FIELDS:
            if field in changes:
                value = changes[field]
                setattr(order, field, value.value if hasattr(value, "value") else value)
        order.updated_by = user_id
        order.updated_at = datetime.utcnow()

    db.refresh(order)
    logger.info(
        f"SO {order.order_no}: dispatch info updated ({order.dispatch_status})",
        extra={"sale_order_id": order.id},
    )
    return order


def delete_sale_order(db: Session, order_id: int, user_id: Optional[int] = None) -> SaleOrder:
    """
    Soft delete an order that has nothing attached to it yet.

    Only DRAFT and CONFIRMED orders without invoices, purchase orders or a
    dispatch can be deleted.
    """
    with transaction(db):
        order = _lock_sale_order(db, order_id)

        if order.status not in SALE_ORDER_DELETABLE_STATUSES:
            raise InvalidStateError(
                f"Sale order {order.order_no} cannot be deleted in status {order.status}",
                current_state=order.status,
                allowed_states=sorted(s.value for s in SALE_ORDER_DELETABLE_STATUSES),
            )
        if order.invoices:
            raise InvalidStateError(
                f"Sale order {order.order_no} is already invoiced",
                details={"invoices": [inv.invoice_no for inv in order.invoices]},
            )
        if order.purchase_orders:
            raise InvalidStateError(
                f"Sale order {order.order_no} has purchase orders",
                details={"purchase_orders": [po.po_number for po in order.purchase_orders]},
            )
        if order.dispatch is not None:
            raise InvalidStateError(
                f"Sale order {order.order_no} has already been dispatched",
                details={"dc_number": order.dispatch.dc_number},
            )

        order.is_deleted = True
        order.deleted_at = datetime.utcnow()
        order.updated_by = user_id

    logger.info(f"Deleted sale order {order.order_no}", extra={"sale_order_id": order.id, "user_id": user_id})
    return order


def get_statistics(
    db: Session,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> Dict:
    """Order counts by status and dispatch status, plus total order value."""
    base = db.query(SaleOrder).filter(SaleOrder.is_deleted.is_(False))
    if start_date:
        base = base.filter(SaleOrder.created_at >= datetime.combine(start_date, time.min))
    if end_date:
        base = base.filter(SaleOrder.created_at < datetime.combine(end_date + timedelta(days=1), time.min))

    by_status = {
        status: count
        for status, count in base.with_entities(SaleOrder.status, func.count(SaleOrder.id))
        .group_by(SaleOrder.status)
        .all()
    }
    by_dispatch_status = {
        status or "Pending": count
        for status, count in base.with_entities(SaleOrder.dispatch_status, func.count(SaleOrder.id))
        .group_by(SaleOrder.dispatch_status)
        .all()
    }
    total_value = (
        base.join(SaleOrder.items)
        .with_entities(func.coalesce(func.sum(SaleOrderItem.line_total), 0))
        .scalar()
    )

    return {
        "total_orders": sum(by_status.values()),
        "by_status": {s.value: by_status.get(s.value, 0) for s in SaleOrderStatus},
        "by_dispatch_status": by_dispatch_status,
        "total_value": to_money(total_value or 0),
    }
