"""
Dispatch Service

A dispatch (delivery challan) can only be raised for a sale order that is
READY_FOR_DISPATCH, and only once per order. Raising it moves the order to
DISPATCHED; marking the dispatch DELIVERED closes the order as DELIVERED.
"""
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from app.core.status_config import (
    DispatchStatus,
    SaleOrderStatus,
    validate_dispatch_transition,
)
from app.db.session import transaction
from app.exceptions import ConflictError, InvalidStateError, NotFoundError
from app.logging_config import get_logger
from app.models.dispatch import Dispatch
from app.models.sales_order import SaleOrder
from app.schemas.dispatch import DispatchCreate
from app.services.sales_order_service import apply_status
from app.services.sequence_service import next_number

logger = get_logger(__name__)


def get_dispatch(db: Session, dispatch_id: int) -> Dispatch:
    dispatch = db.query(Dispatch).filter(Dispatch.id == dispatch_id).first()
    if not dispatch:
        raise NotFoundError("Dispatch", dispatch_id)
    return dispatch


def create_dispatch(db: Session, data: DispatchCreate, user_id: Optional[int] = None) -> Dispatch:
    """
    Raise a delivery challan for a sale order.

    Raises:
        NotFoundError: sale order does not exist
        ConflictError: the order already has a dispatch
        InvalidStateError: the order is not READY_FOR_DISPATCH
    """
    with transaction(db):
        order = (
            db.query(SaleOrder)
            .filter(SaleOrder.id == data.sale_order_id, SaleOrder.is_deleted.is_(False))
            .with_for_update()
            .populate_existing()
            .first()
        )
        if not order:
            raise NotFoundError("Sale order", data.sale_order_id)

        existing = db.query(Dispatch).filter(Dispatch.sale_order_id == order.id).first()
        if existing:
            raise ConflictError(
                f"Sale order {order.order_no} already has dispatch {existing.dc_number}",
                details={"sale_order_id": order.id, "dc_number": existing.dc_number},
            )

        if order.status != SaleOrderStatus.READY_FOR_DISPATCH:
            raise InvalidStateError(
                f"Sale order {order.order_no} is not ready for dispatch",
                current_state=order.status,
                allowed_states=[SaleOrderStatus.READY_FOR_DISPATCH.value],
            )

        dc_number = next_number(db, "DC")
        customer = order.customer
        dispatch = Dispatch(
            dc_number=dc_number,
            sale_order_id=order.id,
            customer_name=data.customer_name or customer.shop_name or customer.name,
            customer_address=data.customer_address or customer.address,
            customer_phone=data.customer_phone or customer.phone,
            items=[item.model_dump() for item in data.items],
            delivery_method=data.delivery_method,
            dispatch_date=data.dispatch_date or datetime.utcnow(),
            remarks=data.remarks,
            status=DispatchStatus.PENDING.value,
            created_by=user_id,
        )
        db.add(dispatch)
        db.flush()

        apply_status(db, order, SaleOrderStatus.DISPATCHED, user_id)

    db.refresh(dispatch)
    logger.info(
        f"Created dispatch {dispatch.dc_number} for SO {order.order_no}",
        extra={"dispatch_id": dispatch.id, "sale_order_id": order.id},
    )
    return dispatch


def list_dispatches(
    db: Session,
    *,
    status: Optional[str] = None,
    offset: int = 0,
    limit: int = 50,
) -> Tuple[List[Dispatch], int]:
    query = db.query(Dispatch)
    if status:
        query = query.filter(Dispatch.status == status)
    total = query.count()
    dispatches = query.order_by(Dispatch.created_at.desc(), Dispatch.id.desc()).offset(offset).limit(limit).all()
    return dispatches, total


def update_status(
    db: Session,
    dispatch_id: int,
    new_status: str,
    remarks: Optional[str] = None,
    user_id: Optional[int] = None,
) -> Dispatch:
    """
    Advance a dispatch one step. Delivery stamps delivered_at and closes the
    sale order.
    """
    with transaction(db):
        dispatch = (
            db.query(Dispatch)
            .filter(Dispatch.id == dispatch_id)
            .with_for_update()
            .populate_existing()
            .first()
        )
        if not dispatch:
            raise NotFoundError("Dispatch", dispatch_id)

        old_status = dispatch.status
        validate_dispatch_transition(old_status, new_status)

        dispatch.status = DispatchStatus(new_status).value
        if remarks is not None:
            dispatch.remarks = remarks
        dispatch.updated_at = datetime.utcnow()

        if new_status == DispatchStatus.DELIVERED:
            dispatch.delivered_at = datetime.utcnow()
            order = (
                db.query(SaleOrder)
                .filter(SaleOrder.id == dispatch.sale_order_id)
                .with_for_update()
                .populate_existing()
                .first()
            )
            if order.status != SaleOrderStatus.DELIVERED:
                apply_status(db, order, SaleOrderStatus.DELIVERED, user_id)

    db.refresh(dispatch)
    logger.info(f"DC {dispatch.dc_number} status: {old_status} -> {dispatch.status}", extra={"dispatch_id": dispatch.id})
    return dispatch
