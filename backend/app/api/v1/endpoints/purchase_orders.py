"""
Purchase Order Endpoints
"""
from datetime import date
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.api.v1.deps import get_current_user, get_pagination_params
from app.core.status_config import PurchaseOrderStatus
from app.db.session import get_db
from app.logging_config import get_logger
from app.models.user import User
from app.schemas.common import ListResponse, PaginationMeta, PaginationParams
from app.schemas.purchasing import (
    PurchaseOrderCreate,
    PurchaseOrderListResponse,
    PurchaseOrderResponse,
    PurchaseOrderStatusUpdate,
    ReorderRequest,
)
from app.services import purchase_order_service

router = APIRouter()
logger = get_logger(__name__)


@router.post("/", response_model=PurchaseOrderResponse, status_code=status.HTTP_201_CREATED)
async def create_purchase_order(
    request: PurchaseOrderCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create a PENDING purchase order, optionally for a sale order waiting on Rx lenses"""
    return purchase_order_service.create_purchase_order(db, request, current_user.id)


@router.get("/", response_model=ListResponse[PurchaseOrderListResponse])
async def list_purchase_orders(
    pagination: Annotated[PaginationParams, Depends(get_pagination_params)],
    status_filter: Optional[PurchaseOrderStatus] = Query(None, alias="status"),
    vendor_id: Optional[int] = None,
    from_date: Optional[date] = None,
    to_date: Optional[date] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    List purchase orders

    - **status**: PENDING, ORDERED, RECEIVED, CANCELLED
    - **from_date** / **to_date**: inclusive range on creation date
    """
    pos, total = purchase_order_service.list_purchase_orders(
        db,
        status=status_filter.value if status_filter else None,
        vendor_id=vendor_id,
        from_date=from_date,
        to_date=to_date,
        offset=pagination.offset,
        limit=pagination.limit,
    )
    return ListResponse(
        items=[PurchaseOrderListResponse.model_validate(po) for po in pos],
        pagination=PaginationMeta(
            total=total,
            offset=pagination.offset,
            limit=pagination.limit,
            returned=len(pos),
        ),
    )


@router.post("/reorder", response_model=Optional[PurchaseOrderResponse])
async def reorder_low_stock(
    request: ReorderRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Raise one purchase order covering every low-stock lens variant.

    Returns 204 when nothing is below its minimum.
    """
    po = purchase_order_service.create_reorder_purchase_order(db, request.vendor_id, current_user.id)
    if po is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return po


@router.get("/{po_id}", response_model=PurchaseOrderResponse)
async def get_purchase_order(
    po_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return purchase_order_service.get_purchase_order(db, po_id)


@router.patch("/{po_id}/status", response_model=PurchaseOrderResponse)
async def update_purchase_order_status(
    po_id: int,
    request: PurchaseOrderStatusUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Update PO status.

    Receiving adds every line to stock and releases a linked CONFIRMED sale
    order to production.
    """
    return purchase_order_service.update_status(db, po_id, request.status.value, current_user.id)
