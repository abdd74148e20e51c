"""
Sale Order Endpoints

Order entry and lifecycle: create (with stock deduction for stock lenses),
status changes, courier assignment and soft delete.
"""
from datetime import date
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.v1.deps import get_current_user, get_pagination_params
from app.core.status_config import SaleOrderStatus
from app.db.session import get_db
from app.logging_config import get_logger
from app.models.user import User
from app.schemas.common import ListResponse, MessageResponse, PaginationMeta, PaginationParams
from app.schemas.sales_order import (
    SaleOrderCreate,
    SaleOrderDispatchUpdate,
    SaleOrderListResponse,
    SaleOrderResponse,
    SaleOrderStatistics,
    SaleOrderStatusUpdate,
    SaleOrderUpdate,
)
from app.services import sales_order_service

router = APIRouter()
logger = get_logger(__name__)


@router.post("/", response_model=SaleOrderResponse, status_code=status.HTTP_201_CREATED)
async def create_sale_order(
    request: SaleOrderCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Create a sale order.

    - Orders with any prescription (Rx) line start CONFIRMED and wait for a purchase order
    - Stock-only orders start IN_PRODUCTION and deduct stock immediately
    - **draft**: save as DRAFT without touching stock
    """
    return sales_order_service.create_sale_order(db, request, current_user.id)


@router.get("/", response_model=ListResponse[SaleOrderListResponse])
async def list_sale_orders(
    pagination: Annotated[PaginationParams, Depends(get_pagination_params)],
    status_filter: Optional[SaleOrderStatus] = Query(None, alias="status"),
    customer_id: Optional[int] = None,
    search: Optional[str] = Query(None, description="Order no, customer ref or item ref"),
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """List sale orders, newest first. Deleted orders are never returned."""
    orders, total = sales_order_service.list_sale_orders(
        db,
        status=status_filter.value if status_filter else None,
        customer_id=customer_id,
        search=search,
        start_date=start_date,
        end_date=end_date,
        offset=pagination.offset,
        limit=pagination.limit,
    )
    return ListResponse(
        items=[SaleOrderListResponse.model_validate(o) for o in orders],
        pagination=PaginationMeta(
            total=total,
            offset=pagination.offset,
            limit=pagination.limit,
            returned=len(orders),
        ),
    )


@router.get("/stats", response_model=SaleOrderStatistics)
async def get_sale_order_statistics(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Order counts by status and dispatch status, plus total value"""
    return sales_order_service.get_statistics(db, start_date, end_date)


@router.get("/{order_id}", response_model=SaleOrderResponse)
async def get_sale_order(
    order_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return sales_order_service.get_sale_order(db, order_id)


@router.put("/{order_id}", response_model=SaleOrderResponse)
async def update_sale_order(
    order_id: int,
    request: SaleOrderUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Update order header. Items can only be replaced while the order is a DRAFT."""
    return sales_order_service.update_sale_order(db, order_id, request, current_user.id)


@router.patch("/{order_id}/status", response_model=SaleOrderResponse)
async def update_sale_order_status(
    order_id: int,
    request: SaleOrderStatusUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Move an order one step forward.

    DRAFT → CONFIRMED → IN_PRODUCTION → READY_FOR_DISPATCH. DISPATCHED and
    DELIVERED are set by the dispatch endpoints.
    """
    return sales_order_service.update_status(db, order_id, request.status.value, current_user.id)


@router.patch("/{order_id}/dispatch", response_model=SaleOrderResponse)
async def update_sale_order_dispatch(
    order_id: int,
    request: SaleOrderDispatchUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Update courier assignment and delivery estimate"""
    return sales_order_service.update_dispatch_info(db, order_id, request, current_user.id)


@router.delete("/{order_id}", response_model=MessageResponse)
async def delete_sale_order(
    order_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Soft delete a DRAFT or CONFIRMED order with nothing attached to it"""
    order = sales_order_service.delete_sale_order(db, order_id, current_user.id)
    return MessageResponse(message=f"Sale order {order.order_no} deleted")
