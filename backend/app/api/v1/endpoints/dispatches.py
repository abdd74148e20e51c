"""
Dispatch Endpoints

Delivery challans: one per sale order, PENDING → IN_TRANSIT → DELIVERED.
"""
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.v1.deps import get_current_user, get_pagination_params
from app.core.status_config import DispatchStatus
from app.db.session import get_db
from app.models.user import User
from app.schemas.common import ListResponse, PaginationMeta, PaginationParams
from app.schemas.dispatch import DispatchCreate, DispatchResponse, DispatchStatusUpdate
from app.services import dispatch_service

router = APIRouter()


@router.post("/", response_model=DispatchResponse, status_code=status.HTTP_201_CREATED)
async def create_dispatch(
    request: DispatchCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Issue a delivery challan for an order that is READY_FOR_DISPATCH.

    The order moves to DISPATCHED. A second challan for the same order is
    rejected with 409.
    """
    return dispatch_service.create_dispatch(db, request, current_user.id)


@router.get("/", response_model=ListResponse[DispatchResponse])
async def list_dispatches(
    pagination: Annotated[PaginationParams, Depends(get_pagination_params)],
    status_filter: Optional[DispatchStatus] = Query(None, alias="status"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    dispatches, total = dispatch_service.list_dispatches(
        db,
        status=status_filter.value if status_filter else None,
        offset=pagination.offset,
        limit=pagination.limit,
    )
    return ListResponse(
        items=[DispatchResponse.model_validate(d) for d in dispatches],
        pagination=PaginationMeta(
            total=total,
            offset=pagination.offset,
            limit=pagination.limit,
            returned=len(dispatches),
        ),
    )


@router.get("/{dispatch_id}", response_model=DispatchResponse)
async def get_dispatch(
    dispatch_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return dispatch_service.get_dispatch(db, dispatch_id)


@router.patch("/{dispatch_id}/status", response_model=DispatchResponse)
async def update_dispatch_status(
    dispatch_id: int,
    request: DispatchStatusUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Advance the challan; DELIVERED also closes the sale order"""
    return dispatch_service.update_status(
        db, dispatch_id, request.status.value, request.remarks, current_user.id
    )
