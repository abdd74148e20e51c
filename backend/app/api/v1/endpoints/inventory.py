"""
Inventory Endpoints

Stock levels, availability checks and the movement ledger for lens variants.
"""
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.v1.deps import get_current_user
from app.db.session import get_db
from app.models.user import User
from app.schemas.inventory import (
    AvailabilityRequest,
    AvailabilityResponse,
    LensVariantStockResponse,
    StockMovementResponse,
)
from app.services import stock_ledger

router = APIRouter()


@router.get("/low-stock", response_model=List[LensVariantStockResponse])
async def list_low_stock(
    include_rx: bool = False,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Active variants at or below their minimum stock level"""
    return stock_ledger.low_stock_variants(db, include_rx=include_rx)


@router.post("/availability", response_model=AvailabilityResponse)
async def check_availability(
    request: AvailabilityRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Check whether the given lines could be filled from stock right now"""
    return stock_ledger.check_availability(db, [item.model_dump() for item in request.items])


@router.get("/variants/{variant_id}/movements", response_model=List[StockMovementResponse])
async def list_stock_movements(
    variant_id: int,
    limit: int = Query(100, ge=1, le=500),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return stock_ledger.movement_history(db, variant_id, limit=limit)
