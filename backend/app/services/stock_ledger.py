"""
Stock Ledger

Every change to a lens variant's on-hand stock goes through decrement() or
increment(). Both lock the variant row, write a StockMovement and flush,
but neither commits: they are composed into the caller's transaction
together with the status change that triggered them.

Prescription (Rx) variants are made to order and never held in stock, so
decrement() leaves them untouched.
"""
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from app.core.status_config import StockMovementType
from app.exceptions import InsufficientStockError, NotFoundError, ValidationError
from app.logging_config import get_logger
from app.models.inventory import StockMovement
from app.models.lens import LensVariant

logger = get_logger(__name__)


def _lock_variant(db: Session, variant_id: int) -> LensVariant:
    variant = (
        db.query(LensVariant)
        .filter(LensVariant.id == variant_id)
        .with_for_update()
        .populate_existing()
        .first()
    )
    if not variant:
        raise NotFoundError("Lens variant", variant_id)
    return variant


def _check_quantity(quantity: int) -> None:
    if quantity is None or quantity <= 0:
        raise ValidationError("Quantity must be greater than zero", field="quantity", value=quantity)


def decrement(
    db: Session,
    variant_id: int,
    quantity: int,
    *,
    reference_type: Optional[str] = None,
    reference_id: Optional[int] = None,
    user_id: Optional[int] = None,
) -> Optional[StockMovement]:
    """
    Take stock out for a sale.

    Returns the movement written, or None for prescription variants.

    Raises:
        NotFoundError: variant does not exist
        InsufficientStockError: stock < quantity
    """
    _check_quantity(quantity)
    variant = _lock_variant(db, variant_id)

    if variant.is_rx:
        logger.debug(f"Skipping stock check for Rx variant {variant.sku}")
        return None

    if variant.stock < quantity:
        raise InsufficientStockError(variant.name, requested=quantity, available=variant.stock)

    variant.stock -= quantity
    movement = StockMovement(
        lens_variant_id=variant.id,
        movement_type=StockMovementType.OUT.value,
        quantity=quantity,
        stock_after=variant.stock,
        reference_type=reference_type,
        reference_id=reference_id,
        created_by=user_id,
    )
    db.add(movement)
    db.flush()

    logger.info(
        f"Stock OUT {variant.sku}: -{quantity} -> {variant.stock}",
        extra={"lens_variant_id": variant.id, "reference_type": reference_type, "reference_id": reference_id},
    )
    return movement


def increment(
    db: Session,
    variant_id: int,
    quantity: int,
    *,
    reference_type: Optional[str] = None,
    reference_id: Optional[int] = None,
    user_id: Optional[int] = None,
) -> StockMovement:
    """Put stock in (purchase receipt). There is no upper bound."""
    _check_quantity(quantity)
    variant = _lock_variant(db, variant_id)

    variant.stock += quantity
    movement = StockMovement(
        lens_variant_id=variant.id,
        movement_type=StockMovementType.IN.value,
        quantity=quantity,
        stock_after=variant.stock,
        reference_type=reference_type,
        reference_id=reference_id,
        created_by=user_id,
    )
    db.add(movement)
    db.flush()

    logger.info(
        f"Stock IN {variant.sku}: +{quantity} -> {variant.stock}",
        extra={"lens_variant_id": variant.id, "reference_type": reference_type, "reference_id": reference_id},
    )
    return movement


# =============================================================================
# Read-side helpers
# =============================================================================

def check_availability(db: Session, items: List[Dict]) -> Dict:
    """
    Report whether each requested line can be filled from stock.

    items: [{"lens_variant_id": int, "quantity": int}, ...]
    """
    variant_ids = [item["lens_variant_id"] for item in items]
    variants = {
        v.id: v for v in db.query(LensVariant).filter(LensVariant.id.in_(variant_ids)).all()
    }

    results = []
    for item in items:
        variant = variants.get(item["lens_variant_id"])
        required = item["quantity"]

        if variant is None:
            results.append({
                "lens_variant_id": item["lens_variant_id"],
                "available": False,
                "current_stock": 0,
                "required": required,
                "message": "Lens variant not found",
            })
            continue

        if variant.is_rx:
            results.append({
                "lens_variant_id": variant.id,
                "available": False,
                "current_stock": variant.stock,
                "required": required,
                "message": "Requires purchase order",
            })
            continue

        in_stock = variant.stock >= required
        results.append({
            "lens_variant_id": variant.id,
            "available": in_stock,
            "current_stock": variant.stock,
            "required": required,
            "message": "In stock" if in_stock else "Insufficient stock",
        })

    return {
        "all_available": all(r["available"] for r in results),
        "items": results,
    }


def low_stock_variants(db: Session, include_rx: bool = False) -> List[LensVariant]:
    """Active variants at or below their minimum stock level."""
    query = db.query(LensVariant).filter(
        LensVariant.is_active.is_(True),
        LensVariant.stock <= LensVariant.min_stock,
    )
    if not include_rx:
        query = query.filter(LensVariant.is_rx.is_(False))
    return query.order_by(LensVariant.stock.asc(), LensVariant.sku.asc()).all()


def movement_history(db: Session, variant_id: int, limit: int = 100) -> List[StockMovement]:
    """Most recent stock movements for a variant."""
    if not db.query(LensVariant.id).filter(LensVariant.id == variant_id).first():
        raise NotFoundError("Lens variant", variant_id)
    return (
        db.query(StockMovement)
        .filter(StockMovement.lens_variant_id == variant_id)
        .order_by(StockMovement.id.desc())
        .limit(limit)
        .all()
    )
