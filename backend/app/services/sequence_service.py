"""
Document number generation

Sale orders, purchase orders, dispatch challans and invoices all carry a
human-readable number scoped by a time prefix:

    SO-2026-001     (year, 3 digits)
    PO-2026-0001    (year, 4 digits)
    DC-2610-001     (year + month, 3 digits)
    INV-2026-0001   (year, 4 digits)

Each scope ("SO-2026", "DC-2610", ...) has a row in sequence_counters. The
row is locked with SELECT ... FOR UPDATE and incremented inside the
caller's transaction, so two concurrent requests can never be handed the
same number and a rolled-back request does not consume one. This module
never commits.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.exceptions import ConflictError, ValidationError
from app.logging_config import get_logger
from app.models.sequence import SequenceCounter

logger = get_logger(__name__)


@dataclass(frozen=True)
class NumberFormat:
    prefix_format: str  # strftime pattern for the time scope
    width: int  # zero padding of the counter


SEQUENCE_FORMATS: Dict[str, NumberFormat] = {
    "SO": NumberFormat(prefix_format="%Y", width=3),
    "PO": NumberFormat(prefix_format="%Y", width=4),
    "DC": NumberFormat(prefix_format="%y%m", width=3),
    "INV": NumberFormat(prefix_format="%Y", width=4),
}


def _existing_numbers_column(family: str):
    """Column holding already-issued numbers for a family (used to seed new counters)."""
    from app.models.dispatch import Dispatch
    from app.models.invoice import Invoice
    from app.models.purchase_order import PurchaseOrder
    from app.models.sales_order import SaleOrder

    return {
        "SO": SaleOrder.order_no,
        "PO": PurchaseOrder.po_number,
        "DC": Dispatch.dc_number,
        "INV": Invoice.invoice_no,
    }[family]


def format_number(family: str, prefix: str, value: int) -> str:
    """Format a counter value, e.g. format_number("PO", "2026", 7) -> "PO-2026-0007"."""
    fmt = SEQUENCE_FORMATS[family]
    return f"{family}-{prefix}-{value:0{fmt.width}d}"


def time_prefix(family: str, now: Optional[datetime] = None) -> str:
    if family not in SEQUENCE_FORMATS:
        raise ValidationError(f"Unknown number sequence '{family}'", field="family", value=family)
    return (now or datetime.utcnow()).strftime(SEQUENCE_FORMATS[family].prefix_format)


def _parse_suffix(number: Optional[str]) -> int:
    """Trailing numeric part of an issued number; 0 if absent or malformed."""
    if not number:
        return 0
    tail = number.rsplit("-", 1)[-1]
    return int(tail) if tail.isdigit() else 0


def _seed_value(db: Session, family: str, prefix: str) -> int:
    """Start a new counter where the greatest already-issued number left off."""
    column = _existing_numbers_column(family)
    last_number = db.query(func.max(column)).filter(column.like(f"{family}-{prefix}-%")).scalar()
    return _parse_suffix(last_number)


def next_number(db: Session, family: str, now: Optional[datetime] = None) -> str:
    """
    Allocate the next document number for a family.

    Must be called inside the same transaction that inserts the record
    consuming the number.

    Raises:
        ValidationError: unknown family
        ConflictError: another transaction created the same counter row first
    """
    prefix = time_prefix(family, now)
    scope = f"{family}-{prefix}"

    counter = (
        db.query(SequenceCounter)
        .filter(SequenceCounter.name == scope)
        .with_for_update()
        .populate_existing()
        .first()
    )

    if counter is None:
        counter = SequenceCounter(name=scope, current_value=_seed_value(db, family, prefix))
        db.add(counter)
        try:
            db.flush()
        except IntegrityError as e:
            logger.warning(f"Sequence counter {scope} created concurrently", extra={"scope": scope})
            raise ConflictError(
                f"Could not allocate a {family} number, please retry",
                details={"sequence": scope},
            ) from e

    counter.current_value += 1
    db.flush()

    number = format_number(family, prefix, counter.current_value)
    logger.debug("Allocated document number", extra={"scope": scope, "number": number})
    return number
