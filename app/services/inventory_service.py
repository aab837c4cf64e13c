"""Stock accounting over the movement ledger.

Every function that changes ``Variant.stock_quantity`` follows the same shape
inside one ``unit_of_work``: load the variant (row-locked where the database
supports it), validate, compute the new quantity, persist the variant, append
exactly one ``StockMovement``. Nothing else in the code base writes
``stock_quantity`` after creation, so the stored quantity always equals the
signed sum of the variant's ledger.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from app.core.errors import (
    InsufficientStockError,
    InvalidArgumentError,
    InvalidStockStateError,
    NotFoundError,
)
from app.core.observability import log_event
from app.db.base import as_utc
from app.db.session import unit_of_work
from app.models.inventory import MovementType, StockMovement
from app.models.item import Variant

logger = logging.getLogger("warehouse.inventory")

REASON_STOCK_ADDITION = "Stock addition"
REASON_STOCK_REMOVAL = "Stock removal"
REASON_STOCK_ADJUSTMENT = "Stock adjustment"
REASON_SALE_RESERVATION = "Sale reservation"
REASON_INITIAL_STOCK = "Initial stock"


@dataclass(frozen=True)
class LedgerSummary:
    variant_id: int
    sku: str
    stock_quantity: int
    total_in: int
    total_out: int
    net_adjustment: int

    @property
    def ledger_balance(self) -> int:
        return self.total_in - self.total_out + self.net_adjustment

    @property
    def consistent(self) -> bool:
        return self.ledger_balance == self.stock_quantity


def _load_variant(db: Session, variant_id: int, *, for_update: bool = False) -> Variant:
    stmt = select(Variant).where(Variant.id == variant_id)
    if for_update:
        stmt = stmt.with_for_update().execution_options(populate_existing=True)
    variant = db.execute(stmt).scalar_one_or_none()
    if not variant:
        raise NotFoundError(f"Variant not found with id: {variant_id}")
    return variant


def _ensure_variant_exists(db: Session, variant_id: int) -> None:
    found = db.execute(select(Variant.id).where(Variant.id == variant_id)).scalar_one_or_none()
    if found is None:
        raise NotFoundError(f"Variant not found with id: {variant_id}")


def _require_positive(quantity: int | None) -> int:
    if quantity is None or quantity <= 0:
        raise InvalidArgumentError("Quantity must be positive")
    return quantity


def append_movement(
    db: Session,
    *,
    variant: Variant,
    movement_type: MovementType,
    quantity: int,
    reason: str | None = None,
    reference: str | None = None,
) -> StockMovement:
    entry = StockMovement(
        variant_id=variant.id,
        variant_sku=variant.sku,
        movement_type=movement_type,
        quantity=quantity,
        reason=reason,
        reference=reference,
    )
    db.add(entry)
    return entry


def _apply_movement(
    db: Session,
    variant: Variant,
    *,
    new_quantity: int,
    movement_type: MovementType,
    quantity: int,
    reason: str,
    reference: str | None,
) -> StockMovement:
    previous = variant.stock_quantity
    variant.stock_quantity = new_quantity
    movement = append_movement(
        db,
        variant=variant,
        movement_type=movement_type,
        quantity=quantity,
        reason=reason,
        reference=reference,
    )
    # Flush here so a concurrent version bump fails before the commit.
    db.flush()
    log_event(
        logger,
        "stock_movement",
        variant_id=variant.id,
        sku=variant.sku,
        movement_type=movement_type.value,
        quantity=quantity,
        previous_stock=previous,
        new_stock=new_quantity,
        reference=reference,
    )
    return movement


def add_stock(
    db: Session,
    variant_id: int,
    quantity: int | None,
    *,
    reason: str | None = None,
    reference: str | None = None,
) -> StockMovement:
    with unit_of_work(db):
        quantity = _require_positive(quantity)
        variant = _load_variant(db, variant_id, for_update=True)
        movement = _apply_movement(
            db,
            variant,
            new_quantity=variant.stock_quantity + quantity,
            movement_type=MovementType.IN,
            quantity=quantity,
            reason=reason or REASON_STOCK_ADDITION,
            reference=reference,
        )
    return movement


def remove_stock(
    db: Session,
    variant_id: int,
    quantity: int | None,
    *,
    reason: str | None = None,
    reference: str | None = None,
) -> StockMovement:
    with unit_of_work(db):
        quantity = _require_positive(quantity)
        variant = _load_variant(db, variant_id, for_update=True)
        if variant.stock_quantity < quantity:
            raise InsufficientStockError(
                sku=variant.sku, available=variant.stock_quantity, requested=quantity
            )
        movement = _apply_movement(
            db,
            variant,
            new_quantity=variant.stock_quantity - quantity,
            movement_type=MovementType.OUT,
            quantity=quantity,
            reason=reason or REASON_STOCK_REMOVAL,
            reference=reference,
        )
    return movement


def adjust_stock(
    db: Session,
    variant_id: int,
    quantity: int | None,
    *,
    reason: str | None = None,
    reference: str | None = None,
) -> StockMovement:
    """Apply a signed correction, e.g. after a stock count.

    Zero is accepted and still recorded, so a count that confirms the
    stored quantity leaves a trace in the ledger.
    """
    with unit_of_work(db):
        if quantity is None:
            raise InvalidArgumentError("Quantity is required")
        variant = _load_variant(db, variant_id, for_update=True)
        new_quantity = variant.stock_quantity + quantity
        if new_quantity < 0:
            raise InvalidStockStateError(
                f"Stock cannot be negative. Adjustment would result in: {new_quantity}"
            )
        movement = _apply_movement(
            db,
            variant,
            new_quantity=new_quantity,
            movement_type=MovementType.ADJUSTMENT,
            quantity=quantity,
            reason=reason or REASON_STOCK_ADJUSTMENT,
            reference=reference,
        )
    return movement


def reserve_stock(db: Session, variant_id: int, quantity: int | None) -> None:
    with unit_of_work(db):
        quantity = _require_positive(quantity)
        variant = _load_variant(db, variant_id, for_update=True)
        if variant.stock_quantity < quantity:
            raise InsufficientStockError(
                sku=variant.sku, available=variant.stock_quantity, requested=quantity
            )
        _apply_movement(
            db,
            variant,
            new_quantity=variant.stock_quantity - quantity,
            movement_type=MovementType.OUT,
            quantity=quantity,
            reason=REASON_SALE_RESERVATION,
            reference=None,
        )


def record_initial_stock(db: Session, variant: Variant) -> StockMovement | None:
    """Ledger entry for the quantity a variant is created with.

    Runs inside the caller's unit of work; ``variant`` must already be flushed.
    """
    if variant.stock_quantity <= 0:
        return None
    return append_movement(
        db,
        variant=variant,
        movement_type=MovementType.IN,
        quantity=variant.stock_quantity,
        reason=REASON_INITIAL_STOCK,
    )


def detach_movements(db: Session, variant_ids: Iterable[int]) -> None:
    ids = list(variant_ids)
    if not ids:
        return
    db.execute(
        update(StockMovement)
        .where(StockMovement.variant_id.in_(ids))
        .values(variant_id=None)
        .execution_options(synchronize_session=False)
    )


def get_current_stock(db: Session, variant_id: int) -> int:
    return _load_variant(db, variant_id).stock_quantity


def get_movement_history(
    db: Session,
    variant_id: int,
    *,
    start: datetime | None = None,
    end: datetime | None = None,
) -> list[StockMovement]:
    _ensure_variant_exists(db, variant_id)
    start, end = as_utc(start), as_utc(end)
    if start is not None and end is not None and start > end:
        raise InvalidArgumentError("start must not be after end")

    stmt = select(StockMovement).where(StockMovement.variant_id == variant_id)
    if start is not None:
        stmt = stmt.where(StockMovement.created_at >= start)
    if end is not None:
        stmt = stmt.where(StockMovement.created_at <= end)
    stmt = stmt.order_by(StockMovement.created_at.desc(), StockMovement.id.desc())
    return list(db.execute(stmt).scalars().all())


def _sum_by_type(db: Session, variant_id: int) -> dict[MovementType, int]:
    rows = db.execute(
        select(StockMovement.movement_type, func.coalesce(func.sum(StockMovement.quantity), 0))
        .where(StockMovement.variant_id == variant_id)
        .group_by(StockMovement.movement_type)
    ).all()
    return {movement_type: int(total) for movement_type, total in rows}


def get_total_in(db: Session, variant_id: int) -> int:
    _ensure_variant_exists(db, variant_id)
    return _sum_by_type(db, variant_id).get(MovementType.IN, 0)


def get_total_out(db: Session, variant_id: int) -> int:
    _ensure_variant_exists(db, variant_id)
    return _sum_by_type(db, variant_id).get(MovementType.OUT, 0)


def get_ledger_summary(db: Session, variant_id: int) -> LedgerSummary:
    variant = _load_variant(db, variant_id)
    totals = _sum_by_type(db, variant_id)
    return LedgerSummary(
        variant_id=variant.id,
        sku=variant.sku,
        stock_quantity=variant.stock_quantity,
        total_in=totals.get(MovementType.IN, 0),
        total_out=totals.get(MovementType.OUT, 0),
        net_adjustment=totals.get(MovementType.ADJUSTMENT, 0),
    )
