from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.api_docs import error_responses
from app.core.config import settings
from app.core.deps import get_db
from app.models.inventory import MovementType
from app.schemas.common import paginate
from app.schemas.inventory import (
    LedgerSummaryOut,
    MovementListOut,
    MovementOut,
    StockLevelOut,
    StockTotalOut,
    StockUpdateIn,
    to_movement_out,
)
from app.services import inventory_service

router = APIRouter(prefix="/inventory", tags=["inventory"])


@router.post(
    "/add-stock",
    response_model=MovementOut,
    summary="Add stock to a variant",
    responses=error_responses(400, 404, 409, 422, 500),
)
def add_stock(payload: StockUpdateIn, db: Session = Depends(get_db)):
    movement = inventory_service.add_stock(
        db,
        payload.variant_id,
        payload.quantity,
        reason=payload.reason,
        reference=payload.reference,
    )
    return to_movement_out(movement)


@router.post(
    "/remove-stock",
    response_model=MovementOut,
    summary="Remove stock from a variant",
    responses=error_responses(400, 404, 409, 422, 500),
)
def remove_stock(payload: StockUpdateIn, db: Session = Depends(get_db)):
    movement = inventory_service.remove_stock(
        db,
        payload.variant_id,
        payload.quantity,
        reason=payload.reason,
        reference=payload.reference,
    )
    return to_movement_out(movement)


@router.post(
    "/adjust-stock",
    response_model=MovementOut,
    summary="Apply a signed stock adjustment",
    responses=error_responses(400, 404, 409, 422, 500),
)
def adjust_stock(payload: StockUpdateIn, db: Session = Depends(get_db)):
    movement = inventory_service.adjust_stock(
        db,
        payload.variant_id,
        payload.quantity,
        reason=payload.reason,
        reference=payload.reference,
    )
    return to_movement_out(movement)


@router.get(
    "/{variant_id}/movements",
    response_model=MovementListOut,
    summary="Movement history for a variant, newest first",
    responses={
        200: {
            "description": "Paginated stock movements",
            "content": {
                "application/json": {
                    "example": {
                        "items": [
                            {
                                "id": 7,
                                "variant_id": 1,
                                "variant_sku": "TSHIRT-M-BLU",
                                "movement_type": "OUT",
                                "quantity": 2,
                                "reason": "Sale reservation",
                                "reference": None,
                                "created_at": "2026-10-18T10:00:00Z",
                            }
                        ],
                        "pagination": {
                            "total": 7,
                            "limit": 50,
                            "offset": 0,
                            "count": 7,
                            "has_next": False,
                        },
                    }
                }
            },
        },
        **error_responses(400, 404, 422, 500),
    },
)
def get_movement_history(
    variant_id: int,
    start: datetime | None = Query(default=None, description="Only movements created at or after this time"),
    end: datetime | None = Query(default=None, description="Only movements created at or before this time"),
    limit: int = Query(default=settings.default_page_size, ge=1, le=settings.max_page_size, description="Page size"),
    offset: int = Query(default=0, ge=0, description="Pagination offset"),
    db: Session = Depends(get_db),
):
    movements = inventory_service.get_movement_history(db, variant_id, start=start, end=end)
    page, pagination = paginate(movements, limit=limit, offset=offset)
    return MovementListOut(items=[to_movement_out(m) for m in page], pagination=pagination)


@router.get(
    "/{variant_id}/current-stock",
    response_model=StockLevelOut,
    summary="Current stock level for a variant",
    responses=error_responses(404, 422, 500),
)
def get_current_stock(variant_id: int, db: Session = Depends(get_db)):
    stock = inventory_service.get_current_stock(db, variant_id)
    return StockLevelOut(variant_id=variant_id, stock=stock)


@router.get(
    "/{variant_id}/total-in",
    response_model=StockTotalOut,
    summary="Sum of IN movements for a variant",
    responses=error_responses(404, 422, 500),
)
def get_total_in(variant_id: int, db: Session = Depends(get_db)):
    total = inventory_service.get_total_in(db, variant_id)
    return StockTotalOut(variant_id=variant_id, movement_type=MovementType.IN, total=total)


@router.get(
    "/{variant_id}/total-out",
    response_model=StockTotalOut,
    summary="Sum of OUT movements for a variant",
    responses=error_responses(404, 422, 500),
)
def get_total_out(variant_id: int, db: Session = Depends(get_db)):
    total = inventory_service.get_total_out(db, variant_id)
    return StockTotalOut(variant_id=variant_id, movement_type=MovementType.OUT, total=total)


@router.get(
    "/{variant_id}/summary",
    response_model=LedgerSummaryOut,
    summary="Ledger totals and reconciliation against the stored stock level",
    responses=error_responses(404, 422, 500),
)
def get_ledger_summary(variant_id: int, db: Session = Depends(get_db)):
    summary = inventory_service.get_ledger_summary(db, variant_id)
    return LedgerSummaryOut(
        variant_id=summary.variant_id,
        sku=summary.sku,
        stock_quantity=summary.stock_quantity,
        total_in=summary.total_in,
        total_out=summary.total_out,
        net_adjustment=summary.net_adjustment,
        ledger_balance=summary.ledger_balance,
        consistent=summary.consistent,
    )
