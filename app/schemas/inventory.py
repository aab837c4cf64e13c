from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.models.inventory import MovementType, StockMovement
from app.schemas.common import PaginationMeta


class StockUpdateIn(BaseModel):
    variant_id: int
    quantity: int = Field(
        ...,
        description=(
            "Units to move. Must be positive for add-stock and remove-stock; "
            "adjust-stock accepts any signed value, including zero."
        ),
    )
    reason: Optional[str] = Field(default=None, max_length=255)
    reference: Optional[str] = Field(default=None, max_length=100)

    @field_validator("reason", "reference")
    @classmethod
    def normalize_optional_text(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        cleaned = value.strip()
        return cleaned or None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "variant_id": 1,
                "quantity": 20,
                "reason": "Supplier delivery",
                "reference": "PO-2026-0042",
            }
        }
    )


class StockOut(BaseModel):
    ok: bool = True


class MovementOut(BaseModel):
    id: int
    variant_id: Optional[int] = None
    variant_sku: str
    movement_type: MovementType
    quantity: int
    reason: Optional[str] = None
    reference: Optional[str] = None
    created_at: datetime


class MovementListOut(BaseModel):
    items: list[MovementOut]
    pagination: PaginationMeta


class StockLevelOut(BaseModel):
    variant_id: int
    stock: int


class StockTotalOut(BaseModel):
    variant_id: int
    movement_type: MovementType
    total: int


class LedgerSummaryOut(BaseModel):
    variant_id: int
    sku: str
    stock_quantity: int
    total_in: int
    total_out: int
    net_adjustment: int
    ledger_balance: int
    consistent: bool


def to_movement_out(movement: StockMovement) -> MovementOut:
    return MovementOut(
        id=movement.id,
        variant_id=movement.variant_id,
        variant_sku=movement.variant_sku,
        movement_type=movement.movement_type,
        quantity=movement.quantity,
        reason=movement.reason,
        reference=movement.reference,
        created_at=movement.created_at,
    )
