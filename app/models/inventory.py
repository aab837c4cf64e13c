import enum
from datetime import datetime
from typing import Optional

from sqlalchemy import Enum, ForeignKey, Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, UTCDateTime, utc_now


class MovementType(str, enum.Enum):
    IN = "IN"
    OUT = "OUT"
    ADJUSTMENT = "ADJUSTMENT"

    def signed(self, quantity: int) -> int:
        """Effect of a movement of this type on the variant's stock."""
        return -quantity if self is MovementType.OUT else quantity


class StockMovement(Base):
    """
    One immutable row per stock change. IN and OUT carry a positive magnitude;
    ADJUSTMENT carries the signed delta. Rows outlive their variant: on variant
    deletion ``variant_id`` is cleared and ``variant_sku`` keeps the row attributable.
    """
    __tablename__ = "stock_movements"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    variant_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("variants.id", ondelete="SET NULL"), nullable=True, index=True
    )
    variant_sku: Mapped[str] = mapped_column(String(100), nullable=False)

    movement_type: Mapped[MovementType] = mapped_column(
        Enum(MovementType, name="movement_type", native_enum=False, length=20),
        nullable=False,
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    reason: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    reference: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)  # e.g., purchase order, sale id

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, server_default=func.now()
    )

    __table_args__ = (
        Index("ix_stock_movements_variant_created_at", "variant_id", "created_at"),
        Index("ix_stock_movements_variant_type", "variant_id", "movement_type"),
    )
