from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, UTCDateTime, utc_now


class Item(Base):
    __tablename__ = "items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    base_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, server_default=func.now(), onupdate=utc_now
    )

    __table_args__ = (
        CheckConstraint("base_price > 0", name="ck_items_base_price_positive"),
    )


class Variant(Base):
    """A purchasable SKU of an item.

    ``stock_quantity`` is only written by the accounting functions in
    ``app.services.inventory_service``; each write there appends a
    ``StockMovement`` in the same transaction.
    """

    __tablename__ = "variants"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    item_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("items.id", ondelete="CASCADE"), nullable=False, index=True
    )

    sku: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    size: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    color: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    material: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    stock_quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    min_stock_level: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    version_id: Mapped[int] = mapped_column(Integer, nullable=False, default=1, server_default="1")

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, server_default=func.now(), onupdate=utc_now
    )

    __mapper_args__ = {"version_id_col": version_id}

    __table_args__ = (
        UniqueConstraint("item_id", "size", "color", "material", name="uq_variants_item_attributes"),
        CheckConstraint("stock_quantity >= 0", name="ck_variants_stock_quantity_non_negative"),
        CheckConstraint("min_stock_level >= 0", name="ck_variants_min_stock_level_non_negative"),
        CheckConstraint("price > 0", name="ck_variants_price_positive"),
        Index("ix_variants_stock_quantity", "stock_quantity"),
    )

    @property
    def in_stock(self) -> bool:
        return self.stock_quantity > 0

    @property
    def needs_restock(self) -> bool:
        return self.stock_quantity <= self.min_stock_level

    def __repr__(self) -> str:
        return f"<Variant id={self.id} sku={self.sku!r} stock={self.stock_quantity}>"
