import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.errors import DuplicateResourceError, NotFoundError
from app.core.money import to_money
from app.core.observability import log_event
from app.db.session import unit_of_work
from app.models.item import Item, Variant
from app.services.inventory_service import detach_movements, record_initial_stock

logger = logging.getLogger("warehouse.inventory")


@dataclass(frozen=True)
class VariantDraft:
    sku: str
    price: Decimal
    size: str | None = None
    color: str | None = None
    material: str | None = None
    stock_quantity: int = 0
    min_stock_level: int = 0

    @property
    def attributes(self) -> tuple[str | None, str | None, str | None]:
        return (self.size, self.color, self.material)


def _matches(column, value: str | None):
    return column.is_(None) if value is None else column == value


def sku_exists(db: Session, sku: str, *, exclude_id: int | None = None) -> bool:
    stmt = select(Variant.id).where(Variant.sku == sku)
    if exclude_id is not None:
        stmt = stmt.where(Variant.id != exclude_id)
    return db.execute(stmt.limit(1)).scalar_one_or_none() is not None


def attributes_taken(
    db: Session,
    *,
    item_id: int,
    size: str | None,
    color: str | None,
    material: str | None,
    exclude_id: int | None = None,
) -> bool:
    # Missing attributes compare equal, so an item has at most one plain variant.
    stmt = select(Variant.id).where(
        Variant.item_id == item_id,
        _matches(Variant.size, size),
        _matches(Variant.color, color),
        _matches(Variant.material, material),
    )
    if exclude_id is not None:
        stmt = stmt.where(Variant.id != exclude_id)
    return db.execute(stmt.limit(1)).scalar_one_or_none() is not None


def add_variant(db: Session, *, item_id: int, draft: VariantDraft) -> Variant:
    """Persist a variant and its initial-stock movement inside the caller's unit of work."""
    variant = Variant(
        item_id=item_id,
        sku=draft.sku,
        size=draft.size,
        color=draft.color,
        material=draft.material,
        price=to_money(draft.price),
        stock_quantity=draft.stock_quantity,
        min_stock_level=draft.min_stock_level,
    )
    db.add(variant)
    db.flush()
    record_initial_stock(db, variant)
    return variant


def create_variant(db: Session, *, item_id: int, draft: VariantDraft) -> Variant:
    with unit_of_work(db):
        if sku_exists(db, draft.sku):
            raise DuplicateResourceError(f"Variant with SKU '{draft.sku}' already exists")

        item_found = db.execute(select(Item.id).where(Item.id == item_id)).scalar_one_or_none()
        if item_found is None:
            raise NotFoundError(f"Item not found with id: {item_id}")

        if attributes_taken(
            db, item_id=item_id, size=draft.size, color=draft.color, material=draft.material
        ):
            raise DuplicateResourceError("Variant with these attributes already exists for this item")

        variant = add_variant(db, item_id=item_id, draft=draft)

    log_event(
        logger,
        "variant_created",
        variant_id=variant.id,
        item_id=item_id,
        sku=draft.sku,
        initial_stock=draft.stock_quantity,
    )
    return variant


def get_variant(db: Session, variant_id: int) -> Variant:
    variant = db.get(Variant, variant_id)
    if not variant:
        raise NotFoundError(f"Variant not found with id: {variant_id}")
    return variant


def get_variant_by_sku(db: Session, sku: str) -> Variant:
    variant = db.execute(select(Variant).where(Variant.sku == sku)).scalar_one_or_none()
    if not variant:
        raise NotFoundError(f"Variant not found with SKU: {sku}")
    return variant


def list_variants_by_item(db: Session, item_id: int) -> list[Variant]:
    item_found = db.execute(select(Item.id).where(Item.id == item_id)).scalar_one_or_none()
    if item_found is None:
        raise NotFoundError(f"Item not found with id: {item_id}")
    return list(
        db.execute(select(Variant).where(Variant.item_id == item_id).order_by(Variant.id))
        .scalars()
        .all()
    )


def variants_by_item(db: Session, item_ids: Iterable[int]) -> dict[int, list[Variant]]:
    ids = list(item_ids)
    grouped: dict[int, list[Variant]] = {item_id: [] for item_id in ids}
    if not ids:
        return grouped
    rows = db.execute(
        select(Variant).where(Variant.item_id.in_(ids)).order_by(Variant.id)
    ).scalars()
    for variant in rows:
        grouped[variant.item_id].append(variant)
    return grouped


def update_variant(
    db: Session,
    variant_id: int,
    *,
    sku: str,
    size: str | None,
    color: str | None,
    material: str | None,
    price: Decimal,
    min_stock_level: int,
) -> Variant:
    """Overwrite a variant's catalog fields. Stock is not touched here."""
    with unit_of_work(db):
        variant = get_variant(db, variant_id)

        if variant.sku != sku and sku_exists(db, sku, exclude_id=variant.id):
            raise DuplicateResourceError(f"Variant with SKU '{sku}' already exists")

        if (variant.size, variant.color, variant.material) != (size, color, material) and attributes_taken(
            db,
            item_id=variant.item_id,
            size=size,
            color=color,
            material=material,
            exclude_id=variant.id,
        ):
            raise DuplicateResourceError("Variant with these attributes already exists for this item")

        variant.sku = sku
        variant.size = size
        variant.color = color
        variant.material = material
        variant.price = to_money(price)
        variant.min_stock_level = min_stock_level

    log_event(logger, "variant_updated", variant_id=variant_id, sku=sku)
    return variant


def delete_variant(db: Session, variant_id: int) -> None:
    with unit_of_work(db):
        variant = get_variant(db, variant_id)
        detach_movements(db, [variant.id])
        db.delete(variant)

    log_event(logger, "variant_deleted", variant_id=variant_id)


def list_low_stock(db: Session) -> list[Variant]:
    # Zero stock is "out of stock", never "low stock".
    stmt = (
        select(Variant)
        .where(Variant.stock_quantity > 0, Variant.stock_quantity <= Variant.min_stock_level)
        .order_by(Variant.id)
    )
    return list(db.execute(stmt).scalars().all())


def list_out_of_stock(db: Session) -> list[Variant]:
    stmt = select(Variant).where(Variant.stock_quantity == 0).order_by(Variant.id)
    return list(db.execute(stmt).scalars().all())


def list_in_stock(db: Session) -> list[Variant]:
    stmt = select(Variant).where(Variant.stock_quantity > 0).order_by(Variant.id)
    return list(db.execute(stmt).scalars().all())
