import logging
from decimal import Decimal
from typing import Sequence

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from app.core.errors import DuplicateResourceError, NotFoundError
from app.core.money import to_money
from app.core.observability import log_event
from app.db.session import unit_of_work
from app.models.item import Item, Variant
from app.services.inventory_service import detach_movements
from app.services.variant_service import VariantDraft, add_variant, attributes_taken, sku_exists

logger = logging.getLogger("warehouse.inventory")


def _name_taken(db: Session, name: str, *, exclude_id: int | None = None) -> bool:
    stmt = select(Item.id).where(Item.name == name)
    if exclude_id is not None:
        stmt = stmt.where(Item.id != exclude_id)
    return db.execute(stmt.limit(1)).scalar_one_or_none() is not None


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _new_item(db: Session, *, name: str, description: str | None, base_price: Decimal) -> Item:
    if _name_taken(db, name):
        raise DuplicateResourceError(f"Item with name '{name}' already exists")
    item = Item(name=name, description=description, base_price=to_money(base_price))
    db.add(item)
    db.flush()
    return item


def create_item(db: Session, *, name: str, description: str | None, base_price: Decimal) -> Item:
    with unit_of_work(db):
        item = _new_item(db, name=name, description=description, base_price=base_price)

    log_event(logger, "item_created", item_id=item.id, name=name)
    return item


def create_item_with_variants(
    db: Session,
    *,
    name: str,
    description: str | None,
    base_price: Decimal,
    variants: Sequence[VariantDraft],
) -> Item:
    """Create an item plus as many of ``variants`` as do not collide.

    A candidate whose SKU already exists, or whose attributes repeat an
    earlier candidate, is skipped rather than failing the whole request.
    """
    created: list[str] = []
    skipped: list[str] = []
    with unit_of_work(db):
        item = _new_item(db, name=name, description=description, base_price=base_price)
        for draft in variants:
            if sku_exists(db, draft.sku) or attributes_taken(
                db,
                item_id=item.id,
                size=draft.size,
                color=draft.color,
                material=draft.material,
            ):
                skipped.append(draft.sku)
                continue
            add_variant(db, item_id=item.id, draft=draft)
            created.append(draft.sku)

    log_event(
        logger,
        "item_created",
        item_id=item.id,
        name=name,
        variants_created=created,
        variants_skipped=skipped,
    )
    return item


def get_item(db: Session, item_id: int) -> Item:
    item = db.get(Item, item_id)
    if not item:
        raise NotFoundError(f"Item not found with id: {item_id}")
    return item


def list_items(db: Session) -> list[Item]:
    return list(db.execute(select(Item).order_by(Item.id)).scalars().all())


def search_items_by_name(db: Session, name: str) -> list[Item]:
    pattern = f"%{_escape_like(name.strip())}%"
    stmt = select(Item).where(Item.name.ilike(pattern, escape="\\")).order_by(Item.id)
    return list(db.execute(stmt).scalars().all())


def update_item(
    db: Session,
    item_id: int,
    *,
    name: str,
    description: str | None,
    base_price: Decimal,
) -> Item:
    with unit_of_work(db):
        item = get_item(db, item_id)
        if item.name != name and _name_taken(db, name, exclude_id=item.id):
            raise DuplicateResourceError(f"Item with name '{name}' already exists")

        item.name = name
        item.description = description
        item.base_price = to_money(base_price)

    log_event(logger, "item_updated", item_id=item_id, name=name)
    return item


def delete_item(db: Session, item_id: int) -> None:
    with unit_of_work(db):
        item = get_item(db, item_id)
        variant_ids = list(
            db.execute(select(Variant.id).where(Variant.item_id == item.id)).scalars().all()
        )
        detach_movements(db, variant_ids)
        db.execute(
            delete(Variant)
            .where(Variant.item_id == item.id)
            .execution_options(synchronize_session=False)
        )
        db.delete(item)

    log_event(logger, "item_deleted", item_id=item_id, variants_deleted=len(variant_ids))
