from decimal import Decimal

import pytest
from sqlalchemy import create_engine, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from app.core.errors import (
    ConcurrentModificationError,
    DuplicateResourceError,
    InsufficientStockError,
    InvalidArgumentError,
    InvalidStockStateError,
)
from app.db.base import Base
from app.db.session import unit_of_work
from app.models.inventory import MovementType, StockMovement
from app.models.item import Item, Variant
from app.services import inventory_service, item_service, variant_service
from app.services.variant_service import VariantDraft


def _variant(db, *, sku: str = "SKU-1", stock_quantity: int = 0, min_stock_level: int = 0) -> Variant:
    item = item_service.create_item(db, name=f"Item {sku}", description=None, base_price=Decimal("10"))
    return variant_service.create_variant(
        db,
        item_id=item.id,
        draft=VariantDraft(
            sku=sku,
            price=Decimal("12.50"),
            stock_quantity=stock_quantity,
            min_stock_level=min_stock_level,
        ),
    )


def _movement_count(db, variant_id: int) -> int:
    return db.execute(
        select(func.count(StockMovement.id)).where(StockMovement.variant_id == variant_id)
    ).scalar_one()


def _ledger_effect(db, variant_id: int) -> int:
    movements = db.execute(
        select(StockMovement).where(StockMovement.variant_id == variant_id)
    ).scalars()
    return sum(m.movement_type.signed(m.quantity) for m in movements)


def test_stock_always_equals_signed_ledger_sum(db_session):
    variant = _variant(db_session, stock_quantity=10)
    variant_id = variant.id

    steps = [
        lambda: inventory_service.add_stock(db_session, variant_id, 20),
        lambda: inventory_service.remove_stock(db_session, variant_id, 25),
        lambda: inventory_service.adjust_stock(db_session, variant_id, 7),
        lambda: inventory_service.reserve_stock(db_session, variant_id, 3),
        lambda: inventory_service.adjust_stock(db_session, variant_id, -4),
        lambda: inventory_service.adjust_stock(db_session, variant_id, 0),
    ]
    for step in steps:
        step()
        stock = inventory_service.get_current_stock(db_session, variant_id)
        assert stock >= 0
        assert stock == _ledger_effect(db_session, variant_id)

    assert inventory_service.get_current_stock(db_session, variant_id) == 5

    summary = inventory_service.get_ledger_summary(db_session, variant_id)
    assert summary.total_in == 30
    assert summary.total_out == 28
    assert summary.net_adjustment == 3
    assert summary.consistent is True


def test_add_stock_appends_exactly_one_in_movement(db_session):
    variant = _variant(db_session)

    movement = inventory_service.add_stock(db_session, variant.id, 9, reference="PO-1")

    assert movement.movement_type == MovementType.IN
    assert movement.quantity == 9
    assert movement.reason == "Stock addition"
    assert movement.reference == "PO-1"
    assert inventory_service.get_current_stock(db_session, variant.id) == 9
    assert _movement_count(db_session, variant.id) == 1


def test_failed_remove_leaves_stock_and_ledger_unchanged(db_session):
    variant = _variant(db_session, stock_quantity=3)

    with pytest.raises(InsufficientStockError) as excinfo:
        inventory_service.remove_stock(db_session, variant.id, 4)

    assert excinfo.value.sku == "SKU-1"
    assert excinfo.value.available == 3
    assert excinfo.value.requested == 4
    assert inventory_service.get_current_stock(db_session, variant.id) == 3
    assert _movement_count(db_session, variant.id) == 1


def test_failed_adjustment_leaves_state_unchanged(db_session):
    variant = _variant(db_session, stock_quantity=2)

    with pytest.raises(InvalidStockStateError):
        inventory_service.adjust_stock(db_session, variant.id, -3)

    assert inventory_service.get_current_stock(db_session, variant.id) == 2
    assert _movement_count(db_session, variant.id) == 1


def test_adjust_stock_requires_a_quantity(db_session):
    variant = _variant(db_session)

    with pytest.raises(InvalidArgumentError):
        inventory_service.adjust_stock(db_session, variant.id, None)


def test_reserve_stock_records_sale_reservation(db_session):
    variant = _variant(db_session, stock_quantity=8)

    assert inventory_service.reserve_stock(db_session, variant.id, 8) is None

    history = inventory_service.get_movement_history(db_session, variant.id)
    assert history[0].movement_type == MovementType.OUT
    assert history[0].reason == "Sale reservation"
    assert inventory_service.get_current_stock(db_session, variant.id) == 0
    assert [v.id for v in variant_service.list_out_of_stock(db_session)] == [variant.id]


def test_derived_stock_flags():
    variant = Variant(sku="FLAG-1", price=Decimal("1.00"), stock_quantity=0, min_stock_level=0)
    assert variant.in_stock is False
    assert variant.needs_restock is True

    variant.stock_quantity = 6
    variant.min_stock_level = 5
    assert variant.in_stock is True
    assert variant.needs_restock is False


def test_deleted_variant_keeps_its_movements(db_session):
    variant = _variant(db_session, sku="GONE-1", stock_quantity=4)
    variant_id = variant.id
    inventory_service.remove_stock(db_session, variant_id, 1)

    variant_service.delete_variant(db_session, variant_id)

    orphaned = db_session.execute(
        select(StockMovement).where(StockMovement.variant_sku == "GONE-1")
    ).scalars().all()
    assert len(orphaned) == 2
    assert all(m.variant_id is None for m in orphaned)


def test_stale_variant_write_is_rejected(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'race.db'}")
    Base.metadata.create_all(bind=engine)
    session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    setup = session_factory()
    try:
        variant_id = _variant(setup, sku="RACE-1", stock_quantity=10).id
    finally:
        setup.close()

    first = session_factory()
    second = session_factory()
    try:
        stale = first.get(Variant, variant_id)
        assert stale.stock_quantity == 10

        inventory_service.add_stock(second, variant_id, 5)

        stale.min_stock_level = 3
        with pytest.raises(ConcurrentModificationError):
            with unit_of_work(first):
                pass

        assert inventory_service.get_current_stock(second, variant_id) == 15
    finally:
        first.close()
        second.close()
        engine.dispose()


def test_unique_violation_maps_to_duplicate_resource(db_session):
    item_service.create_item(db_session, name="Taken", description=None, base_price=Decimal("5"))

    with pytest.raises(DuplicateResourceError):
        with unit_of_work(db_session):
            db_session.add(Item(name="Taken", base_price=Decimal("5")))

    assert db_session.execute(select(func.count(Item.id))).scalar_one() == 1


def test_check_constraint_violation_is_not_reported_as_duplicate(db_session):
    item = item_service.create_item(db_session, name="Checked", description=None, base_price=Decimal("5"))

    with pytest.raises(IntegrityError):
        with unit_of_work(db_session):
            db_session.add(
                Variant(
                    item_id=item.id,
                    sku="NEG-PRICE",
                    price=Decimal("-1.00"),
                    stock_quantity=0,
                    min_stock_level=0,
                )
            )

    assert variant_service.list_variants_by_item(db_session, item.id) == []


def test_timestamps_are_utc_aware(db_session):
    variant = _variant(db_session, sku="TZ-1", stock_quantity=2)
    movement = inventory_service.get_movement_history(db_session, variant.id)[0]

    for value in (variant.created_at, variant.updated_at, movement.created_at):
        assert value.tzinfo is not None
        assert value.utcoffset().total_seconds() == 0
