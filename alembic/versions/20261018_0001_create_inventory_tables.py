"""create items, variants and stock movement ledger

Revision ID: 20261018_0001
Revises:
Create Date: 2026-10-18 09:00:00.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "20261018_0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "items",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("base_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.UniqueConstraint("name", name="uq_items_name"),
        sa.CheckConstraint("base_price > 0", name="ck_items_base_price_positive"),
    )

    op.create_table(
        "variants",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "item_id",
            sa.Integer(),
            sa.ForeignKey("items.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("sku", sa.String(length=100), nullable=False),
        sa.Column("size", sa.String(length=50), nullable=True),
        sa.Column("color", sa.String(length=50), nullable=True),
        sa.Column("material", sa.String(length=100), nullable=True),
        sa.Column("price", sa.Numeric(12, 2), nullable=False),
        sa.Column("stock_quantity", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("min_stock_level", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("version_id", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.UniqueConstraint("sku", name="uq_variants_sku"),
        sa.UniqueConstraint("item_id", "size", "color", "material", name="uq_variants_item_attributes"),
        sa.CheckConstraint("stock_quantity >= 0", name="ck_variants_stock_quantity_non_negative"),
        sa.CheckConstraint("min_stock_level >= 0", name="ck_variants_min_stock_level_non_negative"),
        sa.CheckConstraint("price > 0", name="ck_variants_price_positive"),
    )
    op.create_index("ix_variants_item_id", "variants", ["item_id"])
    op.create_index("ix_variants_stock_quantity", "variants", ["stock_quantity"])

    op.create_table(
        "stock_movements",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "variant_id",
            sa.Integer(),
            sa.ForeignKey("variants.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("variant_sku", sa.String(length=100), nullable=False),
        sa.Column(
            "movement_type",
            sa.Enum("IN", "OUT", "ADJUSTMENT", name="movement_type", native_enum=False, length=20),
            nullable=False,
        ),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("reason", sa.String(length=255), nullable=True),
        sa.Column("reference", sa.String(length=100), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
    )
    op.create_index("ix_stock_movements_variant_id", "stock_movements", ["variant_id"])
    op.create_index(
        "ix_stock_movements_variant_created_at",
        "stock_movements",
        ["variant_id", "created_at"],
    )
    op.create_index(
        "ix_stock_movements_variant_type",
        "stock_movements",
        ["variant_id", "movement_type"],
    )


def downgrade() -> None:
    op.drop_index("ix_stock_movements_variant_type", table_name="stock_movements")
    op.drop_index("ix_stock_movements_variant_created_at", table_name="stock_movements")
    op.drop_index("ix_stock_movements_variant_id", table_name="stock_movements")
    op.drop_table("stock_movements")

    op.drop_index("ix_variants_stock_quantity", table_name="variants")
    op.drop_index("ix_variants_item_id", table_name="variants")
    op.drop_table("variants")

    op.drop_table("items")
