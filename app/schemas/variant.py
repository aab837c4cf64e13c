from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.models.item import Variant
from app.schemas.common import PaginationMeta


class VariantAttributesIn(BaseModel):
    sku: str = Field(max_length=100)
    size: Optional[str] = Field(default=None, max_length=50)
    color: Optional[str] = Field(default=None, max_length=50)
    material: Optional[str] = Field(default=None, max_length=100)
    price: Decimal = Field(gt=0)
    min_stock_level: int = Field(default=0, ge=0)

    @field_validator("sku")
    @classmethod
    def validate_sku(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("sku is required")
        return cleaned

    @field_validator("size", "color", "material")
    @classmethod
    def normalize_optional_text(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        cleaned = value.strip()
        return cleaned or None


class VariantSpecIn(VariantAttributesIn):
    """A variant as supplied inside ``POST /items/with-variants``."""

    stock_quantity: int = Field(default=0, ge=0)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "sku": "TSHIRT-M-BLU",
                "size": "M",
                "color": "Blue",
                "material": "Cotton",
                "price": 19.99,
                "stock_quantity": 10,
                "min_stock_level": 5,
            }
        }
    )


class VariantCreate(VariantSpecIn):
    item_id: int

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "item_id": 1,
                "sku": "TSHIRT-M-BLU",
                "size": "M",
                "color": "Blue",
                "material": "Cotton",
                "price": 19.99,
                "stock_quantity": 10,
                "min_stock_level": 5,
            }
        }
    )


class VariantUpdate(VariantAttributesIn):
    # stock_quantity is deliberately absent: stock only moves through /inventory.
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "sku": "TSHIRT-M-BLU",
                "size": "M",
                "color": "Navy",
                "material": "Cotton",
                "price": 21.50,
                "min_stock_level": 8,
            }
        }
    )


class VariantOut(BaseModel):
    id: int
    item_id: int
    sku: str
    size: Optional[str] = None
    color: Optional[str] = None
    material: Optional[str] = None
    price: float
    stock_quantity: int
    min_stock_level: int
    in_stock: bool
    needs_restock: bool
    created_at: datetime
    updated_at: datetime


class VariantListOut(BaseModel):
    items: list[VariantOut]
    pagination: PaginationMeta


def to_variant_out(variant: Variant) -> VariantOut:
    return VariantOut(
        id=variant.id,
        item_id=variant.item_id,
        sku=variant.sku,
        size=variant.size,
        color=variant.color,
        material=variant.material,
        price=float(variant.price),
        stock_quantity=variant.stock_quantity,
        min_stock_level=variant.min_stock_level,
        in_stock=variant.in_stock,
        needs_restock=variant.needs_restock,
        created_at=variant.created_at,
        updated_at=variant.updated_at,
    )
