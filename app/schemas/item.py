from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.schemas.common import PaginationMeta
from app.schemas.variant import VariantOut, VariantSpecIn


class ItemCreate(BaseModel):
    name: str = Field(max_length=255)
    description: Optional[str] = None
    base_price: Decimal = Field(gt=0)

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("name is required")
        return cleaned

    @field_validator("description")
    @classmethod
    def normalize_description(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        cleaned = value.strip()
        return cleaned or None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Classic T-Shirt",
                "description": "Crew neck, regular fit",
                "base_price": 19.99,
            }
        }
    )


class ItemUpdate(ItemCreate):
    pass


class ItemWithVariantsCreate(ItemCreate):
    variants: list[VariantSpecIn] = Field(default_factory=list)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Classic T-Shirt",
                "description": "Crew neck, regular fit",
                "base_price": 19.99,
                "variants": [
                    {
                        "sku": "TSHIRT-M-BLU",
                        "size": "M",
                        "color": "Blue",
                        "price": 19.99,
                        "stock_quantity": 10,
                        "min_stock_level": 5,
                    },
                    {
                        "sku": "TSHIRT-L-BLU",
                        "size": "L",
                        "color": "Blue",
                        "price": 21.99,
                    },
                ],
            }
        }
    )


class ItemOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    base_price: float
    variants: list[VariantOut] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class ItemListOut(BaseModel):
    items: list[ItemOut]
    pagination: PaginationMeta
