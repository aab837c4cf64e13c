from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.api_docs import error_responses
from app.core.config import settings
from app.core.deps import get_db
from app.models.item import Item, Variant
from app.schemas.common import paginate
from app.schemas.item import ItemCreate, ItemListOut, ItemOut, ItemUpdate, ItemWithVariantsCreate
from app.schemas.variant import to_variant_out
from app.services import item_service
from app.services.variant_service import VariantDraft, variants_by_item

router = APIRouter(prefix="/items", tags=["items"])


def _item_out(item: Item, variants: list[Variant]) -> ItemOut:
    return ItemOut(
        id=item.id,
        name=item.name,
        description=item.description,
        base_price=float(item.base_price),
        variants=[to_variant_out(v) for v in variants],
        created_at=item.created_at,
        updated_at=item.updated_at,
    )


def _items_out(db: Session, items: list[Item]) -> list[ItemOut]:
    grouped = variants_by_item(db, [item.id for item in items])
    return [_item_out(item, grouped.get(item.id, [])) for item in items]


@router.post(
    "",
    response_model=ItemOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create item",
    responses=error_responses(409, 422, 500),
)
def create_item(payload: ItemCreate, db: Session = Depends(get_db)):
    item = item_service.create_item(
        db,
        name=payload.name,
        description=payload.description,
        base_price=payload.base_price,
    )
    return _item_out(item, [])


@router.post(
    "/with-variants",
    response_model=ItemOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create item together with its variants",
    description=(
        "Variants whose SKU already exists, or whose size/color/material repeat an "
        "earlier variant in the request, are skipped. Variants created with stock "
        "get an `Initial stock` movement."
    ),
    responses=error_responses(409, 422, 500),
)
def create_item_with_variants(payload: ItemWithVariantsCreate, db: Session = Depends(get_db)):
    item = item_service.create_item_with_variants(
        db,
        name=payload.name,
        description=payload.description,
        base_price=payload.base_price,
        variants=[VariantDraft(**spec.model_dump()) for spec in payload.variants],
    )
    return _items_out(db, [item])[0]


@router.get(
    "",
    response_model=ItemListOut,
    summary="List items with their variants",
    responses=error_responses(422, 500),
)
def list_items(
    limit: int = Query(default=settings.default_page_size, ge=1, le=settings.max_page_size, description="Page size"),
    offset: int = Query(default=0, ge=0, description="Pagination offset"),
    db: Session = Depends(get_db),
):
    page, pagination = paginate(item_service.list_items(db), limit=limit, offset=offset)
    return ItemListOut(items=_items_out(db, page), pagination=pagination)


@router.get(
    "/search",
    response_model=ItemListOut,
    summary="Search items by name (case-insensitive substring)",
    responses=error_responses(422, 500),
)
def search_items(
    name: str = Query(..., min_length=1, description="Substring to look for in item names"),
    limit: int = Query(default=settings.default_page_size, ge=1, le=settings.max_page_size, description="Page size"),
    offset: int = Query(default=0, ge=0, description="Pagination offset"),
    db: Session = Depends(get_db),
):
    page, pagination = paginate(item_service.search_items_by_name(db, name), limit=limit, offset=offset)
    return ItemListOut(items=_items_out(db, page), pagination=pagination)


@router.get(
    "/{item_id}",
    response_model=ItemOut,
    summary="Get item",
    responses=error_responses(404, 422, 500),
)
def get_item(item_id: int, db: Session = Depends(get_db)):
    item = item_service.get_item(db, item_id)
    return _items_out(db, [item])[0]


@router.put(
    "/{item_id}",
    response_model=ItemOut,
    summary="Update item",
    description="Overwrites name, description and base price. Variants are left untouched.",
    responses=error_responses(404, 409, 422, 500),
)
def update_item(item_id: int, payload: ItemUpdate, db: Session = Depends(get_db)):
    item = item_service.update_item(
        db,
        item_id,
        name=payload.name,
        description=payload.description,
        base_price=payload.base_price,
    )
    return _items_out(db, [item])[0]


@router.delete(
    "/{item_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete item and its variants",
    responses=error_responses(404, 422, 500),
)
def delete_item(item_id: int, db: Session = Depends(get_db)) -> None:
    item_service.delete_item(db, item_id)
