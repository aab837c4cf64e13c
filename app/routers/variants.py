from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.api_docs import error_responses
from app.core.config import settings
from app.core.deps import get_db
from app.schemas.common import paginate
from app.schemas.inventory import StockOut
from app.schemas.variant import VariantCreate, VariantListOut, VariantOut, VariantUpdate, to_variant_out
from app.services import inventory_service, variant_service
from app.services.variant_service import VariantDraft

router = APIRouter(prefix="/variants", tags=["variants"])

_VARIANT_LIST_EXAMPLE = {
    200: {
        "description": "Paginated variants",
        "content": {
            "application/json": {
                "example": {
                    "items": [
                        {
                            "id": 1,
                            "item_id": 1,
                            "sku": "TSHIRT-M-BLU",
                            "size": "M",
                            "color": "Blue",
                            "material": "Cotton",
                            "price": 19.99,
                            "stock_quantity": 3,
                            "min_stock_level": 5,
                            "in_stock": True,
                            "needs_restock": True,
                            "created_at": "2026-10-18T10:00:00Z",
                            "updated_at": "2026-10-18T10:00:00Z",
                        }
                    ],
                    "pagination": {
                        "total": 1,
                        "limit": 50,
                        "offset": 0,
                        "count": 1,
                        "has_next": False,
                    },
                }
            }
        },
    },
}


def _variant_page(variants, *, limit: int, offset: int) -> VariantListOut:
    page, pagination = paginate(variants, limit=limit, offset=offset)
    return VariantListOut(items=[to_variant_out(v) for v in page], pagination=pagination)


@router.post(
    "",
    response_model=VariantOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create variant",
    description="A positive `stock_quantity` is recorded as an `Initial stock` IN movement.",
    responses=error_responses(404, 409, 422, 500),
)
def create_variant(payload: VariantCreate, db: Session = Depends(get_db)):
    variant = variant_service.create_variant(
        db,
        item_id=payload.item_id,
        draft=VariantDraft(**payload.model_dump(exclude={"item_id"})),
    )
    return to_variant_out(variant)


@router.get(
    "/low-stock",
    response_model=VariantListOut,
    summary="List low-stock variants",
    description="Variants with `0 < stock_quantity <= min_stock_level`. Zero stock is listed under out-of-stock.",
    responses={**_VARIANT_LIST_EXAMPLE, **error_responses(422, 500)},
)
def list_low_stock_variants(
    limit: int = Query(default=settings.default_page_size, ge=1, le=settings.max_page_size, description="Page size"),
    offset: int = Query(default=0, ge=0, description="Pagination offset"),
    db: Session = Depends(get_db),
):
    return _variant_page(variant_service.list_low_stock(db), limit=limit, offset=offset)


@router.get(
    "/out-of-stock",
    response_model=VariantListOut,
    summary="List out-of-stock variants",
    responses=error_responses(422, 500),
)
def list_out_of_stock_variants(
    limit: int = Query(default=settings.default_page_size, ge=1, le=settings.max_page_size, description="Page size"),
    offset: int = Query(default=0, ge=0, description="Pagination offset"),
    db: Session = Depends(get_db),
):
    return _variant_page(variant_service.list_out_of_stock(db), limit=limit, offset=offset)


@router.get(
    "/in-stock",
    response_model=VariantListOut,
    summary="List in-stock variants",
    responses=error_responses(422, 500),
)
def list_in_stock_variants(
    limit: int = Query(default=settings.default_page_size, ge=1, le=settings.max_page_size, description="Page size"),
    offset: int = Query(default=0, ge=0, description="Pagination offset"),
    db: Session = Depends(get_db),
):
    return _variant_page(variant_service.list_in_stock(db), limit=limit, offset=offset)


@router.get(
    "/item/{item_id}",
    response_model=VariantListOut,
    summary="List variants of an item",
    responses=error_responses(404, 422, 500),
)
def list_item_variants(
    item_id: int,
    limit: int = Query(default=settings.default_page_size, ge=1, le=settings.max_page_size, description="Page size"),
    offset: int = Query(default=0, ge=0, description="Pagination offset"),
    db: Session = Depends(get_db),
):
    return _variant_page(variant_service.list_variants_by_item(db, item_id), limit=limit, offset=offset)


@router.get(
    "/sku/{sku}",
    response_model=VariantOut,
    summary="Get variant by SKU",
    responses=error_responses(404, 422, 500),
)
def get_variant_by_sku(sku: str, db: Session = Depends(get_db)):
    return to_variant_out(variant_service.get_variant_by_sku(db, sku))


@router.get(
    "/{variant_id}",
    response_model=VariantOut,
    summary="Get variant",
    responses=error_responses(404, 422, 500),
)
def get_variant(variant_id: int, db: Session = Depends(get_db)):
    return to_variant_out(variant_service.get_variant(db, variant_id))


@router.put(
    "/{variant_id}",
    response_model=VariantOut,
    summary="Update variant",
    description="Updates SKU, attributes, price and minimum stock level. Stock moves only through `/inventory`.",
    responses=error_responses(404, 409, 422, 500),
)
def update_variant(variant_id: int, payload: VariantUpdate, db: Session = Depends(get_db)):
    variant = variant_service.update_variant(
        db,
        variant_id,
        sku=payload.sku,
        size=payload.size,
        color=payload.color,
        material=payload.material,
        price=payload.price,
        min_stock_level=payload.min_stock_level,
    )
    return to_variant_out(variant)


@router.delete(
    "/{variant_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete variant",
    description="Movement history is kept; its entries lose the variant id but keep the SKU.",
    responses=error_responses(404, 422, 500),
)
def delete_variant(variant_id: int, db: Session = Depends(get_db)) -> None:
    variant_service.delete_variant(db, variant_id)


@router.post(
    "/{variant_id}/reserve",
    response_model=StockOut,
    summary="Reserve stock for a sale",
    description="Recorded as an OUT movement reasoned `Sale reservation`.",
    responses=error_responses(400, 404, 409, 422, 500),
)
def reserve_stock(
    variant_id: int,
    quantity: int = Query(..., description="Units to reserve"),
    db: Session = Depends(get_db),
):
    inventory_service.reserve_stock(db, variant_id, quantity)
    return StockOut()
