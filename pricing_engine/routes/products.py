from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from pricing_engine.database.connection import get_db
from pricing_engine.dependencies.auth import require_admin
from pricing_engine.enums.product import ProductStatus
from pricing_engine.schemas.product import (
    BulkProductSaleRequest,
    ProductCreate,
    ProductPriceUpdate,
    ProductResponse,
    UpdatedCountResponse,
)
from pricing_engine.schemas.user import Actor
from pricing_engine.services.product_service import (
    bulk_set_product_sale,
    create_product,
    delete_product,
    get_product,
    list_on_sale_products,
    list_products,
    update_product_price,
)

router = APIRouter(prefix="/products", tags=["Products"])


# CREATE
@router.post("/", response_model=ProductResponse, status_code=201)
def create(data: ProductCreate, db: Session = Depends(get_db), actor: Actor = Depends(require_admin)):
    return create_product(db, actor, data)


# LIST
@router.get("/", response_model=list[ProductResponse])
def list_all(
    status: Optional[ProductStatus] = None,
    category_id: Optional[str] = None,
    db: Session = Depends(get_db),
):
    return list_products(db, status=status, category_id=category_id)


# ON SALE (public storefront)
@router.get("/on-sale", response_model=list[ProductResponse])
def list_on_sale(db: Session = Depends(get_db)):
    return list_on_sale_products(db)


# BULK SALE FLAG
@router.post("/bulk/sale", response_model=UpdatedCountResponse)
def bulk_sale(
    request: BulkProductSaleRequest,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_admin),
):
    updated_count = bulk_set_product_sale(db, actor, request)
    return UpdatedCountResponse(
        message=f"Updated sale status for {updated_count} products",
        updated_count=updated_count,
    )


# GET BY ID
@router.get("/{product_id}", response_model=ProductResponse)
def get(product_id: str, db: Session = Depends(get_db)):
    return get_product(db, product_id)


# PRICE UPDATE
@router.put("/{product_id}/price", response_model=ProductResponse)
def update_price(
    product_id: str,
    data: ProductPriceUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_admin),
):
    return update_product_price(db, actor, product_id, data.price)


# DELETE
@router.delete("/{product_id}")
def delete(product_id: str, db: Session = Depends(get_db), actor: Actor = Depends(require_admin)):
    delete_product(db, actor, product_id)
    return {"message": "Product deleted"}
