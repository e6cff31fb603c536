import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from pricing_engine.core.clock import utcnow
from pricing_engine.core.errors import InvalidRequestError, NotFoundError
from pricing_engine.core.security import ensure_admin
from pricing_engine.enums.pricing import ChangeReason
from pricing_engine.enums.product import ProductStatus
from pricing_engine.models.product import Product
from pricing_engine.schemas.product import BulkProductSaleRequest, ProductCreate
from pricing_engine.schemas.user import Actor
from pricing_engine.services.price_history_service import record_price_change
from pricing_engine.services.pricing_service.calculate_price import (
    calculate_sale_price,
    finalize_price,
)

logger = logging.getLogger(__name__)


def with_sale_price(product: Product) -> Product:
    """Attach the on-sale display price; None once the sale has ended."""
    sale_price = None
    if product.is_on_sale and (product.sale_ends_at is None or product.sale_ends_at > utcnow()):
        sale_price = calculate_sale_price(
            product.price,
            sale_percentage=product.sale_percentage,
            sale_amount=product.sale_amount,
        )
    product.sale_price = sale_price
    return product


# --------------------------
# CREATE PRODUCT
# --------------------------
def create_product(db: Session, actor: Actor, data: ProductCreate) -> Product:
    ensure_admin(actor)
    values = {key: getattr(value, "value", value) for key, value in data.model_dump().items()}
    if values.get("id") is None:
        values.pop("id", None)
    elif db.query(Product.id).filter(Product.id == values["id"]).first():
        raise InvalidRequestError("Product id already exists")

    if db.query(Product.id).filter(Product.sku == values["sku"]).first():
        raise InvalidRequestError("SKU already exists")

    values["price"] = finalize_price(values["price"])
    product = Product(**values)
    db.add(product)
    db.commit()
    db.refresh(product)
    logger.info("Product %s created by %s", product.id, actor.id)
    return with_sale_price(product)


# --------------------------
# GET PRODUCT
# --------------------------
def _get_product_or_404(db: Session, product_id: str) -> Product:
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise NotFoundError("Product not found")
    return product


def get_product(db: Session, product_id: str) -> Product:
    return with_sale_price(_get_product_or_404(db, product_id))


# --------------------------
# LIST PRODUCTS
# --------------------------
def list_products(
    db: Session,
    status: Optional[ProductStatus] = None,
    category_id: Optional[str] = None,
) -> List[Product]:
    query = db.query(Product)
    if status is not None:
        query = query.filter(Product.status == status.value)
    if category_id is not None:
        query = query.filter(Product.category_id == category_id)
    return [with_sale_price(p) for p in query.order_by(Product.created_at.asc(), Product.id.asc()).all()]


def list_on_sale_products(db: Session) -> List[Product]:
    products = (
        db.query(Product)
        .filter(
            Product.status == ProductStatus.ACTIVE.value,
            Product.is_on_sale.is_(True),
            Product.sale_ends_at > utcnow(),
        )
        .order_by(Product.sale_ends_at.asc())
        .all()
    )
    return [with_sale_price(p) for p in products]


# --------------------------
# DELETE PRODUCT
# --------------------------
def delete_product(db: Session, actor: Actor, product_id: str) -> None:
    ensure_admin(actor)
    product = _get_product_or_404(db, product_id)

    # ledger rows go with the product
    db.delete(product)
    db.commit()
    logger.info("Product %s deleted by %s", product_id, actor.id)


# --------------------------
# UPDATE PRICE + HISTORY
# --------------------------
def update_product_price(db: Session, actor: Actor, product_id: str, new_price: float) -> Product:
    ensure_admin(actor)
    product = _get_product_or_404(db, product_id)
    final_price = finalize_price(new_price)

    if final_price != product.price:
        record_price_change(
            db,
            product_id=product.id,
            previous_price=product.price,
            new_price=final_price,
            change_reason=ChangeReason.manual,
            changed_by=actor.id,
        )
        product.price = final_price
        product.version = (product.version or 0) + 1
        db.commit()
        db.refresh(product)
        logger.info("Product %s price set to %.2f by %s", product_id, final_price, actor.id)

    return with_sale_price(product)


# --------------------------
# BULK SALE FLAG
# --------------------------
def bulk_set_product_sale(db: Session, actor: Actor, request: BulkProductSaleRequest) -> int:
    """
    Put products on sale by hand (or take them off). Clearing the flag also
    clears compare_at_price and any sale link.
    """
    ensure_admin(actor)

    if request.is_on_sale:
        values = {
            Product.is_on_sale: True,
            Product.sale_percentage: request.sale_percentage,
            Product.sale_amount: None,
            Product.sale_ends_at: request.sale_ends_at,
        }
    else:
        values = {
            Product.is_on_sale: False,
            Product.sale_percentage: None,
            Product.sale_amount: None,
            Product.sale_ends_at: None,
            Product.active_sale_id: None,
            Product.compare_at_price: None,
        }

    updated_count = (
        db.query(Product)
        .filter(Product.id.in_(request.product_ids))
        .update(values, synchronize_session="fetch")
    )
    db.commit()
    logger.info(
        "Sale flag set to %s on %d products by %s",
        request.is_on_sale,
        updated_count,
        actor.id,
    )
    return updated_count
