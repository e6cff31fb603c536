import logging
import math
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import and_, func
from sqlalchemy.orm import Session

from pricing_engine.core.clock import utcnow
from pricing_engine.core.errors import InvalidRequestError, NotFoundError
from pricing_engine.core.security import ensure_admin
from pricing_engine.enums.pricing import DiscountType, SaleStatus
from pricing_engine.models.product import Product
from pricing_engine.models.sale import Sale
from pricing_engine.schemas.sale import SaleCreate, SaleUpdate
from pricing_engine.schemas.user import Actor
from pricing_engine.services.pricing_service.calculate_price import sale_discount_fields
from pricing_engine.services.product_matcher import match_products, selector_from_sale

logger = logging.getLogger(__name__)

SYSTEM_ACTOR = Actor(id="system", role="admin")

MAX_PAGE_SIZE = 100

_MS_PER_SECOND = 1000
_MS_PER_MINUTE = 60 * _MS_PER_SECOND
_MS_PER_HOUR = 60 * _MS_PER_MINUTE
_MS_PER_DAY = 24 * _MS_PER_HOUR


# ---------- COMPUTED STATE ----------

def get_sale_status(sale: Any, now: Optional[datetime] = None) -> SaleStatus:
    now = now or utcnow()
    if not sale.is_active:
        return SaleStatus.inactive
    if now < sale.starts_at:
        return SaleStatus.upcoming
    if now > sale.ends_at:
        return SaleStatus.expired
    return SaleStatus.active


def get_countdown(ends_at: datetime, now: Optional[datetime] = None) -> Dict[str, Any]:
    now = now or utcnow()
    diff = math.floor((ends_at - now).total_seconds() * _MS_PER_SECOND)

    if diff <= 0:
        return {"days": 0, "hours": 0, "minutes": 0, "seconds": 0, "expired": True}

    return {
        "days": diff // _MS_PER_DAY,
        "hours": (diff % _MS_PER_DAY) // _MS_PER_HOUR,
        "minutes": (diff % _MS_PER_HOUR) // _MS_PER_MINUTE,
        "seconds": (diff % _MS_PER_MINUTE) // _MS_PER_SECOND,
        "expired": False,
    }


def with_computed_status(sale: Sale, now: Optional[datetime] = None) -> Sale:
    sale.computed_status = get_sale_status(sale, now)
    return sale


# ---------- PRODUCT EFFECTS ----------

def apply_sale_to_products(db: Session, sale: Sale) -> int:
    """
    Flag every matched product as on sale and link it to `sale`.
    Flushes only; the caller owns the commit.
    """
    products = match_products(db, selector_from_sale(sale))
    discount = sale_discount_fields(sale.discount_type, sale.discount_value)

    for product in products:
        product.is_on_sale = True
        product.sale_percentage = discount["sale_percentage"]
        product.sale_amount = discount["sale_amount"]
        product.sale_ends_at = sale.ends_at
        product.active_sale_id = sale.id

    db.flush()
    logger.info("Sale %s applied to %d products", sale.id, len(products))
    return len(products)


def remove_sale_from_products(db: Session, sale: Sale) -> int:
    """Clear the sale flags only on products this sale put on sale."""
    removed = (
        db.query(Product)
        .filter(Product.active_sale_id == sale.id)
        .update(
            {
                Product.is_on_sale: False,
                Product.sale_percentage: None,
                Product.sale_amount: None,
                Product.sale_ends_at: None,
                Product.active_sale_id: None,
            },
            synchronize_session="fetch",
        )
    )
    logger.info("Sale %s removed from %d products", sale.id, removed)
    return removed


def _has_applied_products(db: Session, sale: Sale) -> bool:
    return (
        db.query(Product.id).filter(Product.active_sale_id == sale.id).first()
        is not None
    )


# ---------- CREATE / READ ----------

def create_sale(db: Session, actor: Actor, data: SaleCreate) -> Sale:
    ensure_admin(actor)
    values = {key: getattr(value, "value", value) for key, value in data.model_dump().items()}

    sale = Sale(**values)
    db.add(sale)
    db.flush()

    if sale.is_active and sale.starts_at <= utcnow():
        apply_sale_to_products(db, sale)

    db.commit()
    db.refresh(sale)
    logger.info("Sale %s created by %s", sale.id, actor.id)
    return with_computed_status(sale)


def _get_sale_or_404(db: Session, sale_id: int) -> Sale:
    sale = db.query(Sale).filter(Sale.id == sale_id).first()
    if not sale:
        raise NotFoundError("Sale not found")
    return sale


def get_sale(db: Session, actor: Actor, sale_id: int) -> Sale:
    ensure_admin(actor)
    return with_computed_status(_get_sale_or_404(db, sale_id))


def list_sales(
    db: Session,
    actor: Actor,
    status: Optional[SaleStatus] = None,
    page: int = 1,
    limit: int = 20,
) -> Dict[str, Any]:
    """One page of sales filtered by computed status, with pagination meta."""
    ensure_admin(actor)
    page = max(page, 1)
    limit = min(max(limit, 1), MAX_PAGE_SIZE)
    now = utcnow()

    query = db.query(Sale)
    if status == SaleStatus.active:
        query = query.filter(
            and_(Sale.is_active.is_(True), Sale.starts_at <= now, Sale.ends_at >= now)
        )
    elif status == SaleStatus.upcoming:
        query = query.filter(and_(Sale.is_active.is_(True), Sale.starts_at > now))
    elif status == SaleStatus.expired:
        query = query.filter(and_(Sale.is_active.is_(True), Sale.ends_at < now))
    elif status == SaleStatus.inactive:
        query = query.filter(Sale.is_active.is_(False))

    total = query.with_entities(func.count(Sale.id)).scalar() or 0
    sales = (
        query.order_by(Sale.created_at.desc(), Sale.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return {
        "sales": [with_computed_status(sale, now) for sale in sales],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": math.ceil(total / limit),
        },
    }


# ---------- UPDATE / DELETE ----------

def update_sale(db: Session, actor: Actor, sale_id: int, data: SaleUpdate) -> Sale:
    ensure_admin(actor)
    sale = _get_sale_or_404(db, sale_id)

    changes = {
        key: getattr(value, "value", value)
        for key, value in data.model_dump(exclude_unset=True).items()
    }
    for key in ("name", "discount_type", "discount_value", "apply_to", "starts_at", "ends_at", "is_active"):
        if key in changes and changes[key] is None:
            raise InvalidRequestError(f"{key} cannot be null")

    starts_at = changes.get("starts_at", sale.starts_at)
    ends_at = changes.get("ends_at", sale.ends_at)
    if ends_at <= starts_at:
        raise InvalidRequestError("ends_at must be after starts_at")

    discount_type = changes.get("discount_type", sale.discount_type)
    discount_value = changes.get("discount_value", sale.discount_value)
    if discount_type == DiscountType.percentage.value and discount_value > 100:
        raise InvalidRequestError("percentage discount cannot exceed 100")

    # drop the old effects, then re-apply under the new definition
    remove_sale_from_products(db, sale)

    for key, value in changes.items():
        if key in ("category_ids", "product_ids", "tags") and value is None:
            value = []
        setattr(sale, key, value)
    db.flush()

    if get_sale_status(sale) == SaleStatus.active:
        apply_sale_to_products(db, sale)

    db.commit()
    db.refresh(sale)
    logger.info("Sale %s updated by %s", sale_id, actor.id)
    return with_computed_status(sale)


def delete_sale(db: Session, actor: Actor, sale_id: int) -> None:
    ensure_admin(actor)
    sale = _get_sale_or_404(db, sale_id)

    remove_sale_from_products(db, sale)
    db.delete(sale)
    db.commit()
    logger.info("Sale %s deleted by %s", sale_id, actor.id)


# ---------- STATE TRANSITIONS ----------

def activate_sale(db: Session, actor: Actor, sale_id: int) -> Sale:
    ensure_admin(actor)
    sale = _get_sale_or_404(db, sale_id)

    sale.is_active = True
    db.flush()
    apply_sale_to_products(db, sale)

    db.commit()
    db.refresh(sale)
    logger.info("Sale %s activated by %s", sale_id, actor.id)
    return with_computed_status(sale)


def deactivate_sale(db: Session, actor: Actor, sale_id: int) -> Sale:
    ensure_admin(actor)
    sale = _get_sale_or_404(db, sale_id)

    remove_sale_from_products(db, sale)
    sale.is_active = False

    db.commit()
    db.refresh(sale)
    logger.info("Sale %s deactivated by %s", sale_id, actor.id)
    return with_computed_status(sale)


def reconcile_sales(db: Session, actor: Actor = SYSTEM_ACTOR) -> Dict[str, int]:
    """
    Bring product flags in line with sale time windows: apply sales that
    are active but not yet on any product, remove effects of sales that
    expired or were switched off. Upcoming sales are left as they are.
    """
    ensure_admin(actor)
    now = utcnow()
    applied = 0
    removed = 0

    for sale in db.query(Sale).all():
        status = get_sale_status(sale, now)
        if status == SaleStatus.active and not _has_applied_products(db, sale):
            if apply_sale_to_products(db, sale):
                applied += 1
        elif status in (SaleStatus.expired, SaleStatus.inactive):
            if remove_sale_from_products(db, sale):
                removed += 1

    db.commit()
    if applied or removed:
        logger.info("Sale reconcile by %s: applied=%d removed=%d", actor.id, applied, removed)
    return {"applied": applied, "removed": removed}


# ---------- PUBLIC ----------

def get_active_sales(db: Session, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
    """Sales in the `active` computed state, ending soonest first."""
    now = now or utcnow()
    sales = (
        db.query(Sale)
        .filter(Sale.is_active.is_(True), Sale.starts_at <= now, Sale.ends_at >= now)
        .order_by(Sale.ends_at.asc())
        .all()
    )
    return [
        {
            "id": sale.id,
            "name": sale.name,
            "description": sale.description,
            "discount_type": sale.discount_type,
            "discount_value": sale.discount_value,
            "show_countdown": sale.show_countdown,
            "banner_text": sale.banner_text,
            "banner_color": sale.banner_color,
            "ends_at": sale.ends_at,
            "countdown": get_countdown(sale.ends_at, now),
        }
        for sale in sales
    ]


def get_sale_countdown(db: Session, sale_id: int, now: Optional[datetime] = None) -> Dict[str, Any]:
    now = now or utcnow()
    sale = _get_sale_or_404(db, sale_id)
    is_active = get_sale_status(sale, now) == SaleStatus.active

    return {
        "id": sale.id,
        "name": sale.name,
        "is_active": is_active,
        "show_countdown": sale.show_countdown,
        "banner_text": sale.banner_text,
        "banner_color": sale.banner_color,
        "starts_at": sale.starts_at,
        "ends_at": sale.ends_at,
        "countdown": get_countdown(sale.ends_at, now) if is_active else None,
    }
