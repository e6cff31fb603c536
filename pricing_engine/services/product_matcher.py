"""
Resolve which catalog products a pricing rule, bulk update or sale targets.

Only ACTIVE products are ever matched. A selector whose `apply_to` names a
list-based target (category, brand, tags, ...) with an empty list matches
nothing; it is never widened to "all".
"""
from dataclasses import dataclass, field, asdict
from typing import Any, Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from pricing_engine.enums.product import ProductStatus
from pricing_engine.models.product import Product

APPLY_TO_ALL = "all"
APPLY_TO_CATEGORY = "category"
APPLY_TO_SUBCATEGORY = "subcategory"
APPLY_TO_CONDITION = "condition"
APPLY_TO_BRAND = "brand"
APPLY_TO_PRICE_RANGE = "price_range"
APPLY_TO_TAGS = "tags"
APPLY_TO_PRODUCTS = "products"

KNOWN_APPLY_TO = {
    APPLY_TO_ALL,
    APPLY_TO_CATEGORY,
    APPLY_TO_SUBCATEGORY,
    APPLY_TO_CONDITION,
    APPLY_TO_BRAND,
    APPLY_TO_PRICE_RANGE,
    APPLY_TO_TAGS,
    APPLY_TO_PRODUCTS,
}


@dataclass
class ProductSelector:
    apply_to: str = APPLY_TO_ALL
    category_ids: List[str] = field(default_factory=list)
    subcategory_ids: List[str] = field(default_factory=list)
    conditions: List[str] = field(default_factory=list)
    brands: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    product_ids: List[str] = field(default_factory=list)
    min_price: Optional[float] = None
    max_price: Optional[float] = None

    def target_ids(self) -> List[str]:
        """The id/value list the selector filters on, for batch descriptors."""
        return {
            APPLY_TO_CATEGORY: self.category_ids,
            APPLY_TO_SUBCATEGORY: self.subcategory_ids,
            APPLY_TO_CONDITION: self.conditions,
            APPLY_TO_BRAND: self.brands,
            APPLY_TO_TAGS: self.tags,
            APPLY_TO_PRODUCTS: self.product_ids,
        }.get(self.apply_to, [])

    def to_dict(self) -> dict:
        return asdict(self)


def _value(v: Any) -> Any:
    return getattr(v, "value", v)


def _as_list(values: Optional[Iterable[Any]]) -> List[str]:
    return [_value(v) for v in (values or [])]


def selector_from_rule(rule: Any) -> ProductSelector:
    """Build a selector from a PricingRule row or a bulk update request."""
    return ProductSelector(
        apply_to=_value(getattr(rule, "apply_to", None)) or APPLY_TO_ALL,
        category_ids=_as_list(getattr(rule, "category_ids", None)),
        subcategory_ids=_as_list(getattr(rule, "subcategory_ids", None)),
        conditions=_as_list(getattr(rule, "conditions", None)),
        brands=_as_list(getattr(rule, "brands", None)),
        min_price=getattr(rule, "min_price", None),
        max_price=getattr(rule, "max_price", None),
    )


def selector_from_sale(sale: Any) -> ProductSelector:
    return ProductSelector(
        apply_to=_value(sale.apply_to) or APPLY_TO_ALL,
        category_ids=_as_list(sale.category_ids),
        product_ids=_as_list(sale.product_ids),
        tags=_as_list(sale.tags),
    )


# ===================== PREDICATE =====================


def product_matches(product: Any, selector: ProductSelector) -> bool:
    """In-memory form of `match_products` for a single product."""
    if _value(product.status) != ProductStatus.ACTIVE.value:
        return False

    apply_to = selector.apply_to
    if apply_to == APPLY_TO_ALL:
        return True
    if apply_to == APPLY_TO_CATEGORY:
        return product.category_id in selector.category_ids
    if apply_to == APPLY_TO_SUBCATEGORY:
        return product.subcategory_id in selector.subcategory_ids
    if apply_to == APPLY_TO_CONDITION:
        return _value(product.condition) in selector.conditions
    if apply_to == APPLY_TO_BRAND:
        wanted = {b.lower() for b in selector.brands}
        return bool(product.brand) and product.brand.lower() in wanted
    if apply_to == APPLY_TO_TAGS:
        return bool(set(product.tags or []) & set(selector.tags))
    if apply_to == APPLY_TO_PRODUCTS:
        return product.id in selector.product_ids
    if apply_to == APPLY_TO_PRICE_RANGE:
        if selector.min_price is not None and product.price < selector.min_price:
            return False
        if selector.max_price is not None and product.price > selector.max_price:
            return False
        return True
    return False


# ===================== QUERY =====================


def match_products(db: Session, selector: ProductSelector) -> List[Product]:
    """
    Return every eligible product, unpaginated. Callers that display a
    preview truncate the result themselves.
    """
    apply_to = selector.apply_to
    query = db.query(Product).filter(Product.status == ProductStatus.ACTIVE.value)

    if apply_to == APPLY_TO_ALL:
        pass
    elif apply_to == APPLY_TO_CATEGORY:
        if not selector.category_ids:
            return []
        query = query.filter(Product.category_id.in_(selector.category_ids))
    elif apply_to == APPLY_TO_SUBCATEGORY:
        if not selector.subcategory_ids:
            return []
        query = query.filter(Product.subcategory_id.in_(selector.subcategory_ids))
    elif apply_to == APPLY_TO_CONDITION:
        if not selector.conditions:
            return []
        query = query.filter(Product.condition.in_(selector.conditions))
    elif apply_to == APPLY_TO_BRAND:
        if not selector.brands:
            return []
        query = query.filter(
            func.lower(Product.brand).in_([b.lower() for b in selector.brands])
        )
    elif apply_to == APPLY_TO_PRODUCTS:
        if not selector.product_ids:
            return []
        query = query.filter(Product.id.in_(selector.product_ids))
    elif apply_to == APPLY_TO_PRICE_RANGE:
        if selector.min_price is not None:
            query = query.filter(Product.price >= selector.min_price)
        if selector.max_price is not None:
            query = query.filter(Product.price <= selector.max_price)
    elif apply_to == APPLY_TO_TAGS:
        if not selector.tags:
            return []
        # tags live in a JSON column; overlap is checked in Python
    else:
        return []

    products = query.order_by(Product.created_at.asc(), Product.id.asc()).all()

    if apply_to == APPLY_TO_TAGS:
        wanted = set(selector.tags)
        products = [p for p in products if wanted & set(p.tags or [])]

    return products
