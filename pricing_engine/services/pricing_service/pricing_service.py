import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from pricing_engine.core.config import settings
from pricing_engine.core.errors import InvalidRequestError, NotFoundError
from pricing_engine.core.security import ensure_admin
from pricing_engine.enums.pricing import ChangeReason
from pricing_engine.models.pricing_rule import PricingRule
from pricing_engine.schemas.pricing_rule import (
    PricingRuleCreate,
    PricingRulePreviewItem,
    PricingRulePreviewResponse,
    PricingRuleUpdate,
)
from pricing_engine.schemas.user import Actor
from pricing_engine.services.pricing_service.bulk_update import (
    BatchResult,
    apply_price_changes,
    create_batch_descriptor,
)
from pricing_engine.services.pricing_service.calculate_price import (
    adjust_price,
    compute_new_price,
)
from pricing_engine.services.product_matcher import match_products, selector_from_rule

logger = logging.getLogger(__name__)


def _enum_values(data: dict) -> dict:
    return {key: getattr(value, "value", value) for key, value in data.items()}


def create_pricing_rule(db: Session, actor: Actor, rule: PricingRuleCreate) -> PricingRule:
    ensure_admin(actor)
    db_rule = PricingRule(**_enum_values(rule.model_dump()))
    db.add(db_rule)
    db.commit()
    db.refresh(db_rule)
    logger.info("Pricing rule %s created by %s", db_rule.id, actor.id)
    return db_rule


def get_pricing_rules(db: Session, actor: Actor, is_active: Optional[bool] = None) -> List[PricingRule]:
    ensure_admin(actor)
    query = db.query(PricingRule)
    if is_active is not None:
        query = query.filter(PricingRule.is_active == is_active)
    return query.order_by(PricingRule.priority.desc(), PricingRule.created_at.desc()).all()


def get_pricing_rule(db: Session, actor: Actor, rule_id: int) -> PricingRule:
    ensure_admin(actor)
    db_rule = db.query(PricingRule).filter(PricingRule.id == rule_id).first()
    if not db_rule:
        raise NotFoundError("Pricing rule not found")
    return db_rule


def update_pricing_rule(
    db: Session, actor: Actor, rule_id: int, rule_update: PricingRuleUpdate
) -> PricingRule:
    db_rule = get_pricing_rule(db, actor, rule_id)

    changes = _enum_values(rule_update.model_dump(exclude_unset=True))
    for key in ("name", "rule_type", "adjustment_type", "adjustment_value", "apply_to"):
        if key in changes and changes[key] is None:
            raise InvalidRequestError(f"{key} cannot be null")

    min_price = changes.get("min_price", db_rule.min_price)
    max_price = changes.get("max_price", db_rule.max_price)
    if min_price is not None and max_price is not None and min_price > max_price:
        raise InvalidRequestError("min_price must not exceed max_price")

    for key, value in changes.items():
        if key in ("category_ids", "subcategory_ids", "conditions", "brands") and value is None:
            value = []
        setattr(db_rule, key, value)

    db.commit()
    db.refresh(db_rule)
    logger.info("Pricing rule %s updated by %s", rule_id, actor.id)
    return db_rule


def delete_pricing_rule(db: Session, actor: Actor, rule_id: int) -> None:
    db_rule = get_pricing_rule(db, actor, rule_id)
    db.delete(db_rule)
    db.commit()
    logger.info("Pricing rule %s deleted by %s", rule_id, actor.id)


# ---------- PREVIEW / APPLY ----------

def preview_pricing_rule(db: Session, actor: Actor, rule_id: int) -> PricingRulePreviewResponse:
    """
    Dry run of `apply_pricing_rule`. Totals cover every matched product;
    only the first PREVIEW_LIMIT rows are listed.
    """
    db_rule = get_pricing_rule(db, actor, rule_id)
    products = match_products(db, selector_from_rule(db_rule))

    preview: List[PricingRulePreviewItem] = []
    total_current_value = 0.0
    total_new_value = 0.0

    for product in products:
        new_price = compute_new_price(product.price, db_rule)
        total_current_value += product.price
        total_new_value += new_price
        if len(preview) < settings.PREVIEW_LIMIT:
            preview.append(
                PricingRulePreviewItem(
                    id=product.id,
                    name=product.name,
                    sku=product.sku,
                    current_price=product.price,
                    new_price=new_price,
                    change=round(new_price - product.price, 2),
                    change_percent=(
                        round((new_price - product.price) / product.price * 100, 2)
                        if product.price
                        else 0.0
                    ),
                )
            )

    average_change = 0.0
    if products and total_current_value > 0:
        average_change = (total_new_value - total_current_value) / total_current_value * 100

    return PricingRulePreviewResponse(
        rule_id=db_rule.id,
        affected_products=len(products),
        total_current_value=round(total_current_value, 2),
        total_new_value=round(total_new_value, 2),
        average_change=round(average_change, 2),
        products=preview,
    )


def apply_pricing_rule(db: Session, actor: Actor, rule_id: int) -> BatchResult:
    db_rule = get_pricing_rule(db, actor, rule_id)
    selector = selector_from_rule(db_rule)
    products = match_products(db, selector)

    # read before the descriptor commit expires db_rule
    rule_type = db_rule.rule_type
    adjustment_type = db_rule.adjustment_type
    adjustment_value = db_rule.adjustment_value

    descriptor = create_batch_descriptor(
        db,
        actor=actor,
        selector=selector,
        adjustment_type=adjustment_type,
        adjustment_value=adjustment_value,
        change_reason=ChangeReason.pricing_rule,
        rule_id=rule_id,
    )

    return apply_price_changes(
        db,
        products=products,
        compute=lambda price: adjust_price(price, rule_type, adjustment_type, adjustment_value),
        actor=actor,
        descriptor=descriptor,
        change_reason=ChangeReason.pricing_rule,
        rule_id=rule_id,
        set_compare_at_price=True,
    )
