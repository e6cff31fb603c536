"""
Batch price mutation.

Every batch owns a BulkPriceUpdate descriptor that is persisted before the
first product is touched, so each ledger row can point at it. Products are
then written one transaction at a time: the compare-and-swap price update,
its ledger row and the descriptor's affected_count move together or not at
all. A failing product is rolled back and reported; products committed
before it stay committed.
"""
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, List, Optional

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pricing_engine.core.clock import utcnow
from pricing_engine.core.errors import AlreadyRevertedError, NotFoundError
from pricing_engine.core.security import ensure_admin
from pricing_engine.enums.pricing import ChangeReason
from pricing_engine.models.bulk_price_update import BulkPriceUpdate
from pricing_engine.models.price_history import PriceHistory
from pricing_engine.models.product import Product
from pricing_engine.schemas.bulk_price import BulkPriceAdjustRequest, CustomPriceItem
from pricing_engine.schemas.user import Actor
from pricing_engine.services.price_history_service import record_price_change
from pricing_engine.services.pricing_service.calculate_price import (
    apply_adjustment,
    finalize_price,
)
from pricing_engine.services.product_matcher import (
    ProductSelector,
    match_products,
    selector_from_rule,
)

logger = logging.getLogger(__name__)


@dataclass
class BatchResult:
    bulk_update_id: Optional[int] = None
    updated_count: int = 0
    skipped_count: int = 0
    conflicts: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)


@dataclass
class RevertResult:
    bulk_update_id: int
    reverted_count: int = 0
    conflicts: List[str] = field(default_factory=list)


# ---------- DESCRIPTOR ----------

def create_batch_descriptor(
    db: Session,
    actor: Actor,
    selector: ProductSelector,
    adjustment_type: str,
    adjustment_value: float,
    change_reason: ChangeReason = ChangeReason.bulk_update,
    rule_id: Optional[int] = None,
) -> BulkPriceUpdate:
    descriptor = BulkPriceUpdate(
        change_reason=change_reason.value,
        rule_id=rule_id,
        adjustment_type=getattr(adjustment_type, "value", adjustment_type),
        adjustment_value=float(adjustment_value),
        apply_to=selector.apply_to,
        target_ids=selector.target_ids(),
        selector=selector.to_dict(),
        affected_count=0,
        created_by=actor.id,
    )
    db.add(descriptor)
    db.commit()
    db.refresh(descriptor)
    return descriptor


# ---------- ENGINE ----------

def apply_price_changes(
    db: Session,
    products: Iterable[Product],
    compute: Callable[[float], float],
    actor: Actor,
    descriptor: BulkPriceUpdate,
    change_reason: ChangeReason,
    rule_id: Optional[int] = None,
    set_compare_at_price: bool = False,
) -> BatchResult:
    """
    Write `compute(price)` to every product whose price actually changes.

    Unchanged prices are skipped without a write or a ledger row. A product
    whose price moved since it was read is left alone and listed in
    `conflicts`.
    """
    result = BatchResult(bulk_update_id=descriptor.id)
    # commits expire loaded rows, so read what we need up front
    targets = [(product.id, product.price) for product in products]

    for product_id, old_price in targets:
        new_price = compute(old_price)

        if new_price == old_price:
            result.skipped_count += 1
            logger.debug("Price unchanged for product %s, skipping", product_id)
            continue

        values = {
            "price": new_price,
            "version": Product.version + 1,
            "updated_at": utcnow(),
        }
        if set_compare_at_price:
            values["compare_at_price"] = old_price

        try:
            res = db.execute(
                update(Product)
                .where(Product.id == product_id, Product.price == old_price)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            if res.rowcount != 1:
                db.rollback()
                result.conflicts.append(product_id)
                logger.warning(
                    "Product %s price changed concurrently, skipped (batch %s)",
                    product_id,
                    descriptor.id,
                )
                continue

            record_price_change(
                db,
                product_id=product_id,
                previous_price=old_price,
                new_price=new_price,
                change_reason=change_reason,
                changed_by=actor.id,
                rule_id=rule_id,
                bulk_update_id=descriptor.id,
            )
            descriptor.affected_count = (descriptor.affected_count or 0) + 1
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            result.failed.append(product_id)
            logger.exception(
                "Failed to update price for product %s (batch %s)",
                product_id,
                descriptor.id,
            )
            continue

        result.updated_count += 1

    logger.info(
        "Batch %s (%s) by %s: updated=%d skipped=%d conflicts=%d failed=%d",
        descriptor.id,
        change_reason.value,
        actor.id,
        result.updated_count,
        result.skipped_count,
        len(result.conflicts),
        len(result.failed),
    )
    return result


# --------------------------
# BULK PRICE UPDATE
# --------------------------
def bulk_update_prices(db: Session, actor: Actor, request: BulkPriceAdjustRequest) -> BatchResult:
    ensure_admin(actor)

    selector = selector_from_rule(request)
    products = match_products(db, selector)
    adjustment_type = request.adjustment_type
    adjustment_value = request.adjustment_value

    descriptor = create_batch_descriptor(
        db,
        actor=actor,
        selector=selector,
        adjustment_type=adjustment_type,
        adjustment_value=adjustment_value,
        change_reason=ChangeReason.bulk_update,
    )

    return apply_price_changes(
        db,
        products=products,
        compute=lambda price: apply_adjustment(price, adjustment_type, adjustment_value),
        actor=actor,
        descriptor=descriptor,
        change_reason=ChangeReason.bulk_update,
    )


# --------------------------
# CUSTOM PRICES
# --------------------------
def _parse_custom_price(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        price = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(price) or price <= 0:
        return None
    return finalize_price(price)


def bulk_set_custom_prices(db: Session, actor: Actor, items: List[CustomPriceItem]) -> int:
    """
    Set explicit prices. Entries with an unknown product or a missing,
    non-numeric or non-positive price are skipped silently.
    """
    ensure_admin(actor)
    updated_count = 0

    try:
        for item in items:
            if not isinstance(item.product_id, str) or not item.product_id:
                continue
            new_price = _parse_custom_price(item.new_price)
            if new_price is None:
                continue

            product = db.query(Product).filter(Product.id == item.product_id).first()
            if not product or product.price == new_price:
                continue

            record_price_change(
                db,
                product_id=product.id,
                previous_price=product.price,
                new_price=new_price,
                change_reason=ChangeReason.manual,
                changed_by=actor.id,
            )
            product.price = new_price
            product.version = (product.version or 0) + 1
            updated_count += 1

        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    logger.info("Custom prices set on %d products by %s", updated_count, actor.id)
    return updated_count


# --------------------------
# REVERT
# --------------------------
def revert_price_changes(db: Session, actor: Actor, bulk_update_id: int) -> RevertResult:
    """
    Restore every product of a batch to its pre-batch price, in one
    transaction. A batch can be reverted once.

    A product whose price no longer equals what the batch wrote was changed
    afterwards; it keeps its current price and is listed in `conflicts`.
    """
    ensure_admin(actor)

    bulk_update = (
        db.query(BulkPriceUpdate)
        .filter(BulkPriceUpdate.id == bulk_update_id)
        .first()
    )
    if not bulk_update:
        raise NotFoundError("Bulk update not found")
    if bulk_update.is_reverted:
        raise AlreadyRevertedError("This bulk update has already been reverted")

    entries = (
        db.query(PriceHistory)
        .filter(PriceHistory.bulk_update_id == bulk_update_id)
        .order_by(PriceHistory.id.desc())
        .all()
    )

    result = RevertResult(bulk_update_id=bulk_update_id)
    try:
        # claim the descriptor first so two concurrent reverts cannot both run
        claimed = db.execute(
            update(BulkPriceUpdate)
            .where(
                BulkPriceUpdate.id == bulk_update_id,
                BulkPriceUpdate.is_reverted.is_(False),
            )
            .values(is_reverted=True, reverted_at=utcnow(), reverted_by=actor.id)
            .execution_options(synchronize_session=False)
        )
        if claimed.rowcount != 1:
            db.rollback()
            raise AlreadyRevertedError("This bulk update has already been reverted")

        for entry in entries:
            product = db.query(Product).filter(Product.id == entry.product_id).first()
            if not product:
                continue

            if product.price != entry.new_price:
                result.conflicts.append(product.id)
                logger.warning(
                    "Product %s changed after batch %s (%.2f != %.2f), not reverted",
                    product.id,
                    bulk_update_id,
                    product.price,
                    entry.new_price,
                )
                continue

            record_price_change(
                db,
                product_id=product.id,
                previous_price=product.price,
                new_price=entry.previous_price,
                change_reason=ChangeReason.bulk_update,
                changed_by=actor.id,
                rule_id=entry.rule_id,
                bulk_update_id=bulk_update_id,
            )
            product.price = entry.previous_price
            product.version = (product.version or 0) + 1
            result.reverted_count += 1

        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    db.refresh(bulk_update)
    logger.info(
        "Reverted batch %s on %d products by %s (conflicts=%d)",
        bulk_update_id,
        result.reverted_count,
        actor.id,
        len(result.conflicts),
    )
    return result
