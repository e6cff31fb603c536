from typing import List, Optional, Tuple

from sqlalchemy.orm import Session, joinedload

from pricing_engine.core.config import settings
from pricing_engine.core.security import ensure_admin
from pricing_engine.enums.pricing import ChangeReason
from pricing_engine.models.bulk_price_update import BulkPriceUpdate
from pricing_engine.models.price_history import PriceHistory
from pricing_engine.schemas.user import Actor

MAX_RECENT_LIMIT = 200


def record_price_change(
    db: Session,
    product_id: str,
    previous_price: float,
    new_price: float,
    change_reason: ChangeReason,
    changed_by: Optional[str] = None,
    rule_id: Optional[int] = None,
    bulk_update_id: Optional[int] = None,
) -> PriceHistory:
    """
    Add one ledger row to the session. The caller commits it together with
    the price write it describes.
    """
    history = PriceHistory(
        product_id=product_id,
        previous_price=previous_price,
        new_price=new_price,
        change_reason=change_reason.value,
        changed_by=changed_by,
        rule_id=rule_id,
        bulk_update_id=bulk_update_id,
    )
    db.add(history)
    return history


# --------------------------
# GET PRICE HISTORY
# --------------------------
def get_price_history(db: Session, actor: Actor, product_id: str) -> List[PriceHistory]:
    """Newest first, capped at PRICE_HISTORY_LIMIT rows."""
    ensure_admin(actor)
    return (
        db.query(PriceHistory)
        .filter(PriceHistory.product_id == product_id)
        .order_by(PriceHistory.created_at.desc(), PriceHistory.id.desc())
        .limit(settings.PRICE_HISTORY_LIMIT)
        .all()
    )


# --------------------------
# RECENT CHANGES
# --------------------------
def get_recent_price_changes(
    db: Session,
    actor: Actor,
    limit: int = 50,
) -> Tuple[List[PriceHistory], List[BulkPriceUpdate]]:
    ensure_admin(actor)
    if limit < 1:
        limit = 1
    if limit > MAX_RECENT_LIMIT:
        limit = MAX_RECENT_LIMIT

    recent_changes = (
        db.query(PriceHistory)
        .options(joinedload(PriceHistory.product))
        .order_by(PriceHistory.created_at.desc(), PriceHistory.id.desc())
        .limit(limit)
        .all()
    )
    bulk_updates = (
        db.query(BulkPriceUpdate)
        .order_by(BulkPriceUpdate.created_at.desc(), BulkPriceUpdate.id.desc())
        .limit(settings.RECENT_BULK_UPDATES_LIMIT)
        .all()
    )
    return recent_changes, bulk_updates
