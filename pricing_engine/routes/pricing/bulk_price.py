from dataclasses import asdict

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from pricing_engine.database.connection import get_db
from pricing_engine.dependencies.auth import require_admin
from pricing_engine.schemas.bulk_price import (
    BulkCustomPriceRequest,
    BulkMutationResponse,
    BulkPriceAdjustRequest,
    CustomPriceResponse,
    RevertPriceChangesRequest,
    RevertResponse,
)
from pricing_engine.schemas.price_history import (
    PriceHistoryListResponse,
    RecentPriceChangesResponse,
)
from pricing_engine.schemas.user import Actor
from pricing_engine.services.price_history_service import (
    get_price_history,
    get_recent_price_changes,
)
from pricing_engine.services.pricing_service.bulk_update import (
    bulk_set_custom_prices,
    bulk_update_prices,
    revert_price_changes,
)

router = APIRouter(
    prefix="/pricing",
    tags=["Bulk Pricing & History"],
    dependencies=[Depends(require_admin)],
)


@router.post("/bulk/update", response_model=BulkMutationResponse)
def bulk_update(
    request: BulkPriceAdjustRequest,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_admin),
):
    result = bulk_update_prices(db, actor, request)
    return BulkMutationResponse(
        message=f"Updated prices for {result.updated_count} products",
        **asdict(result),
    )


@router.post("/bulk/custom", response_model=CustomPriceResponse)
def bulk_custom(
    request: BulkCustomPriceRequest,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_admin),
):
    updated_count = bulk_set_custom_prices(db, actor, request.prices)
    return CustomPriceResponse(
        message=f"Updated prices for {updated_count} products",
        updated_count=updated_count,
    )


@router.post("/bulk/revert", response_model=RevertResponse)
def bulk_revert(
    request: RevertPriceChangesRequest,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_admin),
):
    result = revert_price_changes(db, actor, request.bulk_update_id)
    return RevertResponse(
        message=f"Reverted prices for {result.reverted_count} products",
        **asdict(result),
    )


# ---------- HISTORY ----------

@router.get("/history", response_model=RecentPriceChangesResponse)
def recent_changes(
    limit: int = 50,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_admin),
):
    changes, bulk_updates = get_recent_price_changes(db, actor, limit=limit)
    return RecentPriceChangesResponse(recent_changes=changes, bulk_updates=bulk_updates)


@router.get("/history/{product_id}", response_model=PriceHistoryListResponse)
def product_history(
    product_id: str,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_admin),
):
    history = get_price_history(db, actor, product_id)
    return PriceHistoryListResponse(product_id=product_id, history=history)
