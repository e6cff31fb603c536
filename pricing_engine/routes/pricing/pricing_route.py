from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from pricing_engine.database.connection import get_db
from pricing_engine.dependencies.auth import require_admin
from pricing_engine.schemas.bulk_price import BulkMutationResponse
from pricing_engine.schemas.pricing_config import PricingConfigResponse, PricingConfigUpdate
from pricing_engine.schemas.pricing_rule import (
    PricingRuleCreate,
    PricingRulePreviewResponse,
    PricingRuleResponse,
    PricingRuleUpdate,
)
from pricing_engine.schemas.user import Actor
from pricing_engine.services.pricing_service.pricing_config_service import (
    get_pricing_config,
    update_pricing_config,
)
from pricing_engine.services.pricing_service.pricing_service import (
    apply_pricing_rule,
    create_pricing_rule,
    delete_pricing_rule,
    get_pricing_rule,
    get_pricing_rules,
    preview_pricing_rule,
    update_pricing_rule,
)

router = APIRouter(
    prefix="/pricing",
    tags=["Pricing Rules"],
    dependencies=[Depends(require_admin)],
)


# ---------- RULES ----------

@router.post("/rules", response_model=PricingRuleResponse, status_code=201)
def create_rule(
    rule: PricingRuleCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_admin),
):
    return create_pricing_rule(db, actor, rule)


@router.get("/rules", response_model=list[PricingRuleResponse])
def list_rules(
    is_active: Optional[bool] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_admin),
):
    return get_pricing_rules(db, actor, is_active=is_active)


@router.get("/rules/{rule_id}", response_model=PricingRuleResponse)
def get_rule(rule_id: int, db: Session = Depends(get_db), actor: Actor = Depends(require_admin)):
    return get_pricing_rule(db, actor, rule_id)


@router.put("/rules/{rule_id}", response_model=PricingRuleResponse)
def update_rule(
    rule_id: int,
    rule: PricingRuleUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_admin),
):
    return update_pricing_rule(db, actor, rule_id, rule)


@router.delete("/rules/{rule_id}")
def delete_rule(rule_id: int, db: Session = Depends(get_db), actor: Actor = Depends(require_admin)):
    delete_pricing_rule(db, actor, rule_id)
    return {"message": "Pricing rule deleted"}


@router.get("/rules/{rule_id}/preview", response_model=PricingRulePreviewResponse)
def preview_rule(rule_id: int, db: Session = Depends(get_db), actor: Actor = Depends(require_admin)):
    return preview_pricing_rule(db, actor, rule_id)


@router.post("/rules/{rule_id}/apply", response_model=BulkMutationResponse)
def apply_rule(rule_id: int, db: Session = Depends(get_db), actor: Actor = Depends(require_admin)):
    result = apply_pricing_rule(db, actor, rule_id)
    return BulkMutationResponse(
        message=f"Pricing rule applied to {result.updated_count} products",
        **asdict(result),
    )


# ---------- CONFIG ----------

@router.get("/config", response_model=PricingConfigResponse)
def read_config(db: Session = Depends(get_db), actor: Actor = Depends(require_admin)):
    return get_pricing_config(db, actor)


@router.put("/config", response_model=PricingConfigResponse)
def update_config(
    data: PricingConfigUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_admin),
):
    return update_pricing_config(db, actor, data)
