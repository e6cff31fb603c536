from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from pricing_engine.database.connection import get_db
from pricing_engine.dependencies.auth import require_admin
from pricing_engine.enums.pricing import SaleStatus
from pricing_engine.schemas.sale import (
    ActiveSaleResponse,
    SaleCountdownResponse,
    SaleCreate,
    SalePageResponse,
    SaleReconcileResponse,
    SaleResponse,
    SaleUpdate,
)
from pricing_engine.schemas.user import Actor
from pricing_engine.services.sale import (
    activate_sale,
    create_sale,
    deactivate_sale,
    delete_sale,
    get_active_sales,
    get_sale,
    get_sale_countdown,
    list_sales,
    reconcile_sales,
    update_sale,
)

router = APIRouter(prefix="/sales", tags=["Sales"])


# ---------- PUBLIC ----------

@router.get("/active", response_model=List[ActiveSaleResponse])
def active_sales_route(db: Session = Depends(get_db)):
    return get_active_sales(db)


@router.get("/countdown/{sale_id}", response_model=SaleCountdownResponse)
def sale_countdown_route(sale_id: int, db: Session = Depends(get_db)):
    return get_sale_countdown(db, sale_id)


# ---------- ADMIN ----------

@router.post("/", response_model=SaleResponse, status_code=201)
def create_sale_route(
    data: SaleCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_admin),
):
    return create_sale(db, actor, data)


@router.get("/", response_model=SalePageResponse)
def list_sales_route(
    status: Optional[SaleStatus] = None,
    page: int = 1,
    limit: int = 20,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_admin),
):
    return list_sales(db, actor, status=status, page=page, limit=limit)


@router.post("/reconcile", response_model=SaleReconcileResponse)
def reconcile_sales_route(db: Session = Depends(get_db), actor: Actor = Depends(require_admin)):
    return reconcile_sales(db, actor)


@router.get("/{sale_id}", response_model=SaleResponse)
def get_sale_route(sale_id: int, db: Session = Depends(get_db), actor: Actor = Depends(require_admin)):
    return get_sale(db, actor, sale_id)


@router.put("/{sale_id}", response_model=SaleResponse)
def update_sale_route(
    sale_id: int,
    data: SaleUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_admin),
):
    return update_sale(db, actor, sale_id, data)


@router.delete("/{sale_id}")
def delete_sale_route(sale_id: int, db: Session = Depends(get_db), actor: Actor = Depends(require_admin)):
    delete_sale(db, actor, sale_id)
    return {"message": "Sale deleted"}


@router.post("/{sale_id}/activate", response_model=SaleResponse)
def activate_sale_route(sale_id: int, db: Session = Depends(get_db), actor: Actor = Depends(require_admin)):
    return activate_sale(db, actor, sale_id)


@router.post("/{sale_id}/deactivate", response_model=SaleResponse)
def deactivate_sale_route(sale_id: int, db: Session = Depends(get_db), actor: Actor = Depends(require_admin)):
    return deactivate_sale(db, actor, sale_id)
