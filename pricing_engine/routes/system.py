import logging
from datetime import datetime

from fastapi import APIRouter, Depends, Request
from sqlalchemy import func, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pricing_engine.core.clock import utcnow
from pricing_engine.database.connection import get_db
from pricing_engine.dependencies.auth import require_admin
from pricing_engine.models.bulk_price_update import BulkPriceUpdate
from pricing_engine.models.price_history import PriceHistory
from pricing_engine.models.sale import Sale
from pricing_engine.schemas.system import HealthCheckResponse, SystemMetricsResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["System"])


@router.get("/health", response_model=HealthCheckResponse)
def health_check(request: Request, db: Session = Depends(get_db)):
    """
    Lightweight public health check.
    Returns ok + DB connectivity check (SELECT 1).
    """
    now = utcnow()
    start_time = getattr(request.app.state, "start_time", now)
    uptime_seconds = (now - start_time).total_seconds()

    db_ok = True
    extra = {}
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.warning("Health check database query failed: %s", e)
        db_ok = False
        extra["db_error"] = str(e)

    return HealthCheckResponse(
        status="ok" if db_ok else "degraded",
        now=now,
        uptime_seconds=uptime_seconds,
        db_ok=db_ok,
        extra=extra or None,
    )


@router.get("/metrics", response_model=SystemMetricsResponse, dependencies=[Depends(require_admin)])
def system_metrics(request: Request, db: Session = Depends(get_db)):
    """
    Admin-only system metrics in JSON form.
    In-process counters come from app.state.metrics, the rest from the DB.
    """
    now = utcnow()
    start_time = getattr(request.app.state, "start_time", now)
    uptime_seconds = (now - start_time).total_seconds()

    metrics = getattr(request.app.state, "metrics", None) or {}
    requests_count = int(metrics.get("requests", 0))
    error_count = int(metrics.get("errors", 0))
    total_response_ms = float(metrics.get("total_response_ms", 0.0))
    avg_response_ms = (total_response_ms / requests_count) if requests_count > 0 else None

    active_sales = (
        db.query(func.count(Sale.id))
        .filter(Sale.is_active.is_(True), Sale.starts_at <= now, Sale.ends_at >= now)
        .scalar()
    ) or 0

    start_today = datetime.combine(now.date(), datetime.min.time())
    price_changes_today = (
        db.query(func.count(PriceHistory.id))
        .filter(PriceHistory.created_at >= start_today)
        .scalar()
    ) or 0
    total_price_changes = db.query(func.count(PriceHistory.id)).scalar() or 0

    bulk_updates = db.query(func.count(BulkPriceUpdate.id)).scalar() or 0
    reverted_bulk_updates = (
        db.query(func.count(BulkPriceUpdate.id))
        .filter(BulkPriceUpdate.is_reverted.is_(True))
        .scalar()
    ) or 0

    return SystemMetricsResponse(
        uptime_seconds=uptime_seconds,
        now=now,
        requests_count=requests_count,
        error_count=error_count,
        avg_response_ms=avg_response_ms,
        active_sales=int(active_sales),
        price_changes_today=int(price_changes_today),
        total_price_changes=int(total_price_changes),
        bulk_updates=int(bulk_updates),
        reverted_bulk_updates=int(reverted_bulk_updates),
        extra=None,
    )
