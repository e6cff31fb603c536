import asyncio
import logging

from sqlalchemy.orm import Session

from pricing_engine.database.connection import SessionLocal
from pricing_engine.services.sale import reconcile_sales

logger = logging.getLogger(__name__)


def get_db_session() -> Session:
    return SessionLocal()


# ---------- SALE RECONCILE SCHEDULER ----------

async def sale_reconcile_scheduler_loop(interval_seconds: int):
    """
    Apply sales whose window opened and clear sales whose window closed,
    every `interval_seconds`.
    """
    logger.info("Sale reconciler started (every %ss)", interval_seconds)
    while True:
        try:
            run_sale_reconcile()
        except Exception:
            # keep the loop alive; the next tick retries
            logger.exception("Sale reconcile run failed")
        await asyncio.sleep(interval_seconds)


def run_sale_reconcile() -> dict:
    db = get_db_session()
    try:
        return reconcile_sales(db)
    finally:
        db.close()
