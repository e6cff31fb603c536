import asyncio
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from pricing_engine import models  # noqa: F401  registers tables on Base
from pricing_engine.core.clock import utcnow
from pricing_engine.core.config import settings
from pricing_engine.core.errors import PricingEngineError
from pricing_engine.core.logging_config import configure_logging
from pricing_engine.database.connection import Base, engine
from pricing_engine.middleware.metrics import MetricsMiddleware, new_metrics
from pricing_engine.routes import system
from pricing_engine.routes.pricing.bulk_price import router as bulk_price_router
from pricing_engine.routes.pricing.pricing_route import router as pricing_router
from pricing_engine.routes.products import router as product_router
from pricing_engine.routes.sales import router as sales_router
from pricing_engine.services.scheduler_service import sale_reconcile_scheduler_loop

configure_logging()
logger = logging.getLogger(__name__)

Base.metadata.create_all(bind=engine)

app = FastAPI(title="Pricing & Sale Management Engine")

app.add_middleware(MetricsMiddleware)


app.include_router(product_router)
app.include_router(pricing_router)
app.include_router(bulk_price_router)
app.include_router(sales_router)
app.include_router(system.router)


# Exception handlers
@app.exception_handler(PricingEngineError)
async def pricing_engine_error_handler(request: Request, exc: PricingEngineError):
    if exc.status_code >= 500:
        logger.error("Engine error on %s: %s", request.url.path, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.error("Unhandled exception on %s", request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"detail": "An unexpected error occurred"},
    )


@app.on_event("startup")
async def startup_event():
    app.state.start_time = utcnow()
    app.state.metrics = new_metrics()
    app.state.sale_reconciler = None
    if settings.SALE_RECONCILE_INTERVAL_SECONDS > 0:
        app.state.sale_reconciler = asyncio.create_task(
            sale_reconcile_scheduler_loop(settings.SALE_RECONCILE_INTERVAL_SECONDS)
        )
    logger.info("Pricing engine started")


@app.on_event("shutdown")
async def shutdown_event():
    task = getattr(app.state, "sale_reconciler", None)
    if task is not None:
        task.cancel()
