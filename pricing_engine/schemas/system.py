from pydantic import BaseModel
from typing import Optional, Dict, Any
from datetime import datetime


class HealthCheckResponse(BaseModel):
    status: str
    now: datetime
    uptime_seconds: float
    db_ok: bool
    extra: Optional[Dict[str, Any]] = None


class SystemMetricsResponse(BaseModel):
    uptime_seconds: float
    now: datetime

    # middleware counters
    requests_count: int
    error_count: int
    avg_response_ms: Optional[float] = None

    # DB metrics
    active_sales: int
    price_changes_today: int
    total_price_changes: int
    bulk_updates: int
    reverted_bulk_updates: int

    extra: Optional[Dict[str, Any]] = None
