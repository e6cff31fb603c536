import logging
import time
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)


def new_metrics() -> dict:
    return {
        "requests": 0,
        "errors": 0,
        "total_response_ms": 0.0,
    }


class MetricsMiddleware(BaseHTTPMiddleware):
    """
    Collects in-process metrics:
      - total requests
      - responses with a 5xx status
      - total response time (ms)
    NOTE: app.state is not ready in __init__, so the container is created lazily.
    """

    def __init__(self, app, dispatch: Callable = None):
        super().__init__(app, dispatch=dispatch)

    async def dispatch(self, request: Request, call_next):
        metrics = getattr(request.app.state, "metrics", None)
        if metrics is None:
            metrics = request.app.state.metrics = new_metrics()

        start = time.perf_counter()
        metrics["requests"] += 1
        try:
            response: Response = await call_next(request)
        except Exception:
            # unhandled errors are turned into a 500 further out
            metrics["errors"] += 1
            raise
        elapsed_ms = (time.perf_counter() - start) * 1000.0

        metrics["total_response_ms"] += elapsed_ms
        if response.status_code >= 500:
            metrics["errors"] += 1

        logger.debug(
            "%s %s -> %s (%.1f ms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response
