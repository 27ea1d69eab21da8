import time
from typing import Callable
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from models.api_models import ErrorResponse
from utils.logging import app_logger, log_request_start, log_request_end, log_error, log_periodic_stats

# Polled by load balancers and the docs UI; not worth a log line each
UNLOGGED_PATHS = frozenset({"/health", "/docs", "/redoc", "/openapi.json"})


def elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs every API call with its status and duration, and the running
    request stats once per ``stats_interval_s``. Anything a route lets
    escape is logged and turned into the usual ``{error, details}`` 500.
    """

    def __init__(self, app, stats_interval_s: float = 300, clock: Callable[[], float] = time.monotonic):
        super().__init__(app)
        self.stats_interval_s = stats_interval_s
        self.clock = clock
        self.next_stats_at = clock() + stats_interval_s

    def _maybe_log_stats(self):
        now = self.clock()
        if now >= self.next_stats_at:
            log_periodic_stats()
            self.next_stats_at = now + self.stats_interval_s

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in UNLOGGED_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        request_info = log_request_start(request, f"{request.method} {request.url.path}")

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = elapsed_ms(started)
            log_error(e, request_info["endpoint"], {"duration_ms": round(duration_ms, 2)})
            log_request_end(request_info, duration_ms, 500)
            return JSONResponse(
                status_code=500,
                content=ErrorResponse(error="Internal server error", details=str(e)).model_dump()
            )

        log_request_end(request_info, elapsed_ms(started), response.status_code)
        self._maybe_log_stats()
        return response


class ResponseTimeMiddleware(BaseHTTPMiddleware):
    """Sets ``X-Response-Time`` and warns when a call runs past the threshold."""

    def __init__(self, app, slow_request_threshold_ms: float = 10000):
        super().__init__(app)
        self.slow_request_threshold_ms = slow_request_threshold_ms

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = elapsed_ms(started)

        # Model calls dominate; a slow request usually means a slow Vertex AI reply
        if duration_ms > self.slow_request_threshold_ms:
            app_logger.logger.warning(
                f"🐌 SLOW REQUEST | {request.method} {request.url.path} | "
                f"Duration: {duration_ms:.2f}ms | Threshold: {self.slow_request_threshold_ms}ms"
            )

        response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"
        return response
