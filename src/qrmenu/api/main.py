from __future__ import annotations

import logging
import os
import time

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import Counter, Histogram
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from qrmenu.api.error_handling import register_exception_handlers
from qrmenu.api.middleware.rate_limit import RateLimitMiddleware
from qrmenu.api.middleware.request_id import RequestIDMiddleware
from qrmenu.api.routes.admin_analytics import router as admin_analytics_router
from qrmenu.api.routes.admin_metrics import router as admin_metrics_router
from qrmenu.api.routes.auth import router as auth_router
from qrmenu.api.routes.categories import router as categories_router
from qrmenu.api.routes.csrf import router as csrf_router
from qrmenu.api.routes.health import router as health_router
from qrmenu.api.routes.menu import router as menu_router
from qrmenu.api.routes.metrics import router as metrics_router
from qrmenu.api.routes.products import router as products_router
from qrmenu.api.routes.subcategories import router as subcategories_router
from qrmenu.application.metrics.database_metrics import DatabaseMetricsCollector
from qrmenu.application.metrics.rate_limit_monitor import RateLimitMonitor
from qrmenu.application.security.rate_limit import RateLimiter
from qrmenu.infrastructure.db.query_metrics import get_database_metrics
from qrmenu.infrastructure.observability.logging_config import configure_logging
from qrmenu.infrastructure.observability.otel import configure_otel
from qrmenu.infrastructure.ratelimit.factory import build_rate_limiter

logger = logging.getLogger("qrmenu.api.access")

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total number of HTTP requests",
    ["method", "path", "status_code"],
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path"],
)


def _cors_allow_origins() -> list[str]:
    env = os.getenv("APP_ENV", "dev").lower()

    if env in {"dev", "test"}:
        return ["*"]

    raw_value = os.getenv("CORS_ALLOW_ORIGINS", "")
    return [origin.strip() for origin in raw_value.split(",") if origin.strip()]


def _route_template(request: Request) -> str:
    # Label metrics by route template so ids in paths do not explode cardinality.
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


class AccessLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        method = request.method
        try:
            response = await call_next(request)
        except Exception:
            path = _route_template(request)
            duration_ms = (time.perf_counter() - started) * 1000
            REQUEST_COUNT.labels(method=method, path=path, status_code="500").inc()
            REQUEST_LATENCY.labels(method=method, path=path).observe(duration_ms / 1000)
            logger.exception(
                "request_error",
                extra={
                    "method": method,
                    "path": request.url.path,
                    "status_code": 500,
                    "duration_ms": round(duration_ms, 2),
                },
            )
            raise

        path = _route_template(request)
        duration_ms = (time.perf_counter() - started) * 1000
        REQUEST_COUNT.labels(method=method, path=path, status_code=str(response.status_code)).inc()
        REQUEST_LATENCY.labels(method=method, path=path).observe(duration_ms / 1000)
        logger.info(
            "request_complete",
            extra={
                "method": method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": round(duration_ms, 2),
            },
        )
        return response


def create_app(
    rate_limiter: RateLimiter | None = None,
    database_metrics: DatabaseMetricsCollector | None = None,
) -> FastAPI:
    configure_logging()

    app = FastAPI(title="QR Menu API", version="0.1.0")
    if rate_limiter is None:
        rate_limiter = build_rate_limiter(RateLimitMonitor())
    app.state.rate_limiter = rate_limiter
    app.state.rate_limit_monitor = rate_limiter.monitor
    app.state.database_metrics = database_metrics or get_database_metrics()

    register_exception_handlers(app)
    app.include_router(health_router)
    app.include_router(metrics_router)
    app.include_router(csrf_router)
    app.include_router(auth_router)
    app.include_router(menu_router)
    app.include_router(products_router)
    app.include_router(categories_router)
    app.include_router(subcategories_router)
    app.include_router(admin_metrics_router)
    app.include_router(admin_analytics_router)

    origins = _cors_allow_origins()
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=origins != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-Id", "Retry-After"],
    )

    configure_otel(app)
    return app


app = create_app()
