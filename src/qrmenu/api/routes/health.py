from __future__ import annotations

import os
from datetime import datetime, timezone

from fastapi import APIRouter, Response, status

from qrmenu.infrastructure.cache.redis_client import ping_redis, redis_configured
from qrmenu.infrastructure.db.session import measure_database_latency, ping_database

router = APIRouter()


@router.get("/health/live")
def live() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/health/ready")
def ready(response: Response) -> dict[str, object]:
    postgres_ready = ping_database(timeout_seconds=1.0)
    redis_ready = ping_redis(timeout_seconds=1.0) if redis_configured() else True

    if postgres_ready and redis_ready:
        return {"status": "ok"}

    response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return {
        "status": "unavailable",
        "checks": {"postgres": postgres_ready, "redis": redis_ready},
    }


@router.get("/api/health")
def api_health(response: Response) -> dict[str, object]:
    latency_ms = measure_database_latency(timeout_seconds=1.0)
    payload: dict[str, object] = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": os.getenv("APP_ENV", "dev"),
    }
    if latency_ms is None:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        payload["status"] = "unhealthy"
        payload["database"] = {"connected": False}
        return payload

    payload["status"] = "healthy"
    payload["database"] = {"connected": True, "latencyMs": latency_ms}
    return payload
