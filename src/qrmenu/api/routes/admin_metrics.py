from __future__ import annotations

from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends, Query, Request

from qrmenu.api.dependencies import require_admin, require_csrf
from qrmenu.application.dto.responses import (
    DatabaseMetricsResponse,
    OkResponse,
    RateLimitStatsResponse,
)
from qrmenu.application.mappers.database_metrics_mapper import to_database_metrics_response
from qrmenu.application.mappers.rate_limit_mapper import to_rate_limit_stats_response
from qrmenu.application.metrics.database_metrics import DatabaseMetricsCollector
from qrmenu.application.metrics.rate_limit_monitor import RateLimitMonitor

router = APIRouter(prefix="/api/admin/metrics", dependencies=[Depends(require_admin)])


def _monitor(request: Request) -> RateLimitMonitor:
    return request.app.state.rate_limit_monitor


def _database_metrics(request: Request) -> DatabaseMetricsCollector:
    return request.app.state.database_metrics


@router.get("/rate-limits", response_model=RateLimitStatsResponse)
def rate_limit_stats(
    request: Request,
    hours: int = Query(default=24, ge=1, le=24 * 30),
) -> RateLimitStatsResponse:
    until = datetime.now(timezone.utc)
    since = until - timedelta(hours=hours)
    stats = _monitor(request).get_stats(since=since)
    return to_rate_limit_stats_response(stats, since=since, until=until, hours=hours)


@router.delete("/rate-limits", response_model=OkResponse, dependencies=[Depends(require_csrf)])
def reset_rate_limit_stats(request: Request) -> OkResponse:
    _monitor(request).reset()
    return OkResponse()


@router.get("/database", response_model=DatabaseMetricsResponse)
def database_stats(request: Request) -> DatabaseMetricsResponse:
    collector = _database_metrics(request)
    return to_database_metrics_response(collector.get_metrics(), collector.slow_threshold_ms)


@router.delete("/database", response_model=OkResponse, dependencies=[Depends(require_csrf)])
def reset_database_stats(request: Request) -> OkResponse:
    _database_metrics(request).reset()
    return OkResponse()
