from __future__ import annotations

from qrmenu.application.dto.responses import DatabaseMetricsResponse
from qrmenu.application.metrics.database_metrics import DatabaseMetrics


def to_database_metrics_response(
    metrics: DatabaseMetrics,
    slow_threshold_ms: float,
) -> DatabaseMetricsResponse:
    return DatabaseMetricsResponse(
        totalQueries=metrics.total_queries,
        slowQueries=metrics.slow_queries,
        averageQueryTime=round(metrics.average_query_ms, 2),
        queriesByModel=metrics.queries_by_model,
        slowQueriesByModel=metrics.slow_queries_by_model,
        slowQueryThresholdMs=slow_threshold_ms,
    )
