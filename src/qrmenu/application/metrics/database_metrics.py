from __future__ import annotations

import logging
import threading
from collections import deque
from dataclasses import dataclass, field

from prometheus_client import Counter, Histogram

logger = logging.getLogger(__name__)

DB_QUERY_DURATION_SECONDS = Histogram(
    "qrmenu_db_query_duration_seconds",
    "Database statement execution time in seconds.",
    ["model", "action"],
)
DB_SLOW_QUERIES_TOTAL = Counter(
    "qrmenu_db_slow_queries_total",
    "Database statements slower than the slow query threshold.",
    ["model"],
)

SLOW_QUERY_THRESHOLD_MS = 500.0
MAX_QUERY_TIMES = 1000
UNKNOWN_MODEL = "unknown"


@dataclass(frozen=True)
class DatabaseMetrics:
    total_queries: int = 0
    slow_queries: int = 0
    average_query_ms: float = 0.0
    queries_by_model: dict[str, int] = field(default_factory=dict)
    slow_queries_by_model: dict[str, int] = field(default_factory=dict)


class DatabaseMetricsCollector:
    """Running query counters since start-up or the last reset.

    The average covers the most recent ``max_query_times`` statements only.
    """

    def __init__(
        self,
        slow_threshold_ms: float = SLOW_QUERY_THRESHOLD_MS,
        max_query_times: int = MAX_QUERY_TIMES,
    ) -> None:
        self.slow_threshold_ms = slow_threshold_ms
        self._max_query_times = max_query_times
        self._lock = threading.Lock()
        self._reset_locked()

    def _reset_locked(self) -> None:
        self._total = 0
        self._slow = 0
        self._durations: deque[float] = deque(maxlen=self._max_query_times)
        self._by_model: dict[str, int] = {}
        self._slow_by_model: dict[str, int] = {}

    def record_query(self, model: str | None, action: str, duration_ms: float) -> bool:
        model = model or UNKNOWN_MODEL
        is_slow = duration_ms > self.slow_threshold_ms
        with self._lock:
            self._total += 1
            self._durations.append(duration_ms)
            self._by_model[model] = self._by_model.get(model, 0) + 1
            if is_slow:
                self._slow += 1
                self._slow_by_model[model] = self._slow_by_model.get(model, 0) + 1

        DB_QUERY_DURATION_SECONDS.labels(model=model, action=action).observe(duration_ms / 1000)
        if is_slow:
            DB_SLOW_QUERIES_TOTAL.labels(model=model).inc()
            logger.warning(
                "slow_query_detected",
                extra={
                    "model": model,
                    "action": action,
                    "duration_ms": round(duration_ms, 2),
                    "threshold_ms": self.slow_threshold_ms,
                },
            )
        return is_slow

    def get_metrics(self) -> DatabaseMetrics:
        with self._lock:
            durations = list(self._durations)
            return DatabaseMetrics(
                total_queries=self._total,
                slow_queries=self._slow,
                average_query_ms=sum(durations) / len(durations) if durations else 0.0,
                queries_by_model=dict(self._by_model),
                slow_queries_by_model=dict(self._slow_by_model),
            )

    def reset(self) -> None:
        with self._lock:
            self._reset_locked()
