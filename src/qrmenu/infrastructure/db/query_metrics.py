from __future__ import annotations

import os
import re
import time
from functools import lru_cache

from sqlalchemy import event
from sqlalchemy.engine import Engine

from qrmenu.application.metrics.database_metrics import (
    SLOW_QUERY_THRESHOLD_MS,
    DatabaseMetricsCollector,
)

_START_TIMES_KEY = "qrmenu_query_start_times"
_TABLE = re.compile(r"\b(?:from|into|update|table)\s+[\"`]?(\w+)", re.IGNORECASE)


def statement_model(statement: str) -> str | None:
    """Name of the first table a statement touches, ``None`` when there is none."""
    match = _TABLE.search(statement)
    return match.group(1).lower() if match else None


def statement_action(statement: str) -> str:
    words = statement.split(None, 1)
    return words[0].lower() if words else "unknown"


def _slow_query_threshold_ms() -> float:
    return float(os.getenv("DB_SLOW_QUERY_MS", str(SLOW_QUERY_THRESHOLD_MS)))


@lru_cache(maxsize=1)
def get_database_metrics() -> DatabaseMetricsCollector:
    return DatabaseMetricsCollector(slow_threshold_ms=_slow_query_threshold_ms())


def instrument_engine(engine: Engine, collector: DatabaseMetricsCollector) -> Engine:
    """Time every statement the engine executes and feed it to ``collector``."""

    @event.listens_for(engine, "before_cursor_execute")
    def _before(conn, cursor, statement, parameters, context, executemany) -> None:
        conn.info.setdefault(_START_TIMES_KEY, []).append(time.perf_counter())

    @event.listens_for(engine, "after_cursor_execute")
    def _after(conn, cursor, statement, parameters, context, executemany) -> None:
        started = conn.info[_START_TIMES_KEY].pop()
        collector.record_query(
            statement_model(statement),
            statement_action(statement),
            (time.perf_counter() - started) * 1000,
        )

    @event.listens_for(engine, "handle_error")
    def _error(exception_context) -> None:
        connection = exception_context.connection
        if connection is None:
            return
        started = connection.info.get(_START_TIMES_KEY)
        if started:
            started.pop()

    return engine
