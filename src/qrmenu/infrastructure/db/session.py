from __future__ import annotations

import os
import time
from functools import lru_cache

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

from qrmenu.infrastructure.db.query_metrics import get_database_metrics, instrument_engine


def _database_url() -> str:
    url = os.getenv("DATABASE_URL")
    if not url:
        raise RuntimeError("DATABASE_URL is not set")
    return url


@lru_cache(maxsize=8)
def _build_engine(database_url: str, connect_timeout: int) -> Engine:
    connect_args: dict[str, object] = {}
    if database_url.startswith("postgresql"):
        connect_args["connect_timeout"] = connect_timeout
    engine = create_engine(database_url, pool_pre_ping=True, connect_args=connect_args)
    return instrument_engine(engine, get_database_metrics())


def get_engine(timeout_seconds: float = 1.0) -> Engine:
    connect_timeout = max(1, int(timeout_seconds))
    return _build_engine(_database_url(), connect_timeout)


def ping_database(timeout_seconds: float = 1.0) -> bool:
    return measure_database_latency(timeout_seconds) is not None


def measure_database_latency(timeout_seconds: float = 1.0) -> float | None:
    """Round-trip time of ``SELECT 1`` in milliseconds, ``None`` when unreachable."""
    started = time.perf_counter()
    try:
        with get_engine(timeout_seconds).connect() as connection:
            connection.execute(text("SELECT 1"))
    except Exception:
        return None
    return round((time.perf_counter() - started) * 1000, 2)
