from __future__ import annotations

import sys
from pathlib import Path
from typing import Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from qrmenu.api.main import create_app
from qrmenu.application.metrics.database_metrics import DatabaseMetricsCollector
from qrmenu.application.metrics.rate_limit_monitor import RateLimitMonitor
from qrmenu.application.security.rate_limit import RateLimiter
from qrmenu.application.security.session import SESSION_COOKIE_NAME, SessionUser, encode_session
from qrmenu.domain.menu.entities import UserRole
from qrmenu.infrastructure.ratelimit.memory_store import MemoryCounterStore

CSRF_TOKEN = "f" * 64


@pytest.fixture(autouse=True)
def api_environment(monkeypatch) -> None:
    monkeypatch.setenv("APP_ENV", "test")
    monkeypatch.setenv("SESSION_SECRET", "test-session-secret-with-enough-length")
    monkeypatch.delenv("CSRF_DEV_PERMISSIVE", raising=False)
    monkeypatch.delenv("REDIS_URL", raising=False)


@pytest.fixture
def monitor() -> RateLimitMonitor:
    return RateLimitMonitor()


@pytest.fixture
def database_metrics() -> DatabaseMetricsCollector:
    return DatabaseMetricsCollector(slow_threshold_ms=100)


@pytest.fixture
def app(monitor: RateLimitMonitor, database_metrics: DatabaseMetricsCollector) -> FastAPI:
    return create_app(
        rate_limiter=RateLimiter(MemoryCounterStore(), monitor),
        database_metrics=database_metrics,
    )


@pytest.fixture
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client


@pytest.fixture
def admin_client(client: TestClient) -> TestClient:
    admin = SessionUser(id="usr_admin", email="admin@example.com", role=UserRole.ADMIN)
    client.cookies.set(SESSION_COOKIE_NAME, encode_session(admin))
    client.cookies.set("XSRF-TOKEN", CSRF_TOKEN)
    client.headers["X-CSRF-Token"] = CSRF_TOKEN
    return client
