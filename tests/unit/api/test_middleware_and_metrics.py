from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

import qrmenu.api.routes.health as health_route


def _exhaust(app, scope: str, limit: int, window_ms: int) -> None:
    limiter = app.state.rate_limiter
    for _ in range(limit):
        limiter.check("testclient", scope, limit, window_ms)


def test_get_requests_report_remaining_budget(client) -> None:
    first = client.get("/api/csrf")
    second = client.get("/api/csrf")

    assert first.headers["x-ratelimit-remaining"] == "299"
    assert second.headers["x-ratelimit-remaining"] == "298"


def test_middleware_rejects_exhausted_clients(client, app, monitor) -> None:
    _exhaust(app, "middleware:global", 300, 60_000)

    response = client.get("/api/csrf")

    assert response.status_code == 429
    assert response.headers["retry-after"] == "60"
    assert response.json()["error"]["code"] == "RATE_LIMITED"
    assert response.headers["x-request-id"]
    assert monitor.get_stats().by_scope == {"middleware:global": 1}


def test_product_paths_use_their_own_rule(admin_client, app) -> None:
    _exhaust(app, "middleware:api:products", 60, 30_000)

    response = admin_client.get("/api/products")

    assert response.status_code == 429
    assert response.headers["retry-after"] == "30"


def test_health_and_writes_are_not_limited(client, app) -> None:
    _exhaust(app, "middleware:global", 300, 60_000)

    assert client.get("/health/live").status_code == 200
    assert client.post("/api/auth/logout").status_code == 403


def test_request_id_is_echoed_or_generated(client) -> None:
    echoed = client.get("/health/live", headers={"X-Request-Id": "abc-123"})
    replaced = client.get("/health/live", headers={"X-Request-Id": "bad id with spaces"})

    assert echoed.headers["x-request-id"] == "abc-123"
    assert replaced.headers["x-request-id"] != "bad id with spaces"
    assert len(replaced.headers["x-request-id"]) == 36


def test_unknown_route_uses_error_envelope(client) -> None:
    response = client.get("/api/nope")

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_FOUND"


def test_rate_limit_stats_and_reset(admin_client, monitor) -> None:
    monitor.record_hit("10.0.0.1", "menu:get", 120, 60_000)
    monitor.record_hit("10.0.0.1", "menu:get", 120, 60_000)
    monitor.record_hit("10.0.0.2", "auth:login", 10, 60_000)

    stats = admin_client.get("/api/admin/metrics/rate-limits", params={"hours": 1}).json()

    assert stats["totalHits"] == 3
    assert stats["byScope"] == {"menu:get": 2, "auth:login": 1}
    assert stats["topOffenders"][0] == {"identifier": "10.0.0.1", "scope": "menu:get", "hits": 2}
    assert stats["periodHours"] == 1
    assert set(stats["timeRange"]) == {"from", "to"}

    assert admin_client.delete("/api/admin/metrics/rate-limits").json() == {"ok": True}
    assert monitor.get_stats().total_hits == 0


def test_rate_limit_stats_require_admin(client) -> None:
    assert client.get("/api/admin/metrics/rate-limits").status_code == 401
    assert client.get("/api/admin/metrics/rate-limits", params={"hours": 0}).status_code == 401


def test_prometheus_metrics_endpoint(client) -> None:
    client.get("/health/live")

    response = client.get("/metrics")

    assert response.status_code == 200
    assert "http_requests_total" in response.text


def test_ready_health_endpoint(client, monkeypatch) -> None:
    monkeypatch.setattr(health_route, "ping_database", lambda timeout_seconds=1.0: True)
    monkeypatch.setattr(health_route, "redis_configured", lambda: True)
    monkeypatch.setattr(health_route, "ping_redis", lambda timeout_seconds=1.0: False)

    response = client.get("/health/ready")

    assert response.status_code == 503
    assert response.json() == {
        "status": "unavailable",
        "checks": {"postgres": True, "redis": False},
    }


def test_ready_health_skips_unconfigured_redis(client, monkeypatch) -> None:
    monkeypatch.setattr(health_route, "ping_database", lambda timeout_seconds=1.0: True)
    monkeypatch.setattr(health_route, "redis_configured", lambda: False)

    assert client.get("/health/ready").json() == {"status": "ok"}


def test_api_health_reports_database_latency(client, monkeypatch) -> None:
    monkeypatch.setattr(health_route, "measure_database_latency", lambda timeout_seconds=1.0: 4)
    healthy = client.get("/api/health")

    monkeypatch.setattr(
        health_route, "measure_database_latency", lambda timeout_seconds=1.0: None
    )
    unhealthy = client.get("/api/health")

    assert healthy.status_code == 200
    assert healthy.json()["status"] == "healthy"
    assert healthy.json()["database"] == {"connected": True, "latencyMs": 4}
    assert healthy.json()["environment"] == "test"
    assert unhealthy.status_code == 503
    assert unhealthy.json()["database"] == {"connected": False}
