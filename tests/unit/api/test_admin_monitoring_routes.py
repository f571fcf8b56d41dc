from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

import qrmenu.api.routes.admin_analytics as analytics_route
from qrmenu.application.ports.repositories import VenueViews
from qrmenu.application.use_cases.view_analytics import GetViewAnalytics

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


class StubViewLogRepository:
    def __init__(self) -> None:
        self.since: list[datetime] = []

    def count_since(self, since: datetime) -> int:
        self.since.append(since)
        return 15

    def daily_counts(self, since: datetime) -> list[tuple[str, int]]:
        return [("2026-10-19", 9), ("2026-10-18", 6)]

    def user_agent_counts(self, since: datetime) -> list[tuple[str | None, int]]:
        return [("Mozilla/5.0 (iPhone)", 12), (None, 3)]

    def venue_counts(self, since: datetime) -> list[VenueViews]:
        return [VenueViews(venue_id="ven_1", name="Örnek Kafe", slug="ornek-kafe", views=15)]


def test_database_metrics_report_and_reset(admin_client, database_metrics) -> None:
    database_metrics.record_query("products", "select", 20.0)
    database_metrics.record_query("products", "select", 180.0)
    database_metrics.record_query("view_logs", "insert", 10.0)

    body = admin_client.get("/api/admin/metrics/database").json()

    assert body == {
        "totalQueries": 3,
        "slowQueries": 1,
        "averageQueryTime": 70.0,
        "queriesByModel": {"products": 2, "view_logs": 1},
        "slowQueriesByModel": {"products": 1},
        "slowQueryThresholdMs": 100.0,
    }

    assert admin_client.delete("/api/admin/metrics/database").json() == {"ok": True}
    assert database_metrics.get_metrics().total_queries == 0


def test_metric_resets_require_csrf(admin_client, monitor, database_metrics) -> None:
    monitor.record_hit("10.0.0.1", "menu:get", 120, 60_000)
    database_metrics.record_query("products", "select", 5.0)
    del admin_client.headers["X-CSRF-Token"]

    for path in ("/api/admin/metrics/rate-limits", "/api/admin/metrics/database"):
        response = admin_client.delete(path)
        assert response.status_code == 403
        assert response.json()["error"]["code"] == "CSRF_REJECTED"

    assert monitor.get_stats().total_hits == 1
    assert database_metrics.get_metrics().total_queries == 1


def test_database_metrics_require_admin(client) -> None:
    assert client.get("/api/admin/metrics/database").status_code == 401


def test_view_analytics_route(admin_client, monkeypatch) -> None:
    repository = StubViewLogRepository()
    monkeypatch.setattr(
        analytics_route,
        "_view_analytics_use_case",
        lambda: GetViewAnalytics(repository, clock=lambda: NOW),
    )

    body = admin_client.get("/api/admin/analytics/accessibility", params={"days": 3}).json()

    assert body["summary"]["totalViews"] == 15
    assert body["summary"]["averageViewsPerDay"] == 5
    assert body["summary"]["period"]["days"] == 3
    assert body["summary"]["period"]["from"].startswith("2026-10-16T12:00:00")
    assert body["viewsPerDay"] == [
        {"date": "2026-10-19", "views": 9},
        {"date": "2026-10-18", "views": 6},
    ]
    assert body["deviceBreakdown"] == {
        "mobile": 12,
        "desktop": 0,
        "tablet": 0,
        "bot": 0,
        "unknown": 3,
    }
    assert body["topUserAgents"][1] == {"userAgent": "Unknown", "count": 3}
    assert body["venueStats"] == [
        {"venueId": "ven_1", "venueName": "Örnek Kafe", "venueSlug": "ornek-kafe", "views": 15}
    ]


def test_view_analytics_validates_days(admin_client) -> None:
    response = admin_client.get("/api/admin/analytics/accessibility", params={"days": 0})
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_REQUEST"


def test_view_analytics_requires_admin(client) -> None:
    assert client.get("/api/admin/analytics/accessibility").status_code == 401
