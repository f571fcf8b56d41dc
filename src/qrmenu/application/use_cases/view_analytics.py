from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable

from qrmenu.application.dto.responses import (
    AnalyticsPeriodResponse,
    DailyViewsResponse,
    DeviceBreakdownResponse,
    UserAgentViewsResponse,
    VenueViewsResponse,
    ViewAnalyticsResponse,
    ViewSummaryResponse,
)
from qrmenu.application.ports.repositories import ViewLogRepository

TOP_USER_AGENTS = 10
UNKNOWN_USER_AGENT = "Unknown"


def classify_user_agent(user_agent: str | None) -> str:
    """Coarse device class of a user agent string; unrecognised agents count as mobile."""
    agent = (user_agent or "").lower()
    if "bot" in agent or "crawler" in agent:
        return "bot"
    if "mobile" in agent or "android" in agent or "iphone" in agent:
        return "mobile"
    if "tablet" in agent or "ipad" in agent:
        return "tablet"
    if "windows" in agent or "mac" in agent or "linux" in agent:
        return "desktop"
    if not agent:
        return "unknown"
    return "mobile"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GetViewAnalytics:
    def __init__(
        self,
        view_log_repository: ViewLogRepository,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._view_log_repository = view_log_repository
        self._clock = clock

    def execute(self, days: int) -> ViewAnalyticsResponse:
        if days < 1:
            raise ValueError("days must be >= 1")

        until = self._clock()
        since = until - timedelta(days=days)
        total_views = self._view_log_repository.count_since(since)
        user_agents = self._view_log_repository.user_agent_counts(since)

        devices = DeviceBreakdownResponse()
        for user_agent, views in user_agents:
            device = classify_user_agent(user_agent)
            setattr(devices, device, getattr(devices, device) + views)

        return ViewAnalyticsResponse(
            summary=ViewSummaryResponse(
                totalViews=total_views,
                period=AnalyticsPeriodResponse(days=days, start=since, to=until),
                averageViewsPerDay=round(total_views / days),
            ),
            viewsPerDay=[
                DailyViewsResponse(date=day, views=views)
                for day, views in self._view_log_repository.daily_counts(since)
            ],
            deviceBreakdown=devices,
            topUserAgents=[
                UserAgentViewsResponse(userAgent=user_agent or UNKNOWN_USER_AGENT, count=views)
                for user_agent, views in user_agents[:TOP_USER_AGENTS]
            ],
            venueStats=[
                VenueViewsResponse(
                    venueId=item.venue_id,
                    venueName=item.name or "Unknown",
                    venueSlug=item.slug or "unknown",
                    views=item.views,
                )
                for item in self._view_log_repository.venue_counts(since)
            ],
        )
