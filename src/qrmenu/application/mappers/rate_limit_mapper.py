from __future__ import annotations

from datetime import datetime

from qrmenu.application.dto.responses import (
    RateLimitStatsResponse,
    TimeRangeResponse,
    TopOffenderResponse,
)
from qrmenu.application.metrics.rate_limit_monitor import RateLimitStats


def to_rate_limit_stats_response(
    stats: RateLimitStats,
    since: datetime,
    until: datetime,
    hours: int,
) -> RateLimitStatsResponse:
    return RateLimitStatsResponse(
        totalHits=stats.total_hits,
        byScope=stats.by_scope,
        byIdentifier=stats.by_identifier,
        topOffenders=[
            TopOffenderResponse(
                identifier=offender.identifier,
                scope=offender.scope,
                hits=offender.hits,
            )
            for offender in stats.top_offenders
        ],
        timeRange=TimeRangeResponse(start=since, to=until),
        periodHours=hours,
    )
