from __future__ import annotations

import logging
import threading
from collections import Counter as TallyCounter
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable

from prometheus_client import Counter

logger = logging.getLogger(__name__)

RATE_LIMIT_REJECTIONS_TOTAL = Counter(
    "qrmenu_rate_limit_rejections_total",
    "Total number of requests rejected by the rate limiter.",
    ["scope"],
)

MAX_EVENTS = 1000
TOP_OFFENDERS = 10


@dataclass(frozen=True)
class RateLimitEvent:
    identifier: str
    scope: str
    limit: int
    window_ms: int
    timestamp: datetime


@dataclass(frozen=True)
class Offender:
    identifier: str
    scope: str
    hits: int


@dataclass(frozen=True)
class RateLimitStats:
    total_hits: int
    by_scope: dict[str, int] = field(default_factory=dict)
    by_identifier: dict[str, int] = field(default_factory=dict)
    top_offenders: list[Offender] = field(default_factory=list)
    first_at: datetime | None = None
    last_at: datetime | None = None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RateLimitMonitor:
    """Bounded in-process record of rate limit rejections.

    One instance is constructed per application and shared by every limiter
    call through ``app.state``.
    """

    def __init__(
        self,
        max_events: int = MAX_EVENTS,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._events: deque[RateLimitEvent] = deque(maxlen=max_events)
        self._clock = clock
        self._lock = threading.Lock()

    def record_hit(self, identifier: str, scope: str, limit: int, window_ms: int) -> RateLimitEvent:
        event = RateLimitEvent(
            identifier=identifier,
            scope=scope,
            limit=limit,
            window_ms=window_ms,
            timestamp=self._clock(),
        )
        with self._lock:
            self._events.append(event)
        RATE_LIMIT_REJECTIONS_TOTAL.labels(scope=scope).inc()
        logger.warning(
            "rate_limit_rejected",
            extra={"scope": scope, "client_id": identifier, "limit": limit, "window_ms": window_ms},
        )
        return event

    def get_events(
        self,
        scope: str | None = None,
        identifier: str | None = None,
        since: datetime | None = None,
    ) -> list[RateLimitEvent]:
        with self._lock:
            events = list(self._events)
        if scope is not None:
            events = [event for event in events if event.scope == scope]
        if identifier is not None:
            events = [event for event in events if event.identifier == identifier]
        if since is not None:
            events = [event for event in events if event.timestamp >= since]
        return events

    def get_stats(self, since: datetime | None = None) -> RateLimitStats:
        events = self.get_events(since=since)
        by_scope = TallyCounter(event.scope for event in events)
        by_identifier = TallyCounter(event.identifier for event in events)
        pairs = TallyCounter((event.identifier, event.scope) for event in events)

        return RateLimitStats(
            total_hits=len(events),
            by_scope=dict(by_scope),
            by_identifier=dict(by_identifier),
            top_offenders=[
                Offender(identifier=identifier, scope=scope, hits=hits)
                for (identifier, scope), hits in pairs.most_common(TOP_OFFENDERS)
            ],
            first_at=events[0].timestamp if events else None,
            last_at=events[-1].timestamp if events else None,
        )

    def reset(self) -> None:
        with self._lock:
            self._events.clear()
