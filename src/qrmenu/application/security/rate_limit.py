from __future__ import annotations

import logging
import math
import re
import time
from dataclasses import dataclass
from typing import Callable, Mapping

from qrmenu.application.metrics.rate_limit_monitor import RateLimitMonitor
from qrmenu.application.ports.counter_store import CounterStore

logger = logging.getLogger(__name__)

LOOPBACK_IDENTIFIER = "127.0.0.1"


class RateLimitExceededError(Exception):
    def __init__(self, message: str, window_ms: int) -> None:
        super().__init__(message)
        self.window_ms = window_ms
        self.retry_after_seconds = max(1, math.ceil(window_ms / 1000))


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    remaining: int


@dataclass(frozen=True)
class RateLimitRule:
    pattern: re.Pattern[str]
    scope: str
    limit: int
    window_ms: int

    def matches(self, path: str) -> bool:
        return bool(self.pattern.search(path))


RATE_LIMIT_RULES: tuple[RateLimitRule, ...] = (
    RateLimitRule(re.compile(r"^/api/venue/[^/]+/menu"), "api:menu", 300, 60_000),
    RateLimitRule(re.compile(r"^/api/products"), "api:products", 60, 30_000),
    RateLimitRule(re.compile(r"^/admin(/|$)"), "page:admin", 30, 60_000),
)

DEFAULT_RATE_LIMIT_RULE = RateLimitRule(re.compile(r".*"), "global", 300, 60_000)


def pick_rule(
    path: str,
    rules: tuple[RateLimitRule, ...] = RATE_LIMIT_RULES,
    default: RateLimitRule = DEFAULT_RATE_LIMIT_RULE,
) -> RateLimitRule:
    for rule in rules:
        if rule.matches(path):
            return rule
    return default


def _first_value(raw: str | None) -> str | None:
    if not raw:
        return None
    first = raw.split(",")[0].strip()
    return first or None


def resolve_client_identifier(peer_host: str | None, headers: Mapping[str, str]) -> str:
    """Best-effort client address. Header values are client-controlled."""
    if peer_host:
        return peer_host
    real_ip = _first_value(headers.get("x-real-ip"))
    if real_ip:
        return real_ip
    forwarded = _first_value(headers.get("x-forwarded-for"))
    if forwarded:
        return forwarded
    return LOOPBACK_IDENTIFIER


def _now_ms() -> int:
    return int(time.time() * 1000)


class RateLimiter:
    def __init__(
        self,
        store: CounterStore,
        monitor: RateLimitMonitor,
        fallback: CounterStore | None = None,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        self._store = store
        self._fallback = fallback
        self._monitor = monitor
        self._clock = clock

    @property
    def monitor(self) -> RateLimitMonitor:
        return self._monitor

    def _increment(self, key: str, window_ms: int, now_ms: int) -> int:
        try:
            return self._store.check_and_increment(key, window_ms, now_ms)
        except Exception:
            if self._fallback is None:
                raise
            logger.warning("rate_limit_store_unavailable", exc_info=True, extra={"scope": key})
            return self._fallback.check_and_increment(key, window_ms, now_ms)

    def check(self, identifier: str, scope: str, limit: int, window_ms: int) -> RateLimitResult:
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_ms < 1:
            raise ValueError("window_ms must be >= 1")

        count = self._increment(f"{scope}:{identifier}", window_ms, self._clock())
        if count > limit:
            self._monitor.record_hit(identifier, scope, limit, window_ms)
            return RateLimitResult(allowed=False, remaining=0)
        return RateLimitResult(allowed=True, remaining=max(0, limit - count))

    def enforce(self, identifier: str, scope: str, limit: int, window_ms: int) -> RateLimitResult:
        result = self.check(identifier, scope, limit, window_ms)
        if not result.allowed:
            raise RateLimitExceededError("too many requests", window_ms=window_ms)
        return result
