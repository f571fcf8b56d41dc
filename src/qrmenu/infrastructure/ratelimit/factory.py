from __future__ import annotations

import logging

from qrmenu.application.metrics.rate_limit_monitor import RateLimitMonitor
from qrmenu.application.ports.counter_store import CounterStore
from qrmenu.application.security.rate_limit import RateLimiter
from qrmenu.infrastructure.cache.redis_client import redis_configured
from qrmenu.infrastructure.ratelimit.memory_store import MemoryCounterStore
from qrmenu.infrastructure.ratelimit.redis_store import RedisCounterStore

logger = logging.getLogger(__name__)


def build_counter_store() -> CounterStore:
    if redis_configured():
        logger.info("rate_limit_backend_selected", extra={"scope": "redis"})
        return RedisCounterStore()
    logger.info("rate_limit_backend_selected", extra={"scope": "memory"})
    return MemoryCounterStore()


def build_rate_limiter(monitor: RateLimitMonitor) -> RateLimiter:
    store = build_counter_store()
    fallback = None if isinstance(store, MemoryCounterStore) else MemoryCounterStore()
    return RateLimiter(store=store, monitor=monitor, fallback=fallback)
