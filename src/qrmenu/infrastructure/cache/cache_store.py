from __future__ import annotations

import threading
import time
from functools import lru_cache
from typing import Callable

from qrmenu.application.ports.cache import CacheStore
from qrmenu.infrastructure.cache.redis_client import get_redis_client, redis_configured


class RedisCacheStore(CacheStore):
    def __init__(self, timeout_seconds: float = 1.0, prefix: str = "cache:") -> None:
        self._timeout_seconds = timeout_seconds
        self._prefix = prefix

    def get(self, key: str) -> str | None:
        value = get_redis_client(timeout_seconds=self._timeout_seconds).get(self._prefix + key)
        if value is None:
            return None
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return str(value)

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        get_redis_client(timeout_seconds=self._timeout_seconds).set(
            name=self._prefix + key,
            value=value,
            ex=ttl_seconds,
        )


class InMemoryCacheStore(CacheStore):
    """Process-local TTL cache used when Redis is not configured."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._entries: dict[str, tuple[float, str]] = {}
        self._clock = clock
        self._lock = threading.Lock()

    def get(self, key: str) -> str | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        with self._lock:
            self._entries[key] = (self._clock() + ttl_seconds, value)


@lru_cache(maxsize=1)
def _process_cache() -> InMemoryCacheStore:
    return InMemoryCacheStore()


def build_cache_store() -> CacheStore:
    if redis_configured():
        return RedisCacheStore()
    return _process_cache()
