from __future__ import annotations

from typing import Callable

import redis

from qrmenu.application.ports.counter_store import CounterStore
from qrmenu.infrastructure.cache.redis_client import get_redis_client

KEY_PREFIX = "rl:"


class RedisCounterStore(CounterStore):
    def __init__(
        self,
        client_factory: Callable[[], redis.Redis] = get_redis_client,
        prefix: str = KEY_PREFIX,
    ) -> None:
        self._client_factory = client_factory
        self._prefix = prefix

    def check_and_increment(self, key: str, window_ms: int, now_ms: int) -> int:
        client = self._client_factory()
        redis_key = self._prefix + key
        count = int(client.incr(redis_key))
        if count == 1:
            client.pexpire(redis_key, window_ms)
        return count
