from __future__ import annotations

from typing import Protocol


class CounterStore(Protocol):
    def check_and_increment(self, key: str, window_ms: int, now_ms: int) -> int:
        """Increment the counter for ``key`` and return its value in the current window."""
        ...
