from __future__ import annotations

import threading
from collections import OrderedDict
from dataclasses import dataclass

from qrmenu.application.ports.counter_store import CounterStore

DEFAULT_MAX_ENTRIES = 2000


@dataclass
class _Window:
    count: int
    window_start: int


class MemoryCounterStore(CounterStore):
    """Bounded LRU of fixed windows, local to this process.

    A window resets once ``now_ms - window_start`` exceeds ``window_ms``; the
    least recently touched key is evicted when the store is full.
    """

    def __init__(self, max_entries: int = DEFAULT_MAX_ENTRIES) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be >= 1")
        self._max_entries = max_entries
        self._windows: OrderedDict[str, _Window] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._windows)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._windows

    def check_and_increment(self, key: str, window_ms: int, now_ms: int) -> int:
        with self._lock:
            window = self._windows.get(key)
            if window is None or now_ms - window.window_start > window_ms:
                window = _Window(count=1, window_start=now_ms)
                self._windows[key] = window
            else:
                window.count += 1
            self._windows.move_to_end(key)

            while len(self._windows) > self._max_entries:
                self._windows.popitem(last=False)
            return window.count
