from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Protocol


class StorageConfigurationError(Exception):
    pass


class StorageError(Exception):
    pass


@dataclass(frozen=True)
class StoredFile:
    url: str
    remove: Callable[[], None] | None = None


class StorageAdapter(Protocol):
    def save(
        self,
        data: bytes,
        *,
        filename: str,
        content_type: str,
        folder: str = "uploads",
    ) -> StoredFile: ...

    def remove(self, url: str) -> None: ...
