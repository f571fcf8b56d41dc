from __future__ import annotations

import os
from pathlib import Path

from qrmenu.application.ports.storage import StorageAdapter, StorageError, StoredFile
from qrmenu.infrastructure.storage.naming import generate_object_name


def _local_root() -> Path:
    return Path(os.getenv("STORAGE_LOCAL_ROOT", "./public")).resolve()


class LocalStorageAdapter(StorageAdapter):
    def __init__(self, root: Path | None = None) -> None:
        self._root = root or _local_root()

    def _path_for(self, url: str) -> Path:
        candidate = (self._root / url.lstrip("/")).resolve()
        if self._root not in candidate.parents:
            raise StorageError("path escapes storage root")
        return candidate

    def save(
        self,
        data: bytes,
        *,
        filename: str,
        content_type: str,
        folder: str = "uploads",
    ) -> StoredFile:
        name = generate_object_name(filename)
        directory = self._root / folder
        try:
            directory.mkdir(parents=True, exist_ok=True)
            (directory / name).write_bytes(data)
        except OSError as exc:
            raise StorageError("local write failed") from exc

        url = f"/{folder}/{name}"
        return StoredFile(url=url, remove=lambda: self.remove(url))

    def remove(self, url: str) -> None:
        if not url:
            return
        try:
            self._path_for(url).unlink(missing_ok=True)
        except OSError as exc:
            raise StorageError("local remove failed") from exc
