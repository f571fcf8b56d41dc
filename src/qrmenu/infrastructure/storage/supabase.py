from __future__ import annotations

import os
from dataclasses import dataclass

import httpx

from qrmenu.application.ports.storage import (
    StorageAdapter,
    StorageConfigurationError,
    StorageError,
    StoredFile,
)
from qrmenu.infrastructure.storage.naming import generate_object_name


@dataclass(frozen=True)
class SupabaseSettings:
    url: str
    service_role_key: str
    bucket: str

    @classmethod
    def from_env(cls) -> SupabaseSettings | None:
        url = os.getenv("SUPABASE_URL")
        key = os.getenv("SUPABASE_SERVICE_ROLE_KEY")
        bucket = os.getenv("SUPABASE_STORAGE_BUCKET")
        if not (url and key and bucket):
            return None
        return cls(url=url.rstrip("/"), service_role_key=key, bucket=bucket)


def supabase_enabled() -> bool:
    return SupabaseSettings.from_env() is not None


class SupabaseStorageAdapter(StorageAdapter):
    """Supabase Storage over its REST API."""

    def __init__(
        self,
        settings: SupabaseSettings | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        resolved = settings or SupabaseSettings.from_env()
        if resolved is None:
            raise StorageConfigurationError("Supabase storage is not configured")
        self._settings = resolved
        self._client = client or httpx.Client(timeout=10.0)

    @property
    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._settings.service_role_key}",
            "apikey": self._settings.service_role_key,
        }

    def public_url(self, path: str) -> str:
        return f"{self._settings.url}/storage/v1/object/public/{self._settings.bucket}/{path}"

    def object_path_for(self, url: str) -> str | None:
        marker = f"/object/public/{self._settings.bucket}/"
        index = url.find(marker)
        if index == -1:
            return None
        return url[index + len(marker) :] or None

    def save(
        self,
        data: bytes,
        *,
        filename: str,
        content_type: str,
        folder: str = "uploads",
    ) -> StoredFile:
        path = f"{folder}/{generate_object_name(filename)}"
        try:
            response = self._client.post(
                f"{self._settings.url}/storage/v1/object/{self._settings.bucket}/{path}",
                content=data,
                headers={
                    **self._headers,
                    "Content-Type": content_type or "application/octet-stream",
                    "x-upsert": "false",
                },
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise StorageError("Supabase upload failed") from exc

        url = self.public_url(path)
        return StoredFile(url=url, remove=lambda: self.remove(url))

    def remove(self, url: str) -> None:
        if not url:
            return
        path = self.object_path_for(url)
        if path is None:
            return
        try:
            response = self._client.request(
                "DELETE",
                f"{self._settings.url}/storage/v1/object/{self._settings.bucket}",
                json={"prefixes": [path]},
                headers=self._headers,
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise StorageError("Supabase remove failed") from exc
