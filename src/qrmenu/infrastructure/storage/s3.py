from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from qrmenu.application.ports.storage import (
    StorageAdapter,
    StorageConfigurationError,
    StorageError,
    StoredFile,
)
from qrmenu.infrastructure.storage.naming import generate_object_name


@dataclass(frozen=True)
class R2Settings:
    account_id: str
    access_key_id: str
    secret_access_key: str
    bucket: str
    public_base_url: str

    @property
    def endpoint_url(self) -> str:
        return f"https://{self.account_id}.r2.cloudflarestorage.com"

    @classmethod
    def from_env(cls) -> R2Settings | None:
        values = {
            "account_id": os.getenv("R2_ACCOUNT_ID"),
            "access_key_id": os.getenv("R2_ACCESS_KEY_ID"),
            "secret_access_key": os.getenv("R2_SECRET_ACCESS_KEY"),
            "bucket": os.getenv("R2_BUCKET"),
            "public_base_url": os.getenv("R2_PUBLIC_BASE_URL"),
        }
        if not all(values.values()):
            return None
        return cls(**values)  # type: ignore[arg-type]


def r2_enabled() -> bool:
    return R2Settings.from_env() is not None


class S3StorageAdapter(StorageAdapter):
    """S3-compatible object storage; configured for Cloudflare R2 by default."""

    def __init__(self, settings: R2Settings | None = None, client: Any | None = None) -> None:
        resolved = settings or R2Settings.from_env()
        if resolved is None:
            raise StorageConfigurationError("R2 storage is not configured")
        self._settings = resolved
        self._client = client or boto3.client(
            "s3",
            endpoint_url=resolved.endpoint_url,
            aws_access_key_id=resolved.access_key_id,
            aws_secret_access_key=resolved.secret_access_key,
            region_name="auto",
        )

    @property
    def _base_url(self) -> str:
        return self._settings.public_base_url.rstrip("/")

    def object_key_for(self, url: str) -> str | None:
        normalized = url.rstrip("/")
        if not normalized.startswith(self._base_url):
            return None
        key = normalized[len(self._base_url) :].lstrip("/")
        return key or None

    def save(
        self,
        data: bytes,
        *,
        filename: str,
        content_type: str,
        folder: str = "uploads",
    ) -> StoredFile:
        key = f"{folder}/{generate_object_name(filename)}"
        try:
            self._client.put_object(
                Bucket=self._settings.bucket,
                Key=key,
                Body=data,
                ContentType=content_type or "application/octet-stream",
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageError("R2 upload failed") from exc

        url = f"{self._base_url}/{key}"
        return StoredFile(url=url, remove=lambda: self.remove(url))

    def remove(self, url: str) -> None:
        if not url:
            return
        key = self.object_key_for(url)
        if key is None:
            return
        try:
            self._client.delete_object(Bucket=self._settings.bucket, Key=key)
        except ClientError as exc:
            status = exc.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
            if status != 404:
                raise StorageError("R2 remove failed") from exc
        except BotoCoreError as exc:
            raise StorageError("R2 remove failed") from exc
