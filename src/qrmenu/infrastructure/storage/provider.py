from __future__ import annotations

import logging
import os

from qrmenu.application.ports.storage import StorageAdapter, StorageConfigurationError
from qrmenu.infrastructure.storage.local import LocalStorageAdapter
from qrmenu.infrastructure.storage.s3 import S3StorageAdapter, r2_enabled
from qrmenu.infrastructure.storage.supabase import SupabaseStorageAdapter, supabase_enabled

logger = logging.getLogger(__name__)

PROVIDERS = ("r2", "supabase", "local", "auto")


def resolve_provider_name() -> str:
    raw = os.getenv("STORAGE_PROVIDER", "auto").strip().lower()
    return raw if raw in PROVIDERS else "auto"


def get_storage_adapter() -> StorageAdapter:
    provider = resolve_provider_name()

    if provider == "r2":
        if not r2_enabled():
            raise StorageConfigurationError("STORAGE_PROVIDER=r2 but R2 env is missing")
        return S3StorageAdapter()
    if provider == "supabase":
        if not supabase_enabled():
            raise StorageConfigurationError(
                "STORAGE_PROVIDER=supabase but Supabase storage env is missing"
            )
        return SupabaseStorageAdapter()
    if provider == "local":
        return LocalStorageAdapter()

    if r2_enabled():
        return S3StorageAdapter()
    if supabase_enabled():
        return SupabaseStorageAdapter()
    logger.debug("storage_provider_fallback", extra={"provider": "local"})
    return LocalStorageAdapter()
