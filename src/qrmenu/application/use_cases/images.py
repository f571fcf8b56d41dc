from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import BinaryIO, Callable

from qrmenu.application.dto.responses import ImageUploadResponse
from qrmenu.application.metrics.catalog_metrics import record_image_upload
from qrmenu.application.ports.repositories import CategoryRepository, ProductRepository
from qrmenu.application.ports.storage import (
    StorageAdapter,
    StorageConfigurationError,
    StoredFile,
)
from qrmenu.application.use_cases.categories import CategoryNotFoundError
from qrmenu.application.use_cases.products import ProductNotFoundError
from qrmenu.domain.common.ids import CategoryId, ProductId

logger = logging.getLogger(__name__)

MAX_IMAGE_BYTES = 2 * 1024 * 1024
ALLOWED_IMAGE_TYPES = frozenset({"image/jpeg", "image/png", "image/webp"})


class ImageTooLargeError(Exception):
    pass


class UnsupportedImageTypeError(Exception):
    pass


class ImageStorageError(Exception):
    pass


class ImageAssignmentError(Exception):
    pass


@dataclass(frozen=True)
class ImageUpload:
    data: bytes
    filename: str
    content_type: str

    @property
    def size(self) -> int:
        return len(self.data)

    @classmethod
    def from_stream(
        cls,
        stream: BinaryIO,
        filename: str,
        content_type: str,
        max_bytes: int = MAX_IMAGE_BYTES,
    ) -> ImageUpload:
        """Read at most one byte past ``max_bytes`` so oversized bodies are never buffered."""
        return cls(data=stream.read(max_bytes + 1), filename=filename, content_type=content_type)


def validate_image(upload: ImageUpload) -> None:
    if upload.size > MAX_IMAGE_BYTES:
        raise ImageTooLargeError("file is too large")
    if upload.content_type not in ALLOWED_IMAGE_TYPES:
        raise UnsupportedImageTypeError("unsupported image type")


class _ImageUpload(ABC):
    """Store a new image, point the record at it, then drop the previous one.

    If the record update fails the freshly stored object is removed again.
    Cleanup failures are logged and never change the response.
    """

    target = "image"
    folder = "uploads"

    def __init__(self, storage_factory: Callable[[], StorageAdapter]) -> None:
        self._storage_factory = storage_factory

    @abstractmethod
    def _current_image_url(self, target_id: str) -> str | None:
        """Image url of the target; raises when the target does not exist."""

    @abstractmethod
    def _assign(self, target_id: str, url: str) -> None: ...

    def _storage(self) -> StorageAdapter:
        try:
            return self._storage_factory()
        except StorageConfigurationError as exc:
            record_image_upload(self.target, "config_error")
            logger.error("image_storage_not_configured", exc_info=True)
            raise ImageStorageError("storage is missing or misconfigured") from exc

    def _discard(self, stored: StoredFile, storage: StorageAdapter) -> None:
        try:
            if stored.remove is not None:
                stored.remove()
            else:
                storage.remove(stored.url)
        except Exception:
            logger.warning(
                f"{self.target}_image_cleanup_failed",
                exc_info=True,
                extra={"url": stored.url},
            )

    def execute(self, target_id: str, upload: ImageUpload) -> ImageUploadResponse:
        current_url = self._current_image_url(target_id)
        validate_image(upload)

        storage = self._storage()
        try:
            stored = storage.save(
                upload.data,
                filename=upload.filename,
                content_type=upload.content_type,
                folder=self.folder,
            )
        except Exception as exc:
            record_image_upload(self.target, "storage_error")
            logger.error(f"{self.target}_image_save_failed", exc_info=True)
            raise ImageStorageError("image upload failed") from exc

        try:
            self._assign(target_id, stored.url)
        except Exception as exc:
            self._discard(stored, storage)
            record_image_upload(self.target, "assign_error")
            logger.error(f"{self.target}_image_assign_failed", exc_info=True)
            raise ImageAssignmentError("image could not be saved") from exc

        if current_url and current_url != stored.url:
            try:
                storage.remove(current_url)
            except Exception:
                logger.warning(
                    f"{self.target}_image_remove_orphan_failed",
                    exc_info=True,
                    extra={"url": current_url},
                )

        record_image_upload(self.target, "ok")
        return ImageUploadResponse(url=stored.url)


class UploadProductImage(_ImageUpload):
    target = "product"
    folder = "uploads"

    def __init__(
        self,
        product_repository: ProductRepository,
        storage_factory: Callable[[], StorageAdapter],
    ) -> None:
        super().__init__(storage_factory)
        self._product_repository = product_repository

    def _current_image_url(self, target_id: str) -> str | None:
        product = self._product_repository.get(ProductId(target_id))
        if product is None:
            raise ProductNotFoundError(f"product not found for product_id={target_id}")
        return product.image_url

    def _assign(self, target_id: str, url: str) -> None:
        product = self._product_repository.get(ProductId(target_id))
        if product is None:
            raise ProductNotFoundError(f"product not found for product_id={target_id}")
        self._product_repository.update(replace(product, image_url=url))


class UploadCategoryImage(_ImageUpload):
    target = "category"
    folder = "category-images"

    def __init__(
        self,
        category_repository: CategoryRepository,
        storage_factory: Callable[[], StorageAdapter],
    ) -> None:
        super().__init__(storage_factory)
        self._category_repository = category_repository

    def _current_image_url(self, target_id: str) -> str | None:
        category = self._category_repository.get(CategoryId(target_id))
        if category is None:
            raise CategoryNotFoundError(f"category not found for category_id={target_id}")
        return category.image_url

    def _assign(self, target_id: str, url: str) -> None:
        category = self._category_repository.get(CategoryId(target_id))
        if category is None:
            raise CategoryNotFoundError(f"category not found for category_id={target_id}")
        self._category_repository.update(replace(category, image_url=url))
