from __future__ import annotations

import io
import logging
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from qrmenu.application.ports.storage import StorageConfigurationError, StoredFile
from qrmenu.application.use_cases.categories import CategoryNotFoundError
from qrmenu.application.use_cases.images import (
    MAX_IMAGE_BYTES,
    ImageAssignmentError,
    ImageStorageError,
    ImageTooLargeError,
    ImageUpload,
    UnsupportedImageTypeError,
    UploadCategoryImage,
    UploadProductImage,
    _ImageUpload,
)
from qrmenu.application.use_cases.products import ProductNotFoundError
from qrmenu.domain.common.ids import CategoryId, ProductId


class FakeStorage:
    def __init__(self, fail_save: bool = False, fail_remove: bool = False) -> None:
        self.saved: list[tuple[str, str]] = []
        self.removed: list[str] = []
        self._fail_save = fail_save
        self._fail_remove = fail_remove

    def save(self, data: bytes, *, filename: str, content_type: str, folder: str = "uploads"):
        if self._fail_save:
            raise OSError("disk full")
        url = f"/{folder}/{len(self.saved) + 1}-{filename}"
        self.saved.append((folder, url))
        return StoredFile(url=url)

    def remove(self, url: str) -> None:
        if self._fail_remove:
            raise OSError("permission denied")
        self.removed.append(url)


def _jpeg(size: int = 10, content_type: str = "image/jpeg") -> ImageUpload:
    return ImageUpload(data=b"x" * size, filename="latte.jpg", content_type=content_type)


def test_product_upload_assigns_url_and_removes_previous_image(catalog) -> None:
    catalog.add_product("prd_1", "latte", image_url="/uploads/old.jpg")
    storage = FakeStorage()

    response = UploadProductImage(catalog.products, lambda: storage).execute("prd_1", _jpeg())

    assert response.url == "/uploads/1-latte.jpg"
    assert catalog.products.get(ProductId("prd_1")).image_url == response.url
    assert storage.removed == ["/uploads/old.jpg"]


def test_category_upload_uses_its_own_folder(catalog) -> None:
    catalog.add_category("cat_hot", "hot")
    storage = FakeStorage()

    response = UploadCategoryImage(catalog.categories, lambda: storage).execute("cat_hot", _jpeg())

    assert storage.saved == [("category-images", response.url)]
    assert catalog.categories.get(CategoryId("cat_hot")).image_url == response.url


def test_missing_target_is_reported_before_validation(catalog) -> None:
    storage = FakeStorage()
    with pytest.raises(ProductNotFoundError):
        UploadProductImage(catalog.products, lambda: storage).execute(
            "prd_x", _jpeg(content_type="text/plain")
        )
    with pytest.raises(CategoryNotFoundError):
        UploadCategoryImage(catalog.categories, lambda: storage).execute("cat_x", _jpeg())


def test_upload_validation(catalog) -> None:
    catalog.add_product("prd_1", "latte")
    use_case = UploadProductImage(catalog.products, FakeStorage)

    with pytest.raises(ImageTooLargeError):
        use_case.execute("prd_1", _jpeg(size=MAX_IMAGE_BYTES + 1))
    with pytest.raises(UnsupportedImageTypeError):
        use_case.execute("prd_1", _jpeg(content_type="image/gif"))

    use_case.execute("prd_1", _jpeg(size=MAX_IMAGE_BYTES))


def test_failed_assignment_removes_the_new_object(catalog) -> None:
    catalog.add_product("prd_1", "latte", image_url="/uploads/old.jpg")
    catalog.products.fail_update = True
    storage = FakeStorage()

    with pytest.raises(ImageAssignmentError):
        UploadProductImage(catalog.products, lambda: storage).execute("prd_1", _jpeg())

    assert storage.removed == ["/uploads/1-latte.jpg"]
    assert catalog.products.get(ProductId("prd_1")).image_url == "/uploads/old.jpg"


def test_cleanup_failures_do_not_fail_the_upload(catalog, caplog) -> None:
    caplog.set_level(logging.WARNING)
    catalog.add_product("prd_1", "latte", image_url="/uploads/old.jpg")
    storage = FakeStorage(fail_remove=True)

    response = UploadProductImage(catalog.products, lambda: storage).execute("prd_1", _jpeg())

    assert catalog.products.get(ProductId("prd_1")).image_url == response.url
    assert "product_image_remove_orphan_failed" in caplog.text


def test_storage_errors_surface_as_storage_error(catalog) -> None:
    catalog.add_product("prd_1", "latte")

    def _unconfigured():
        raise StorageConfigurationError("STORAGE_PROVIDER=r2 but R2 is not configured")

    with pytest.raises(ImageStorageError):
        UploadProductImage(catalog.products, _unconfigured).execute("prd_1", _jpeg())
    with pytest.raises(ImageStorageError):
        UploadProductImage(catalog.products, lambda: FakeStorage(fail_save=True)).execute(
            "prd_1", _jpeg()
        )


class RecordingStream(io.BytesIO):
    def __init__(self, data: bytes) -> None:
        super().__init__(data)
        self.requested: list[int] = []

    def read(self, size: int | None = -1) -> bytes:
        self.requested.append(size)
        return super().read(size)


def test_oversized_stream_is_read_only_past_the_limit(catalog) -> None:
    catalog.add_product("prd_1", "latte")
    stream = RecordingStream(b"x" * (3 * MAX_IMAGE_BYTES))

    upload = ImageUpload.from_stream(stream, filename="big.jpg", content_type="image/jpeg")

    assert stream.requested == [MAX_IMAGE_BYTES + 1]
    assert upload.size == MAX_IMAGE_BYTES + 1
    storage = FakeStorage()
    with pytest.raises(ImageTooLargeError):
        UploadProductImage(catalog.products, lambda: storage).execute("prd_1", upload)
    assert storage.saved == []


def test_small_stream_is_read_whole() -> None:
    upload = ImageUpload.from_stream(
        io.BytesIO(b"\x89PNG"), filename="a.png", content_type="image/png"
    )
    assert upload.data == b"\x89PNG"


def test_upload_base_requires_target_hooks() -> None:
    with pytest.raises(TypeError):
        _ImageUpload(FakeStorage)
