from __future__ import annotations

from fastapi import APIRouter, Depends, File, Query, UploadFile, status

from qrmenu.api.dependencies import require_admin, require_csrf
from qrmenu.application.dto.requests import CategoryCreateRequest, CategoryPatchRequest
from qrmenu.application.dto.responses import (
    CategoryEnvelope,
    CategoryListResponse,
    ImageUploadResponse,
    OkResponse,
)
from qrmenu.application.use_cases.categories import (
    CreateCategory,
    DeleteCategory,
    ListCategories,
    UpdateCategory,
)
from qrmenu.application.use_cases.images import ImageUpload, UploadCategoryImage
from qrmenu.domain.common.ids import CategoryId
from qrmenu.infrastructure.db.repositories.category_repo import (
    SqlAlchemyCategoryRepository,
    SqlAlchemySubCategoryRepository,
)
from qrmenu.infrastructure.db.repositories.product_repo import SqlAlchemyProductRepository
from qrmenu.infrastructure.db.repositories.venue_repo import SqlAlchemyVenueRepository
from qrmenu.infrastructure.storage.provider import get_storage_adapter

router = APIRouter(prefix="/api/categories", dependencies=[Depends(require_admin)])


def _list_categories_use_case() -> ListCategories:
    return ListCategories(
        venue_repository=SqlAlchemyVenueRepository(),
        category_repository=SqlAlchemyCategoryRepository(),
    )


def _create_category_use_case() -> CreateCategory:
    return CreateCategory(
        venue_repository=SqlAlchemyVenueRepository(),
        category_repository=SqlAlchemyCategoryRepository(),
    )


def _update_category_use_case() -> UpdateCategory:
    return UpdateCategory(category_repository=SqlAlchemyCategoryRepository())


def _delete_category_use_case() -> DeleteCategory:
    return DeleteCategory(
        category_repository=SqlAlchemyCategoryRepository(),
        sub_category_repository=SqlAlchemySubCategoryRepository(),
        product_repository=SqlAlchemyProductRepository(),
    )


def _upload_image_use_case() -> UploadCategoryImage:
    return UploadCategoryImage(
        category_repository=SqlAlchemyCategoryRepository(),
        storage_factory=get_storage_adapter,
    )


@router.get("", response_model=CategoryListResponse)
def list_categories(
    venue_id: str = Query(alias="venueId", min_length=1),
) -> CategoryListResponse:
    return _list_categories_use_case().execute(venue_id)


@router.post(
    "",
    response_model=CategoryEnvelope,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_csrf)],
)
def create_category(request_dto: CategoryCreateRequest) -> CategoryEnvelope:
    return _create_category_use_case().execute(request_dto)


@router.patch(
    "/{category_id}",
    response_model=CategoryEnvelope,
    dependencies=[Depends(require_csrf)],
)
def update_category(category_id: str, request_dto: CategoryPatchRequest) -> CategoryEnvelope:
    return _update_category_use_case().execute(CategoryId(category_id), request_dto)


@router.delete(
    "/{category_id}", response_model=OkResponse, dependencies=[Depends(require_csrf)]
)
def delete_category(category_id: str) -> OkResponse:
    _delete_category_use_case().execute(CategoryId(category_id))
    return OkResponse()


@router.post(
    "/{category_id}/image",
    response_model=ImageUploadResponse,
    dependencies=[Depends(require_csrf)],
)
def upload_image(category_id: str, file: UploadFile = File(...)) -> ImageUploadResponse:
    upload = ImageUpload.from_stream(
        file.file,
        filename=file.filename or "upload.bin",
        content_type=file.content_type or "",
    )
    return _upload_image_use_case().execute(category_id, upload)
