from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from qrmenu.api.dependencies import require_admin, require_csrf
from qrmenu.application.dto.requests import SubCategoryCreateRequest
from qrmenu.application.dto.responses import (
    OkResponse,
    SubCategoryEnvelope,
    SubCategoryListResponse,
)
from qrmenu.application.use_cases.subcategories import (
    CreateSubCategory,
    DeleteSubCategory,
    ListSubCategories,
)
from qrmenu.domain.common.ids import CategoryId, SubCategoryId
from qrmenu.infrastructure.db.repositories.category_repo import (
    SqlAlchemyCategoryRepository,
    SqlAlchemySubCategoryRepository,
)
from qrmenu.infrastructure.db.repositories.product_repo import SqlAlchemyProductRepository

router = APIRouter(prefix="/api/subcategories", dependencies=[Depends(require_admin)])


def _list_sub_categories_use_case() -> ListSubCategories:
    return ListSubCategories(
        category_repository=SqlAlchemyCategoryRepository(),
        sub_category_repository=SqlAlchemySubCategoryRepository(),
    )


def _create_sub_category_use_case() -> CreateSubCategory:
    return CreateSubCategory(
        category_repository=SqlAlchemyCategoryRepository(),
        sub_category_repository=SqlAlchemySubCategoryRepository(),
    )


def _delete_sub_category_use_case() -> DeleteSubCategory:
    return DeleteSubCategory(
        sub_category_repository=SqlAlchemySubCategoryRepository(),
        product_repository=SqlAlchemyProductRepository(),
    )


@router.get("", response_model=SubCategoryListResponse)
def list_sub_categories(
    category_id: str = Query(alias="categoryId", min_length=1),
) -> SubCategoryListResponse:
    return _list_sub_categories_use_case().execute(CategoryId(category_id))


@router.post(
    "",
    response_model=SubCategoryEnvelope,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_csrf)],
)
def create_sub_category(request_dto: SubCategoryCreateRequest) -> SubCategoryEnvelope:
    return _create_sub_category_use_case().execute(request_dto)


@router.delete(
    "/{sub_category_id}",
    response_model=OkResponse,
    dependencies=[Depends(require_csrf)],
)
def delete_sub_category(sub_category_id: str) -> OkResponse:
    _delete_sub_category_use_case().execute(SubCategoryId(sub_category_id))
    return OkResponse()
