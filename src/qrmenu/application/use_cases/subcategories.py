from __future__ import annotations

from qrmenu.application.dto.requests import SubCategoryCreateRequest
from qrmenu.application.dto.responses import SubCategoryEnvelope, SubCategoryListResponse
from qrmenu.application.mappers.menu_mapper import to_sub_category_response
from qrmenu.application.metrics.catalog_metrics import (
    record_catalog_mutation,
    record_slug_collision,
)
from qrmenu.application.ports.repositories import (
    CategoryRepository,
    DuplicateSlugError,
    ProductRepository,
    SubCategoryRepository,
)
from qrmenu.application.use_cases.categories import CategoryNotFoundError, InvalidCategoryError
from qrmenu.domain.common.ids import CategoryId, SubCategoryId, new_id
from qrmenu.domain.common.text import to_slug
from qrmenu.domain.menu.entities import SubCategory


class SubCategoryNotFoundError(Exception):
    pass


class SubCategoryConflictError(Exception):
    pass


class SubCategoryInUseError(Exception):
    pass


class ListSubCategories:
    def __init__(
        self,
        category_repository: CategoryRepository,
        sub_category_repository: SubCategoryRepository,
    ) -> None:
        self._category_repository = category_repository
        self._sub_category_repository = sub_category_repository

    def execute(self, category_id: CategoryId) -> SubCategoryListResponse:
        if self._category_repository.get(category_id) is None:
            raise CategoryNotFoundError(f"category not found for category_id={category_id}")
        items = self._sub_category_repository.list_for_category(category_id)
        return SubCategoryListResponse(
            subCategories=[to_sub_category_response(item) for item in items]
        )


class CreateSubCategory:
    def __init__(
        self,
        category_repository: CategoryRepository,
        sub_category_repository: SubCategoryRepository,
    ) -> None:
        self._category_repository = category_repository
        self._sub_category_repository = sub_category_repository

    def execute(self, request_dto: SubCategoryCreateRequest) -> SubCategoryEnvelope:
        category = self._category_repository.get(CategoryId(request_dto.category_id))
        if category is None or category.venue_id != request_dto.venue_id:
            raise InvalidCategoryError("no valid category found")

        slug = to_slug(request_dto.name)
        if not slug:
            raise InvalidCategoryError("could not derive a slug from the name")

        display_order = request_dto.display_order
        if display_order is None:
            display_order = self._sub_category_repository.next_display_order(category.category_id)

        sub_category = SubCategory(
            sub_category_id=SubCategoryId(new_id("sub")),
            venue_id=category.venue_id,
            category_id=category.category_id,
            slug=slug,
            name=request_dto.name,
            display_order=display_order,
            is_visible=True if request_dto.is_visible is None else request_dto.is_visible,
        )
        try:
            self._sub_category_repository.add(sub_category)
        except DuplicateSlugError as exc:
            record_slug_collision("sub_category")
            raise SubCategoryConflictError(
                "this sub-category already exists in the category"
            ) from exc

        record_catalog_mutation("sub_category", "create")
        return SubCategoryEnvelope(subCategory=to_sub_category_response(sub_category))


class DeleteSubCategory:
    def __init__(
        self,
        sub_category_repository: SubCategoryRepository,
        product_repository: ProductRepository,
    ) -> None:
        self._sub_category_repository = sub_category_repository
        self._product_repository = product_repository

    def execute(self, sub_category_id: SubCategoryId) -> None:
        if self._sub_category_repository.get(sub_category_id) is None:
            raise SubCategoryNotFoundError(
                f"sub-category not found for sub_category_id={sub_category_id}"
            )
        if self._product_repository.count_for_sub_category(sub_category_id) > 0:
            raise SubCategoryInUseError("products still reference this sub-category")

        self._sub_category_repository.delete(sub_category_id)
        record_catalog_mutation("sub_category", "delete")
