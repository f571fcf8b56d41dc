from __future__ import annotations

from dataclasses import replace

from qrmenu.application.dto.requests import CategoryCreateRequest, CategoryPatchRequest
from qrmenu.application.dto.responses import CategoryEnvelope, CategoryListResponse
from qrmenu.application.mappers.menu_mapper import to_category_response
from qrmenu.application.metrics.catalog_metrics import (
    record_catalog_mutation,
    record_slug_collision,
)
from qrmenu.application.ports.repositories import (
    CategoryRepository,
    DuplicateSlugError,
    ProductRepository,
    RecordNotFoundError,
    SubCategoryRepository,
    VenueRepository,
)
from qrmenu.application.use_cases.products import InvalidVenueError
from qrmenu.domain.common.ids import CategoryId, new_id
from qrmenu.domain.common.text import to_slug
from qrmenu.domain.menu.entities import Category


class CategoryNotFoundError(Exception):
    pass


class InvalidCategoryError(Exception):
    pass


class CategoryConflictError(Exception):
    pass


class CategoryInUseError(Exception):
    pass


class ListCategories:
    def __init__(
        self,
        venue_repository: VenueRepository,
        category_repository: CategoryRepository,
    ) -> None:
        self._venue_repository = venue_repository
        self._category_repository = category_repository

    def execute(self, venue_id: str) -> CategoryListResponse:
        venue = self._venue_repository.get_by_id_or_slug(venue_id)
        if venue is None:
            raise InvalidVenueError("no valid venue found")
        categories = self._category_repository.list_for_venue(venue.venue_id)
        return CategoryListResponse(
            categories=[to_category_response(category) for category in categories]
        )


class CreateCategory:
    def __init__(
        self,
        venue_repository: VenueRepository,
        category_repository: CategoryRepository,
    ) -> None:
        self._venue_repository = venue_repository
        self._category_repository = category_repository

    def execute(self, request_dto: CategoryCreateRequest) -> CategoryEnvelope:
        venue = self._venue_repository.get_by_id_or_slug(request_dto.venue_id)
        if venue is None:
            raise InvalidVenueError("no valid venue found")

        slug = to_slug(request_dto.name)
        if not slug:
            raise InvalidCategoryError("could not derive a slug from the name")

        display_order = request_dto.display_order
        if display_order is None:
            display_order = self._category_repository.next_display_order(venue.venue_id)

        category = Category(
            category_id=CategoryId(new_id("cat")),
            venue_id=venue.venue_id,
            slug=slug,
            name=request_dto.name,
            display_order=display_order,
            is_visible=True if request_dto.is_visible is None else request_dto.is_visible,
            image_url=request_dto.image_url or None,
        )
        try:
            self._category_repository.add(category)
        except DuplicateSlugError as exc:
            record_slug_collision("category")
            raise CategoryConflictError("this slug already exists for the venue") from exc

        record_catalog_mutation("category", "create")
        return CategoryEnvelope(category=to_category_response(category))


class UpdateCategory:
    def __init__(self, category_repository: CategoryRepository) -> None:
        self._category_repository = category_repository

    def execute(
        self,
        category_id: CategoryId,
        request_dto: CategoryPatchRequest,
    ) -> CategoryEnvelope:
        existing = self._category_repository.get(category_id)
        if existing is None:
            raise CategoryNotFoundError(f"category not found for category_id={category_id}")

        provided = request_dto.model_fields_set
        changes: dict[str, object] = {}
        if request_dto.name is not None:
            changes["name"] = request_dto.name
        if request_dto.display_order is not None:
            changes["display_order"] = request_dto.display_order
        if request_dto.is_visible is not None:
            changes["is_visible"] = request_dto.is_visible
        if "image_url" in provided:
            changes["image_url"] = request_dto.image_url or None

        updated = replace(existing, **changes)
        try:
            self._category_repository.update(updated)
        except RecordNotFoundError as exc:
            raise CategoryNotFoundError(
                f"category not found for category_id={category_id}"
            ) from exc

        record_catalog_mutation("category", "update")
        return CategoryEnvelope(category=to_category_response(updated))


class DeleteCategory:
    def __init__(
        self,
        category_repository: CategoryRepository,
        sub_category_repository: SubCategoryRepository,
        product_repository: ProductRepository,
    ) -> None:
        self._category_repository = category_repository
        self._sub_category_repository = sub_category_repository
        self._product_repository = product_repository

    def execute(self, category_id: CategoryId) -> None:
        if self._category_repository.get(category_id) is None:
            raise CategoryNotFoundError(f"category not found for category_id={category_id}")
        if self._product_repository.count_for_category(category_id) > 0:
            raise CategoryInUseError("products still reference this category")
        if self._sub_category_repository.count_for_category(category_id) > 0:
            raise CategoryInUseError("sub-categories still reference this category")

        self._category_repository.delete(category_id)
        record_catalog_mutation("category", "delete")
