from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable

from qrmenu.application.dto.requests import (
    PriceChangeRequest,
    ProductCreateRequest,
    ProductPatchRequest,
)
from qrmenu.application.dto.responses import (
    CreatedResponse,
    PriceChangeResponse,
    ProductListResponse,
)
from qrmenu.application.mappers.menu_mapper import to_product_response
from qrmenu.application.metrics.catalog_metrics import (
    record_catalog_mutation,
    record_price_change,
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
from qrmenu.application.use_cases.category_selection import (
    CategorySelectionError,
    resolve_category_selection,
    resolve_sub_category_selection,
)
from qrmenu.domain.common.ids import PriceChangeId, ProductId, new_id
from qrmenu.domain.common.text import DEFAULT_PRODUCT_SLUG, slug_candidates, to_slug
from qrmenu.domain.menu.entities import PriceChange, Product

MANUAL_EDIT_REASON = "manual edit"


class ProductNotFoundError(Exception):
    pass


class InvalidVenueError(Exception):
    pass


class InvalidSlugError(Exception):
    pass


class SlugConflictError(Exception):
    pass


class PriceUnchangedError(Exception):
    pass


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ListProducts:
    def __init__(self, product_repository: ProductRepository) -> None:
        self._product_repository = product_repository

    def execute(
        self,
        category: str | None = None,
        query: str | None = None,
        active: bool | None = None,
    ) -> ProductListResponse:
        products = self._product_repository.list_for_admin(
            category=category or None,
            query=(query or "").strip() or None,
            is_active=active,
        )
        return ProductListResponse(items=[to_product_response(product) for product in products])


class CreateProduct:
    def __init__(
        self,
        venue_repository: VenueRepository,
        category_repository: CategoryRepository,
        sub_category_repository: SubCategoryRepository,
        product_repository: ProductRepository,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._venue_repository = venue_repository
        self._category_repository = category_repository
        self._sub_category_repository = sub_category_repository
        self._product_repository = product_repository
        self._clock = clock

    def execute(self, request_dto: ProductCreateRequest) -> CreatedResponse:
        selection = resolve_category_selection(
            self._category_repository,
            category_id=request_dto.category_id,
            category=request_dto.category,
        )

        venue = self._venue_repository.get_by_id_or_slug(request_dto.venue_id)
        if venue is None:
            raise InvalidVenueError("no valid venue found")

        sub_category_id = resolve_sub_category_selection(
            self._sub_category_repository,
            sub_category_id=request_dto.sub_category_id,
            category_id=selection.category_id,
            venue_id=venue.venue_id,
        )

        base_slug = to_slug(request_dto.slug or request_dto.name or "") or DEFAULT_PRODUCT_SLUG
        template = Product(
            product_id=ProductId(new_id("prd")),
            venue_id=venue.venue_id,
            name=request_dto.name,
            slug=base_slug,
            price_cents=request_dto.price_cents,
            category=selection.category_value,
            category_id=selection.category_id,
            sub_category_id=sub_category_id,
            description=request_dto.description,
            is_active=True if request_dto.is_active is None else request_dto.is_active,
            is_in_stock=True if request_dto.is_in_stock is None else request_dto.is_in_stock,
            diet_tags=frozenset(request_dto.diet_tags or ()),
            created_at=self._clock(),
        )

        for candidate in slug_candidates(base_slug):
            product = replace(template, slug=candidate)
            try:
                self._product_repository.add(product)
            except DuplicateSlugError:
                record_slug_collision("product")
                continue
            record_catalog_mutation("product", "create")
            return CreatedResponse(id=str(product.product_id))

        raise SlugConflictError("a product with this name already exists (slug conflict)")


class UpdateProduct:
    def __init__(
        self,
        category_repository: CategoryRepository,
        sub_category_repository: SubCategoryRepository,
        product_repository: ProductRepository,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._category_repository = category_repository
        self._sub_category_repository = sub_category_repository
        self._product_repository = product_repository
        self._clock = clock

    def execute(self, product_id: ProductId, request_dto: ProductPatchRequest) -> None:
        existing = self._product_repository.get(product_id)
        if existing is None:
            raise ProductNotFoundError(f"product not found for product_id={product_id}")

        provided = request_dto.model_fields_set
        changes: dict[str, object] = {}

        if request_dto.name:
            changes["name"] = request_dto.name
        if request_dto.slug:
            slug = to_slug(request_dto.slug)
            if not slug:
                raise InvalidSlugError("invalid slug")
            changes["slug"] = slug

        next_category_id = existing.category_id
        if "category" in provided or request_dto.category_id:
            selection = resolve_category_selection(
                self._category_repository,
                category_id=request_dto.category_id,
                category=request_dto.category,
            )
            changes["category"] = selection.category_value
            changes["category_id"] = selection.category_id
            next_category_id = selection.category_id
            if "sub_category_id" not in provided:
                changes["sub_category_id"] = None

        if "sub_category_id" in provided:
            if request_dto.sub_category_id is None:
                changes["sub_category_id"] = None
            else:
                if not next_category_id:
                    raise CategorySelectionError(
                        "a valid category is required for a sub-category"
                    )
                changes["sub_category_id"] = resolve_sub_category_selection(
                    self._sub_category_repository,
                    sub_category_id=request_dto.sub_category_id,
                    category_id=next_category_id,
                    venue_id=existing.venue_id,
                )

        if "description" in provided:
            changes["description"] = request_dto.description
        if request_dto.price_cents is not None:
            changes["price_cents"] = request_dto.price_cents
        if request_dto.is_active is not None:
            changes["is_active"] = request_dto.is_active
        if request_dto.is_in_stock is not None:
            changes["is_in_stock"] = request_dto.is_in_stock
        if "diet_tags" in provided:
            changes["diet_tags"] = frozenset(request_dto.diet_tags or ())

        updated = replace(existing, **changes)
        price_change = None
        if updated.price_cents != existing.price_cents:
            price_change = PriceChange(
                price_change_id=PriceChangeId(new_id("prc")),
                product_id=existing.product_id,
                old_price_cents=existing.price_cents,
                new_price_cents=updated.price_cents,
                reason=MANUAL_EDIT_REASON,
                created_at=self._clock(),
            )

        try:
            self._product_repository.update(updated, price_change=price_change)
        except DuplicateSlugError as exc:
            record_slug_collision("product")
            raise SlugConflictError("this slug is already in use") from exc
        except RecordNotFoundError as exc:
            raise ProductNotFoundError(f"product not found for product_id={product_id}") from exc

        if price_change is not None:
            record_price_change()
        record_catalog_mutation("product", "update")


class DeleteProduct:
    def __init__(
        self,
        product_repository: ProductRepository,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._product_repository = product_repository
        self._clock = clock

    def execute(self, product_id: ProductId) -> None:
        existing = self._product_repository.get(product_id)
        if existing is None:
            raise ProductNotFoundError(f"product not found for product_id={product_id}")
        try:
            self._product_repository.update(existing.soft_delete(self._clock()))
        except RecordNotFoundError as exc:
            raise ProductNotFoundError(f"product not found for product_id={product_id}") from exc
        record_catalog_mutation("product", "delete")


class ChangeProductPrice:
    def __init__(
        self,
        product_repository: ProductRepository,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._product_repository = product_repository
        self._clock = clock

    def execute(
        self,
        product_id: ProductId,
        request_dto: PriceChangeRequest,
    ) -> PriceChangeResponse:
        product = self._product_repository.get(product_id)
        if product is None:
            raise ProductNotFoundError(f"product not found for product_id={product_id}")
        if product.price_cents == request_dto.new_price_cents:
            raise PriceUnchangedError("price is unchanged")

        price_change = PriceChange(
            price_change_id=PriceChangeId(new_id("prc")),
            product_id=product.product_id,
            old_price_cents=product.price_cents,
            new_price_cents=request_dto.new_price_cents,
            reason=request_dto.reason,
            created_at=self._clock(),
        )
        self._product_repository.update(
            replace(product, price_cents=request_dto.new_price_cents),
            price_change=price_change,
        )
        record_price_change()
        return PriceChangeResponse(ok=True, newPriceCents=request_dto.new_price_cents)
