from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from qrmenu.application.ports.repositories import DuplicateSlugError, RecordNotFoundError
from qrmenu.domain.common.ids import CategoryId, ProductId, SubCategoryId, VenueId
from qrmenu.domain.menu.entities import Category, PriceChange, Product, SubCategory, Venue


class FakeVenueRepository:
    def __init__(self, venues: list[Venue]) -> None:
        self.venues = {venue.venue_id: venue for venue in venues}

    def get_by_slug(self, slug: str) -> Venue | None:
        return next((venue for venue in self.venues.values() if venue.slug == slug), None)

    def get_by_id_or_slug(self, value: str) -> Venue | None:
        return self.venues.get(VenueId(value)) or self.get_by_slug(value)


class FakeCategoryRepository:
    def __init__(self) -> None:
        self.items: dict[str, Category] = {}

    def get(self, category_id: CategoryId) -> Category | None:
        return self.items.get(category_id)

    def find_by_slug_or_name(self, slug: str, name: str) -> Category | None:
        return next(
            (item for item in self.items.values() if item.slug == slug or item.name == name),
            None,
        )

    def list_for_venue(self, venue_id: VenueId, visible_only: bool = False) -> list[Category]:
        items = [item for item in self.items.values() if item.venue_id == venue_id]
        if visible_only:
            items = [item for item in items if item.is_visible]
        return sorted(items, key=lambda item: (item.display_order, item.name))

    def next_display_order(self, venue_id: VenueId) -> int:
        orders = [item.display_order for item in self.list_for_venue(venue_id)]
        return max(orders) + 1 if orders else 0

    def add(self, category: Category) -> None:
        for item in self.items.values():
            if item.venue_id == category.venue_id and item.slug == category.slug:
                raise DuplicateSlugError(category.slug)
        self.items[category.category_id] = category

    def update(self, category: Category) -> None:
        if category.category_id not in self.items:
            raise RecordNotFoundError(category.category_id)
        self.items[category.category_id] = category

    def delete(self, category_id: CategoryId) -> None:
        self.items.pop(category_id, None)


class FakeSubCategoryRepository:
    def __init__(self) -> None:
        self.items: dict[str, SubCategory] = {}

    def get(self, sub_category_id: SubCategoryId) -> SubCategory | None:
        return self.items.get(sub_category_id)

    def list_for_venue(self, venue_id: VenueId, visible_only: bool = False) -> list[SubCategory]:
        items = [item for item in self.items.values() if item.venue_id == venue_id]
        if visible_only:
            items = [item for item in items if item.is_visible]
        return sorted(items, key=lambda item: (item.display_order, item.name))

    def list_for_category(self, category_id: CategoryId) -> list[SubCategory]:
        items = [item for item in self.items.values() if item.category_id == category_id]
        return sorted(items, key=lambda item: (item.display_order, item.name))

    def next_display_order(self, category_id: CategoryId) -> int:
        orders = [item.display_order for item in self.list_for_category(category_id)]
        return max(orders) + 1 if orders else 0

    def count_for_category(self, category_id: CategoryId) -> int:
        return len(self.list_for_category(category_id))

    def add(self, sub_category: SubCategory) -> None:
        for item in self.items.values():
            if item.category_id == sub_category.category_id and item.slug == sub_category.slug:
                raise DuplicateSlugError(sub_category.slug)
        self.items[sub_category.sub_category_id] = sub_category

    def delete(self, sub_category_id: SubCategoryId) -> None:
        self.items.pop(sub_category_id, None)


class FakeProductRepository:
    def __init__(self) -> None:
        self.items: dict[str, Product] = {}
        self.history: list[PriceChange] = []
        self.add_attempts: list[str] = []
        self.fail_update = False

    def get(self, product_id: ProductId) -> Product | None:
        return self.items.get(product_id)

    def list_for_admin(
        self,
        category: str | None = None,
        query: str | None = None,
        is_active: bool | None = None,
    ) -> list[Product]:
        items = [item for item in self.items.values() if not item.is_deleted]
        if category:
            items = [item for item in items if category in (item.category, item.category_id)]
        if query:
            items = [item for item in items if query.lower() in item.name.lower()]
        if is_active is not None:
            items = [item for item in items if item.is_active is is_active]
        return items

    def list_public(self, venue_id: VenueId) -> list[Product]:
        return [
            item for item in self.items.values() if item.venue_id == venue_id and item.is_listed
        ]

    def count_for_category(self, category_id: CategoryId) -> int:
        return sum(
            1
            for item in self.items.values()
            if item.category_id == category_id and not item.is_deleted
        )

    def count_for_sub_category(self, sub_category_id: SubCategoryId) -> int:
        return sum(
            1
            for item in self.items.values()
            if item.sub_category_id == sub_category_id and not item.is_deleted
        )

    def add(self, product: Product) -> None:
        self.add_attempts.append(product.slug)
        for item in self.items.values():
            if item.venue_id == product.venue_id and item.slug == product.slug:
                raise DuplicateSlugError(product.slug)
        self.items[product.product_id] = product

    def update(self, product: Product, price_change: PriceChange | None = None) -> None:
        if self.fail_update:
            raise RuntimeError("database unavailable")
        if product.product_id not in self.items:
            raise RecordNotFoundError(product.product_id)
        for item in self.items.values():
            if (
                item.product_id != product.product_id
                and item.venue_id == product.venue_id
                and item.slug == product.slug
            ):
                raise DuplicateSlugError(product.slug)
        self.items[product.product_id] = product
        if price_change is not None:
            self.history.append(price_change)

    def list_price_history(self, product_id: ProductId) -> list[PriceChange]:
        return [item for item in self.history if item.product_id == product_id]


@dataclass
class Catalog:
    venues: FakeVenueRepository
    categories: FakeCategoryRepository = field(default_factory=FakeCategoryRepository)
    sub_categories: FakeSubCategoryRepository = field(default_factory=FakeSubCategoryRepository)
    products: FakeProductRepository = field(default_factory=FakeProductRepository)

    def add_category(self, category_id: str, slug: str, display_order: int = 0) -> Category:
        category = Category(
            category_id=CategoryId(category_id),
            venue_id=VenueId("ven_1"),
            slug=slug,
            name=slug.title(),
            display_order=display_order,
        )
        self.categories.add(category)
        return category

    def add_sub_category(self, sub_category_id: str, category_id: str, slug: str) -> SubCategory:
        sub_category = SubCategory(
            sub_category_id=SubCategoryId(sub_category_id),
            venue_id=VenueId("ven_1"),
            category_id=CategoryId(category_id),
            slug=slug,
            name=slug.title(),
        )
        self.sub_categories.add(sub_category)
        return sub_category

    def add_product(self, product_id: str, slug: str, price_cents: int = 1000, **kwargs) -> Product:
        product = Product(
            product_id=ProductId(product_id),
            venue_id=VenueId("ven_1"),
            name=kwargs.pop("name", slug.title()),
            slug=slug,
            price_cents=price_cents,
            **kwargs,
        )
        self.products.add(product)
        return product


@pytest.fixture
def catalog() -> Catalog:
    venue = Venue(venue_id=VenueId("ven_1"), name="Örnek Kafe", slug="ornek-kafe")
    return Catalog(venues=FakeVenueRepository([venue]))
