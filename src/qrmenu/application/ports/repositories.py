from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from qrmenu.domain.common.ids import CategoryId, ProductId, SubCategoryId, VenueId
from qrmenu.domain.menu.entities import Category, PriceChange, Product, SubCategory, User, Venue


class VenueRepository(Protocol):
    def get_by_slug(self, slug: str) -> Venue | None: ...

    def get_by_id_or_slug(self, value: str) -> Venue | None: ...


class CategoryRepository(Protocol):
    def get(self, category_id: CategoryId) -> Category | None: ...

    def find_by_slug_or_name(self, slug: str, name: str) -> Category | None: ...

    def list_for_venue(self, venue_id: VenueId, visible_only: bool = False) -> list[Category]: ...

    def next_display_order(self, venue_id: VenueId) -> int: ...

    def add(self, category: Category) -> None: ...

    def update(self, category: Category) -> None: ...

    def delete(self, category_id: CategoryId) -> None: ...


class SubCategoryRepository(Protocol):
    def get(self, sub_category_id: SubCategoryId) -> SubCategory | None: ...

    def list_for_venue(
        self,
        venue_id: VenueId,
        visible_only: bool = False,
    ) -> list[SubCategory]: ...

    def list_for_category(self, category_id: CategoryId) -> list[SubCategory]: ...

    def next_display_order(self, category_id: CategoryId) -> int: ...

    def count_for_category(self, category_id: CategoryId) -> int: ...

    def add(self, sub_category: SubCategory) -> None: ...

    def delete(self, sub_category_id: SubCategoryId) -> None: ...


class ProductRepository(Protocol):
    def get(self, product_id: ProductId) -> Product | None: ...

    def list_for_admin(
        self,
        category: str | None = None,
        query: str | None = None,
        is_active: bool | None = None,
    ) -> list[Product]: ...

    def list_public(self, venue_id: VenueId) -> list[Product]: ...

    def count_for_category(self, category_id: CategoryId) -> int: ...

    def count_for_sub_category(self, sub_category_id: SubCategoryId) -> int: ...

    def add(self, product: Product) -> None: ...

    def update(self, product: Product, price_change: PriceChange | None = None) -> None: ...

    def list_price_history(self, product_id: ProductId) -> list[PriceChange]: ...


class UserRepository(Protocol):
    def get_by_email(self, email: str) -> User | None: ...


@dataclass(frozen=True)
class VenueViews:
    venue_id: str
    name: str | None
    slug: str | None
    views: int


class ViewLogRepository(Protocol):
    def record(self, venue_id: VenueId, table_id: str | None, user_agent: str | None) -> None: ...

    def count_since(self, since: datetime) -> int: ...

    def daily_counts(self, since: datetime) -> list[tuple[str, int]]: ...

    def user_agent_counts(self, since: datetime) -> list[tuple[str | None, int]]: ...

    def venue_counts(self, since: datetime) -> list[VenueViews]: ...


class DuplicateSlugError(Exception):
    pass


class RecordNotFoundError(Exception):
    pass
