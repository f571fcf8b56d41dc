from __future__ import annotations

import re
import sys
import time
from dataclasses import dataclass, field
from typing import Callable, Iterable

from qrmenu.application.dto.responses import (
    CategoryResponse,
    ProductResponse,
    PublicMenuResponse,
    SubCategoryResponse,
)
from qrmenu.domain.common.text import fold_text

ALL = "ALL"
UNCATEGORIZED = "uncategorized"
UNCATEGORIZED_LABEL = "Other"
CATEGORY_IMAGE_PLACEHOLDER = "/images/placeholder.jpg"
SEARCH_DEBOUNCE_MS = 350

_WHITESPACE = re.compile(r"\s+")
_CATEGORY_ALIASES = {"coffee": "hot"}


def normalize_product_category(category: str | None) -> str | None:
    """Map the legacy free-text product category onto a category slug."""
    if not category:
        return None
    lower = category.lower()
    if lower in _CATEGORY_ALIASES:
        return _CATEGORY_ALIASES[lower]
    return _WHITESPACE.sub("-", lower)


def name_sort_key(name: str) -> tuple[str, str]:
    return fold_text(name).casefold(), name


def sort_by_price_desc(products: Iterable[ProductResponse]) -> list[ProductResponse]:
    return sorted(products, key=lambda product: (-product.priceCents, *name_sort_key(product.name)))


def _sub_category_order(item: SubCategoryResponse) -> tuple[int, str, str]:
    return (item.displayOrder, *name_sort_key(item.name))


@dataclass
class ProductGroup:
    slug: str
    label: str
    items: list[ProductResponse] = field(default_factory=list)


class CategoryIndex:
    """Lookup tables derived from one menu payload."""

    def __init__(
        self,
        categories: list[CategoryResponse],
        sub_categories: list[SubCategoryResponse],
        products: list[ProductResponse],
    ) -> None:
        self.categories = sorted(
            categories, key=lambda item: (item.displayOrder, *name_sort_key(item.name))
        )
        self.id_to_slug: dict[str, str] = {}
        self.slug_to_image: dict[str, str] = {}
        self.sub_id_to_slug: dict[str, str] = {}
        self.sub_slug_to_name: dict[str, str] = {}
        self.category_sub_categories: dict[str, list[SubCategoryResponse]] = {}

        for category in self.categories:
            self.id_to_slug[category.id] = category.slug
            if category.slug not in self.slug_to_image:
                self.slug_to_image[category.slug] = (
                    category.imageUrl or f"/images/categories/{category.slug}.jpg"
                )

        for sub_category in sub_categories:
            self.sub_id_to_slug[sub_category.id] = sub_category.slug
            self.sub_slug_to_name[sub_category.slug] = sub_category.name
            category_slug = self.id_to_slug.get(sub_category.categoryId)
            if category_slug is None:
                continue
            self.category_sub_categories.setdefault(category_slug, []).append(sub_category)

        for slug, items in self.category_sub_categories.items():
            self.category_sub_categories[slug] = sorted(items, key=_sub_category_order)

        for product in products:
            key = normalize_product_category(product.category)
            if key and key not in self.slug_to_image and product.imageUrl:
                self.slug_to_image[key] = product.imageUrl

    @classmethod
    def from_menu(cls, menu: PublicMenuResponse) -> "CategoryIndex":
        return cls(menu.categories, menu.subCategories, menu.products)

    def category_slug(self, product: ProductResponse) -> str | None:
        if product.categoryId and product.categoryId in self.id_to_slug:
            return self.id_to_slug[product.categoryId]
        return normalize_product_category(product.category)

    def sub_category_slug(self, product: ProductResponse) -> str | None:
        if product.subCategoryId:
            return self.sub_id_to_slug.get(product.subCategoryId)
        return None

    def sub_categories_of(self, category_slug: str) -> list[SubCategoryResponse]:
        return list(self.category_sub_categories.get(category_slug, []))

    def category_image(self, category_slug: str) -> str:
        return self.slug_to_image.get(category_slug, CATEGORY_IMAGE_PLACEHOLDER)


def filter_products(
    products: Iterable[ProductResponse],
    index: CategoryIndex,
    category: str | None,
    sub_category: str = ALL,
    search: str = "",
) -> list[ProductResponse]:
    query = search.lower()
    result: list[ProductResponse] = []
    for product in products:
        if category and index.category_slug(product) != category:
            continue
        if category and sub_category != ALL and index.sub_category_slug(product) != sub_category:
            continue
        if query not in product.name.lower() and query not in (product.description or "").lower():
            continue
        result.append(product)
    return sort_by_price_desc(result)


def group_products(
    products: list[ProductResponse],
    index: CategoryIndex,
    category: str | None,
    sub_category: str = ALL,
) -> list[ProductGroup]:
    if not category or sub_category != ALL:
        return []

    grouped: dict[str, ProductGroup] = {}
    for product in products:
        slug = index.sub_category_slug(product) or UNCATEGORIZED
        group = grouped.get(slug)
        if group is None:
            if slug == UNCATEGORIZED:
                label = UNCATEGORIZED_LABEL
            else:
                label = index.sub_slug_to_name.get(slug, slug)
            group = grouped[slug] = ProductGroup(slug=slug, label=label)
        group.items.append(product)

    positions = {
        item.slug: position for position, item in enumerate(index.sub_categories_of(category))
    }
    return sorted(
        grouped.values(),
        key=lambda group: (positions.get(group.slug, sys.maxsize), *name_sort_key(group.label)),
    )


def _monotonic_ms() -> float:
    return time.monotonic() * 1000


class SearchDebouncer:
    """Holds typed text until the input has been idle for ``delay_ms``."""

    def __init__(
        self,
        delay_ms: int = SEARCH_DEBOUNCE_MS,
        clock: Callable[[], float] = _monotonic_ms,
    ) -> None:
        self._delay_ms = delay_ms
        self._clock = clock
        self._pending: str | None = None
        self._typed_at = 0.0
        self.value = ""

    def type(self, text: str) -> None:
        self._pending = text
        self._typed_at = self._clock()

    def poll(self) -> str:
        if self._pending is not None and self._clock() - self._typed_at >= self._delay_ms:
            self.value = self._pending.lower()
            self._pending = None
        return self.value


@dataclass(frozen=True)
class MenuView:
    products: list[ProductResponse]
    groups: list[ProductGroup]

    @property
    def grouped(self) -> bool:
        return bool(self.groups)


class MenuBrowser:
    """Category, sub-category and search selection over one menu payload."""

    def __init__(self, menu: PublicMenuResponse, debouncer: SearchDebouncer | None = None) -> None:
        self.menu = menu
        self.index = CategoryIndex.from_menu(menu)
        self.search = debouncer or SearchDebouncer()
        self.category: str | None = (
            self.index.categories[0].slug if self.index.categories else None
        )
        self.sub_category = ALL

    def select_category(self, slug: str) -> None:
        known = {category.slug for category in self.index.categories}
        if slug not in known:
            slug = self.index.categories[0].slug if self.index.categories else None
        self.category = slug
        self._reset_invalid_sub_category()

    def select_sub_category(self, slug: str) -> None:
        self.sub_category = slug
        self._reset_invalid_sub_category()

    def _reset_invalid_sub_category(self) -> None:
        if self.sub_category == ALL:
            return
        allowed = {item.slug for item in self.index.sub_categories_of(self.category or "")}
        if self.sub_category not in allowed:
            self.sub_category = ALL

    def sub_category_options(self) -> list[SubCategoryResponse]:
        if not self.category:
            return []
        return self.index.sub_categories_of(self.category)

    def category_image(self, slug: str) -> str:
        return self.index.category_image(slug)

    def view(self) -> MenuView:
        products = filter_products(
            self.menu.products,
            self.index,
            self.category,
            self.sub_category,
            self.search.poll(),
        )
        groups = group_products(products, self.index, self.category, self.sub_category)
        if groups:
            return MenuView(products=[], groups=groups)
        return MenuView(products=products, groups=[])
