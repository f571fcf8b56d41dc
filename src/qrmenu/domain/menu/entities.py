from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum

from qrmenu.domain.common.ids import (
    CategoryId,
    PriceChangeId,
    ProductId,
    SubCategoryId,
    UserId,
    VenueId,
)
from qrmenu.domain.common.money import ensure_price_cents

MAX_DIET_TAGS = 8
MAX_DIET_TAG_LENGTH = 32


class UserRole(str, Enum):
    ADMIN = "ADMIN"
    VIEWER = "VIEWER"


@dataclass(frozen=True)
class Venue:
    venue_id: VenueId
    name: str
    slug: str
    announcement: str | None = None
    opening_hours: str | None = None

    def __post_init__(self) -> None:
        if not self.slug.strip():
            raise ValueError("slug must be non-empty")


@dataclass(frozen=True)
class Category:
    category_id: CategoryId
    venue_id: VenueId
    slug: str
    name: str
    display_order: int = 0
    is_visible: bool = True
    image_url: str | None = None

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("name must be non-empty")
        if not self.slug:
            raise ValueError("slug must be non-empty")
        if self.display_order < 0:
            raise ValueError("display_order must be >= 0")


@dataclass(frozen=True)
class SubCategory:
    sub_category_id: SubCategoryId
    venue_id: VenueId
    category_id: CategoryId
    slug: str
    name: str
    display_order: int = 0
    is_visible: bool = True

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("name must be non-empty")
        if not self.slug:
            raise ValueError("slug must be non-empty")
        if self.display_order < 0:
            raise ValueError("display_order must be >= 0")


@dataclass(frozen=True)
class Product:
    product_id: ProductId
    venue_id: VenueId
    name: str
    slug: str
    price_cents: int
    category: str | None = None
    category_id: CategoryId | None = None
    sub_category_id: SubCategoryId | None = None
    description: str | None = None
    image_url: str | None = None
    is_active: bool = True
    is_in_stock: bool = True
    diet_tags: frozenset[str] = field(default_factory=frozenset)
    created_at: datetime | None = None
    deleted_at: datetime | None = None

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("name must be non-empty")
        ensure_price_cents(self.price_cents)
        if len(self.diet_tags) > MAX_DIET_TAGS:
            raise ValueError(f"at most {MAX_DIET_TAGS} diet tags are allowed")
        for tag in self.diet_tags:
            if not tag or len(tag) > MAX_DIET_TAG_LENGTH:
                raise ValueError(f"diet tags must be 1..{MAX_DIET_TAG_LENGTH} characters")

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def is_listed(self) -> bool:
        return self.is_active and not self.is_deleted

    def soft_delete(self, now: datetime) -> Product:
        return replace(self, deleted_at=now, is_active=False)


@dataclass(frozen=True)
class PriceChange:
    price_change_id: PriceChangeId
    product_id: ProductId
    old_price_cents: int
    new_price_cents: int
    reason: str
    created_at: datetime

    def __post_init__(self) -> None:
        ensure_price_cents(self.old_price_cents)
        ensure_price_cents(self.new_price_cents)
        if not self.reason.strip():
            raise ValueError("reason must be non-empty")


@dataclass(frozen=True)
class User:
    user_id: UserId
    email: str
    password_hash: str | None
    role: UserRole = UserRole.ADMIN
