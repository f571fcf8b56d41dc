from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, model_validator

CategoryValue = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=1, max_length=64)
]
DietTag = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=32)]
TrimmedId = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]


def _to_camel(value: str) -> str:
    parts = value.split("_")
    return parts[0] + "".join(part.capitalize() for part in parts[1:])


class CamelBaseModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=_to_camel,
        populate_by_name=True,
    )


class LoginRequest(CamelBaseModel):
    email: str = Field(pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    password: str = Field(min_length=6)


class ProductCreateRequest(CamelBaseModel):
    venue_id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    slug: str | None = Field(default=None, min_length=1)
    category: CategoryValue | None = None
    category_id: TrimmedId | None = None
    sub_category_id: TrimmedId | None = None
    description: str | None = None
    price_cents: int = Field(ge=0)
    is_active: bool | None = None
    is_in_stock: bool | None = None
    diet_tags: list[DietTag] | None = Field(default=None, max_length=8)

    @model_validator(mode="after")
    def _category_required(self) -> ProductCreateRequest:
        if not (self.category or self.category_id):
            raise ValueError("category is required")
        return self


class ProductPatchRequest(CamelBaseModel):
    name: str | None = None
    slug: str | None = None
    category: CategoryValue | None = None
    category_id: TrimmedId | None = None
    sub_category_id: TrimmedId | None = None
    description: str | None = None
    price_cents: int | None = Field(default=None, ge=0)
    is_active: bool | None = None
    is_in_stock: bool | None = None
    diet_tags: list[DietTag] | None = Field(default=None, max_length=8)


class PriceChangeRequest(CamelBaseModel):
    new_price_cents: int = Field(ge=0)
    reason: Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=200)]


class CategoryCreateRequest(CamelBaseModel):
    venue_id: TrimmedId
    name: Name
    image_url: Annotated[
        str, StringConstraints(strip_whitespace=True, min_length=1, max_length=512)
    ] | None = None
    display_order: int | None = Field(default=None, ge=0)
    is_visible: bool | None = None


class CategoryPatchRequest(CamelBaseModel):
    name: Name | None = None
    image_url: Annotated[
        str, StringConstraints(strip_whitespace=True, max_length=512)
    ] | None = None
    display_order: int | None = Field(default=None, ge=0)
    is_visible: bool | None = None


class SubCategoryCreateRequest(CamelBaseModel):
    venue_id: TrimmedId
    category_id: TrimmedId
    name: Name
    display_order: int | None = Field(default=None, ge=0)
    is_visible: bool | None = None
