from __future__ import annotations

from dataclasses import dataclass

from qrmenu.application.ports.repositories import CategoryRepository, SubCategoryRepository
from qrmenu.domain.common.ids import CategoryId, SubCategoryId, VenueId


class CategorySelectionError(Exception):
    pass


@dataclass(frozen=True)
class CategorySelection:
    category_id: CategoryId | None
    category_value: str


def resolve_category_selection(
    categories: CategoryRepository,
    category_id: str | None,
    category: str | None,
) -> CategorySelection:
    """Map the submitted category fields onto a stored category where possible.

    An explicit id must exist. Free text is matched against slug (lowercased)
    or exact name; unmatched text is kept as a legacy value with no link.
    """
    value = (category or "").strip()

    if category_id:
        record = categories.get(CategoryId(category_id))
        if record is None:
            raise CategorySelectionError("category not found")
        return CategorySelection(
            category_id=record.category_id,
            category_value=value or record.slug or record.name,
        )

    if value:
        record = categories.find_by_slug_or_name(slug=value.lower(), name=value)
        if record is not None:
            return CategorySelection(
                category_id=record.category_id,
                category_value=record.slug or record.name or value,
            )
        return CategorySelection(category_id=None, category_value=value)

    raise CategorySelectionError("category is required")


def resolve_sub_category_selection(
    sub_categories: SubCategoryRepository,
    sub_category_id: str | None,
    category_id: str | None,
    venue_id: str | None,
) -> SubCategoryId | None:
    if not sub_category_id:
        return None

    record = sub_categories.get(SubCategoryId(sub_category_id))
    if record is None:
        raise CategorySelectionError("sub-category not found")
    if category_id and record.category_id != category_id:
        raise CategorySelectionError("sub-category does not belong to the selected category")
    if venue_id and record.venue_id != venue_id:
        raise CategorySelectionError("sub-category does not belong to the selected venue")
    return record.sub_category_id
