from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from qrmenu.application.dto.requests import (
    CategoryCreateRequest,
    CategoryPatchRequest,
    SubCategoryCreateRequest,
)
from qrmenu.application.use_cases.categories import (
    CategoryConflictError,
    CategoryInUseError,
    CategoryNotFoundError,
    CreateCategory,
    DeleteCategory,
    InvalidCategoryError,
    ListCategories,
    UpdateCategory,
)
from qrmenu.application.use_cases.products import InvalidVenueError
from qrmenu.application.use_cases.subcategories import (
    CreateSubCategory,
    DeleteSubCategory,
    ListSubCategories,
    SubCategoryConflictError,
    SubCategoryInUseError,
    SubCategoryNotFoundError,
)
from qrmenu.domain.common.ids import CategoryId, SubCategoryId


def test_create_category_appends_display_order(catalog) -> None:
    catalog.add_category("cat_hot", "hot", display_order=4)
    use_case = CreateCategory(catalog.venues, catalog.categories)

    request_dto = CategoryCreateRequest(venueId="ornek-kafe", name="Soğuk İçecekler")
    envelope = use_case.execute(request_dto)

    assert envelope.category.slug == "soguk-icecekler"
    assert envelope.category.displayOrder == 5
    assert envelope.category.isVisible is True


def test_create_category_conflict_and_bad_name(catalog) -> None:
    use_case = CreateCategory(catalog.venues, catalog.categories)
    use_case.execute(CategoryCreateRequest(venueId="ven_1", name="Tatlılar"))

    with pytest.raises(CategoryConflictError):
        use_case.execute(CategoryCreateRequest(venueId="ven_1", name="tatlilar"))
    with pytest.raises(InvalidCategoryError):
        use_case.execute(CategoryCreateRequest(venueId="ven_1", name="***"))
    with pytest.raises(InvalidVenueError):
        use_case.execute(CategoryCreateRequest(venueId="ven_x", name="Yeni"))


def test_list_categories_in_display_order(catalog) -> None:
    catalog.add_category("cat_b", "cold", display_order=1)
    catalog.add_category("cat_a", "hot", display_order=0)

    response = ListCategories(catalog.venues, catalog.categories).execute("ven_1")

    assert [item.slug for item in response.categories] == ["hot", "cold"]


def test_update_category_empty_image_clears_it(catalog) -> None:
    catalog.add_category("cat_hot", "hot")
    use_case = UpdateCategory(catalog.categories)
    use_case.execute(CategoryId("cat_hot"), CategoryPatchRequest(imageUrl="/uploads/a.jpg"))

    envelope = use_case.execute(CategoryId("cat_hot"), CategoryPatchRequest(imageUrl=""))

    assert envelope.category.imageUrl is None
    with pytest.raises(CategoryNotFoundError):
        use_case.execute(CategoryId("cat_x"), CategoryPatchRequest(name="X"))


def test_delete_category_blocked_by_products_then_sub_categories(catalog) -> None:
    catalog.add_category("cat_hot", "hot")
    catalog.add_sub_category("sub_coffee", "cat_hot", "kahve")
    catalog.add_product("prd_1", "latte", category_id="cat_hot")
    use_case = DeleteCategory(catalog.categories, catalog.sub_categories, catalog.products)

    with pytest.raises(CategoryInUseError, match="products"):
        use_case.execute(CategoryId("cat_hot"))

    catalog.products.items.clear()
    with pytest.raises(CategoryInUseError, match="sub-categories"):
        use_case.execute(CategoryId("cat_hot"))

    catalog.sub_categories.items.clear()
    use_case.execute(CategoryId("cat_hot"))
    assert catalog.categories.get(CategoryId("cat_hot")) is None


def test_deleted_products_do_not_block_category_delete(catalog) -> None:
    from datetime import datetime, timezone

    catalog.add_category("cat_hot", "hot")
    catalog.add_product(
        "prd_1",
        "latte",
        category_id="cat_hot",
        deleted_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
    )

    DeleteCategory(catalog.categories, catalog.sub_categories, catalog.products).execute(
        CategoryId("cat_hot")
    )


def test_create_sub_category_must_match_venue(catalog) -> None:
    catalog.add_category("cat_hot", "hot")
    use_case = CreateSubCategory(catalog.categories, catalog.sub_categories)

    envelope = use_case.execute(
        SubCategoryCreateRequest(venueId="ven_1", categoryId="cat_hot", name="Kahveler")
    )
    assert envelope.subCategory.slug == "kahveler"
    assert envelope.subCategory.displayOrder == 0

    with pytest.raises(SubCategoryConflictError):
        use_case.execute(
            SubCategoryCreateRequest(venueId="ven_1", categoryId="cat_hot", name="kahveler")
        )
    with pytest.raises(InvalidCategoryError):
        use_case.execute(
            SubCategoryCreateRequest(venueId="ven_2", categoryId="cat_hot", name="Çaylar")
        )


def test_list_and_delete_sub_categories(catalog) -> None:
    catalog.add_category("cat_hot", "hot")
    catalog.add_sub_category("sub_tea", "cat_hot", "cay")
    catalog.add_sub_category("sub_coffee", "cat_hot", "kahve")
    catalog.add_product("prd_1", "latte", sub_category_id="sub_coffee")

    listed = ListSubCategories(catalog.categories, catalog.sub_categories).execute(
        CategoryId("cat_hot")
    )
    assert [item.slug for item in listed.subCategories] == ["cay", "kahve"]

    use_case = DeleteSubCategory(catalog.sub_categories, catalog.products)
    with pytest.raises(SubCategoryInUseError):
        use_case.execute(SubCategoryId("sub_coffee"))
    with pytest.raises(SubCategoryNotFoundError):
        use_case.execute(SubCategoryId("sub_missing"))

    use_case.execute(SubCategoryId("sub_tea"))
    assert catalog.sub_categories.get(SubCategoryId("sub_tea")) is None


def test_list_sub_categories_of_unknown_category(catalog) -> None:
    with pytest.raises(CategoryNotFoundError):
        ListSubCategories(catalog.categories, catalog.sub_categories).execute(CategoryId("cat_x"))
