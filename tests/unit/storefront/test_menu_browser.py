from __future__ import annotations

import itertools
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent))

from storefront_factories import category, product, sub_category

from qrmenu.application.dto.responses import PublicMenuResponse, VenueResponse
from qrmenu.storefront.browse import (
    ALL,
    CATEGORY_IMAGE_PLACEHOLDER,
    UNCATEGORIZED,
    CategoryIndex,
    MenuBrowser,
    SearchDebouncer,
    filter_products,
    group_products,
    normalize_product_category,
    sort_by_price_desc,
)


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def _menu(products, sub_categories=()) -> PublicMenuResponse:
    return PublicMenuResponse(
        venue=VenueResponse(id="ven_1", name="Örnek Kafe", slug="ornek-kafe"),
        categories=[
            category("cat_cold", "cold", display_order=1),
            category("cat_hot", "hot", display_order=0, imageUrl="/img/hot.jpg"),
        ],
        subCategories=list(sub_categories),
        products=list(products),
    )


def _grouped_menu() -> PublicMenuResponse:
    return _menu(
        products=[
            product("prd_latte", "Latte", 12000, categoryId="cat_hot", subCategoryId="sub_kahve"),
            product("prd_cay", "Demlik Çay", 6000, categoryId="cat_hot", subCategoryId="sub_cay"),
            product("prd_su", "Sıcak Su", 1000, categoryId="cat_hot"),
            product("prd_limon", "Limonata", 9000, categoryId="cat_cold"),
        ],
        sub_categories=[
            sub_category("sub_cay", "cat_hot", "cay", "Çay", display_order=1),
            sub_category("sub_kahve", "cat_hot", "kahve", "Kahve", display_order=0),
        ],
    )


def test_selected_category_is_sorted_by_price_descending() -> None:
    menu = _menu(
        [
            product("prd_espresso", "Espresso", 8000, categoryId="cat_hot"),
            product("prd_latte", "Latte", 12000, categoryId="cat_hot"),
        ]
    )
    index = CategoryIndex.from_menu(menu)

    result = filter_products(menu.products, index, "hot")

    assert [(item.name, item.priceCents) for item in result] == [
        ("Latte", 12000),
        ("Espresso", 8000),
    ]
    assert filter_products(menu.products, index, "cold") == []


def test_price_ties_are_ordered_by_name_ignoring_diacritics() -> None:
    items = [
        product("p1", "Zencefilli", 5000),
        product("p2", "Çay", 5000),
        product("p3", "Cappuccino", 5000),
        product("p4", "Salep", 7000),
    ]

    assert [item.name for item in sort_by_price_desc(items)] == [
        "Salep",
        "Cappuccino",
        "Çay",
        "Zencefilli",
    ]


def test_turkish_names_collate_the_same_for_every_input_order() -> None:
    items = [
        product("p1", "Soda", 5000),
        product("p2", "Sıcak Çikolata", 5000),
        product("p3", "Şalgam", 5000),
        product("p4", "Salep", 5000),
        product("p5", "Ihlamur", 5000),
        product("p6", "İrmik Helvası", 9000),
    ]
    expected = ["İrmik Helvası", "Ihlamur", "Salep", "Şalgam", "Sıcak Çikolata", "Soda"]

    for ordering in itertools.permutations(items):
        assert [item.name for item in sort_by_price_desc(ordering)] == expected


def test_legacy_category_text_is_normalized() -> None:
    assert normalize_product_category("Coffee") == "hot"
    assert normalize_product_category("Soft  Drinks") == "soft-drinks"
    assert normalize_product_category(None) is None

    index = CategoryIndex.from_menu(_menu([]))
    legacy = product("prd_1", "Filtre Kahve", 7000, category="coffee")
    assert index.category_slug(legacy) == "hot"


def test_categories_follow_display_order() -> None:
    index = CategoryIndex.from_menu(_menu([]))
    assert [item.slug for item in index.categories] == ["hot", "cold"]


def test_search_matches_name_or_description() -> None:
    menu = _menu(
        [
            product("prd_1", "Latte", 12000, categoryId="cat_hot"),
            product(
                "prd_2", "Mocha", 13000, categoryId="cat_hot", description="Sütlü, latte bazlı"
            ),
            product("prd_3", "Espresso", 8000, categoryId="cat_hot"),
        ]
    )
    index = CategoryIndex.from_menu(menu)

    result = filter_products(menu.products, index, "hot", search="latte")

    assert [item.id for item in result] == ["prd_2", "prd_1"]


def test_groups_follow_sub_category_order_with_other_last() -> None:
    menu = _grouped_menu()
    index = CategoryIndex.from_menu(menu)
    products = filter_products(menu.products, index, "hot")

    groups = group_products(products, index, "hot")

    assert [(group.slug, group.label) for group in groups] == [
        ("kahve", "Kahve"),
        ("cay", "Çay"),
        (UNCATEGORIZED, "Other"),
    ]
    assert [item.id for item in groups[2].items] == ["prd_su"]
    assert group_products(products, index, "hot", sub_category="cay") == []


def test_browser_shows_groups_or_a_flat_list() -> None:
    browser = MenuBrowser(_grouped_menu())

    assert browser.category == "hot"
    grouped = browser.view()
    assert grouped.grouped
    assert grouped.products == []

    browser.select_sub_category("cay")
    flat = browser.view()
    assert not flat.grouped
    assert [item.id for item in flat.products] == ["prd_cay"]
    assert [item.slug for item in browser.sub_category_options()] == ["kahve", "cay"]


def test_changing_category_resets_foreign_sub_category() -> None:
    browser = MenuBrowser(_grouped_menu())
    browser.select_sub_category("cay")

    browser.select_category("cold")

    assert browser.sub_category == ALL
    assert browser.sub_category_options() == []

    browser.select_sub_category("yok")
    assert browser.sub_category == ALL

    browser.select_category("unknown")
    assert browser.category == "hot"


def test_category_image_fallbacks() -> None:
    menu = _menu(
        [product("prd_1", "Kokteyl", 15000, category="Signature Drinks", imageUrl="/u/k.jpg")]
    )
    browser = MenuBrowser(menu)

    assert browser.category_image("hot") == "/img/hot.jpg"
    assert browser.category_image("cold") == "/images/categories/cold.jpg"
    assert browser.category_image("signature-drinks") == "/u/k.jpg"
    assert browser.category_image("yok") == CATEGORY_IMAGE_PLACEHOLDER


def test_search_is_applied_after_typing_pauses() -> None:
    clock = FakeClock()
    debouncer = SearchDebouncer(delay_ms=350, clock=clock)
    browser = MenuBrowser(_grouped_menu(), debouncer=debouncer)
    browser.select_sub_category("kahve")

    debouncer.type("LAT")
    clock.now = 200
    debouncer.type("ÇAY")
    clock.now = 500
    assert debouncer.poll() == ""

    clock.now = 550
    assert debouncer.poll() == "çay"

    browser.select_sub_category(ALL)
    view = browser.view()
    assert [item.id for item in view.groups[0].items] == ["prd_cay"]
