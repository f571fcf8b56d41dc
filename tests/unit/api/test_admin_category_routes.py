from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

import qrmenu.api.routes.categories as categories_route
import qrmenu.api.routes.subcategories as subcategories_route
from qrmenu.application.use_cases.categories import (
    CreateCategory,
    ListCategories,
    UpdateCategory,
)
from qrmenu.application.use_cases.subcategories import (
    CreateSubCategory,
    DeleteSubCategory,
    ListSubCategories,
)


def _wire(monkeypatch, catalog) -> None:
    monkeypatch.setattr(
        categories_route,
        "_list_categories_use_case",
        lambda: ListCategories(catalog.venues, catalog.categories),
    )
    monkeypatch.setattr(
        categories_route,
        "_create_category_use_case",
        lambda: CreateCategory(catalog.venues, catalog.categories),
    )
    monkeypatch.setattr(
        categories_route, "_update_category_use_case", lambda: UpdateCategory(catalog.categories)
    )
    monkeypatch.setattr(
        subcategories_route,
        "_list_sub_categories_use_case",
        lambda: ListSubCategories(catalog.categories, catalog.sub_categories),
    )
    monkeypatch.setattr(
        subcategories_route,
        "_create_sub_category_use_case",
        lambda: CreateSubCategory(catalog.categories, catalog.sub_categories),
    )
    monkeypatch.setattr(
        subcategories_route,
        "_delete_sub_category_use_case",
        lambda: DeleteSubCategory(catalog.sub_categories, catalog.products),
    )


def test_create_category_appends_display_order(admin_client, monkeypatch, catalog) -> None:
    _wire(monkeypatch, catalog)
    catalog.add_category("cat_cold", "cold", display_order=4)

    response = admin_client.post("/api/categories", json={"venueId": "ven_1", "name": "Sıcak"})

    assert response.status_code == 201
    category = response.json()["category"]
    assert category["slug"] == "sicak"
    assert category["displayOrder"] == 5
    assert category["isVisible"] is True


def test_duplicate_category_is_a_conflict(admin_client, monkeypatch, catalog) -> None:
    _wire(monkeypatch, catalog)
    catalog.add_category("cat_hot", "hot")

    response = admin_client.post("/api/categories", json={"venueId": "ven_1", "name": "Hot"})

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "SLUG_CONFLICT"


def test_list_categories_requires_known_venue(admin_client, monkeypatch, catalog) -> None:
    _wire(monkeypatch, catalog)
    catalog.add_category("cat_b", "cold", display_order=1)
    catalog.add_category("cat_a", "hot", display_order=0)

    listed = admin_client.get("/api/categories", params={"venueId": "ornek-kafe"})
    unknown = admin_client.get("/api/categories", params={"venueId": "yok"})
    missing = admin_client.get("/api/categories")

    assert [item["slug"] for item in listed.json()["categories"]] == ["hot", "cold"]
    assert unknown.json()["error"]["code"] == "INVALID_VENUE"
    assert missing.status_code == 400
    assert missing.json()["error"]["code"] == "INVALID_REQUEST"


def test_patch_category_clears_image_when_empty(admin_client, monkeypatch, catalog) -> None:
    _wire(monkeypatch, catalog)
    catalog.add_category("cat_hot", "hot")
    admin_client.patch("/api/categories/cat_hot", json={"imageUrl": "/img/hot.jpg"})

    response = admin_client.patch(
        "/api/categories/cat_hot", json={"imageUrl": "", "isVisible": False}
    )

    category = response.json()["category"]
    assert category["imageUrl"] is None
    assert category["isVisible"] is False
    assert admin_client.patch("/api/categories/cat_x", json={"name": "X"}).status_code == 404


def test_sub_category_lifecycle(admin_client, monkeypatch, catalog) -> None:
    _wire(monkeypatch, catalog)
    catalog.add_category("cat_hot", "hot")

    created = admin_client.post(
        "/api/subcategories",
        json={"venueId": "ven_1", "categoryId": "cat_hot", "name": "Çay"},
    )
    assert created.status_code == 201
    sub_category = created.json()["subCategory"]
    assert sub_category["slug"] == "cay"

    listed = admin_client.get("/api/subcategories", params={"categoryId": "cat_hot"})
    assert [item["id"] for item in listed.json()["subCategories"]] == [sub_category["id"]]

    catalog.add_product("prd_1", "demlik", sub_category_id=sub_category["id"])
    in_use = admin_client.delete(f"/api/subcategories/{sub_category['id']}")
    assert in_use.json()["error"]["code"] == "SUB_CATEGORY_IN_USE"

    catalog.products.items.clear()
    assert admin_client.delete(f"/api/subcategories/{sub_category['id']}").json() == {"ok": True}
    assert admin_client.delete("/api/subcategories/sub_x").status_code == 404


def test_sub_category_rejects_foreign_category(admin_client, monkeypatch, catalog) -> None:
    _wire(monkeypatch, catalog)
    catalog.add_category("cat_hot", "hot")

    response = admin_client.post(
        "/api/subcategories",
        json={"venueId": "ven_other", "categoryId": "cat_hot", "name": "Kahve"},
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_CATEGORY"
