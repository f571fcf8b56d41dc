from __future__ import annotations

import os

from sqlalchemy import inspect, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.orm import Session

from qrmenu.application.security.passwords import hash_password
from qrmenu.domain.common.ids import new_id
from qrmenu.infrastructure.db.models.catalog import (
    CategoryModel,
    ProductModel,
    SubCategoryModel,
    UserModel,
    VenueModel,
)
from qrmenu.infrastructure.db.session import get_engine

VENUE_ID = "ven_demo"

CATEGORIES = [
    {"id": "cat_hot", "slug": "hot", "name": "Sıcak İçecekler", "display_order": 0},
    {"id": "cat_cold", "slug": "cold", "name": "Soğuk İçecekler", "display_order": 1},
    {"id": "cat_dessert", "slug": "dessert", "name": "Tatlılar", "display_order": 2},
]

SUB_CATEGORIES = [
    {
        "id": "sub_coffee",
        "category_id": "cat_hot",
        "slug": "kahve",
        "name": "Kahveler",
        "display_order": 0,
    },
    {
        "id": "sub_tea",
        "category_id": "cat_hot",
        "slug": "cay",
        "name": "Çaylar",
        "display_order": 1,
    },
]

PRODUCTS = [
    {
        "id": "prd_latte",
        "slug": "latte",
        "name": "latte",
        "category_id": "cat_hot",
        "sub_category_id": "sub_coffee",
        "description": "Espresso ve buharlanmış süt",
        "price_cents": 12000,
    },
    {
        "id": "prd_espresso",
        "slug": "espresso",
        "name": "espresso",
        "category_id": "cat_hot",
        "sub_category_id": "sub_coffee",
        "description": "Tek shot",
        "price_cents": 8000,
    },
    {
        "id": "prd_demleme",
        "slug": "demleme-cay",
        "name": "demleme çay",
        "category_id": "cat_hot",
        "sub_category_id": "sub_tea",
        "description": None,
        "price_cents": 4000,
    },
    {
        "id": "prd_limonata",
        "slug": "limonata",
        "name": "ev yapımı limonata",
        "category_id": "cat_cold",
        "sub_category_id": None,
        "description": "Taze sıkılmış limon, nane",
        "price_cents": 9500,
    },
    {
        "id": "prd_sufle",
        "slug": "sufle",
        "name": "çikolatalı sufle",
        "category_id": "cat_dessert",
        "sub_category_id": None,
        "description": "Dondurma ile servis edilir",
        "price_cents": 15000,
    },
]


def _seed_catalog(session: Session) -> None:
    session.execute(
        insert(VenueModel)
        .values(id=VENUE_ID, name="Örnek Kafe", slug="ornek-kafe", opening_hours="08:00-23:00")
        .on_conflict_do_update(
            index_elements=[VenueModel.id],
            set_={"name": "Örnek Kafe", "slug": "ornek-kafe"},
        )
    )

    for category in CATEGORIES:
        session.execute(
            insert(CategoryModel)
            .values(venue_id=VENUE_ID, **category)
            .on_conflict_do_update(
                index_elements=[CategoryModel.id],
                set_={"name": category["name"], "display_order": category["display_order"]},
            )
        )

    for sub_category in SUB_CATEGORIES:
        session.execute(
            insert(SubCategoryModel)
            .values(venue_id=VENUE_ID, **sub_category)
            .on_conflict_do_update(
                index_elements=[SubCategoryModel.id],
                set_={
                    "name": sub_category["name"],
                    "display_order": sub_category["display_order"],
                },
            )
        )

    for product in PRODUCTS:
        session.execute(
            insert(ProductModel)
            .values(venue_id=VENUE_ID, diet_tags=[], **product)
            .on_conflict_do_update(
                index_elements=[ProductModel.id],
                set_={
                    "name": product["name"],
                    "description": product["description"],
                    "price_cents": product["price_cents"],
                    "category_id": product["category_id"],
                    "sub_category_id": product["sub_category_id"],
                    "deleted_at": None,
                },
            )
        )


def _seed_admin(session: Session) -> bool:
    email = os.getenv("ADMIN_EMAIL", "").strip().lower()
    password = os.getenv("ADMIN_PASSWORD", "")
    if not email or not password:
        return False

    existing = session.scalars(select(UserModel).where(UserModel.email == email)).first()
    if existing is None:
        session.add(
            UserModel(
                id=new_id("usr"),
                email=email,
                password_hash=hash_password(password),
                role="ADMIN",
            )
        )
    else:
        existing.password_hash = hash_password(password)
        existing.role = "ADMIN"
    return True


def main() -> None:
    engine = get_engine(timeout_seconds=2.0)
    inspector = inspect(engine)
    required_tables = {"venues", "categories", "sub_categories", "products", "users"}
    if not required_tables.issubset(set(inspector.get_table_names())):
        print("no schema yet")
        return

    with Session(engine) as session:
        _seed_catalog(session)
        admin_seeded = _seed_admin(session)
        session.commit()

    print("seed complete")
    if not admin_seeded:
        print("ADMIN_EMAIL/ADMIN_PASSWORD not set, admin user skipped")


if __name__ == "__main__":
    main()
