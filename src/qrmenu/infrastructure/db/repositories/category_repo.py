from __future__ import annotations

from sqlalchemy import Engine, delete, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from qrmenu.application.ports.repositories import (
    CategoryRepository,
    RecordNotFoundError,
    SubCategoryRepository,
)
from qrmenu.domain.common.ids import CategoryId, SubCategoryId, VenueId
from qrmenu.domain.menu.entities import Category, SubCategory
from qrmenu.infrastructure.db.models.catalog import CategoryModel, SubCategoryModel
from qrmenu.infrastructure.db.repositories._errors import raise_for_integrity_error
from qrmenu.infrastructure.db.session import get_engine


class SqlAlchemyCategoryRepository(CategoryRepository):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def get(self, category_id: CategoryId) -> Category | None:
        with Session(self._engine) as session:
            model = session.get(CategoryModel, str(category_id))
        return None if model is None else _category_to_domain(model)

    def find_by_slug_or_name(self, slug: str, name: str) -> Category | None:
        statement = (
            select(CategoryModel)
            .where(or_(CategoryModel.slug == slug, CategoryModel.name == name))
            .order_by(CategoryModel.display_order, CategoryModel.id)
            .limit(1)
        )
        with Session(self._engine) as session:
            model = session.execute(statement).scalar_one_or_none()
        return None if model is None else _category_to_domain(model)

    def list_for_venue(self, venue_id: VenueId, visible_only: bool = False) -> list[Category]:
        statement = select(CategoryModel).where(CategoryModel.venue_id == str(venue_id))
        if visible_only:
            statement = statement.where(CategoryModel.is_visible.is_(True))
        statement = statement.order_by(CategoryModel.display_order, CategoryModel.name)
        with Session(self._engine) as session:
            models = session.execute(statement).scalars().all()
        return [_category_to_domain(model) for model in models]

    def next_display_order(self, venue_id: VenueId) -> int:
        statement = select(func.max(CategoryModel.display_order)).where(
            CategoryModel.venue_id == str(venue_id)
        )
        with Session(self._engine) as session:
            current = session.execute(statement).scalar_one_or_none()
        return 0 if current is None else current + 1

    def add(self, category: Category) -> None:
        with Session(self._engine) as session:
            session.add(
                CategoryModel(
                    id=str(category.category_id),
                    venue_id=str(category.venue_id),
                    slug=category.slug,
                    name=category.name,
                    image_url=category.image_url,
                    display_order=category.display_order,
                    is_visible=category.is_visible,
                )
            )
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise_for_integrity_error(exc, "category")

    def update(self, category: Category) -> None:
        statement = (
            update(CategoryModel)
            .where(CategoryModel.id == str(category.category_id))
            .values(
                name=category.name,
                image_url=category.image_url,
                display_order=category.display_order,
                is_visible=category.is_visible,
            )
        )
        with Session(self._engine) as session:
            result = session.execute(statement)
            session.commit()
        if result.rowcount == 0:
            raise RecordNotFoundError("category not found")

    def delete(self, category_id: CategoryId) -> None:
        with Session(self._engine) as session:
            session.execute(delete(CategoryModel).where(CategoryModel.id == str(category_id)))
            session.commit()


class SqlAlchemySubCategoryRepository(SubCategoryRepository):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def get(self, sub_category_id: SubCategoryId) -> SubCategory | None:
        with Session(self._engine) as session:
            model = session.get(SubCategoryModel, str(sub_category_id))
        return None if model is None else _sub_category_to_domain(model)

    def list_for_venue(self, venue_id: VenueId, visible_only: bool = False) -> list[SubCategory]:
        statement = select(SubCategoryModel).where(SubCategoryModel.venue_id == str(venue_id))
        if visible_only:
            statement = statement.where(SubCategoryModel.is_visible.is_(True))
        statement = statement.order_by(SubCategoryModel.display_order, SubCategoryModel.name)
        with Session(self._engine) as session:
            models = session.execute(statement).scalars().all()
        return [_sub_category_to_domain(model) for model in models]

    def list_for_category(self, category_id: CategoryId) -> list[SubCategory]:
        statement = (
            select(SubCategoryModel)
            .where(SubCategoryModel.category_id == str(category_id))
            .order_by(SubCategoryModel.display_order, SubCategoryModel.name)
        )
        with Session(self._engine) as session:
            models = session.execute(statement).scalars().all()
        return [_sub_category_to_domain(model) for model in models]

    def next_display_order(self, category_id: CategoryId) -> int:
        statement = select(func.max(SubCategoryModel.display_order)).where(
            SubCategoryModel.category_id == str(category_id)
        )
        with Session(self._engine) as session:
            current = session.execute(statement).scalar_one_or_none()
        return 0 if current is None else current + 1

    def count_for_category(self, category_id: CategoryId) -> int:
        statement = select(func.count(SubCategoryModel.id)).where(
            SubCategoryModel.category_id == str(category_id)
        )
        with Session(self._engine) as session:
            return int(session.execute(statement).scalar_one())

    def add(self, sub_category: SubCategory) -> None:
        with Session(self._engine) as session:
            session.add(
                SubCategoryModel(
                    id=str(sub_category.sub_category_id),
                    venue_id=str(sub_category.venue_id),
                    category_id=str(sub_category.category_id),
                    slug=sub_category.slug,
                    name=sub_category.name,
                    display_order=sub_category.display_order,
                    is_visible=sub_category.is_visible,
                )
            )
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise_for_integrity_error(exc, "sub-category")

    def delete(self, sub_category_id: SubCategoryId) -> None:
        with Session(self._engine) as session:
            session.execute(
                delete(SubCategoryModel).where(SubCategoryModel.id == str(sub_category_id))
            )
            session.commit()


def _category_to_domain(model: CategoryModel) -> Category:
    return Category(
        category_id=CategoryId(model.id),
        venue_id=VenueId(model.venue_id),
        slug=model.slug,
        name=model.name,
        display_order=model.display_order,
        is_visible=model.is_visible,
        image_url=model.image_url,
    )


def _sub_category_to_domain(model: SubCategoryModel) -> SubCategory:
    return SubCategory(
        sub_category_id=SubCategoryId(model.id),
        venue_id=VenueId(model.venue_id),
        category_id=CategoryId(model.category_id),
        slug=model.slug,
        name=model.name,
        display_order=model.display_order,
        is_visible=model.is_visible,
    )
