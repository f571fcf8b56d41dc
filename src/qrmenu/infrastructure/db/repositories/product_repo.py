from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Engine, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from qrmenu.application.ports.repositories import ProductRepository, RecordNotFoundError
from qrmenu.domain.common.ids import CategoryId, PriceChangeId, ProductId, SubCategoryId, VenueId
from qrmenu.domain.menu.entities import PriceChange, Product
from qrmenu.infrastructure.db.models.catalog import PriceHistoryModel, ProductModel
from qrmenu.infrastructure.db.repositories._errors import raise_for_integrity_error
from qrmenu.infrastructure.db.session import get_engine


class SqlAlchemyProductRepository(ProductRepository):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def get(self, product_id: ProductId) -> Product | None:
        with Session(self._engine) as session:
            model = session.get(ProductModel, str(product_id))
        return None if model is None else _to_domain(model)

    def list_for_admin(
        self,
        category: str | None = None,
        query: str | None = None,
        is_active: bool | None = None,
    ) -> list[Product]:
        statement = select(ProductModel).where(ProductModel.deleted_at.is_(None))
        if is_active is not None:
            statement = statement.where(ProductModel.is_active.is_(is_active))
        if category:
            statement = statement.where(ProductModel.category == category)
        if query:
            pattern = f"%{query.lower()}%"
            statement = statement.where(
                or_(
                    func.lower(ProductModel.name).like(pattern),
                    func.lower(func.coalesce(ProductModel.description, "")).like(pattern),
                )
            )
        statement = statement.order_by(ProductModel.created_at.desc(), ProductModel.id.desc())
        with Session(self._engine) as session:
            models = session.execute(statement).scalars().all()
        return [_to_domain(model) for model in models]

    def list_public(self, venue_id: VenueId) -> list[Product]:
        statement = (
            select(ProductModel)
            .where(
                ProductModel.venue_id == str(venue_id),
                ProductModel.is_active.is_(True),
                ProductModel.deleted_at.is_(None),
            )
            .order_by(
                ProductModel.category_id.asc(),
                ProductModel.sub_category_id.asc(),
                ProductModel.price_cents.desc(),
                ProductModel.name.asc(),
            )
        )
        with Session(self._engine) as session:
            models = session.execute(statement).scalars().all()
        return [_to_domain(model) for model in models]

    def count_for_category(self, category_id: CategoryId) -> int:
        statement = select(func.count(ProductModel.id)).where(
            ProductModel.category_id == str(category_id),
            ProductModel.deleted_at.is_(None),
        )
        with Session(self._engine) as session:
            return int(session.execute(statement).scalar_one())

    def count_for_sub_category(self, sub_category_id: SubCategoryId) -> int:
        statement = select(func.count(ProductModel.id)).where(
            ProductModel.sub_category_id == str(sub_category_id),
            ProductModel.deleted_at.is_(None),
        )
        with Session(self._engine) as session:
            return int(session.execute(statement).scalar_one())

    def add(self, product: Product) -> None:
        model = ProductModel(id=str(product.product_id), venue_id=str(product.venue_id))
        _apply(model, product)
        model.created_at = product.created_at or datetime.now(timezone.utc)
        with Session(self._engine) as session:
            session.add(model)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise_for_integrity_error(exc, "product")

    def update(self, product: Product, price_change: PriceChange | None = None) -> None:
        """Persist ``product`` and, in the same transaction, an optional price history row."""
        with Session(self._engine) as session:
            model = session.get(ProductModel, str(product.product_id))
            if model is None:
                raise RecordNotFoundError("product not found")
            _apply(model, product)
            if price_change is not None:
                session.add(
                    PriceHistoryModel(
                        id=str(price_change.price_change_id),
                        product_id=str(price_change.product_id),
                        old_price_cents=price_change.old_price_cents,
                        new_price_cents=price_change.new_price_cents,
                        reason=price_change.reason,
                        created_at=price_change.created_at,
                    )
                )
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise_for_integrity_error(exc, "product")

    def list_price_history(self, product_id: ProductId) -> list[PriceChange]:
        statement = (
            select(PriceHistoryModel)
            .where(PriceHistoryModel.product_id == str(product_id))
            .order_by(PriceHistoryModel.created_at, PriceHistoryModel.id)
        )
        with Session(self._engine) as session:
            models = session.execute(statement).scalars().all()
        return [
            PriceChange(
                price_change_id=PriceChangeId(model.id),
                product_id=ProductId(model.product_id),
                old_price_cents=model.old_price_cents,
                new_price_cents=model.new_price_cents,
                reason=model.reason,
                created_at=_aware(model.created_at),
            )
            for model in models
        ]


def _aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _apply(model: ProductModel, product: Product) -> None:
    model.name = product.name
    model.slug = product.slug
    model.category = product.category
    model.category_id = product.category_id
    model.sub_category_id = product.sub_category_id
    model.description = product.description
    model.price_cents = product.price_cents
    model.image_url = product.image_url
    model.is_active = product.is_active
    model.is_in_stock = product.is_in_stock
    model.diet_tags = sorted(product.diet_tags) or None
    model.deleted_at = product.deleted_at


def _to_domain(model: ProductModel) -> Product:
    return Product(
        product_id=ProductId(model.id),
        venue_id=VenueId(model.venue_id),
        name=model.name,
        slug=model.slug,
        price_cents=model.price_cents,
        category=model.category,
        category_id=CategoryId(model.category_id) if model.category_id else None,
        sub_category_id=SubCategoryId(model.sub_category_id) if model.sub_category_id else None,
        description=model.description,
        image_url=model.image_url,
        is_active=model.is_active,
        is_in_stock=model.is_in_stock,
        diet_tags=frozenset(model.diet_tags or ()),
        created_at=_aware(model.created_at) if model.created_at else None,
        deleted_at=_aware(model.deleted_at) if model.deleted_at else None,
    )
