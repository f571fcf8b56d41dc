from __future__ import annotations

from sqlalchemy import Engine, select
from sqlalchemy.orm import Session

from qrmenu.application.ports.repositories import VenueRepository
from qrmenu.domain.common.ids import VenueId
from qrmenu.domain.menu.entities import Venue
from qrmenu.infrastructure.db.models.catalog import VenueModel
from qrmenu.infrastructure.db.session import get_engine


class SqlAlchemyVenueRepository(VenueRepository):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def get_by_slug(self, slug: str) -> Venue | None:
        statement = select(VenueModel).where(VenueModel.slug == slug).limit(1)
        with Session(self._engine) as session:
            model = session.execute(statement).scalar_one_or_none()
        return None if model is None else _to_domain(model)

    def get_by_id_or_slug(self, value: str) -> Venue | None:
        with Session(self._engine) as session:
            model = session.get(VenueModel, value)
        if model is not None:
            return _to_domain(model)
        return self.get_by_slug(value)


def _to_domain(model: VenueModel) -> Venue:
    return Venue(
        venue_id=VenueId(model.id),
        name=model.name,
        slug=model.slug,
        announcement=model.announcement,
        opening_hours=model.opening_hours,
    )
