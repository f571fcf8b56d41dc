from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Engine, func, select
from sqlalchemy.orm import Session

from qrmenu.application.ports.repositories import VenueViews, ViewLogRepository
from qrmenu.domain.common.ids import VenueId, new_id
from qrmenu.infrastructure.db.models.catalog import VenueModel, ViewLogModel
from qrmenu.infrastructure.db.session import get_engine


class SqlAlchemyViewLogRepository(ViewLogRepository):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def record(self, venue_id: VenueId, table_id: str | None, user_agent: str | None) -> None:
        with Session(self._engine) as session:
            session.add(
                ViewLogModel(
                    id=new_id("view"),
                    venue_id=str(venue_id),
                    table_id=table_id,
                    user_agent=user_agent[:512] if user_agent else None,
                    created_at=datetime.now(timezone.utc),
                )
            )
            session.commit()

    def count_since(self, since: datetime) -> int:
        stmt = select(func.count(ViewLogModel.id)).where(ViewLogModel.created_at >= since)
        with Session(self._engine) as session:
            return int(session.scalar(stmt) or 0)

    def daily_counts(self, since: datetime) -> list[tuple[str, int]]:
        day = func.date(ViewLogModel.created_at).label("day")
        views = func.count(ViewLogModel.id).label("views")
        stmt = (
            select(day, views)
            .where(ViewLogModel.created_at >= since)
            .group_by(day)
            .order_by(day.desc())
        )
        with Session(self._engine) as session:
            # Postgres returns a date, SQLite an ISO string.
            return [(str(row.day), int(row.views)) for row in session.execute(stmt)]

    def user_agent_counts(self, since: datetime) -> list[tuple[str | None, int]]:
        views = func.count(ViewLogModel.id).label("views")
        stmt = (
            select(ViewLogModel.user_agent, views)
            .where(ViewLogModel.created_at >= since)
            .group_by(ViewLogModel.user_agent)
            .order_by(views.desc())
        )
        with Session(self._engine) as session:
            return [(row.user_agent, int(row.views)) for row in session.execute(stmt)]

    def venue_counts(self, since: datetime) -> list[VenueViews]:
        views = func.count(ViewLogModel.id).label("views")
        stmt = (
            select(ViewLogModel.venue_id, VenueModel.name, VenueModel.slug, views)
            .outerjoin(VenueModel, VenueModel.id == ViewLogModel.venue_id)
            .where(ViewLogModel.created_at >= since)
            .group_by(ViewLogModel.venue_id, VenueModel.name, VenueModel.slug)
            .order_by(views.desc(), ViewLogModel.venue_id)
        )
        with Session(self._engine) as session:
            return [
                VenueViews(
                    venue_id=row.venue_id, name=row.name, slug=row.slug, views=int(row.views)
                )
                for row in session.execute(stmt)
            ]
