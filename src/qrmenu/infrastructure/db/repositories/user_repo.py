from __future__ import annotations

from sqlalchemy import Engine, func, select
from sqlalchemy.orm import Session

from qrmenu.application.ports.repositories import UserRepository
from qrmenu.domain.common.ids import UserId
from qrmenu.domain.menu.entities import User, UserRole
from qrmenu.infrastructure.db.models.catalog import UserModel
from qrmenu.infrastructure.db.session import get_engine


class SqlAlchemyUserRepository(UserRepository):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def get_by_email(self, email: str) -> User | None:
        statement = (
            select(UserModel).where(func.lower(UserModel.email) == email.strip().lower()).limit(1)
        )
        with Session(self._engine) as session:
            model = session.execute(statement).scalar_one_or_none()
        if model is None:
            return None
        return User(
            user_id=UserId(model.id),
            email=model.email,
            password_hash=model.password_hash,
            role=UserRole(model.role),
        )
