from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from itsdangerous import BadSignature, URLSafeTimedSerializer

from qrmenu.domain.menu.entities import UserRole

SESSION_COOKIE_NAME = "qrmenu_session"
SESSION_MAX_AGE_SECONDS = 7 * 24 * 60 * 60
MIN_SECRET_LENGTH = 32
_SALT = "qrmenu.session"


class SessionConfigurationError(Exception):
    pass


@dataclass(frozen=True)
class SessionUser:
    id: str
    email: str
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role is UserRole.ADMIN


def session_secret() -> str:
    secret = os.getenv("SESSION_SECRET", "")
    if len(secret) < MIN_SECRET_LENGTH:
        raise SessionConfigurationError(
            f"SESSION_SECRET must be at least {MIN_SECRET_LENGTH} characters long."
        )
    return secret


@lru_cache(maxsize=4)
def _serializer(secret: str) -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(secret, salt=_SALT)


def encode_session(user: SessionUser) -> str:
    return _serializer(session_secret()).dumps(
        {"id": user.id, "email": user.email, "role": user.role.value}
    )


def decode_session(token: str | None, max_age: int = SESSION_MAX_AGE_SECONDS) -> SessionUser | None:
    """Session user from a signed cookie value; ``None`` if missing, tampered or expired."""
    if not token:
        return None
    try:
        payload = _serializer(session_secret()).loads(token, max_age=max_age)
    except BadSignature:
        return None
    try:
        return SessionUser(
            id=str(payload["id"]),
            email=str(payload["email"]),
            role=UserRole(payload["role"]),
        )
    except (KeyError, TypeError, ValueError):
        return None
