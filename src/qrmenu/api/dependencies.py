from __future__ import annotations

from typing import Callable

from fastapi import Request

from qrmenu.api.error_handling import UnauthorizedError
from qrmenu.api.middleware.rate_limit import client_identifier
from qrmenu.application.security.csrf import verify_csrf
from qrmenu.application.security.rate_limit import RateLimiter
from qrmenu.application.security.session import (
    SESSION_COOKIE_NAME,
    SessionUser,
    decode_session,
)


def get_session_user(request: Request) -> SessionUser | None:
    return decode_session(request.cookies.get(SESSION_COOKIE_NAME))


def require_admin(request: Request) -> SessionUser:
    user = get_session_user(request)
    if user is None or not user.is_admin:
        raise UnauthorizedError("unauthorized")
    return user


def require_csrf(request: Request) -> None:
    verify_csrf(request.headers)


def get_rate_limiter(request: Request) -> RateLimiter:
    return request.app.state.rate_limiter


def rate_limit(scope: str, limit: int, window_ms: int) -> Callable[[Request], None]:
    """Route dependency that rejects the request once ``scope`` is exhausted for this client."""

    def dependency(request: Request) -> None:
        get_rate_limiter(request).enforce(client_identifier(request), scope, limit, window_ms)

    return dependency
