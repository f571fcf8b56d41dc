from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response

from qrmenu.api.dependencies import get_session_user, rate_limit, require_csrf
from qrmenu.api.error_handling import UnauthorizedError
from qrmenu.application.dto.requests import LoginRequest
from qrmenu.application.dto.responses import MeResponse, OkResponse, SessionUserResponse
from qrmenu.application.security.csrf import is_production
from qrmenu.application.security.session import (
    SESSION_COOKIE_NAME,
    SESSION_MAX_AGE_SECONDS,
    encode_session,
)
from qrmenu.application.use_cases.auth import Login
from qrmenu.infrastructure.db.repositories.user_repo import SqlAlchemyUserRepository

router = APIRouter(prefix="/api/auth")


def _login_use_case() -> Login:
    return Login(user_repository=SqlAlchemyUserRepository())


@router.post(
    "/login",
    response_model=OkResponse,
    dependencies=[
        Depends(require_csrf),
        Depends(rate_limit("auth:login", limit=10, window_ms=60_000)),
    ],
)
def login(request_dto: LoginRequest, response: Response) -> OkResponse:
    user = _login_use_case().execute(request_dto)
    response.set_cookie(
        SESSION_COOKIE_NAME,
        encode_session(user),
        max_age=SESSION_MAX_AGE_SECONDS,
        httponly=True,
        secure=is_production(),
        samesite="lax",
        path="/",
    )
    return OkResponse()


@router.post("/logout", response_model=OkResponse, dependencies=[Depends(require_csrf)])
def logout(response: Response) -> OkResponse:
    response.delete_cookie(
        SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        secure=is_production(),
        samesite="lax",
    )
    return OkResponse()


@router.get("/me", response_model=MeResponse)
def me(request: Request) -> MeResponse:
    user = get_session_user(request)
    if user is None:
        raise UnauthorizedError("unauthorized")
    return MeResponse(user=SessionUserResponse(id=user.id, email=user.email, role=user.role.value))
