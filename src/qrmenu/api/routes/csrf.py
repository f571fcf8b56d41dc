from __future__ import annotations

from fastapi import APIRouter, Response

from qrmenu.application.dto.responses import OkResponse
from qrmenu.application.security.csrf import (
    CSRF_COOKIE_MAX_AGE_SECONDS,
    CSRF_COOKIE_NAME,
    is_production,
    issue_csrf_token,
)

router = APIRouter()


@router.get("/api/csrf", response_model=OkResponse)
def issue_csrf_cookie(response: Response) -> OkResponse:
    # Readable by scripts so the token can be echoed back in a header.
    response.set_cookie(
        CSRF_COOKIE_NAME,
        issue_csrf_token(),
        max_age=CSRF_COOKIE_MAX_AGE_SECONDS,
        httponly=False,
        secure=is_production(),
        samesite="lax",
        path="/",
    )
    return OkResponse()
