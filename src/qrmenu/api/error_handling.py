from __future__ import annotations

import logging
import math
import os
from typing import Any, cast

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from qrmenu.api.middleware.request_id import get_request_id
from qrmenu.application.security.csrf import CsrfValidationError
from qrmenu.application.security.rate_limit import RateLimitExceededError
from qrmenu.application.use_cases.auth import InvalidCredentialsError
from qrmenu.application.use_cases.categories import (
    CategoryConflictError,
    CategoryInUseError,
    CategoryNotFoundError,
    InvalidCategoryError,
)
from qrmenu.application.use_cases.category_selection import CategorySelectionError
from qrmenu.application.use_cases.get_menu import VenueNotFoundError
from qrmenu.application.use_cases.images import (
    ImageAssignmentError,
    ImageStorageError,
    ImageTooLargeError,
    UnsupportedImageTypeError,
)
from qrmenu.application.use_cases.products import (
    InvalidSlugError,
    InvalidVenueError,
    PriceUnchangedError,
    ProductNotFoundError,
    SlugConflictError,
)
from qrmenu.application.use_cases.subcategories import (
    SubCategoryConflictError,
    SubCategoryInUseError,
    SubCategoryNotFoundError,
)

logger = logging.getLogger(__name__)

RATE_LIMITED_MESSAGE = "too many requests"


class UnauthorizedError(Exception):
    pass


def _error_response(
    *,
    status_code: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": {
                "code": code,
                "message": message,
                "details": details or {},
            },
            "requestId": get_request_id(),
        },
        headers=headers,
    )


def rate_limited_response(window_ms: int) -> JSONResponse:
    return _error_response(
        status_code=429,
        code="RATE_LIMITED",
        message=RATE_LIMITED_MESSAGE,
        headers={"Retry-After": str(max(1, math.ceil(window_ms / 1000)))},
    )


def _exception_handler(status_code: int, code: str):
    async def handler(_: Request, exc: Exception) -> JSONResponse:
        details = getattr(exc, "details", None)
        return _error_response(
            status_code=status_code,
            code=code,
            message=str(exc),
            details=details if isinstance(details, dict) else None,
        )

    return handler


async def _rate_limit_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    return rate_limited_response(cast(RateLimitExceededError, exc).window_ms)


async def _http_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    http_exc = cast(StarletteHTTPException, exc)
    message = str(http_exc.detail) if http_exc.detail else "request failed"
    code = "HTTP_ERROR"
    if http_exc.status_code == 404:
        code = "NOT_FOUND"
    elif http_exc.status_code == 400:
        code = "BAD_REQUEST"
    elif http_exc.status_code == 405:
        code = "METHOD_NOT_ALLOWED"
    elif http_exc.status_code == 409:
        code = "CONFLICT"
    return _error_response(
        status_code=http_exc.status_code,
        code=code,
        message=message,
        headers=getattr(http_exc, "headers", None),
    )


async def _validation_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    validation_exc = cast(RequestValidationError, exc)
    return _error_response(
        status_code=400,
        code="INVALID_REQUEST",
        message="request validation failed",
        details={"errors": validation_exc.errors()},
    )


async def _unexpected_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "unhandled_exception",
        extra={"method": request.method, "path": request.url.path},
    )
    message = "Unexpected error"
    if os.getenv("APP_ENV", "dev").lower() == "dev":
        message = f"{message}: {exc}"
    return _error_response(status_code=500, code="INTERNAL_ERROR", message=message)


def register_exception_handlers(app: FastAPI) -> None:
    mappings: list[tuple[type[Exception], int, str]] = [
        (VenueNotFoundError, 404, "VENUE_NOT_FOUND"),
        (ProductNotFoundError, 404, "PRODUCT_NOT_FOUND"),
        (CategoryNotFoundError, 404, "CATEGORY_NOT_FOUND"),
        (SubCategoryNotFoundError, 404, "SUB_CATEGORY_NOT_FOUND"),
        (InvalidVenueError, 400, "INVALID_VENUE"),
        (CategorySelectionError, 400, "INVALID_CATEGORY"),
        (InvalidCategoryError, 400, "INVALID_CATEGORY"),
        (InvalidSlugError, 400, "INVALID_SLUG"),
        (PriceUnchangedError, 400, "PRICE_UNCHANGED"),
        (CategoryInUseError, 400, "CATEGORY_IN_USE"),
        (SubCategoryInUseError, 400, "SUB_CATEGORY_IN_USE"),
        (SlugConflictError, 409, "SLUG_CONFLICT"),
        (CategoryConflictError, 409, "SLUG_CONFLICT"),
        (SubCategoryConflictError, 409, "SLUG_CONFLICT"),
        (UnsupportedImageTypeError, 400, "UNSUPPORTED_MEDIA_TYPE"),
        (ImageTooLargeError, 413, "PAYLOAD_TOO_LARGE"),
        (ImageStorageError, 500, "STORAGE_ERROR"),
        (ImageAssignmentError, 500, "STORAGE_ERROR"),
        (InvalidCredentialsError, 401, "INVALID_CREDENTIALS"),
        (UnauthorizedError, 401, "UNAUTHORIZED"),
        (CsrfValidationError, 403, "CSRF_REJECTED"),
    ]

    for exc_cls, status_code, code in mappings:
        app.add_exception_handler(exc_cls, _exception_handler(status_code, code))

    app.add_exception_handler(RateLimitExceededError, _rate_limit_exception_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(Exception, _unexpected_exception_handler)
