from __future__ import annotations

import hmac
import logging
import os
import secrets
from typing import Mapping
from urllib.parse import unquote

logger = logging.getLogger(__name__)

CSRF_COOKIE_NAME = "XSRF-TOKEN"
CSRF_HEADER_NAMES = ("x-csrf-token", "x-xsrf-token")
CSRF_COOKIE_MAX_AGE_SECONDS = 60 * 60
CSRF_REJECTED_MESSAGE = "CSRF token validation failed"


class CsrfValidationError(Exception):
    def __init__(self, message: str = CSRF_REJECTED_MESSAGE) -> None:
        super().__init__(message)


def issue_csrf_token() -> str:
    return secrets.token_hex(32)


def is_production() -> bool:
    return os.getenv("APP_ENV", "dev").lower() == "production"


def dev_permissive_enabled() -> bool:
    return not is_production() and os.getenv("CSRF_DEV_PERMISSIVE") == "1"


def read_cookie(cookie_header: str, name: str) -> str | None:
    """Value of ``name`` in a raw ``Cookie`` header, URL-decoded."""
    for part in cookie_header.split(";"):
        key, sep, value = part.strip().partition("=")
        if sep and key == name:
            return unquote(value)
    return None


def header_token(headers: Mapping[str, str]) -> str | None:
    for name in CSRF_HEADER_NAMES:
        value = headers.get(name)
        if value:
            return value
    return None


def verify_csrf(headers: Mapping[str, str], cookie_header: str | None = None) -> None:
    """Double-submit check: the header token must equal the ``XSRF-TOKEN`` cookie.

    Both sides are read from the raw request headers. A development-only bypass
    applies when a side is missing; mismatched tokens are always rejected.
    """
    submitted = header_token(headers)
    raw_cookie = cookie_header if cookie_header is not None else headers.get("cookie", "")
    expected = read_cookie(raw_cookie or "", CSRF_COOKIE_NAME)

    if (not submitted or not expected) and dev_permissive_enabled():
        logger.warning("csrf_dev_permissive_bypass")
        return

    if not submitted or not expected:
        raise CsrfValidationError()
    if not hmac.compare_digest(submitted.encode("utf-8"), expected.encode("utf-8")):
        raise CsrfValidationError()
