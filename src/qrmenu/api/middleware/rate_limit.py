from __future__ import annotations

from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from qrmenu.api.error_handling import rate_limited_response
from qrmenu.application.security.rate_limit import (
    RateLimiter,
    pick_rule,
    resolve_client_identifier,
)

SKIPPED_PREFIXES = (
    "/uploads/",
    "/images/",
    "/category-images/",
    "/seed/",
    "/health/",
    "/metrics",
)
SKIPPED_PATHS = frozenset({"/favicon.ico", "/sw.js", "/manifest.json", "/robots.txt"})


def is_rate_limited_path(path: str) -> bool:
    if path in SKIPPED_PATHS:
        return False
    return not path.startswith(SKIPPED_PREFIXES)


def client_identifier(request: Request) -> str:
    peer_host = request.client.host if request.client else None
    return resolve_client_identifier(peer_host, request.headers)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Per-client limit for GET traffic, chosen by path from the rule table."""

    async def dispatch(self, request: Request, call_next) -> Response:
        path = request.url.path or "/"
        if request.method != "GET" or not is_rate_limited_path(path):
            return await call_next(request)

        limiter: RateLimiter = request.app.state.rate_limiter
        rule = pick_rule(path)
        result = await run_in_threadpool(
            limiter.check,
            client_identifier(request),
            f"middleware:{rule.scope}",
            rule.limit,
            rule.window_ms,
        )
        if not result.allowed:
            return rate_limited_response(rule.window_ms)

        response = await call_next(request)
        response.headers.setdefault("X-RateLimit-Remaining", str(result.remaining))
        return response
