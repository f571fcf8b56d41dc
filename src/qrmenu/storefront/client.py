from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from qrmenu.application.dto.responses import PublicMenuResponse

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0


class MenuFetchError(Exception):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class MenuTimeoutError(MenuFetchError):
    pass


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return error["message"]
    return f"menu request failed with status {response.status_code}"


class MenuApiClient:
    """Fetches the public menu payload the storefront renders from."""

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "MenuApiClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def fetch_menu(self, venue_slug: str, table_id: str | None = None) -> PublicMenuResponse:
        params = {"tableId": table_id} if table_id else None
        try:
            response = self._client.get(f"/api/venue/{venue_slug}/menu", params=params)
        except httpx.TimeoutException as exc:
            logger.warning("menu_fetch_timeout", extra={"path": f"/api/venue/{venue_slug}/menu"})
            raise MenuTimeoutError("menu request timed out") from exc
        except httpx.HTTPError as exc:
            raise MenuFetchError(f"menu request failed: {exc}") from exc

        if response.status_code >= 400:
            raise MenuFetchError(_error_message(response), status_code=response.status_code)

        try:
            return PublicMenuResponse.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise MenuFetchError("menu response was not a valid menu payload") from exc
