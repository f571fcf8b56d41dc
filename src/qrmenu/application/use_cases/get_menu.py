from __future__ import annotations

import logging
import time

from pydantic import ValidationError

from qrmenu.application.dto.responses import PublicMenuResponse
from qrmenu.application.mappers.menu_mapper import to_public_menu_response
from qrmenu.application.metrics.catalog_metrics import record_menu_load, record_menu_request
from qrmenu.application.ports.cache import CacheStore
from qrmenu.application.ports.repositories import (
    CategoryRepository,
    ProductRepository,
    SubCategoryRepository,
    VenueRepository,
    ViewLogRepository,
)
from qrmenu.domain.common.ids import VenueId

logger = logging.getLogger(__name__)

MENU_CACHE_TTL_SECONDS = 30


class VenueNotFoundError(Exception):
    pass


def menu_payload_cache_key(venue_slug: str) -> str:
    return f"menu:{venue_slug}:payload"


class GetPublicMenu:
    def __init__(
        self,
        venue_repository: VenueRepository,
        category_repository: CategoryRepository,
        sub_category_repository: SubCategoryRepository,
        product_repository: ProductRepository,
        view_log_repository: ViewLogRepository,
        cache: CacheStore,
        ttl_seconds: int = MENU_CACHE_TTL_SECONDS,
    ) -> None:
        self._venue_repository = venue_repository
        self._category_repository = category_repository
        self._sub_category_repository = sub_category_repository
        self._product_repository = product_repository
        self._view_log_repository = view_log_repository
        self._cache = cache
        self._ttl_seconds = ttl_seconds

    def _cache_get(self, key: str) -> str | None:
        try:
            return self._cache.get(key)
        except Exception:
            return None

    def _cache_set(self, key: str, value: str) -> None:
        try:
            self._cache.set(key, value, ttl_seconds=self._ttl_seconds)
        except Exception:
            return

    def _record_view(self, venue_id: str, table_id: str | None, user_agent: str | None) -> None:
        try:
            self._view_log_repository.record(VenueId(venue_id), table_id, user_agent)
        except Exception:
            logger.warning("menu_view_log_failed", exc_info=True, extra={"venue_id": venue_id})

    def _cached_payload(self, venue_slug: str) -> PublicMenuResponse | None:
        payload = self._cache_get(menu_payload_cache_key(venue_slug))
        if not payload:
            return None
        try:
            return PublicMenuResponse.model_validate_json(payload)
        except ValidationError:
            return None

    def _build_payload(self, venue_slug: str) -> PublicMenuResponse:
        venue = self._venue_repository.get_by_slug(venue_slug)
        if venue is None:
            raise VenueNotFoundError(f"venue not found for slug={venue_slug}")

        response = to_public_menu_response(
            venue=venue,
            categories=self._category_repository.list_for_venue(venue.venue_id, visible_only=True),
            sub_categories=self._sub_category_repository.list_for_venue(
                venue.venue_id,
                visible_only=True,
            ),
            products=self._product_repository.list_public(venue.venue_id),
        )
        self._cache_set(menu_payload_cache_key(venue_slug), response.model_dump_json())
        return response

    def execute(
        self,
        venue_slug: str,
        table_id: str | None = None,
        user_agent: str | None = None,
    ) -> PublicMenuResponse:
        started = time.perf_counter()
        try:
            response = self._cached_payload(venue_slug) or self._build_payload(venue_slug)
        except VenueNotFoundError:
            record_menu_request("not_found")
            raise
        except Exception:
            record_menu_request("error")
            raise

        self._record_view(response.venue.id, table_id, user_agent)
        record_menu_request("ok")
        record_menu_load(time.perf_counter() - started)
        return response
