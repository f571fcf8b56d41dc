from __future__ import annotations

from fastapi import APIRouter, Depends, Header, Query, Response

from qrmenu.api.dependencies import rate_limit
from qrmenu.application.dto.responses import PublicMenuResponse
from qrmenu.application.use_cases.get_menu import GetPublicMenu
from qrmenu.infrastructure.cache.cache_store import build_cache_store
from qrmenu.infrastructure.db.repositories.category_repo import (
    SqlAlchemyCategoryRepository,
    SqlAlchemySubCategoryRepository,
)
from qrmenu.infrastructure.db.repositories.product_repo import SqlAlchemyProductRepository
from qrmenu.infrastructure.db.repositories.venue_repo import SqlAlchemyVenueRepository
from qrmenu.infrastructure.db.repositories.view_log_repo import SqlAlchemyViewLogRepository

router = APIRouter()

MENU_CACHE_CONTROL = "public, s-maxage=30, stale-while-revalidate=300"


def _get_public_menu_use_case() -> GetPublicMenu:
    return GetPublicMenu(
        venue_repository=SqlAlchemyVenueRepository(),
        category_repository=SqlAlchemyCategoryRepository(),
        sub_category_repository=SqlAlchemySubCategoryRepository(),
        product_repository=SqlAlchemyProductRepository(),
        view_log_repository=SqlAlchemyViewLogRepository(),
        cache=build_cache_store(),
        ttl_seconds=30,
    )


@router.get(
    "/api/venue/{slug}/menu",
    response_model=PublicMenuResponse,
    dependencies=[Depends(rate_limit("menu:get", limit=120, window_ms=60_000))],
)
def get_public_menu(
    slug: str,
    response: Response,
    table_id: str | None = Query(default=None, alias="tableId", max_length=64),
    user_agent: str | None = Header(default=None, alias="User-Agent"),
) -> PublicMenuResponse:
    payload = _get_public_menu_use_case().execute(
        venue_slug=slug,
        table_id=table_id,
        user_agent=user_agent,
    )
    response.headers["Cache-Control"] = MENU_CACHE_CONTROL
    return payload
