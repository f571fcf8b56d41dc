from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from qrmenu.api.dependencies import require_admin
from qrmenu.application.dto.responses import ViewAnalyticsResponse
from qrmenu.application.use_cases.view_analytics import GetViewAnalytics
from qrmenu.infrastructure.db.repositories.view_log_repo import SqlAlchemyViewLogRepository

router = APIRouter(prefix="/api/admin/analytics", dependencies=[Depends(require_admin)])


def _view_analytics_use_case() -> GetViewAnalytics:
    return GetViewAnalytics(SqlAlchemyViewLogRepository())


@router.get("/accessibility", response_model=ViewAnalyticsResponse)
def menu_view_analytics(days: int = Query(default=7, ge=1, le=365)) -> ViewAnalyticsResponse:
    return _view_analytics_use_case().execute(days)
