from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class VenueResponse(BaseModel):
    id: str
    name: str
    slug: str
    announcement: str | None = None
    openingHours: str | None = None


class CategoryResponse(BaseModel):
    id: str
    venueId: str
    name: str
    slug: str
    imageUrl: str | None = None
    displayOrder: int
    isVisible: bool


class SubCategoryResponse(BaseModel):
    id: str
    venueId: str
    categoryId: str
    name: str
    slug: str
    displayOrder: int
    isVisible: bool


class ProductResponse(BaseModel):
    id: str
    venueId: str
    name: str
    slug: str
    category: str | None = None
    categoryId: str | None = None
    subCategoryId: str | None = None
    description: str | None = None
    priceCents: int
    imageUrl: str | None = None
    isActive: bool
    isInStock: bool
    dietTags: list[str] = Field(default_factory=list)


class PublicMenuResponse(BaseModel):
    venue: VenueResponse
    categories: list[CategoryResponse] = Field(default_factory=list)
    subCategories: list[SubCategoryResponse] = Field(default_factory=list)
    products: list[ProductResponse] = Field(default_factory=list)


class ProductListResponse(BaseModel):
    items: list[ProductResponse] = Field(default_factory=list)


class CategoryListResponse(BaseModel):
    categories: list[CategoryResponse] = Field(default_factory=list)


class SubCategoryListResponse(BaseModel):
    subCategories: list[SubCategoryResponse] = Field(default_factory=list)


class CreatedResponse(BaseModel):
    id: str


class CategoryEnvelope(BaseModel):
    category: CategoryResponse


class SubCategoryEnvelope(BaseModel):
    subCategory: SubCategoryResponse


class OkResponse(BaseModel):
    ok: bool = True


class PriceChangeResponse(BaseModel):
    ok: bool = True
    newPriceCents: int


class ImageUploadResponse(BaseModel):
    url: str


class SessionUserResponse(BaseModel):
    id: str
    email: str
    role: str


class MeResponse(BaseModel):
    user: SessionUserResponse


class TopOffenderResponse(BaseModel):
    identifier: str
    scope: str
    hits: int


class TimeRangeResponse(BaseModel):
    start: datetime | None = Field(default=None, serialization_alias="from")
    to: datetime | None = None


class RateLimitStatsResponse(BaseModel):
    totalHits: int
    byScope: dict[str, int] = Field(default_factory=dict)
    byIdentifier: dict[str, int] = Field(default_factory=dict)
    topOffenders: list[TopOffenderResponse] = Field(default_factory=list)
    timeRange: TimeRangeResponse
    periodHours: int


class DatabaseMetricsResponse(BaseModel):
    totalQueries: int
    slowQueries: int
    averageQueryTime: float
    queriesByModel: dict[str, int] = Field(default_factory=dict)
    slowQueriesByModel: dict[str, int] = Field(default_factory=dict)
    slowQueryThresholdMs: float


class AnalyticsPeriodResponse(BaseModel):
    days: int
    start: datetime = Field(serialization_alias="from")
    to: datetime


class ViewSummaryResponse(BaseModel):
    totalViews: int
    period: AnalyticsPeriodResponse
    averageViewsPerDay: int


class DailyViewsResponse(BaseModel):
    date: str
    views: int


class DeviceBreakdownResponse(BaseModel):
    mobile: int = 0
    desktop: int = 0
    tablet: int = 0
    bot: int = 0
    unknown: int = 0


class UserAgentViewsResponse(BaseModel):
    userAgent: str
    count: int


class VenueViewsResponse(BaseModel):
    venueId: str
    venueName: str
    venueSlug: str
    views: int


class ViewAnalyticsResponse(BaseModel):
    summary: ViewSummaryResponse
    viewsPerDay: list[DailyViewsResponse] = Field(default_factory=list)
    deviceBreakdown: DeviceBreakdownResponse
    topUserAgents: list[UserAgentViewsResponse] = Field(default_factory=list)
    venueStats: list[VenueViewsResponse] = Field(default_factory=list)
