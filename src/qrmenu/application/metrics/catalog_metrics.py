from __future__ import annotations

from prometheus_client import Counter, Histogram

MENU_REQUESTS_TOTAL = Counter(
    "qrmenu_menu_requests_total",
    "Total number of public menu requests by outcome.",
    ["status"],
)

MENU_LOAD_SECONDS = Histogram(
    "qrmenu_menu_load_seconds",
    "Time spent building a public menu payload.",
)

CATALOG_MUTATIONS_TOTAL = Counter(
    "qrmenu_catalog_mutations_total",
    "Total number of admin catalogue mutations.",
    ["entity", "action"],
)

PRICE_CHANGES_TOTAL = Counter(
    "qrmenu_price_changes_total",
    "Total number of recorded product price changes.",
)

SLUG_COLLISIONS_TOTAL = Counter(
    "qrmenu_slug_collisions_total",
    "Total number of slug collisions encountered while creating records.",
    ["entity"],
)

IMAGE_UPLOADS_TOTAL = Counter(
    "qrmenu_image_uploads_total",
    "Total number of image uploads by target and outcome.",
    ["target", "status"],
)


def record_menu_request(status: str) -> None:
    MENU_REQUESTS_TOTAL.labels(status=status).inc()


def record_menu_load(duration_seconds: float) -> None:
    MENU_LOAD_SECONDS.observe(max(duration_seconds, 0.0))


def record_catalog_mutation(entity: str, action: str) -> None:
    CATALOG_MUTATIONS_TOTAL.labels(entity=entity, action=action).inc()


def record_price_change() -> None:
    PRICE_CHANGES_TOTAL.inc()


def record_slug_collision(entity: str) -> None:
    SLUG_COLLISIONS_TOTAL.labels(entity=entity).inc()


def record_image_upload(target: str, status: str) -> None:
    IMAGE_UPLOADS_TOTAL.labels(target=target, status=status).inc()
