from __future__ import annotations

from fastapi import APIRouter, Depends, File, Query, Response, UploadFile, status

from qrmenu.api.dependencies import rate_limit, require_admin, require_csrf
from qrmenu.application.dto.requests import (
    PriceChangeRequest,
    ProductCreateRequest,
    ProductPatchRequest,
)
from qrmenu.application.dto.responses import (
    CreatedResponse,
    ImageUploadResponse,
    OkResponse,
    PriceChangeResponse,
    ProductListResponse,
)
from qrmenu.application.use_cases.images import ImageUpload, UploadProductImage
from qrmenu.application.use_cases.products import (
    ChangeProductPrice,
    CreateProduct,
    DeleteProduct,
    ListProducts,
    UpdateProduct,
)
from qrmenu.domain.common.ids import ProductId
from qrmenu.infrastructure.db.repositories.category_repo import (
    SqlAlchemyCategoryRepository,
    SqlAlchemySubCategoryRepository,
)
from qrmenu.infrastructure.db.repositories.product_repo import SqlAlchemyProductRepository
from qrmenu.infrastructure.db.repositories.venue_repo import SqlAlchemyVenueRepository
from qrmenu.infrastructure.storage.provider import get_storage_adapter

router = APIRouter(prefix="/api/products", dependencies=[Depends(require_admin)])

PRODUCT_LIST_CACHE_CONTROL = "public, s-maxage=60, stale-while-revalidate=600"


def _list_products_use_case() -> ListProducts:
    return ListProducts(product_repository=SqlAlchemyProductRepository())


def _create_product_use_case() -> CreateProduct:
    return CreateProduct(
        venue_repository=SqlAlchemyVenueRepository(),
        category_repository=SqlAlchemyCategoryRepository(),
        sub_category_repository=SqlAlchemySubCategoryRepository(),
        product_repository=SqlAlchemyProductRepository(),
    )


def _update_product_use_case() -> UpdateProduct:
    return UpdateProduct(
        category_repository=SqlAlchemyCategoryRepository(),
        sub_category_repository=SqlAlchemySubCategoryRepository(),
        product_repository=SqlAlchemyProductRepository(),
    )


def _delete_product_use_case() -> DeleteProduct:
    return DeleteProduct(product_repository=SqlAlchemyProductRepository())


def _change_price_use_case() -> ChangeProductPrice:
    return ChangeProductPrice(product_repository=SqlAlchemyProductRepository())


def _upload_image_use_case() -> UploadProductImage:
    return UploadProductImage(
        product_repository=SqlAlchemyProductRepository(),
        storage_factory=get_storage_adapter,
    )


def _parse_active(raw: str | None) -> bool | None:
    if raw is None or raw == "":
        return None
    return raw == "true"


@router.get(
    "",
    response_model=ProductListResponse,
    dependencies=[
        Depends(require_csrf),
        Depends(rate_limit("products:get", limit=120, window_ms=60_000)),
    ],
)
def list_products(
    response: Response,
    category: str | None = Query(default=None),
    q: str | None = Query(default=None),
    active: str | None = Query(default=None),
) -> ProductListResponse:
    payload = _list_products_use_case().execute(
        category=category,
        query=q,
        active=_parse_active(active),
    )
    response.headers["Cache-Control"] = PRODUCT_LIST_CACHE_CONTROL
    return payload


@router.post(
    "",
    response_model=CreatedResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_csrf)],
)
def create_product(request_dto: ProductCreateRequest) -> CreatedResponse:
    return _create_product_use_case().execute(request_dto)


@router.patch("/{product_id}", response_model=OkResponse, dependencies=[Depends(require_csrf)])
def update_product(product_id: str, request_dto: ProductPatchRequest) -> OkResponse:
    _update_product_use_case().execute(ProductId(product_id), request_dto)
    return OkResponse()


@router.delete("/{product_id}", response_model=OkResponse, dependencies=[Depends(require_csrf)])
def delete_product(product_id: str) -> OkResponse:
    _delete_product_use_case().execute(ProductId(product_id))
    return OkResponse()


@router.post(
    "/{product_id}/change",
    response_model=PriceChangeResponse,
    dependencies=[Depends(require_csrf)],
)
def change_price(product_id: str, request_dto: PriceChangeRequest) -> PriceChangeResponse:
    return _change_price_use_case().execute(ProductId(product_id), request_dto)


@router.post(
    "/{product_id}/image",
    response_model=ImageUploadResponse,
    dependencies=[Depends(require_csrf)],
)
def upload_image(product_id: str, file: UploadFile = File(...)) -> ImageUploadResponse:
    upload = ImageUpload.from_stream(
        file.file,
        filename=file.filename or "upload.bin",
        content_type=file.content_type or "",
    )
    return _upload_image_use_case().execute(product_id, upload)
