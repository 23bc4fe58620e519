"""Product API endpoints.

- GET /products - product list with aggregates, or one product by ?id= / ?sku=
- POST /products - create a product
- GET /products/{id} - product details
- PUT /products/{id} - replace a product's complete state
- DELETE /products/{id} - delete a product and everything it owns
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from catalog_engine.api.converters import (
    detail_to_response,
    request_to_payload,
    summary_to_response,
)
from catalog_engine.api.deps import OrganizationId, get_queries, get_synchronizer
from catalog_engine.api.schemas import (
    ErrorResponse,
    ProductDetailResponse,
    ProductRequest,
    ProductSummaryResponse,
    SuccessResponse,
)
from catalog_engine.catalog.query import CatalogQueryService
from catalog_engine.catalog.synchronizer import VariantSynchronizer

router = APIRouter(
    prefix="/products",
    tags=["Products"],
    responses={401: {"model": ErrorResponse}},
)

Queries = Annotated[CatalogQueryService, Depends(get_queries)]
Synchronizer = Annotated[VariantSynchronizer, Depends(get_synchronizer)]


@router.get(
    "",
    response_model=list[ProductSummaryResponse] | ProductDetailResponse,
    responses={404: {"model": ErrorResponse}},
    summary="List products or get one by id/sku",
    description=(
        "Without query parameters, returns every product of the organization with "
        "total stock and variant price range. With id or sku, returns that product's detail."
    ),
)
async def list_products(
    organization_id: OrganizationId,
    queries: Queries,
    product_id: str | None = Query(default=None, alias="id"),
    sku: str | None = Query(default=None),
) -> list[ProductSummaryResponse] | ProductDetailResponse:
    if product_id or sku:
        detail = await queries.get_one(organization_id, product_id=product_id, sku=sku)
        return detail_to_response(detail)
    return [summary_to_response(s) for s in await queries.list_all(organization_id)]


@router.post(
    "",
    response_model=ProductDetailResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
    summary="Create product",
)
async def create_product(
    body: ProductRequest,
    organization_id: OrganizationId,
    synchronizer: Synchronizer,
    queries: Queries,
) -> ProductDetailResponse:
    product = await synchronizer.create(organization_id, request_to_payload(body))
    return detail_to_response(await queries.get_one(organization_id, product_id=product.id))


@router.get(
    "/{product_id}",
    response_model=ProductDetailResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get product",
)
async def get_product(
    product_id: str, organization_id: OrganizationId, queries: Queries
) -> ProductDetailResponse:
    return detail_to_response(await queries.get_one(organization_id, product_id=product_id))


@router.put(
    "/{product_id}",
    response_model=ProductDetailResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Replace product",
    description="Full replace: anything not in the body, including variations, is removed.",
)
async def update_product(
    product_id: str,
    body: ProductRequest,
    organization_id: OrganizationId,
    synchronizer: Synchronizer,
    queries: Queries,
) -> ProductDetailResponse:
    await synchronizer.update(organization_id, product_id, request_to_payload(body))
    return detail_to_response(await queries.get_one(organization_id, product_id=product_id))


@router.delete(
    "/{product_id}",
    response_model=SuccessResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Delete product",
)
async def delete_product(
    product_id: str, organization_id: OrganizationId, synchronizer: Synchronizer
) -> SuccessResponse:
    await synchronizer.delete(organization_id, product_id)
    return SuccessResponse()
