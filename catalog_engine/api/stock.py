"""Stock API endpoints.

- POST /products/stock - upsert the stock of a variant in one country
- GET /products/stock?variantId= - stock rows of a variant
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from catalog_engine.api.converters import stock_to_input, stock_to_response
from catalog_engine.api.deps import OrganizationId, get_ledger
from catalog_engine.api.schemas import ErrorResponse, StockRecordResponse, StockUpsertRequest
from catalog_engine.catalog.stock import StockLedger

router = APIRouter(
    prefix="/products/stock",
    tags=["Stock"],
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)

Ledger = Annotated[StockLedger, Depends(get_ledger)]


@router.post(
    "",
    response_model=StockRecordResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
    summary="Upsert stock",
    description=(
        "Insert or replace the stock row for (variantId, countryCode). "
        "When manageStock is false the stored level is 999999999."
    ),
)
async def upsert_stock(
    body: StockUpsertRequest, organization_id: OrganizationId, ledger: Ledger
) -> StockRecordResponse:
    record = await ledger.upsert(organization_id, body.variant_id, stock_to_input(body))
    return stock_to_response(record)


@router.get("", response_model=list[StockRecordResponse], summary="List stock of a variant")
async def list_stock(
    organization_id: OrganizationId,
    ledger: Ledger,
    variant_id: str = Query(..., alias="variantId"),
) -> list[StockRecordResponse]:
    records = await ledger.list_for_variant(organization_id, variant_id)
    return [stock_to_response(r) for r in records]
