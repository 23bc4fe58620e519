"""Shared FastAPI dependencies.

Resolves the tenant scope of a request and builds services bound to
the request ID.
"""

from typing import Annotated

from fastapi import Depends, Request

from catalog_engine.catalog.categories import CategoryTreeStore, get_category_store
from catalog_engine.catalog.query import CatalogQueryService, get_catalog_query_service
from catalog_engine.catalog.stock import StockLedger, get_stock_ledger
from catalog_engine.catalog.synchronizer import VariantSynchronizer, get_variant_synchronizer
from catalog_engine.catalog.terms import TermRegistry, get_term_registry
from catalog_engine.domain import require_tenant
from catalog_engine.infrastructure.config import settings


def get_request_id(request: Request) -> str | None:
    """Get the correlation ID set by RequestIdMiddleware."""
    return getattr(request.state, "request_id", None)


def get_organization_id(request: Request) -> str:
    """Resolve the caller's tenant from the tenant header.

    Raises:
        UnauthorizedError: If the header is missing or blank.
    """
    return require_tenant(request.headers.get(settings.tenant_header))


RequestId = Annotated[str | None, Depends(get_request_id)]
OrganizationId = Annotated[str, Depends(get_organization_id)]


def get_synchronizer(request_id: RequestId) -> VariantSynchronizer:
    return get_variant_synchronizer(request_id=request_id)


def get_queries(request_id: RequestId) -> CatalogQueryService:
    return get_catalog_query_service(request_id=request_id)


def get_ledger(request_id: RequestId) -> StockLedger:
    return get_stock_ledger(request_id=request_id)


def get_registry(request_id: RequestId) -> TermRegistry:
    return get_term_registry(request_id=request_id)


def get_categories(request_id: RequestId) -> CategoryTreeStore:
    return get_category_store(request_id=request_id)
