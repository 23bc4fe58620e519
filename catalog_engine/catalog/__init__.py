"""Catalog engine - registries, stock, product writes and reads.

Example usage:
    from catalog_engine.catalog import get_variant_synchronizer, ProductPayload

    synchronizer = get_variant_synchronizer(request_id="req-1")
    product = await synchronizer.create(organization_id, payload)
"""

from catalog_engine.catalog.categories import (
    CategoryNode,
    CategoryTreeStore,
    FlatCategory,
    build_tree,
    flatten_tree,
    get_category_store,
)
from catalog_engine.catalog.memory import InMemoryCatalogStore
from catalog_engine.catalog.payloads import (
    AttributeInput,
    ProductPayload,
    StockInput,
    VariationInput,
    VariationTermInput,
)
from catalog_engine.catalog.ports import CatalogStore, CatalogUnitOfWork
from catalog_engine.catalog.query import (
    AttributeDetail,
    CatalogQueryService,
    ProductDetail,
    ProductSummary,
    VariantDetail,
    get_catalog_query_service,
)
from catalog_engine.catalog.reconcile import Reconciliation, reconcile
from catalog_engine.catalog.stock import StockLedger, get_stock_ledger
from catalog_engine.catalog.store import get_catalog_store, reset_catalog_store
from catalog_engine.catalog.synchronizer import VariantSynchronizer, get_variant_synchronizer
from catalog_engine.catalog.terms import TermRegistry, get_term_registry

__all__ = [
    # Storage
    "CatalogStore",
    "CatalogUnitOfWork",
    "InMemoryCatalogStore",
    "get_catalog_store",
    "reset_catalog_store",
    # Payloads
    "AttributeInput",
    "ProductPayload",
    "StockInput",
    "VariationInput",
    "VariationTermInput",
    # Reconciliation
    "Reconciliation",
    "reconcile",
    # Services
    "CategoryTreeStore",
    "CatalogQueryService",
    "StockLedger",
    "TermRegistry",
    "VariantSynchronizer",
    "get_catalog_query_service",
    "get_category_store",
    "get_stock_ledger",
    "get_term_registry",
    "get_variant_synchronizer",
    # Read models
    "AttributeDetail",
    "CategoryNode",
    "FlatCategory",
    "ProductDetail",
    "ProductSummary",
    "VariantDetail",
    "build_tree",
    "flatten_tree",
]
