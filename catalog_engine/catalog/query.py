"""Catalog Query Service.

Read side of the catalog: full product detail assembly and the product
list with stock and price aggregates. Reads take no transaction; each
query bulk-fetches one collection, never one query per row.
"""

from dataclasses import dataclass, field
from decimal import Decimal

import structlog

from catalog_engine.catalog.ports import CatalogStore
from catalog_engine.catalog.stock import StockTotals
from catalog_engine.catalog.store import get_catalog_store
from catalog_engine.domain import (
    Attribute,
    Category,
    Product,
    ProductType,
    StockRecord,
    Term,
    Variant,
    require_tenant,
)
from catalog_engine.domain.exceptions import ProductNotFoundError, ValidationError

logger = structlog.get_logger()


# ============================================================================
# Read Models
# ============================================================================


@dataclass
class AttributeDetail:
    """Attribute assigned to a product with its resolved terms."""

    attribute: Attribute
    used_for_variation: bool
    terms: list[Term] = field(default_factory=list)


@dataclass
class VariantDetail:
    """Variant with its variation terms and stock rows."""

    variant: Variant
    terms: list[Term] = field(default_factory=list)
    stock: list[StockRecord] = field(default_factory=list)


@dataclass
class ProductDetail:
    """A product joined with everything it references or owns."""

    product: Product
    categories: list[Category] = field(default_factory=list)
    attributes: list[AttributeDetail] = field(default_factory=list)
    variants: list[VariantDetail] = field(default_factory=list)


@dataclass
class ProductSummary:
    """A product with list-level aggregates.

    Attributes:
        product: Parent product row.
        categories: Assigned categories.
        variant_count: Number of variants.
        total_stock: Sum of managed stock over all variants and countries.
        has_unlimited_stock: Whether any stock row is unmanaged.
        variable_min_price: Lowest variant price (variable products only).
        variable_max_price: Highest variant price (variable products only).
    """

    product: Product
    categories: list[Category] = field(default_factory=list)
    variant_count: int = 0
    total_stock: int = 0
    has_unlimited_stock: bool = False
    variable_min_price: Decimal | None = None
    variable_max_price: Decimal | None = None


def price_range(variants: list[Variant]) -> tuple[Decimal, Decimal]:
    """Min and max variant price, or (0, 0) without variants."""
    if not variants:
        return Decimal("0"), Decimal("0")
    prices = [v.price for v in variants]
    return min(prices), max(prices)


# ============================================================================
# Catalog Query Service
# ============================================================================


class CatalogQueryService:
    """Service for catalog reads.

    Example usage:
        queries = get_catalog_query_service()
        detail = await queries.get_one("org-1", sku="MUG-1")
        summaries = await queries.list_all("org-1")
    """

    def __init__(
        self,
        store: CatalogStore | None = None,
        request_id: str | None = None,
    ) -> None:
        """Initialize service.

        Args:
            store: Catalog store.
            request_id: Request ID for correlation.
        """
        self.store = store or get_catalog_store()
        self.request_id = request_id

    async def get_one(
        self,
        organization_id: str,
        product_id: str | None = None,
        sku: str | None = None,
    ) -> ProductDetail:
        """Assemble the detail of one product, found by id or sku.

        Args:
            organization_id: Tenant id.
            product_id: Product id.
            sku: Parent SKU; used when no id is given.

        Returns:
            ProductDetail of the product.

        Raises:
            ValidationError: If neither id nor sku is given.
            ProductNotFoundError: If the product is absent from the tenant.
        """
        org = require_tenant(organization_id)
        if not product_id and not sku:
            raise ValidationError("Product id or sku is required", field="id")

        async with self.store.reader() as uow:
            if product_id:
                product = await uow.products.get(org, product_id)
            else:
                product = await uow.products.get_by_sku(org, sku or "")
            if product is None:
                raise ProductNotFoundError(product_id or sku or "")

            assignments = await uow.category_assignments.list_for_products(org, [product.id])
            categories = await uow.categories.list_by_ids(
                org, [a.category_id for a in assignments]
            )
            attribute_assignments = await uow.attribute_assignments.list_for_product(
                org, product.id
            )
            attributes = await uow.attributes.list_by_ids(
                org, [a.attribute_id for a in attribute_assignments]
            )
            product_terms = await uow.product_terms.list_for_product(org, product.id)
            variants = await uow.variants.list_for_products(org, [product.id])
            variant_ids = [v.id for v in variants]
            variant_terms = await uow.variant_terms.list_for_variants(org, variant_ids)
            stock = await uow.stock.list_for_variants(org, variant_ids)

            term_ids = {t.term_id for t in product_terms} | {t.term_id for t in variant_terms}
            terms = {t.id: t for t in await uow.terms.list_by_ids(org, sorted(term_ids))}

        categories_by_id = {c.id: c for c in categories}
        attributes_by_id = {a.id: a for a in attributes}

        detail = ProductDetail(
            product=product,
            categories=[
                categories_by_id[a.category_id]
                for a in assignments
                if a.category_id in categories_by_id
            ],
        )

        for assignment in attribute_assignments:
            attribute = attributes_by_id.get(assignment.attribute_id)
            if attribute is None:
                continue
            # Variation attributes show the terms their variants use.
            source = variant_terms if assignment.used_for_variation else product_terms
            resolved = {
                t.term_id: terms[t.term_id]
                for t in source
                if t.attribute_id == attribute.id and t.term_id in terms
            }
            detail.attributes.append(
                AttributeDetail(
                    attribute=attribute,
                    used_for_variation=assignment.used_for_variation,
                    terms=sorted(resolved.values(), key=lambda t: t.name),
                )
            )
        detail.attributes.sort(key=lambda a: a.attribute.name)

        for variant in variants:
            detail.variants.append(
                VariantDetail(
                    variant=variant,
                    terms=[
                        terms[t.term_id]
                        for t in variant_terms
                        if t.variant_id == variant.id and t.term_id in terms
                    ],
                    stock=[s for s in stock if s.variant_id == variant.id],
                )
            )

        logger.debug(
            "Product detail assembled",
            organization_id=org,
            product_id=product.id,
            variant_count=len(variants),
            request_id=self.request_id,
        )
        return detail

    async def list_all(self, organization_id: str) -> list[ProductSummary]:
        """List a tenant's products with stock and price aggregates.

        Newest products first. Unmanaged stock is flagged rather than
        summed into ``total_stock``.

        Args:
            organization_id: Tenant id.

        Returns:
            One ProductSummary per product.
        """
        org = require_tenant(organization_id)
        async with self.store.reader() as uow:
            products = await uow.products.list_all(org)
            product_ids = [p.id for p in products]
            variants = await uow.variants.list_for_products(org, product_ids)
            stock = await uow.stock.list_for_variants(org, [v.id for v in variants])
            assignments = await uow.category_assignments.list_for_products(org, product_ids)
            categories = {c.id: c for c in await uow.categories.list_all(org)}

        variants_by_product: dict[str, list[Variant]] = {}
        for variant in variants:
            variants_by_product.setdefault(variant.product_id, []).append(variant)
        product_of_variant = {v.id: v.product_id for v in variants}

        totals: dict[str, StockTotals] = {p.id: StockTotals() for p in products}
        for record in stock:
            product_id = product_of_variant.get(record.variant_id)
            if product_id in totals:
                totals[product_id].add(record.level)

        categories_by_product: dict[str, list[Category]] = {}
        for assignment in assignments:
            category = categories.get(assignment.category_id)
            if category is not None:
                categories_by_product.setdefault(assignment.product_id, []).append(category)

        summaries: list[ProductSummary] = []
        for product in products:
            product_variants = variants_by_product.get(product.id, [])
            summary = ProductSummary(
                product=product,
                categories=categories_by_product.get(product.id, []),
                variant_count=len(product_variants),
                total_stock=totals[product.id].managed,
                has_unlimited_stock=totals[product.id].has_unlimited,
            )
            if product.type is ProductType.VARIABLE:
                summary.variable_min_price, summary.variable_max_price = price_range(
                    product_variants
                )
            summaries.append(summary)

        logger.debug(
            "Product list assembled",
            organization_id=org,
            product_count=len(summaries),
            request_id=self.request_id,
        )
        return summaries


# ============================================================================
# Service Factory
# ============================================================================


def get_catalog_query_service(request_id: str | None = None) -> CatalogQueryService:
    """Get catalog query service instance.

    Args:
        request_id: Request ID for correlation.

    Returns:
        CatalogQueryService instance.
    """
    return CatalogQueryService(request_id=request_id)
