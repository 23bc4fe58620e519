"""Variant Synchronizer.

Writes a product's complete desired state in one transaction: the
product row, category assignments, attribute assignments, product
terms, variants, variant terms and stock. Updates reconcile each owned
collection against persisted rows by natural key, so the stored state
always ends up exactly as described by the payload. Create is the same
reconciliation against an empty product.
"""

from collections.abc import Sequence
from dataclasses import dataclass

import structlog

from catalog_engine.catalog.payloads import (
    ProductPayload,
    StockInput,
    VariationInput,
    normalize_payload,
)
from catalog_engine.catalog.ports import CatalogStore, CatalogUnitOfWork
from catalog_engine.catalog.reconcile import reconcile
from catalog_engine.catalog.stock import write_stock
from catalog_engine.catalog.store import get_catalog_store
from catalog_engine.domain import (
    AttributeAssignment,
    CategoryAssignment,
    Product,
    ProductTerm,
    ProductType,
    Variant,
    VariantTerm,
    new_id,
    require_tenant,
    utcnow,
)
from catalog_engine.domain.exceptions import (
    InvalidReferenceError,
    ProductNotFoundError,
    ValidationError,
)

logger = structlog.get_logger()

# Natural key of the single variant of a simple product.
_SIMPLE_VARIANT_KEY = "simple"


@dataclass
class SyncStats:
    """Row changes made by one write, for logging."""

    inserted: int = 0
    updated: int = 0
    deleted: int = 0

    def as_log(self) -> dict[str, int]:
        return {
            "rows_inserted": self.inserted,
            "rows_updated": self.updated,
            "rows_deleted": self.deleted,
        }


class VariantSynchronizer:
    """Service for product writes.

    Example usage:
        synchronizer = get_variant_synchronizer()
        product = await synchronizer.create(
            "org-1",
            ProductPayload(name="Mug", type="simple", sku="MUG-1", price=Decimal("9.99")),
        )
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

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    async def create(self, organization_id: str, payload: ProductPayload) -> Product:
        """Create a product with all of its owned rows.

        Args:
            organization_id: Tenant id.
            payload: Complete product state.

        Returns:
            The persisted product with a server-assigned id.

        Raises:
            ValidationError: If the payload is invalid or references
                entities outside the tenant.
        """
        org = require_tenant(organization_id)
        payload = self._normalize(org, payload)
        stats = SyncStats()
        now = utcnow()

        async with self.store.transaction() as uow:
            await self._check_references(uow, org, payload)
            product = Product(
                id=new_id(),
                organization_id=org,
                name=payload.name,
                description=payload.description,
                type=payload.product_type,
                status=payload.product_status,
                sku=payload.sku,
                price=payload.price,
                image_url=payload.image_url,
                created_at=now,
                updated_at=now,
            )
            await uow.products.add(product)
            stats.inserted += 1
            await self._sync_owned(uow, product, payload, stats)

        logger.info(
            "Product created",
            organization_id=org,
            product_id=product.id,
            product_type=product.type.value,
            variant_count=max(len(payload.variations), 1),
            request_id=self.request_id,
            **stats.as_log(),
        )
        return product

    async def update(
        self, organization_id: str, product_id: str, payload: ProductPayload
    ) -> Product:
        """Replace a product's state with the payload.

        Anything persisted but absent from the payload is removed,
        including variations and their stock.

        Args:
            organization_id: Tenant id.
            product_id: Product to update.
            payload: Complete desired product state.

        Returns:
            The updated product.

        Raises:
            ProductNotFoundError: If the product is absent from the tenant.
            ValidationError: If the payload is invalid or references
                entities outside the tenant.
        """
        org = require_tenant(organization_id)
        payload = self._normalize(org, payload, product_id=product_id)
        stats = SyncStats()

        async with self.store.transaction() as uow:
            product = await uow.products.get(org, product_id)
            if product is None:
                raise ProductNotFoundError(product_id)
            await self._check_references(uow, org, payload)

            product.name = payload.name
            product.description = payload.description
            product.type = payload.product_type
            product.status = payload.product_status
            product.sku = payload.sku
            product.price = payload.price
            product.image_url = payload.image_url
            product.updated_at = utcnow()
            await uow.products.update(product)
            stats.updated += 1
            await self._sync_owned(uow, product, payload, stats)

        logger.info(
            "Product updated",
            organization_id=org,
            product_id=product_id,
            product_type=product.type.value,
            request_id=self.request_id,
            **stats.as_log(),
        )
        return product

    async def delete(self, organization_id: str, product_id: str) -> None:
        """Delete a product and everything it owns.

        Raises:
            ProductNotFoundError: If the product is absent from the tenant.
        """
        org = require_tenant(organization_id)
        stats = SyncStats()

        async with self.store.transaction() as uow:
            if await uow.products.get(org, product_id) is None:
                raise ProductNotFoundError(product_id)

            variants = await uow.variants.list_for_products(org, [product_id])
            stats.deleted += await self._delete_variants(uow, org, [v.id for v in variants])

            assignments = await uow.category_assignments.list_for_products(org, [product_id])
            stats.deleted += await uow.category_assignments.delete(
                org, [a.id for a in assignments]
            )
            attributes = await uow.attribute_assignments.list_for_product(org, product_id)
            stats.deleted += await uow.attribute_assignments.delete(
                org, [a.id for a in attributes]
            )
            terms = await uow.product_terms.list_for_product(org, product_id)
            stats.deleted += await uow.product_terms.delete(org, [t.id for t in terms])

            stats.deleted += await uow.products.delete(org, product_id)

        logger.info(
            "Product deleted",
            organization_id=org,
            product_id=product_id,
            request_id=self.request_id,
            **stats.as_log(),
        )

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def _normalize(
        self, organization_id: str, payload: ProductPayload, product_id: str | None = None
    ) -> ProductPayload:
        try:
            return normalize_payload(payload)
        except ValidationError as e:
            logger.warning(
                "Product payload rejected",
                organization_id=organization_id,
                product_id=product_id,
                error=e.message,
                request_id=self.request_id,
            )
            raise

    async def _check_references(
        self, uow: CatalogUnitOfWork, organization_id: str, payload: ProductPayload
    ) -> None:
        """Verify every referenced registry entry belongs to the tenant.

        Raises:
            InvalidReferenceError: Naming the first offending id.
        """
        try:
            await self._check_reference_ids(uow, organization_id, payload)
        except InvalidReferenceError as e:
            logger.warning(
                "Product references rejected",
                organization_id=organization_id,
                error=e.message,
                request_id=self.request_id,
            )
            raise

    async def _check_reference_ids(
        self, uow: CatalogUnitOfWork, organization_id: str, payload: ProductPayload
    ) -> None:
        if payload.categories:
            found = {
                c.id for c in await uow.categories.list_by_ids(organization_id, payload.categories)
            }
            for category_id in payload.categories:
                if category_id not in found:
                    raise InvalidReferenceError("Category", category_id)

        attribute_ids = [a.attribute_id for a in payload.attributes]
        if attribute_ids:
            found = {
                a.id for a in await uow.attributes.list_by_ids(organization_id, attribute_ids)
            }
            for attribute_id in attribute_ids:
                if attribute_id not in found:
                    raise InvalidReferenceError("Attribute", attribute_id)

        # (attribute_id, term_id) pairs in the order they appear in the payload
        claimed: list[tuple[str, str]] = [
            (attribute.attribute_id, term_id)
            for attribute in payload.attributes
            for term_id in attribute.terms
        ]
        claimed.extend(
            (term.attribute_id, term.term_id)
            for variation in payload.variations
            for term in variation.terms
        )
        if not claimed:
            return
        term_ids = list(dict.fromkeys(term_id for _, term_id in claimed))
        owners = {
            t.id: t.attribute_id for t in await uow.terms.list_by_ids(organization_id, term_ids)
        }
        for attribute_id, term_id in claimed:
            if term_id not in owners:
                raise InvalidReferenceError("Term", term_id)
            if owners[term_id] != attribute_id:
                raise InvalidReferenceError(
                    "Term", term_id, f"does not belong to attribute {attribute_id}"
                )

    # ------------------------------------------------------------------
    # Reconciliation of owned collections
    # ------------------------------------------------------------------

    async def _sync_owned(
        self,
        uow: CatalogUnitOfWork,
        product: Product,
        payload: ProductPayload,
        stats: SyncStats,
    ) -> None:
        await self._sync_categories(uow, product, payload, stats)
        await self._sync_attributes(uow, product, payload, stats)
        await self._sync_product_terms(uow, product, payload, stats)
        await self._sync_variants(uow, product, payload, stats)

    async def _sync_categories(
        self,
        uow: CatalogUnitOfWork,
        product: Product,
        payload: ProductPayload,
        stats: SyncStats,
    ) -> None:
        org = product.organization_id
        existing = await uow.category_assignments.list_for_products(org, [product.id])
        diff = reconcile(existing, payload.categories, lambda a: a.category_id, lambda c: c)

        stats.deleted += await uow.category_assignments.delete(org, [a.id for a in diff.to_delete])
        for category_id in diff.to_insert:
            await uow.category_assignments.add(
                CategoryAssignment(
                    id=new_id(),
                    organization_id=org,
                    product_id=product.id,
                    category_id=category_id,
                )
            )
            stats.inserted += 1

    async def _sync_attributes(
        self,
        uow: CatalogUnitOfWork,
        product: Product,
        payload: ProductPayload,
        stats: SyncStats,
    ) -> None:
        org = product.organization_id
        existing = await uow.attribute_assignments.list_for_product(org, product.id)
        diff = reconcile(
            existing, payload.attributes, lambda a: a.attribute_id, lambda a: a.attribute_id
        )

        stats.deleted += await uow.attribute_assignments.delete(
            org, [a.id for a in diff.to_delete]
        )
        for assignment, desired in diff.to_update:
            if assignment.used_for_variation != desired.used_for_variation:
                assignment.used_for_variation = desired.used_for_variation
                await uow.attribute_assignments.update(assignment)
                stats.updated += 1
        for desired in diff.to_insert:
            await uow.attribute_assignments.add(
                AttributeAssignment(
                    id=new_id(),
                    organization_id=org,
                    product_id=product.id,
                    attribute_id=desired.attribute_id,
                    used_for_variation=desired.used_for_variation,
                )
            )
            stats.inserted += 1

    async def _sync_product_terms(
        self,
        uow: CatalogUnitOfWork,
        product: Product,
        payload: ProductPayload,
        stats: SyncStats,
    ) -> None:
        org = product.organization_id
        # Terms of variation attributes live on variants only.
        desired = [
            (attribute.attribute_id, term_id)
            for attribute in payload.attributes
            if not attribute.used_for_variation
            for term_id in attribute.terms
        ]
        existing = await uow.product_terms.list_for_product(org, product.id)
        diff = reconcile(existing, desired, lambda t: (t.attribute_id, t.term_id), lambda d: d)

        stats.deleted += await uow.product_terms.delete(org, [t.id for t in diff.to_delete])
        for attribute_id, term_id in diff.to_insert:
            await uow.product_terms.add(
                ProductTerm(
                    id=new_id(),
                    organization_id=org,
                    product_id=product.id,
                    attribute_id=attribute_id,
                    term_id=term_id,
                )
            )
            stats.inserted += 1

    async def _sync_variants(
        self,
        uow: CatalogUnitOfWork,
        product: Product,
        payload: ProductPayload,
        stats: SyncStats,
    ) -> None:
        org = product.organization_id
        existing = await uow.variants.list_for_products(org, [product.id])

        if payload.product_type is ProductType.SIMPLE:
            desired = [
                VariationInput(
                    sku=product.sku,
                    price=product.price,
                    image_url=product.image_url,
                    stock=payload.stock,
                )
            ]
            diff = reconcile(
                existing, desired, lambda _: _SIMPLE_VARIANT_KEY, lambda _: _SIMPLE_VARIANT_KEY
            )
        else:
            desired = payload.variations
            diff = reconcile(existing, desired, lambda v: v.sku, lambda v: v.sku)
        positions = {id(variation): index for index, variation in enumerate(desired)}

        stats.deleted += await self._delete_variants(uow, org, [v.id for v in diff.to_delete])

        now = utcnow()
        for variant, variation in diff.to_update:
            variant.sku = variation.sku
            variant.price = variation.price
            variant.image_url = variation.image_url
            variant.position = positions[id(variation)]
            variant.updated_at = now
            await uow.variants.update(variant)
            stats.updated += 1
            await self._sync_variant_rows(uow, variant, variation, stats)

        for variation in diff.to_insert:
            variant = Variant(
                id=new_id(),
                organization_id=org,
                product_id=product.id,
                sku=variation.sku,
                price=variation.price,
                image_url=variation.image_url,
                position=positions[id(variation)],
                created_at=now,
                updated_at=now,
            )
            await uow.variants.add(variant)
            stats.inserted += 1
            await self._sync_variant_rows(uow, variant, variation, stats)

    async def _sync_variant_rows(
        self,
        uow: CatalogUnitOfWork,
        variant: Variant,
        variation: VariationInput,
        stats: SyncStats,
    ) -> None:
        org = variant.organization_id

        existing_terms = await uow.variant_terms.list_for_variants(org, [variant.id])
        terms = reconcile(
            existing_terms, variation.terms, lambda t: t.attribute_id, lambda t: t.attribute_id
        )
        stats.deleted += await uow.variant_terms.delete(org, [t.id for t in terms.to_delete])
        for variant_term, desired in terms.to_update:
            if variant_term.term_id != desired.term_id:
                variant_term.term_id = desired.term_id
                await uow.variant_terms.update(variant_term)
                stats.updated += 1
        for desired in terms.to_insert:
            await uow.variant_terms.add(
                VariantTerm(
                    id=new_id(),
                    organization_id=org,
                    variant_id=variant.id,
                    attribute_id=desired.attribute_id,
                    term_id=desired.term_id,
                )
            )
            stats.inserted += 1

        existing_stock = await uow.stock.list_for_variants(org, [variant.id])
        stock = reconcile(
            existing_stock, variation.stock, lambda s: s.country_code, lambda s: s.country_code
        )
        stats.deleted += await uow.stock.delete(org, [s.id for s in stock.to_delete])
        entries: list[StockInput] = [entry for _, entry in stock.to_update]
        entries.extend(stock.to_insert)
        for entry in entries:
            await write_stock(uow, org, variant.id, entry)
        stats.updated += len(stock.to_update)
        stats.inserted += len(stock.to_insert)

    async def _delete_variants(
        self, uow: CatalogUnitOfWork, organization_id: str, variant_ids: Sequence[str]
    ) -> int:
        """Delete variants after their terms and stock rows."""
        if not variant_ids:
            return 0
        terms = await uow.variant_terms.list_for_variants(organization_id, variant_ids)
        stock = await uow.stock.list_for_variants(organization_id, variant_ids)
        deleted = await uow.variant_terms.delete(organization_id, [t.id for t in terms])
        deleted += await uow.stock.delete(organization_id, [s.id for s in stock])
        deleted += await uow.variants.delete(organization_id, variant_ids)
        return deleted


# ============================================================================
# Service Factory
# ============================================================================


def get_variant_synchronizer(request_id: str | None = None) -> VariantSynchronizer:
    """Get variant synchronizer instance.

    Args:
        request_id: Request ID for correlation.

    Returns:
        VariantSynchronizer instance.
    """
    return VariantSynchronizer(request_id=request_id)
