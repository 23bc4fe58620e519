"""Stock Ledger.

Per-(variant, country) stock rows. Every write is an upsert that fully
replaces one country's row for one variant.
"""

from dataclasses import dataclass

import structlog

from catalog_engine.catalog.payloads import StockInput, normalize_stock
from catalog_engine.catalog.ports import CatalogStore, CatalogUnitOfWork
from catalog_engine.catalog.store import get_catalog_store
from catalog_engine.domain import StockLevel, StockRecord, new_id, require_tenant
from catalog_engine.domain.exceptions import VariantNotFoundError

logger = structlog.get_logger()


@dataclass
class StockTotals:
    """Aggregate of a set of stock rows.

    Attributes:
        managed: Sum of managed quantities.
        has_unlimited: Whether any row is unmanaged.
    """

    managed: int = 0
    has_unlimited: bool = False

    def add(self, level: StockLevel) -> None:
        if level.is_unlimited:
            self.has_unlimited = True
        else:
            self.managed += level.quantity or 0


async def write_stock(
    uow: CatalogUnitOfWork,
    organization_id: str,
    variant_id: str,
    entry: StockInput,
) -> StockRecord:
    """Upsert one stock row inside an open unit of work.

    Args:
        uow: Unit of work of the caller's transaction.
        organization_id: Tenant id.
        variant_id: Variant the row belongs to.
        entry: Normalized stock input.

    Returns:
        The persisted record.
    """
    return await uow.stock.upsert(
        StockRecord(
            id=new_id(),
            organization_id=organization_id,
            variant_id=variant_id,
            country_code=entry.country_code,
            level=entry.level,
            visibility=entry.visibility,
            allow_backorder=entry.allow_backorder,
        )
    )


class StockLedger:
    """Service for variant stock.

    Example usage:
        ledger = get_stock_ledger()
        record = await ledger.upsert(
            "org-1",
            variant_id,
            StockInput(country_code="US", stock_level=5),
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

    async def upsert(
        self, organization_id: str, variant_id: str, entry: StockInput
    ) -> StockRecord:
        """Insert or replace the stock row of a variant in one country.

        When stock is not managed the stored level is the unlimited
        sentinel, whatever level the caller sent.

        Args:
            organization_id: Tenant id.
            variant_id: Variant to stock.
            entry: Stock input.

        Returns:
            The persisted record.

        Raises:
            VariantNotFoundError: If the variant is absent from the tenant.
            ValidationError: On a bad country code or negative level.
        """
        org = require_tenant(organization_id)
        (entry,) = normalize_stock([entry])
        async with self.store.transaction() as uow:
            if await uow.variants.get(org, variant_id) is None:
                raise VariantNotFoundError(variant_id)
            record = await write_stock(uow, org, variant_id, entry)

        logger.info(
            "Stock upserted",
            organization_id=org,
            variant_id=variant_id,
            country_code=record.country_code,
            stock_level=str(record.level),
            request_id=self.request_id,
        )
        return record

    async def list_for_variant(self, organization_id: str, variant_id: str) -> list[StockRecord]:
        """List the stock rows of a variant, ordered by country.

        Raises:
            VariantNotFoundError: If the variant is absent from the tenant.
        """
        org = require_tenant(organization_id)
        async with self.store.reader() as uow:
            if await uow.variants.get(org, variant_id) is None:
                raise VariantNotFoundError(variant_id)
            return await uow.stock.list_for_variants(org, [variant_id])


# ============================================================================
# Service Factory
# ============================================================================


def get_stock_ledger(request_id: str | None = None) -> StockLedger:
    """Get stock ledger instance.

    Args:
        request_id: Request ID for correlation.

    Returns:
        StockLedger instance.
    """
    return StockLedger(request_id=request_id)
