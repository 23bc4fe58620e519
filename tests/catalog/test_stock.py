"""Tests for the stock ledger."""

from decimal import Decimal

import pytest

from catalog_engine.catalog import (
    ProductPayload,
    StockInput,
    StockLedger,
    VariantSynchronizer,
)
from catalog_engine.catalog.payloads import normalize_stock
from catalog_engine.catalog.stock import StockTotals
from catalog_engine.domain import UNLIMITED_STOCK_SENTINEL, ProductType, StockLevel
from catalog_engine.domain.exceptions import ValidationError, VariantNotFoundError

ORG = "org-1"


async def _variant_id(synchronizer: VariantSynchronizer, store) -> str:
    await synchronizer.create(
        ORG, ProductPayload(name="Mug", type=ProductType.SIMPLE, price=Decimal("9.99"))
    )
    (variant,) = store.rows("variants")
    return variant.id


class TestNormalizeStock:
    """Tests for stock input normalization."""

    def test_last_entry_per_country_wins(self) -> None:
        """Duplicate countries collapse, case-insensitively."""
        entries = normalize_stock(
            [
                StockInput(country_code="us", stock_level=1),
                StockInput(country_code="DE", stock_level=2),
                StockInput(country_code="US", stock_level=9),
            ]
        )
        assert [(e.country_code, e.stock_level) for e in entries] == [("US", 9), ("DE", 2)]

    def test_negative_level_rejected(self) -> None:
        """Managed stock cannot be negative."""
        with pytest.raises(ValidationError):
            normalize_stock([StockInput(country_code="US", stock_level=-1)])

    def test_negative_level_ignored_when_unmanaged(self) -> None:
        """The level of unmanaged stock is never looked at."""
        (entry,) = normalize_stock(
            [StockInput(country_code="US", stock_level=-1, manage_stock=False)]
        )
        assert entry.level.is_unlimited


class TestStockTotals:
    """Tests for stock aggregation."""

    def test_unlimited_is_flagged_not_summed(self) -> None:
        """The sentinel never leaks into a total."""
        totals = StockTotals()
        totals.add(StockLevel.managed(5))
        totals.add(StockLevel.unlimited())
        totals.add(StockLevel.managed(2))
        assert totals.managed == 7
        assert totals.has_unlimited


class TestStockLedger:
    """Tests for StockLedger."""

    @pytest.mark.asyncio
    async def test_upsert_is_idempotent(
        self, ledger: StockLedger, synchronizer: VariantSynchronizer, store
    ) -> None:
        """Repeated upserts keep one row per country."""
        variant_id = await _variant_id(synchronizer, store)

        first = await ledger.upsert(ORG, variant_id, StockInput(country_code="us", stock_level=5))
        second = await ledger.upsert(ORG, variant_id, StockInput(country_code="US", stock_level=8))

        assert first.id == second.id
        records = await ledger.list_for_variant(ORG, variant_id)
        assert [(r.country_code, r.stock_level) for r in records] == [("US", 8)]

    @pytest.mark.asyncio
    async def test_unmanaged_stores_sentinel(
        self, ledger: StockLedger, synchronizer: VariantSynchronizer, store
    ) -> None:
        """Unmanaged stock is written as the sentinel whatever the input level."""
        variant_id = await _variant_id(synchronizer, store)

        record = await ledger.upsert(
            ORG,
            variant_id,
            StockInput(country_code="DE", stock_level=12, manage_stock=False),
        )

        assert record.manage_stock is False
        assert record.stock_level == UNLIMITED_STOCK_SENTINEL

    @pytest.mark.asyncio
    async def test_unknown_variant(self, ledger: StockLedger) -> None:
        """Stock can only be written for an existing variant of the tenant."""
        with pytest.raises(VariantNotFoundError):
            await ledger.upsert(ORG, "missing", StockInput(country_code="US"))

    @pytest.mark.asyncio
    async def test_foreign_variant(
        self, ledger: StockLedger, synchronizer: VariantSynchronizer, store
    ) -> None:
        """Another tenant's variant reads as not found."""
        variant_id = await _variant_id(synchronizer, store)
        with pytest.raises(VariantNotFoundError):
            await ledger.list_for_variant("org-2", variant_id)

    @pytest.mark.asyncio
    async def test_invalid_country(
        self, ledger: StockLedger, synchronizer: VariantSynchronizer, store
    ) -> None:
        """Country codes must be two letters."""
        variant_id = await _variant_id(synchronizer, store)
        with pytest.raises(ValidationError):
            await ledger.upsert(ORG, variant_id, StockInput(country_code="USA"))
