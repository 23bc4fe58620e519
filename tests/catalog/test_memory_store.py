"""Tests for the in-memory catalog store."""

import pytest

from catalog_engine.catalog import InMemoryCatalogStore
from catalog_engine.domain import Attribute, StockLevel, StockRecord
from catalog_engine.domain.exceptions import CatalogStorageError


def _attribute(attribute_id: str, slug: str, org: str = "org-1") -> Attribute:
    return Attribute(id=attribute_id, organization_id=org, name=slug.title(), slug=slug)


class TestTransactions:
    """Tests for copy-on-write transactions."""

    @pytest.mark.asyncio
    async def test_commit_publishes_rows(self) -> None:
        """Rows written in a committed transaction become readable."""
        store = InMemoryCatalogStore()
        async with store.transaction() as uow:
            await uow.attributes.add(_attribute("a1", "color"))

        async with store.reader() as uow:
            assert (await uow.attributes.get("org-1", "a1")).slug == "color"

    @pytest.mark.asyncio
    async def test_failure_rolls_back(self) -> None:
        """An exception inside the block leaves committed state untouched."""
        store = InMemoryCatalogStore()
        with pytest.raises(RuntimeError):
            async with store.transaction() as uow:
                await uow.attributes.add(_attribute("a1", "color"))
                raise RuntimeError("boom")

        assert store.counts()["attributes"] == 0

    @pytest.mark.asyncio
    async def test_uncommitted_rows_are_invisible_to_readers(self) -> None:
        """Readers see committed state only."""
        store = InMemoryCatalogStore()
        async with store.transaction() as uow:
            await uow.attributes.add(_attribute("a1", "color"))
            async with store.reader() as reader:
                assert await reader.attributes.get("org-1", "a1") is None


class TestConstraints:
    """Tests for scoping and unique constraints."""

    @pytest.mark.asyncio
    async def test_unique_slug_per_tenant(self) -> None:
        """Two attributes of one tenant cannot share a slug."""
        store = InMemoryCatalogStore()
        with pytest.raises(CatalogStorageError):
            async with store.transaction() as uow:
                await uow.attributes.add(_attribute("a1", "color"))
                await uow.attributes.add(_attribute("a2", "color"))

    @pytest.mark.asyncio
    async def test_same_slug_in_other_tenant(self) -> None:
        """Slugs are scoped to the tenant."""
        store = InMemoryCatalogStore()
        async with store.transaction() as uow:
            await uow.attributes.add(_attribute("a1", "color"))
            await uow.attributes.add(_attribute("a2", "color", org="org-2"))

        assert store.counts()["attributes"] == 2

    @pytest.mark.asyncio
    async def test_reads_are_tenant_scoped(self) -> None:
        """A row of another tenant reads as absent."""
        store = InMemoryCatalogStore()
        async with store.transaction() as uow:
            await uow.attributes.add(_attribute("a1", "color", org="org-2"))

        async with store.reader() as uow:
            assert await uow.attributes.get("org-1", "a1") is None
            assert await uow.attributes.list_all("org-1") == []

    @pytest.mark.asyncio
    async def test_returned_rows_are_copies(self) -> None:
        """Mutating a fetched row does not change stored state."""
        store = InMemoryCatalogStore()
        async with store.transaction() as uow:
            await uow.attributes.add(_attribute("a1", "color"))

        async with store.reader() as uow:
            fetched = await uow.attributes.get("org-1", "a1")
            fetched.slug = "changed"
            assert (await uow.attributes.get("org-1", "a1")).slug == "color"

    @pytest.mark.asyncio
    async def test_stock_upsert_replaces_row(self) -> None:
        """Upserting the same (variant, country) keeps one row."""
        store = InMemoryCatalogStore()
        async with store.transaction() as uow:
            first = await uow.stock.upsert(
                StockRecord("s1", "org-1", "v1", "US", StockLevel.managed(3))
            )
            second = await uow.stock.upsert(
                StockRecord("s2", "org-1", "v1", "US", StockLevel.managed(8))
            )

        assert second.id == first.id
        rows = store.rows("stock")
        assert len(rows) == 1
        assert rows[0].level == StockLevel.managed(8)
