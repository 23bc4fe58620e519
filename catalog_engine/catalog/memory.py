"""In-memory catalog store.

Implements the repository ports over plain dictionaries. Transactions
are copy-on-write: a transaction works on its own copy of every table
and swaps it in on commit, so the last committer wins and a failed
transaction leaves nothing behind. Unique constraints mirror the SQL
schema.

Used by the test suite and by ``CATALOG_BACKEND=memory``.
"""

import copy
from collections.abc import AsyncIterator, Callable, Hashable, Sequence
from contextlib import asynccontextmanager
from typing import Any, Generic, TypeVar

import structlog

from catalog_engine.domain import (
    Attribute,
    AttributeAssignment,
    Category,
    CategoryAssignment,
    Product,
    ProductTerm,
    StockRecord,
    Term,
    Variant,
    VariantTerm,
)
from catalog_engine.domain.exceptions import CatalogStorageError

logger = structlog.get_logger()

E = TypeVar("E", bound=Any)

TABLE_NAMES = (
    "attributes",
    "terms",
    "categories",
    "products",
    "category_assignments",
    "attribute_assignments",
    "product_terms",
    "variants",
    "variant_terms",
    "stock",
)

Tables = dict[str, dict[str, Any]]


# ============================================================================
# Generic Table Repository
# ============================================================================


class _MemoryRepository(Generic[E]):
    """Shared row handling for one table.

    Rows are copied on the way in and out, so callers never hold a
    reference into stored state.
    """

    table: str = ""
    unique_key: Callable[[Any], Hashable] | None = None

    def __init__(self, tables: Tables) -> None:
        self._rows: dict[str, E] = tables[self.table]

    def _scoped(self, organization_id: str) -> list[E]:
        return [
            copy.copy(row)
            for row in self._rows.values()
            if row.organization_id == organization_id
        ]

    def _check_unique(self, entity: E) -> None:
        if self.unique_key is None:
            return
        key = self.unique_key(entity)
        for row in self._rows.values():
            if row.id != entity.id and self.unique_key(row) == key:
                raise CatalogStorageError(
                    f"Unique constraint violated on {self.table}",
                    details={"table": self.table, "key": list(key)},
                )

    async def get(self, organization_id: str, entity_id: str) -> E | None:
        row = self._rows.get(entity_id)
        if row is None or row.organization_id != organization_id:
            return None
        return copy.copy(row)

    async def add(self, entity: E) -> E:
        if entity.id in self._rows:
            raise CatalogStorageError(
                f"Duplicate primary key on {self.table}",
                details={"table": self.table, "id": entity.id},
            )
        self._check_unique(entity)
        self._rows[entity.id] = copy.copy(entity)
        return entity

    async def update(self, entity: E) -> E:
        existing = self._rows.get(entity.id)
        if existing is None or existing.organization_id != entity.organization_id:
            raise CatalogStorageError(
                f"Row to update not found on {self.table}",
                details={"table": self.table, "id": entity.id},
            )
        self._check_unique(entity)
        self._rows[entity.id] = copy.copy(entity)
        return entity

    async def delete(self, organization_id: str, ids: Sequence[str]) -> int:
        deleted = 0
        for entity_id in ids:
            row = self._rows.get(entity_id)
            if row is not None and row.organization_id == organization_id:
                del self._rows[entity_id]
                deleted += 1
        return deleted


# ============================================================================
# Registry Repositories
# ============================================================================


class InMemoryAttributeRepository(_MemoryRepository[Attribute]):
    table = "attributes"
    unique_key = staticmethod(lambda a: (a.organization_id, a.slug))

    async def list_all(self, organization_id: str) -> list[Attribute]:
        return sorted(self._scoped(organization_id), key=lambda a: a.name)

    async def list_by_ids(self, organization_id: str, ids: Sequence[str]) -> list[Attribute]:
        wanted = set(ids)
        return [a for a in self._scoped(organization_id) if a.id in wanted]

    async def find_by_slug(
        self, organization_id: str, slug: str, exclude_id: str | None = None
    ) -> Attribute | None:
        for attribute in self._scoped(organization_id):
            if attribute.slug == slug and attribute.id != exclude_id:
                return attribute
        return None

    async def delete(self, organization_id: str, attribute_id: str) -> int:  # type: ignore[override]
        return await super().delete(organization_id, [attribute_id])


class InMemoryTermRepository(_MemoryRepository[Term]):
    table = "terms"
    unique_key = staticmethod(lambda t: (t.organization_id, t.attribute_id, t.slug))

    async def list_for_attribute(self, organization_id: str, attribute_id: str) -> list[Term]:
        terms = [t for t in self._scoped(organization_id) if t.attribute_id == attribute_id]
        return sorted(terms, key=lambda t: t.name)

    async def list_by_ids(self, organization_id: str, ids: Sequence[str]) -> list[Term]:
        wanted = set(ids)
        return [t for t in self._scoped(organization_id) if t.id in wanted]

    async def find_by_slug(
        self,
        organization_id: str,
        attribute_id: str,
        slug: str,
        exclude_id: str | None = None,
    ) -> Term | None:
        for term in self._scoped(organization_id):
            if term.attribute_id == attribute_id and term.slug == slug and term.id != exclude_id:
                return term
        return None

    async def delete_for_attribute(self, organization_id: str, attribute_id: str) -> int:
        ids = [t.id for t in self._scoped(organization_id) if t.attribute_id == attribute_id]
        return await self.delete(organization_id, ids)


class InMemoryCategoryRepository(_MemoryRepository[Category]):
    table = "categories"
    unique_key = staticmethod(lambda c: (c.organization_id, c.slug))

    async def list_all(self, organization_id: str) -> list[Category]:
        return sorted(self._scoped(organization_id), key=lambda c: c.name)

    async def list_by_ids(self, organization_id: str, ids: Sequence[str]) -> list[Category]:
        wanted = set(ids)
        return [c for c in self._scoped(organization_id) if c.id in wanted]

    async def list_children(self, organization_id: str, category_id: str) -> list[Category]:
        return [c for c in self._scoped(organization_id) if c.parent_id == category_id]

    async def find_by_slug(
        self, organization_id: str, slug: str, exclude_id: str | None = None
    ) -> Category | None:
        for category in self._scoped(organization_id):
            if category.slug == slug and category.id != exclude_id:
                return category
        return None

    async def delete(self, organization_id: str, category_id: str) -> int:  # type: ignore[override]
        return await super().delete(organization_id, [category_id])


# ============================================================================
# Product Repositories
# ============================================================================


class InMemoryProductRepository(_MemoryRepository[Product]):
    table = "products"

    async def get_by_sku(self, organization_id: str, sku: str) -> Product | None:
        matches = [p for p in self._scoped(organization_id) if p.sku == sku]
        matches.sort(key=lambda p: p.created_at)
        return matches[0] if matches else None

    async def list_all(self, organization_id: str) -> list[Product]:
        return sorted(self._scoped(organization_id), key=lambda p: p.created_at, reverse=True)

    async def delete(self, organization_id: str, product_id: str) -> int:  # type: ignore[override]
        return await super().delete(organization_id, [product_id])


class InMemoryCategoryAssignmentRepository(_MemoryRepository[CategoryAssignment]):
    table = "category_assignments"
    unique_key = staticmethod(lambda a: (a.product_id, a.category_id))

    async def list_for_products(
        self, organization_id: str, product_ids: Sequence[str]
    ) -> list[CategoryAssignment]:
        wanted = set(product_ids)
        return [a for a in self._scoped(organization_id) if a.product_id in wanted]

    async def delete_for_category(self, organization_id: str, category_id: str) -> int:
        ids = [a.id for a in self._scoped(organization_id) if a.category_id == category_id]
        return await self.delete(organization_id, ids)


class InMemoryAttributeAssignmentRepository(_MemoryRepository[AttributeAssignment]):
    table = "attribute_assignments"
    unique_key = staticmethod(lambda a: (a.product_id, a.attribute_id))

    async def list_for_product(
        self, organization_id: str, product_id: str
    ) -> list[AttributeAssignment]:
        return [a for a in self._scoped(organization_id) if a.product_id == product_id]

    async def count_for_attribute(self, organization_id: str, attribute_id: str) -> int:
        return sum(1 for a in self._scoped(organization_id) if a.attribute_id == attribute_id)


class InMemoryProductTermRepository(_MemoryRepository[ProductTerm]):
    table = "product_terms"
    unique_key = staticmethod(lambda t: (t.product_id, t.term_id))

    async def list_for_product(self, organization_id: str, product_id: str) -> list[ProductTerm]:
        return [t for t in self._scoped(organization_id) if t.product_id == product_id]

    async def count_for_terms(self, organization_id: str, term_ids: Sequence[str]) -> int:
        wanted = set(term_ids)
        return sum(1 for t in self._scoped(organization_id) if t.term_id in wanted)


class InMemoryVariantRepository(_MemoryRepository[Variant]):
    table = "variants"

    async def list_for_products(
        self, organization_id: str, product_ids: Sequence[str]
    ) -> list[Variant]:
        wanted = set(product_ids)
        variants = [v for v in self._scoped(organization_id) if v.product_id in wanted]
        return sorted(variants, key=lambda v: (v.position, v.id))


class InMemoryVariantTermRepository(_MemoryRepository[VariantTerm]):
    table = "variant_terms"
    unique_key = staticmethod(lambda t: (t.variant_id, t.attribute_id))

    async def list_for_variants(
        self, organization_id: str, variant_ids: Sequence[str]
    ) -> list[VariantTerm]:
        wanted = set(variant_ids)
        return [t for t in self._scoped(organization_id) if t.variant_id in wanted]

    async def count_for_terms(self, organization_id: str, term_ids: Sequence[str]) -> int:
        wanted = set(term_ids)
        return sum(1 for t in self._scoped(organization_id) if t.term_id in wanted)


class InMemoryStockRepository(_MemoryRepository[StockRecord]):
    table = "stock"
    unique_key = staticmethod(lambda s: (s.variant_id, s.country_code))

    async def list_for_variants(
        self, organization_id: str, variant_ids: Sequence[str]
    ) -> list[StockRecord]:
        wanted = set(variant_ids)
        records = [s for s in self._scoped(organization_id) if s.variant_id in wanted]
        return sorted(records, key=lambda s: (s.variant_id, s.country_code))

    async def upsert(self, record: StockRecord) -> StockRecord:
        key = (record.variant_id, record.country_code)
        for existing in self._rows.values():
            if (existing.variant_id, existing.country_code) == key:
                merged = copy.copy(existing)
                merged.level = record.level
                merged.visibility = record.visibility
                merged.allow_backorder = record.allow_backorder
                self._rows[existing.id] = merged
                return copy.copy(merged)
        await self.add(record)
        return copy.copy(record)


# ============================================================================
# Unit of Work and Store
# ============================================================================


class InMemoryUnitOfWork:
    """Repositories bound to one set of tables."""

    def __init__(self, tables: Tables) -> None:
        self.attributes = InMemoryAttributeRepository(tables)
        self.terms = InMemoryTermRepository(tables)
        self.categories = InMemoryCategoryRepository(tables)
        self.products = InMemoryProductRepository(tables)
        self.category_assignments = InMemoryCategoryAssignmentRepository(tables)
        self.attribute_assignments = InMemoryAttributeAssignmentRepository(tables)
        self.product_terms = InMemoryProductTermRepository(tables)
        self.variants = InMemoryVariantRepository(tables)
        self.variant_terms = InMemoryVariantTermRepository(tables)
        self.stock = InMemoryStockRepository(tables)


class InMemoryCatalogStore:
    """Dictionary-backed catalog store.

    Example usage:
        store = InMemoryCatalogStore()
        async with store.transaction() as uow:
            await uow.attributes.add(attribute)
    """

    def __init__(self) -> None:
        self._tables: Tables = {name: {} for name in TABLE_NAMES}

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[InMemoryUnitOfWork]:
        """Run a block against a private copy of the tables.

        Yields:
            Unit of work over the working copy.
        """
        working: Tables = {name: dict(rows) for name, rows in self._tables.items()}
        try:
            yield InMemoryUnitOfWork(working)
        except BaseException:
            logger.debug("In-memory transaction rolled back")
            raise
        self._tables = working

    @asynccontextmanager
    async def reader(self) -> AsyncIterator[InMemoryUnitOfWork]:
        """Read committed state.

        Yields:
            Unit of work over the committed tables.
        """
        yield InMemoryUnitOfWork(self._tables)

    def rows(self, table: str) -> list[Any]:
        """Return copies of every committed row of a table.

        Args:
            table: One of ``TABLE_NAMES``.

        Returns:
            List of entity copies.
        """
        return [copy.copy(row) for row in self._tables[table].values()]

    def counts(self) -> dict[str, int]:
        """Return committed row counts per table."""
        return {name: len(rows) for name, rows in self._tables.items()}
