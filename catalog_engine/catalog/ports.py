"""Repository ports for catalog storage.

One repository per record kind, grouped into a unit of work. Every
method takes the tenant id explicitly and never returns rows owned by
another tenant. Two adapters implement these ports:
``InMemoryCatalogStore`` and ``SqlAlchemyCatalogStore``.
"""

from collections.abc import Sequence
from contextlib import AbstractAsyncContextManager
from typing import Protocol

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


class AttributeRepository(Protocol):
    async def get(self, organization_id: str, attribute_id: str) -> Attribute | None: ...

    async def list_all(self, organization_id: str) -> list[Attribute]: ...

    async def list_by_ids(self, organization_id: str, ids: Sequence[str]) -> list[Attribute]: ...

    async def find_by_slug(
        self, organization_id: str, slug: str, exclude_id: str | None = None
    ) -> Attribute | None: ...

    async def add(self, attribute: Attribute) -> Attribute: ...

    async def update(self, attribute: Attribute) -> Attribute: ...

    async def delete(self, organization_id: str, attribute_id: str) -> int: ...


class TermRepository(Protocol):
    async def get(self, organization_id: str, term_id: str) -> Term | None: ...

    async def list_for_attribute(self, organization_id: str, attribute_id: str) -> list[Term]: ...

    async def list_by_ids(self, organization_id: str, ids: Sequence[str]) -> list[Term]: ...

    async def find_by_slug(
        self,
        organization_id: str,
        attribute_id: str,
        slug: str,
        exclude_id: str | None = None,
    ) -> Term | None: ...

    async def add(self, term: Term) -> Term: ...

    async def update(self, term: Term) -> Term: ...

    async def delete(self, organization_id: str, ids: Sequence[str]) -> int: ...

    async def delete_for_attribute(self, organization_id: str, attribute_id: str) -> int: ...


class CategoryRepository(Protocol):
    async def get(self, organization_id: str, category_id: str) -> Category | None: ...

    async def list_all(self, organization_id: str) -> list[Category]: ...

    async def list_by_ids(self, organization_id: str, ids: Sequence[str]) -> list[Category]: ...

    async def list_children(self, organization_id: str, category_id: str) -> list[Category]: ...

    async def find_by_slug(
        self, organization_id: str, slug: str, exclude_id: str | None = None
    ) -> Category | None: ...

    async def add(self, category: Category) -> Category: ...

    async def update(self, category: Category) -> Category: ...

    async def delete(self, organization_id: str, category_id: str) -> int: ...


class ProductRepository(Protocol):
    async def get(self, organization_id: str, product_id: str) -> Product | None: ...

    async def get_by_sku(self, organization_id: str, sku: str) -> Product | None: ...

    async def list_all(self, organization_id: str) -> list[Product]: ...

    async def add(self, product: Product) -> Product: ...

    async def update(self, product: Product) -> Product: ...

    async def delete(self, organization_id: str, product_id: str) -> int: ...


class CategoryAssignmentRepository(Protocol):
    async def list_for_products(
        self, organization_id: str, product_ids: Sequence[str]
    ) -> list[CategoryAssignment]: ...

    async def add(self, assignment: CategoryAssignment) -> CategoryAssignment: ...

    async def delete(self, organization_id: str, ids: Sequence[str]) -> int: ...

    async def delete_for_category(self, organization_id: str, category_id: str) -> int: ...


class AttributeAssignmentRepository(Protocol):
    async def list_for_product(
        self, organization_id: str, product_id: str
    ) -> list[AttributeAssignment]: ...

    async def count_for_attribute(self, organization_id: str, attribute_id: str) -> int: ...

    async def add(self, assignment: AttributeAssignment) -> AttributeAssignment: ...

    async def update(self, assignment: AttributeAssignment) -> AttributeAssignment: ...

    async def delete(self, organization_id: str, ids: Sequence[str]) -> int: ...


class ProductTermRepository(Protocol):
    async def list_for_product(self, organization_id: str, product_id: str) -> list[ProductTerm]: ...

    async def count_for_terms(self, organization_id: str, term_ids: Sequence[str]) -> int: ...

    async def add(self, product_term: ProductTerm) -> ProductTerm: ...

    async def delete(self, organization_id: str, ids: Sequence[str]) -> int: ...


class VariantRepository(Protocol):
    async def get(self, organization_id: str, variant_id: str) -> Variant | None: ...

    async def list_for_products(
        self, organization_id: str, product_ids: Sequence[str]
    ) -> list[Variant]: ...

    async def add(self, variant: Variant) -> Variant: ...

    async def update(self, variant: Variant) -> Variant: ...

    async def delete(self, organization_id: str, ids: Sequence[str]) -> int: ...


class VariantTermRepository(Protocol):
    async def list_for_variants(
        self, organization_id: str, variant_ids: Sequence[str]
    ) -> list[VariantTerm]: ...

    async def count_for_terms(self, organization_id: str, term_ids: Sequence[str]) -> int: ...

    async def add(self, variant_term: VariantTerm) -> VariantTerm: ...

    async def update(self, variant_term: VariantTerm) -> VariantTerm: ...

    async def delete(self, organization_id: str, ids: Sequence[str]) -> int: ...


class StockRepository(Protocol):
    async def list_for_variants(
        self, organization_id: str, variant_ids: Sequence[str]
    ) -> list[StockRecord]: ...

    async def upsert(self, record: StockRecord) -> StockRecord:
        """Insert, or update the row with the same (variant_id, country_code).

        Returns the persisted row, keeping the existing id on conflict.
        """
        ...

    async def delete(self, organization_id: str, ids: Sequence[str]) -> int: ...


class CatalogUnitOfWork(Protocol):
    """All repositories bound to one session or transaction."""

    attributes: AttributeRepository
    terms: TermRepository
    categories: CategoryRepository
    products: ProductRepository
    category_assignments: CategoryAssignmentRepository
    attribute_assignments: AttributeAssignmentRepository
    product_terms: ProductTermRepository
    variants: VariantRepository
    variant_terms: VariantTermRepository
    stock: StockRepository


class CatalogStore(Protocol):
    """Entry point to catalog storage.

    ``transaction()`` commits when the block exits normally and rolls
    back everything when it raises. ``reader()`` is for read-only
    multi-query assemblies and takes no transaction.
    """

    def transaction(self) -> AbstractAsyncContextManager[CatalogUnitOfWork]: ...

    def reader(self) -> AbstractAsyncContextManager[CatalogUnitOfWork]: ...
