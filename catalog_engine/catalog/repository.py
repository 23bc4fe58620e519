"""SQLAlchemy catalog store.

Implements the repository ports on top of the async session factory.
One ``transaction()`` is one database transaction; any SQLAlchemy
failure inside it rolls back and surfaces as ``CatalogStorageError``.
"""

from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from typing import Any, Generic, TypeVar

import structlog
from sqlalchemy import and_, delete, func, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

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
from catalog_engine.infrastructure.database import async_session_factory
from catalog_engine.infrastructure.models import (
    AttributeAssignmentModel,
    AttributeModel,
    CategoryAssignmentModel,
    CategoryModel,
    ProductModel,
    ProductTermModel,
    StockModel,
    TermModel,
    VariantModel,
    VariantTermModel,
)

logger = structlog.get_logger()

E = TypeVar("E")


class _SqlRepository(Generic[E]):
    """Shared statements for one table.

    Subclasses set ``model`` and implement ``_values`` to map an entity
    onto column values.
    """

    model: Any = None

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    def _values(self, entity: E) -> dict[str, Any]:
        raise NotImplementedError

    def _scope(self, organization_id: str) -> Any:
        return self.model.organization_id == organization_id

    async def _fetch(self, *conditions: Any, order_by: Sequence[Any] = ()) -> list[E]:
        query = (
            select(self.model)
            .where(and_(*conditions))
            .execution_options(populate_existing=True)
        )
        if order_by:
            query = query.order_by(*order_by)
        result = await self.session.execute(query)
        return [row.to_entity() for row in result.scalars().all()]

    async def _count(self, *conditions: Any) -> int:
        query = select(func.count()).select_from(self.model).where(and_(*conditions))
        result = await self.session.execute(query)
        return int(result.scalar_one())

    async def get(self, organization_id: str, entity_id: str) -> E | None:
        rows = await self._fetch(self.model.id == entity_id, self._scope(organization_id))
        return rows[0] if rows else None

    async def add(self, entity: E) -> E:
        self.session.add(self.model(**self._values(entity)))
        await self.session.flush()
        return entity

    async def update(self, entity: E) -> E:
        values = self._values(entity)
        entity_id = values.pop("id")
        await self.session.execute(
            update(self.model)
            .where(self.model.id == entity_id, self._scope(values["organization_id"]))
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return entity

    async def delete(self, organization_id: str, ids: Sequence[str]) -> int:
        if not ids:
            return 0
        result = await self.session.execute(
            delete(self.model)
            .where(self.model.id.in_(list(ids)), self._scope(organization_id))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0


# ============================================================================
# Registry Repositories
# ============================================================================


class SqlAttributeRepository(_SqlRepository[Attribute]):
    model = AttributeModel

    def _values(self, attribute: Attribute) -> dict[str, Any]:
        return {
            "id": attribute.id,
            "organization_id": attribute.organization_id,
            "name": attribute.name,
            "slug": attribute.slug,
        }

    async def list_all(self, organization_id: str) -> list[Attribute]:
        return await self._fetch(self._scope(organization_id), order_by=[AttributeModel.name])

    async def list_by_ids(self, organization_id: str, ids: Sequence[str]) -> list[Attribute]:
        if not ids:
            return []
        return await self._fetch(self._scope(organization_id), AttributeModel.id.in_(list(ids)))

    async def find_by_slug(
        self, organization_id: str, slug: str, exclude_id: str | None = None
    ) -> Attribute | None:
        conditions = [self._scope(organization_id), AttributeModel.slug == slug]
        if exclude_id is not None:
            conditions.append(AttributeModel.id != exclude_id)
        rows = await self._fetch(*conditions)
        return rows[0] if rows else None

    async def delete(self, organization_id: str, attribute_id: str) -> int:  # type: ignore[override]
        return await super().delete(organization_id, [attribute_id])


class SqlTermRepository(_SqlRepository[Term]):
    model = TermModel

    def _values(self, term: Term) -> dict[str, Any]:
        return {
            "id": term.id,
            "organization_id": term.organization_id,
            "attribute_id": term.attribute_id,
            "name": term.name,
            "slug": term.slug,
        }

    async def list_for_attribute(self, organization_id: str, attribute_id: str) -> list[Term]:
        return await self._fetch(
            self._scope(organization_id),
            TermModel.attribute_id == attribute_id,
            order_by=[TermModel.name],
        )

    async def list_by_ids(self, organization_id: str, ids: Sequence[str]) -> list[Term]:
        if not ids:
            return []
        return await self._fetch(self._scope(organization_id), TermModel.id.in_(list(ids)))

    async def find_by_slug(
        self,
        organization_id: str,
        attribute_id: str,
        slug: str,
        exclude_id: str | None = None,
    ) -> Term | None:
        conditions = [
            self._scope(organization_id),
            TermModel.attribute_id == attribute_id,
            TermModel.slug == slug,
        ]
        if exclude_id is not None:
            conditions.append(TermModel.id != exclude_id)
        rows = await self._fetch(*conditions)
        return rows[0] if rows else None

    async def delete_for_attribute(self, organization_id: str, attribute_id: str) -> int:
        result = await self.session.execute(
            delete(TermModel)
            .where(self._scope(organization_id), TermModel.attribute_id == attribute_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0


class SqlCategoryRepository(_SqlRepository[Category]):
    model = CategoryModel

    def _values(self, category: Category) -> dict[str, Any]:
        return {
            "id": category.id,
            "organization_id": category.organization_id,
            "name": category.name,
            "slug": category.slug,
            "image": category.image,
            "parent_id": category.parent_id,
        }

    async def list_all(self, organization_id: str) -> list[Category]:
        return await self._fetch(self._scope(organization_id), order_by=[CategoryModel.name])

    async def list_by_ids(self, organization_id: str, ids: Sequence[str]) -> list[Category]:
        if not ids:
            return []
        return await self._fetch(self._scope(organization_id), CategoryModel.id.in_(list(ids)))

    async def list_children(self, organization_id: str, category_id: str) -> list[Category]:
        return await self._fetch(
            self._scope(organization_id),
            CategoryModel.parent_id == category_id,
            order_by=[CategoryModel.name],
        )

    async def find_by_slug(
        self, organization_id: str, slug: str, exclude_id: str | None = None
    ) -> Category | None:
        conditions = [self._scope(organization_id), CategoryModel.slug == slug]
        if exclude_id is not None:
            conditions.append(CategoryModel.id != exclude_id)
        rows = await self._fetch(*conditions)
        return rows[0] if rows else None

    async def delete(self, organization_id: str, category_id: str) -> int:  # type: ignore[override]
        return await super().delete(organization_id, [category_id])


# ============================================================================
# Product Repositories
# ============================================================================


class SqlProductRepository(_SqlRepository[Product]):
    model = ProductModel

    def _values(self, product: Product) -> dict[str, Any]:
        return {
            "id": product.id,
            "organization_id": product.organization_id,
            "name": product.name,
            "description": product.description,
            "type": product.type.value,
            "sku": product.sku,
            "price": product.price,
            "status": product.status.value,
            "image_url": product.image_url,
            "created_at": product.created_at,
            "updated_at": product.updated_at,
        }

    async def get_by_sku(self, organization_id: str, sku: str) -> Product | None:
        rows = await self._fetch(
            self._scope(organization_id),
            ProductModel.sku == sku,
            order_by=[ProductModel.created_at.asc()],
        )
        return rows[0] if rows else None

    async def list_all(self, organization_id: str) -> list[Product]:
        return await self._fetch(
            self._scope(organization_id), order_by=[ProductModel.created_at.desc()]
        )

    async def delete(self, organization_id: str, product_id: str) -> int:  # type: ignore[override]
        return await super().delete(organization_id, [product_id])


class SqlCategoryAssignmentRepository(_SqlRepository[CategoryAssignment]):
    model = CategoryAssignmentModel

    def _values(self, assignment: CategoryAssignment) -> dict[str, Any]:
        return {
            "id": assignment.id,
            "organization_id": assignment.organization_id,
            "product_id": assignment.product_id,
            "category_id": assignment.category_id,
        }

    async def list_for_products(
        self, organization_id: str, product_ids: Sequence[str]
    ) -> list[CategoryAssignment]:
        if not product_ids:
            return []
        return await self._fetch(
            self._scope(organization_id),
            CategoryAssignmentModel.product_id.in_(list(product_ids)),
        )

    async def delete_for_category(self, organization_id: str, category_id: str) -> int:
        result = await self.session.execute(
            delete(CategoryAssignmentModel)
            .where(
                self._scope(organization_id),
                CategoryAssignmentModel.category_id == category_id,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0


class SqlAttributeAssignmentRepository(_SqlRepository[AttributeAssignment]):
    model = AttributeAssignmentModel

    def _values(self, assignment: AttributeAssignment) -> dict[str, Any]:
        return {
            "id": assignment.id,
            "organization_id": assignment.organization_id,
            "product_id": assignment.product_id,
            "attribute_id": assignment.attribute_id,
            "used_for_variation": assignment.used_for_variation,
        }

    async def list_for_product(
        self, organization_id: str, product_id: str
    ) -> list[AttributeAssignment]:
        return await self._fetch(
            self._scope(organization_id),
            AttributeAssignmentModel.product_id == product_id,
        )

    async def count_for_attribute(self, organization_id: str, attribute_id: str) -> int:
        return await self._count(
            self._scope(organization_id),
            AttributeAssignmentModel.attribute_id == attribute_id,
        )


class SqlProductTermRepository(_SqlRepository[ProductTerm]):
    model = ProductTermModel

    def _values(self, product_term: ProductTerm) -> dict[str, Any]:
        return {
            "id": product_term.id,
            "organization_id": product_term.organization_id,
            "product_id": product_term.product_id,
            "attribute_id": product_term.attribute_id,
            "term_id": product_term.term_id,
        }

    async def list_for_product(self, organization_id: str, product_id: str) -> list[ProductTerm]:
        return await self._fetch(
            self._scope(organization_id), ProductTermModel.product_id == product_id
        )

    async def count_for_terms(self, organization_id: str, term_ids: Sequence[str]) -> int:
        if not term_ids:
            return 0
        return await self._count(
            self._scope(organization_id), ProductTermModel.term_id.in_(list(term_ids))
        )


class SqlVariantRepository(_SqlRepository[Variant]):
    model = VariantModel

    def _values(self, variant: Variant) -> dict[str, Any]:
        return {
            "id": variant.id,
            "organization_id": variant.organization_id,
            "product_id": variant.product_id,
            "sku": variant.sku,
            "price": variant.price,
            "image_url": variant.image_url,
            "position": variant.position,
            "created_at": variant.created_at,
            "updated_at": variant.updated_at,
        }

    async def list_for_products(
        self, organization_id: str, product_ids: Sequence[str]
    ) -> list[Variant]:
        if not product_ids:
            return []
        return await self._fetch(
            self._scope(organization_id),
            VariantModel.product_id.in_(list(product_ids)),
            order_by=[VariantModel.position, VariantModel.id],
        )


class SqlVariantTermRepository(_SqlRepository[VariantTerm]):
    model = VariantTermModel

    def _values(self, variant_term: VariantTerm) -> dict[str, Any]:
        return {
            "id": variant_term.id,
            "organization_id": variant_term.organization_id,
            "variant_id": variant_term.variant_id,
            "attribute_id": variant_term.attribute_id,
            "term_id": variant_term.term_id,
        }

    async def list_for_variants(
        self, organization_id: str, variant_ids: Sequence[str]
    ) -> list[VariantTerm]:
        if not variant_ids:
            return []
        return await self._fetch(
            self._scope(organization_id), VariantTermModel.variant_id.in_(list(variant_ids))
        )

    async def count_for_terms(self, organization_id: str, term_ids: Sequence[str]) -> int:
        if not term_ids:
            return 0
        return await self._count(
            self._scope(organization_id), VariantTermModel.term_id.in_(list(term_ids))
        )


class SqlStockRepository(_SqlRepository[StockRecord]):
    model = StockModel

    def _values(self, record: StockRecord) -> dict[str, Any]:
        return {
            "id": record.id,
            "organization_id": record.organization_id,
            "variant_id": record.variant_id,
            "country_code": record.country_code,
            "stock_level": record.stock_level,
            "visibility": record.visibility,
            "manage_stock": record.manage_stock,
            "allow_backorder": record.allow_backorder,
        }

    async def list_for_variants(
        self, organization_id: str, variant_ids: Sequence[str]
    ) -> list[StockRecord]:
        if not variant_ids:
            return []
        return await self._fetch(
            self._scope(organization_id),
            StockModel.variant_id.in_(list(variant_ids)),
            order_by=[StockModel.variant_id, StockModel.country_code],
        )

    async def upsert(self, record: StockRecord) -> StockRecord:
        """Insert a stock row or update the one for the same variant and country.

        Args:
            record: Stock record to persist.

        Returns:
            The persisted record, with the existing id on conflict.
        """
        statement = pg_insert(StockModel).values(**self._values(record))
        statement = statement.on_conflict_do_update(
            index_elements=[StockModel.variant_id, StockModel.country_code],
            set_={
                "stock_level": statement.excluded.stock_level,
                "visibility": statement.excluded.visibility,
                "manage_stock": statement.excluded.manage_stock,
                "allow_backorder": statement.excluded.allow_backorder,
            },
        ).returning(StockModel)
        result = await self.session.execute(
            statement, execution_options={"populate_existing": True}
        )
        return result.scalar_one().to_entity()


# ============================================================================
# Unit of Work and Store
# ============================================================================


class SqlAlchemyUnitOfWork:
    """Repositories sharing one session."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.attributes = SqlAttributeRepository(session)
        self.terms = SqlTermRepository(session)
        self.categories = SqlCategoryRepository(session)
        self.products = SqlProductRepository(session)
        self.category_assignments = SqlCategoryAssignmentRepository(session)
        self.attribute_assignments = SqlAttributeAssignmentRepository(session)
        self.product_terms = SqlProductTermRepository(session)
        self.variants = SqlVariantRepository(session)
        self.variant_terms = SqlVariantTermRepository(session)
        self.stock = SqlStockRepository(session)


class SqlAlchemyCatalogStore:
    """PostgreSQL-backed catalog store.

    Example usage:
        store = SqlAlchemyCatalogStore()
        async with store.transaction() as uow:
            product = await uow.products.get("org-1", product_id)
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None = None) -> None:
        self._session_factory = session_factory or async_session_factory

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[SqlAlchemyUnitOfWork]:
        """Open a session and run the block in one database transaction.

        Yields:
            Unit of work bound to the session.

        Raises:
            CatalogStorageError: If the database rejects any statement.
        """
        async with self._session_factory() as session:
            try:
                async with session.begin():
                    yield SqlAlchemyUnitOfWork(session)
            except SQLAlchemyError as e:
                logger.error("Catalog transaction failed", error=str(e))
                raise CatalogStorageError(
                    "Catalog storage failure", details={"reason": type(e).__name__}
                ) from e

    @asynccontextmanager
    async def reader(self) -> AsyncIterator[SqlAlchemyUnitOfWork]:
        """Open a session for read-only queries.

        Yields:
            Unit of work bound to the session.
        """
        async with self._session_factory() as session:
            try:
                yield SqlAlchemyUnitOfWork(session)
            except SQLAlchemyError as e:
                logger.error("Catalog read failed", error=str(e))
                raise CatalogStorageError(
                    "Catalog storage failure", details={"reason": type(e).__name__}
                ) from e
