"""Category Tree Store.

Manages a tenant's category hierarchy. Slugs are unique per tenant,
parents must live in the same tenant, and a category can never become
its own ancestor.
"""

from dataclasses import dataclass, field

import structlog

from catalog_engine.catalog.ports import CatalogStore, CatalogUnitOfWork
from catalog_engine.catalog.store import get_catalog_store
from catalog_engine.domain import Category, new_id, require_tenant, slugify
from catalog_engine.domain.exceptions import (
    CategoryCycleError,
    CategoryHasChildrenError,
    CategoryNotFoundError,
    InvalidReferenceError,
    SlugAlreadyExistsError,
    ValidationError,
)

logger = structlog.get_logger()


# ============================================================================
# Tree Shapes
# ============================================================================


@dataclass
class CategoryNode:
    """Category with its nested children."""

    category: Category
    children: list["CategoryNode"] = field(default_factory=list)


@dataclass
class FlatCategory:
    """Category with its depth below the nearest root."""

    category: Category
    level: int


def _children_by_parent(
    categories: list[Category],
) -> tuple[list[Category], dict[str, list[Category]]]:
    ids = {c.id for c in categories}
    roots: list[Category] = []
    children: dict[str, list[Category]] = {}
    for category in sorted(categories, key=lambda c: (c.name, c.id)):
        if category.parent_id is None or category.parent_id not in ids:
            roots.append(category)
        else:
            children.setdefault(category.parent_id, []).append(category)
    return roots, children


def flatten_tree(categories: list[Category]) -> list[FlatCategory]:
    """Flatten categories depth-first, siblings ordered by name.

    Roots, and nodes whose parent is missing, are at level 0. Nodes
    caught in a parent cycle are emitted as extra roots so every
    category appears exactly once.

    Args:
        categories: All categories of one tenant.

    Returns:
        Flattened list with levels.
    """
    roots, children = _children_by_parent(categories)
    result: list[FlatCategory] = []
    visited: set[str] = set()

    def walk(category: Category, level: int) -> None:
        if category.id in visited:
            return
        visited.add(category.id)
        result.append(FlatCategory(category=category, level=level))
        for child in children.get(category.id, []):
            walk(child, level + 1)

    for root in roots:
        walk(root, 0)
    for category in sorted(categories, key=lambda c: (c.name, c.id)):
        walk(category, 0)
    return result


def build_tree(categories: list[Category]) -> list[CategoryNode]:
    """Nest categories under their parents.

    Args:
        categories: All categories of one tenant.

    Returns:
        Root nodes, each carrying its subtree.
    """
    nodes: dict[str, CategoryNode] = {}
    roots: list[CategoryNode] = []
    for flat in flatten_tree(categories):
        node = CategoryNode(category=flat.category)
        nodes[flat.category.id] = node
        parent = nodes.get(flat.category.parent_id or "")
        if flat.level == 0 or parent is None:
            roots.append(node)
        else:
            parent.children.append(node)
    return roots


# ============================================================================
# Category Tree Store
# ============================================================================


class CategoryTreeStore:
    """Service for the category hierarchy.

    Example usage:
        categories = get_category_store()
        apparel = await categories.create_category("org-1", name="Apparel")
        await categories.create_category("org-1", name="Shirts", parent_id=apparel.id)
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

    async def list_categories(self, organization_id: str) -> list[Category]:
        org = require_tenant(organization_id)
        async with self.store.reader() as uow:
            return await uow.categories.list_all(org)

    async def get_category(self, organization_id: str, category_id: str) -> Category:
        org = require_tenant(organization_id)
        async with self.store.reader() as uow:
            category = await uow.categories.get(org, category_id)
        if category is None:
            raise CategoryNotFoundError(category_id)
        return category

    async def get_tree(self, organization_id: str) -> list[CategoryNode]:
        return build_tree(await self.list_categories(organization_id))

    async def get_flat_tree(self, organization_id: str) -> list[FlatCategory]:
        return flatten_tree(await self.list_categories(organization_id))

    async def create_category(
        self,
        organization_id: str,
        name: str,
        slug: str | None = None,
        image: str | None = None,
        parent_id: str | None = None,
    ) -> Category:
        """Create a category.

        Args:
            organization_id: Tenant id.
            name: Display name.
            slug: URL slug; derived from the name when omitted.
            image: Image URL.
            parent_id: Parent category in the same tenant.

        Returns:
            The created category.

        Raises:
            SlugAlreadyExistsError: If the slug is taken in the tenant.
            InvalidReferenceError: If the parent is not in the tenant.
        """
        org = require_tenant(organization_id)
        name, slug = self._clean(name, slug)
        async with self.store.transaction() as uow:
            if await uow.categories.find_by_slug(org, slug) is not None:
                raise SlugAlreadyExistsError("Category", slug)
            if parent_id is not None and await uow.categories.get(org, parent_id) is None:
                raise InvalidReferenceError("Category", parent_id, "parent not found")
            category = await uow.categories.add(
                Category(
                    id=new_id(),
                    organization_id=org,
                    name=name,
                    slug=slug,
                    image=image,
                    parent_id=parent_id,
                )
            )

        logger.info(
            "Category created",
            organization_id=org,
            category_id=category.id,
            parent_id=parent_id,
            request_id=self.request_id,
        )
        return category

    async def update_category(
        self,
        organization_id: str,
        category_id: str,
        name: str,
        slug: str | None = None,
        image: str | None = None,
        parent_id: str | None = None,
    ) -> Category:
        """Replace a category's fields.

        Raises:
            CategoryNotFoundError: If absent from the tenant.
            SlugAlreadyExistsError: If the slug is taken.
            InvalidReferenceError: If the parent is not in the tenant.
            CategoryCycleError: If the parent is the category or a descendant.
        """
        org = require_tenant(organization_id)
        name, slug = self._clean(name, slug)
        async with self.store.transaction() as uow:
            category = await uow.categories.get(org, category_id)
            if category is None:
                raise CategoryNotFoundError(category_id)
            if await uow.categories.find_by_slug(org, slug, exclude_id=category_id):
                raise SlugAlreadyExistsError("Category", slug)
            if parent_id is not None:
                await self._check_parent(uow, org, category_id, parent_id)

            category.name = name
            category.slug = slug
            category.image = image
            category.parent_id = parent_id
            await uow.categories.update(category)

        logger.info(
            "Category updated",
            organization_id=org,
            category_id=category_id,
            parent_id=parent_id,
            request_id=self.request_id,
        )
        return category

    async def delete_category(self, organization_id: str, category_id: str) -> None:
        """Delete a leaf category and unlink it from products.

        Raises:
            CategoryNotFoundError: If absent from the tenant.
            CategoryHasChildrenError: If any category has it as parent.
        """
        org = require_tenant(organization_id)
        async with self.store.transaction() as uow:
            if await uow.categories.get(org, category_id) is None:
                raise CategoryNotFoundError(category_id)
            children = await uow.categories.list_children(org, category_id)
            if children:
                logger.warning(
                    "Category delete refused",
                    organization_id=org,
                    category_id=category_id,
                    child_count=len(children),
                    request_id=self.request_id,
                )
                raise CategoryHasChildrenError(category_id, len(children))
            unlinked = await uow.category_assignments.delete_for_category(org, category_id)
            await uow.categories.delete(org, category_id)

        logger.info(
            "Category deleted",
            organization_id=org,
            category_id=category_id,
            assignments_removed=unlinked,
            request_id=self.request_id,
        )

    async def category_slug_exists(
        self, organization_id: str, slug: str, exclude_id: str | None = None
    ) -> bool:
        org = require_tenant(organization_id)
        async with self.store.reader() as uow:
            return await uow.categories.find_by_slug(org, slug, exclude_id=exclude_id) is not None

    @staticmethod
    def _clean(name: str | None, slug: str | None) -> tuple[str, str]:
        cleaned = (name or "").strip()
        if not cleaned:
            raise ValidationError("Name is required", field="name")
        cleaned_slug = slugify(slug) if slug else slugify(cleaned)
        if not cleaned_slug:
            raise ValidationError("Slug is required", field="slug")
        return cleaned, cleaned_slug

    async def _check_parent(
        self,
        uow: CatalogUnitOfWork,
        organization_id: str,
        category_id: str,
        parent_id: str,
    ) -> None:
        if parent_id == category_id:
            raise CategoryCycleError(category_id, parent_id)
        parents = {c.id: c.parent_id for c in await uow.categories.list_all(organization_id)}
        if parent_id not in parents:
            raise InvalidReferenceError("Category", parent_id, "parent not found")

        # Walk up from the new parent; reaching the category means a cycle.
        seen: set[str] = set()
        current: str | None = parent_id
        while current is not None and current not in seen:
            if current == category_id:
                raise CategoryCycleError(category_id, parent_id)
            seen.add(current)
            current = parents.get(current)


# ============================================================================
# Service Factory
# ============================================================================


def get_category_store(request_id: str | None = None) -> CategoryTreeStore:
    """Get category tree store instance.

    Args:
        request_id: Request ID for correlation.

    Returns:
        CategoryTreeStore instance.
    """
    return CategoryTreeStore(request_id=request_id)
