"""Term Registry.

Manages a tenant's attributes and their terms. Slugs are unique per
tenant for attributes and per attribute for terms. Registry entries are
referenced by products but never owned by them, so deletes are refused
while products still use an entry.
"""

from collections.abc import Sequence

import structlog

from catalog_engine.catalog.ports import CatalogStore, CatalogUnitOfWork
from catalog_engine.catalog.store import get_catalog_store
from catalog_engine.domain import Attribute, Term, new_id, require_tenant, slugify
from catalog_engine.domain.exceptions import (
    AttributeNotFoundError,
    ResourceInUseError,
    SlugAlreadyExistsError,
    TermNotFoundError,
    ValidationError,
)

logger = structlog.get_logger()


def _clean_name(name: str | None) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError("Name is required", field="name")
    return cleaned


def _clean_slug(slug: str | None, name: str) -> str:
    cleaned = slugify(slug) if slug else slugify(name)
    if not cleaned:
        raise ValidationError("Slug is required", field="slug")
    return cleaned


class TermRegistry:
    """Service for attributes and attribute terms.

    Example usage:
        registry = get_term_registry()
        color = await registry.create_attribute("org-1", name="Color")
        red = await registry.create_term("org-1", color.id, name="Red")
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
    # Attributes
    # ------------------------------------------------------------------

    async def list_attributes(self, organization_id: str) -> list[Attribute]:
        org = require_tenant(organization_id)
        async with self.store.reader() as uow:
            return await uow.attributes.list_all(org)

    async def get_attribute(self, organization_id: str, attribute_id: str) -> Attribute:
        """Get an attribute by ID.

        Raises:
            AttributeNotFoundError: If absent from the tenant.
        """
        org = require_tenant(organization_id)
        async with self.store.reader() as uow:
            attribute = await uow.attributes.get(org, attribute_id)
        if attribute is None:
            raise AttributeNotFoundError(attribute_id)
        return attribute

    async def create_attribute(
        self, organization_id: str, name: str, slug: str | None = None
    ) -> Attribute:
        """Create an attribute.

        Args:
            organization_id: Tenant id.
            name: Display name.
            slug: URL slug; derived from the name when omitted.

        Returns:
            The created attribute.

        Raises:
            SlugAlreadyExistsError: If the slug is taken in the tenant.
        """
        org = require_tenant(organization_id)
        name = _clean_name(name)
        slug = _clean_slug(slug, name)
        async with self.store.transaction() as uow:
            if await uow.attributes.find_by_slug(org, slug) is not None:
                raise SlugAlreadyExistsError("Attribute", slug)
            attribute = await uow.attributes.add(
                Attribute(id=new_id(), organization_id=org, name=name, slug=slug)
            )

        logger.info(
            "Attribute created",
            organization_id=org,
            attribute_id=attribute.id,
            slug=slug,
            request_id=self.request_id,
        )
        return attribute

    async def update_attribute(
        self,
        organization_id: str,
        attribute_id: str,
        name: str | None = None,
        slug: str | None = None,
    ) -> Attribute:
        """Rename an attribute or change its slug.

        Raises:
            AttributeNotFoundError: If absent from the tenant.
            SlugAlreadyExistsError: If the new slug is taken.
        """
        org = require_tenant(organization_id)
        async with self.store.transaction() as uow:
            attribute = await uow.attributes.get(org, attribute_id)
            if attribute is None:
                raise AttributeNotFoundError(attribute_id)
            if name is not None:
                attribute.name = _clean_name(name)
            if slug is not None:
                attribute.slug = _clean_slug(slug, attribute.name)
                if await uow.attributes.find_by_slug(org, attribute.slug, exclude_id=attribute_id):
                    raise SlugAlreadyExistsError("Attribute", attribute.slug)
            await uow.attributes.update(attribute)

        logger.info(
            "Attribute updated",
            organization_id=org,
            attribute_id=attribute_id,
            request_id=self.request_id,
        )
        return attribute

    async def delete_attribute(self, organization_id: str, attribute_id: str) -> None:
        """Delete an attribute and all of its terms.

        Raises:
            AttributeNotFoundError: If absent from the tenant.
            ResourceInUseError: If any product has the attribute assigned.
        """
        org = require_tenant(organization_id)
        async with self.store.transaction() as uow:
            if await uow.attributes.get(org, attribute_id) is None:
                raise AttributeNotFoundError(attribute_id)
            usage = await uow.attribute_assignments.count_for_attribute(org, attribute_id)
            if usage:
                logger.warning(
                    "Attribute delete refused",
                    organization_id=org,
                    attribute_id=attribute_id,
                    usage_count=usage,
                    request_id=self.request_id,
                )
                raise ResourceInUseError("Attribute", attribute_id, usage)
            terms_deleted = await uow.terms.delete_for_attribute(org, attribute_id)
            await uow.attributes.delete(org, attribute_id)

        logger.info(
            "Attribute deleted",
            organization_id=org,
            attribute_id=attribute_id,
            terms_deleted=terms_deleted,
            request_id=self.request_id,
        )

    async def attribute_slug_exists(
        self, organization_id: str, slug: str, exclude_id: str | None = None
    ) -> bool:
        org = require_tenant(organization_id)
        async with self.store.reader() as uow:
            return await uow.attributes.find_by_slug(org, slug, exclude_id=exclude_id) is not None

    # ------------------------------------------------------------------
    # Terms
    # ------------------------------------------------------------------

    async def list_terms(self, organization_id: str, attribute_id: str) -> list[Term]:
        """List the terms of an attribute, ordered by name.

        Raises:
            AttributeNotFoundError: If the attribute is absent from the tenant.
        """
        org = require_tenant(organization_id)
        async with self.store.reader() as uow:
            if await uow.attributes.get(org, attribute_id) is None:
                raise AttributeNotFoundError(attribute_id)
            return await uow.terms.list_for_attribute(org, attribute_id)

    async def create_term(
        self,
        organization_id: str,
        attribute_id: str,
        name: str,
        slug: str | None = None,
    ) -> Term:
        """Create a term under an attribute.

        Args:
            organization_id: Tenant id.
            attribute_id: Owning attribute.
            name: Display name.
            slug: URL slug; derived from the name when omitted.

        Returns:
            The created term.

        Raises:
            AttributeNotFoundError: If the attribute is absent from the tenant.
            SlugAlreadyExistsError: If the slug is taken within the attribute.
        """
        org = require_tenant(organization_id)
        name = _clean_name(name)
        slug = _clean_slug(slug, name)
        async with self.store.transaction() as uow:
            if await uow.attributes.get(org, attribute_id) is None:
                raise AttributeNotFoundError(attribute_id)
            if await uow.terms.find_by_slug(org, attribute_id, slug) is not None:
                raise SlugAlreadyExistsError("Term", slug)
            term = await uow.terms.add(
                Term(
                    id=new_id(),
                    organization_id=org,
                    attribute_id=attribute_id,
                    name=name,
                    slug=slug,
                )
            )

        logger.info(
            "Term created",
            organization_id=org,
            attribute_id=attribute_id,
            term_id=term.id,
            request_id=self.request_id,
        )
        return term

    async def update_term(
        self,
        organization_id: str,
        term_id: str,
        name: str | None = None,
        slug: str | None = None,
    ) -> Term:
        """Rename a term or change its slug.

        Raises:
            TermNotFoundError: If absent from the tenant.
            SlugAlreadyExistsError: If the new slug is taken within the attribute.
        """
        org = require_tenant(organization_id)
        async with self.store.transaction() as uow:
            term = await uow.terms.get(org, term_id)
            if term is None:
                raise TermNotFoundError(term_id)
            if name is not None:
                term.name = _clean_name(name)
            if slug is not None:
                term.slug = _clean_slug(slug, term.name)
                existing = await uow.terms.find_by_slug(
                    org, term.attribute_id, term.slug, exclude_id=term_id
                )
                if existing is not None:
                    raise SlugAlreadyExistsError("Term", term.slug)
            await uow.terms.update(term)

        logger.info(
            "Term updated",
            organization_id=org,
            term_id=term_id,
            request_id=self.request_id,
        )
        return term

    async def delete_term(self, organization_id: str, term_id: str) -> None:
        """Delete one term.

        Raises:
            TermNotFoundError: If absent from the tenant.
            ResourceInUseError: If a product or variant uses the term.
        """
        org = require_tenant(organization_id)
        async with self.store.transaction() as uow:
            if await uow.terms.get(org, term_id) is None:
                raise TermNotFoundError(term_id)
            await self._ensure_unused(uow, org, [term_id])
            await uow.terms.delete(org, [term_id])

        logger.info(
            "Term deleted",
            organization_id=org,
            term_id=term_id,
            request_id=self.request_id,
        )

    async def bulk_delete_terms(self, organization_id: str, term_ids: Sequence[str]) -> int:
        """Delete several terms at once.

        Ids unknown to the tenant are skipped. Nothing is deleted if any
        of the terms is still in use.

        Args:
            organization_id: Tenant id.
            term_ids: Terms to delete.

        Returns:
            Number of terms deleted.
        """
        org = require_tenant(organization_id)
        ids = list(dict.fromkeys(term_ids))
        if not ids:
            return 0
        async with self.store.transaction() as uow:
            await self._ensure_unused(uow, org, ids)
            deleted = await uow.terms.delete(org, ids)

        logger.info(
            "Terms bulk deleted",
            organization_id=org,
            requested=len(ids),
            deleted=deleted,
            request_id=self.request_id,
        )
        return deleted

    async def term_slug_exists(
        self,
        organization_id: str,
        attribute_id: str,
        slug: str,
        exclude_id: str | None = None,
    ) -> bool:
        org = require_tenant(organization_id)
        async with self.store.reader() as uow:
            term = await uow.terms.find_by_slug(org, attribute_id, slug, exclude_id=exclude_id)
        return term is not None

    async def _ensure_unused(
        self, uow: CatalogUnitOfWork, organization_id: str, term_ids: list[str]
    ) -> None:
        for term_id in term_ids:
            usage = await uow.product_terms.count_for_terms(organization_id, [term_id])
            usage += await uow.variant_terms.count_for_terms(organization_id, [term_id])
            if usage:
                logger.warning(
                    "Term delete refused",
                    organization_id=organization_id,
                    term_id=term_id,
                    usage_count=usage,
                    request_id=self.request_id,
                )
                raise ResourceInUseError("Term", term_id, usage)


# ============================================================================
# Service Factory
# ============================================================================


def get_term_registry(request_id: str | None = None) -> TermRegistry:
    """Get term registry instance.

    Args:
        request_id: Request ID for correlation.

    Returns:
        TermRegistry instance.
    """
    return TermRegistry(request_id=request_id)
