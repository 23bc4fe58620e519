"""Domain exceptions.

All catalog errors fall into four kinds, each mapped to one HTTP status
by the API layer:

- ``UnauthorizedError``: missing or invalid tenant scope (401)
- ``NotFoundError``: entity absent or owned by another tenant (404)
- ``ValidationError``: bad input, slug collision, broken reference (400)
- ``InternalError``: storage failure or aborted transaction (500)
"""

from typing import Any, ClassVar


class DomainError(Exception):
    """Base class for all domain exceptions.

    All domain errors should inherit from this class to allow
    catching domain-specific errors at the application layer.
    """

    error_code: ClassVar[str] = "DOMAIN_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize domain error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


# ============================================================================
# Authorization Errors
# ============================================================================


class UnauthorizedError(DomainError):
    """Raised when a call carries no usable tenant scope."""

    error_code: ClassVar[str] = "UNAUTHORIZED"

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)


# ============================================================================
# Not Found Errors
# ============================================================================


class NotFoundError(DomainError):
    """Raised when an entity does not exist in the caller's tenant."""

    error_code: ClassVar[str] = "NOT_FOUND"
    entity_type: ClassVar[str] = "Entity"

    def __init__(self, entity_id: str) -> None:
        """Initialize not found error.

        Args:
            entity_id: ID (or other lookup key) of the missing entity.
        """
        super().__init__(
            f"{self.entity_type} not found: {entity_id}",
            details={"entity_type": self.entity_type, "entity_id": entity_id},
        )


class ProductNotFoundError(NotFoundError):
    """Raised when a product is not found."""

    error_code: ClassVar[str] = "PRODUCT_NOT_FOUND"
    entity_type: ClassVar[str] = "Product"


class VariantNotFoundError(NotFoundError):
    """Raised when a variant is not found."""

    error_code: ClassVar[str] = "VARIANT_NOT_FOUND"
    entity_type: ClassVar[str] = "Variant"


class AttributeNotFoundError(NotFoundError):
    """Raised when an attribute is not found."""

    error_code: ClassVar[str] = "ATTRIBUTE_NOT_FOUND"
    entity_type: ClassVar[str] = "Attribute"


class TermNotFoundError(NotFoundError):
    """Raised when an attribute term is not found."""

    error_code: ClassVar[str] = "TERM_NOT_FOUND"
    entity_type: ClassVar[str] = "Term"


class CategoryNotFoundError(NotFoundError):
    """Raised when a category is not found."""

    error_code: ClassVar[str] = "CATEGORY_NOT_FOUND"
    entity_type: ClassVar[str] = "Category"


# ============================================================================
# Validation Errors
# ============================================================================


class ValidationError(DomainError):
    """Raised when input breaks a catalog rule."""

    error_code: ClassVar[str] = "VALIDATION_ERROR"

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize validation error.

        Args:
            message: Human-readable error message.
            field: Payload field the error refers to.
            details: Optional additional error context.
        """
        merged = dict(details or {})
        if field is not None:
            merged["field"] = field
        super().__init__(message, details=merged)
        self.field = field


class SlugAlreadyExistsError(ValidationError):
    """Raised when a slug is already taken within its scope."""

    error_code: ClassVar[str] = "SLUG_ALREADY_EXISTS"

    def __init__(self, entity_type: str, slug: str) -> None:
        """Initialize slug collision error.

        Args:
            entity_type: Kind of entity owning the slug.
            slug: The colliding slug.
        """
        super().__init__(
            f"{entity_type} slug already exists: {slug}",
            field="slug",
            details={"entity_type": entity_type, "slug": slug},
        )


class InvalidReferenceError(ValidationError):
    """Raised when a payload references a missing or foreign entity."""

    error_code: ClassVar[str] = "INVALID_REFERENCE"

    def __init__(self, entity_type: str, entity_id: str, reason: str | None = None) -> None:
        """Initialize invalid reference error.

        Args:
            entity_type: Kind of entity referenced.
            entity_id: The referenced ID.
            reason: Optional explanation.
        """
        message = f"{entity_type} {entity_id} not found in this organization"
        if reason:
            message = f"{entity_type} {entity_id}: {reason}"
        super().__init__(
            message,
            details={"entity_type": entity_type, "entity_id": entity_id},
        )


class CategoryHasChildrenError(ValidationError):
    """Raised when deleting a category that still has subcategories."""

    error_code: ClassVar[str] = "CATEGORY_HAS_CHILDREN"

    def __init__(self, category_id: str, child_count: int) -> None:
        super().__init__(
            "Cannot delete category with subcategories",
            details={"category_id": category_id, "child_count": child_count},
        )


class CategoryCycleError(ValidationError):
    """Raised when a parent assignment would create a cycle."""

    error_code: ClassVar[str] = "CATEGORY_CYCLE"

    def __init__(self, category_id: str, parent_id: str) -> None:
        super().__init__(
            f"Category {category_id} cannot be placed under its own descendant {parent_id}",
            field="parentId",
            details={"category_id": category_id, "parent_id": parent_id},
        )


class ResourceInUseError(ValidationError):
    """Raised when deleting a registry entry that products still reference."""

    error_code: ClassVar[str] = "RESOURCE_IN_USE"

    def __init__(self, entity_type: str, entity_id: str, usage_count: int) -> None:
        super().__init__(
            f"{entity_type} {entity_id} is used by {usage_count} product record(s)",
            details={
                "entity_type": entity_type,
                "entity_id": entity_id,
                "usage_count": usage_count,
            },
        )


# ============================================================================
# Internal Errors
# ============================================================================


class InternalError(DomainError):
    """Raised when the engine cannot complete an operation."""

    error_code: ClassVar[str] = "INTERNAL_ERROR"


class CatalogStorageError(InternalError):
    """Raised when the underlying store fails or aborts a transaction."""

    error_code: ClassVar[str] = "STORAGE_ERROR"
