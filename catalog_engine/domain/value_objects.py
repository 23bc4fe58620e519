"""Value Objects for the domain layer.

Value objects are immutable objects that are defined by their attributes
rather than identity. They are interchangeable when their values are equal.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Self

from catalog_engine.domain.base import ValueObject
from catalog_engine.domain.exceptions import UnauthorizedError, ValidationError

# Persisted stock level for rows that do not track stock.
UNLIMITED_STOCK_SENTINEL = 999_999_999


# ============================================================================
# Enumerations
# ============================================================================


class ProductType(str, Enum):
    """Product shape: one implicit variant or caller-supplied variants."""

    SIMPLE = "simple"
    VARIABLE = "variable"


class ProductStatus(str, Enum):
    """Publication status of a product."""

    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


# ============================================================================
# Tenant Scope
# ============================================================================


def require_tenant(organization_id: str | None) -> str:
    """Return the tenant id, rejecting calls that carry none.

    Args:
        organization_id: Organization id supplied by the caller.

    Returns:
        The stripped organization id.

    Raises:
        UnauthorizedError: If the id is missing or blank.
    """
    if organization_id is None or not str(organization_id).strip():
        raise UnauthorizedError("Missing organization scope")
    return str(organization_id).strip()


# ============================================================================
# Stock
# ============================================================================


@dataclass(frozen=True)
class StockLevel(ValueObject):
    """Stock quantity of one variant in one country.

    Either a managed, non-negative quantity or unlimited. Unlimited stock
    has no quantity, so it can never be added to a real one by accident;
    ``persisted`` is the only place the numeric sentinel appears.

    Attributes:
        quantity: Units on hand, or None when stock is unlimited.
    """

    quantity: int | None

    def __post_init__(self) -> None:
        """Validate quantity."""
        if self.quantity is not None and self.quantity < 0:
            raise ValidationError(
                f"Stock level cannot be negative: {self.quantity}",
                field="stockLevel",
            )

    @classmethod
    def managed(cls, quantity: int) -> Self:
        """Create a managed stock level.

        Args:
            quantity: Units on hand.

        Returns:
            Managed StockLevel.
        """
        return cls(quantity=quantity)

    @classmethod
    def unlimited(cls) -> Self:
        """Create an unlimited stock level.

        Returns:
            Unlimited StockLevel.
        """
        return cls(quantity=None)

    @classmethod
    def from_input(cls, stock_level: int | None, manage_stock: bool) -> Self:
        """Build a level from caller input.

        When stock is not managed, the caller's level is ignored.

        Args:
            stock_level: Requested quantity (None means 0).
            manage_stock: Whether stock is tracked.

        Returns:
            StockLevel instance.
        """
        if not manage_stock:
            return cls.unlimited()
        return cls.managed(stock_level or 0)

    @classmethod
    def from_persisted(cls, stock_level: int, manage_stock: bool) -> Self:
        """Rebuild a level from a stored row.

        Args:
            stock_level: Stored integer column.
            manage_stock: Stored managed flag.

        Returns:
            StockLevel instance.
        """
        if not manage_stock:
            return cls.unlimited()
        return cls.managed(stock_level)

    @property
    def is_unlimited(self) -> bool:
        """Check whether this level is unlimited."""
        return self.quantity is None

    @property
    def persisted(self) -> int:
        """Integer written to storage and the wire."""
        if self.quantity is None:
            return UNLIMITED_STOCK_SENTINEL
        return self.quantity

    def __str__(self) -> str:
        """Return string representation."""
        return "unlimited" if self.quantity is None else str(self.quantity)


def normalize_country_code(country_code: str) -> str:
    """Normalize and validate a two-letter country code.

    Args:
        country_code: Raw code from the caller.

    Returns:
        Upper-case two-letter code.

    Raises:
        ValidationError: If the code is not two letters.
    """
    code = (country_code or "").strip().upper()
    if len(code) != 2 or not code.isalpha():
        raise ValidationError(
            f"Invalid country code: {country_code!r}",
            field="countryCode",
        )
    return code


def slugify(value: str) -> str:
    """Derive a URL slug from a display name.

    Args:
        value: Display name.

    Returns:
        Lower-case slug of letters, digits and single hyphens.

    Example:
        >>> slugify("  Dark Blue / Navy ")
        'dark-blue-navy'
    """
    return re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")
