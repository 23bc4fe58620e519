"""Domain entities for the catalog.

Registry entities (Attribute, Term, Category) are managed on their own by
tenant administrators. Everything else is owned by a Product and shares
its lifecycle.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

from catalog_engine.domain.base import Entity
from catalog_engine.domain.value_objects import ProductStatus, ProductType, StockLevel


def new_id() -> str:
    """Generate a new entity id."""
    return str(uuid4())


def utcnow() -> datetime:
    """Current UTC timestamp."""
    return datetime.now(timezone.utc)


# ============================================================================
# Registry Entities
# ============================================================================


@dataclass(eq=False)
class Attribute(Entity[str]):
    """A product attribute such as "Color". Slug unique within tenant."""

    organization_id: str
    name: str
    slug: str


@dataclass(eq=False)
class Term(Entity[str]):
    """A value of an attribute such as "Red". Slug unique within attribute."""

    organization_id: str
    attribute_id: str
    name: str
    slug: str


@dataclass(eq=False)
class Category(Entity[str]):
    """A node of the tenant's category tree."""

    organization_id: str
    name: str
    slug: str
    image: str | None = None
    parent_id: str | None = None


# ============================================================================
# Product Aggregate
# ============================================================================


@dataclass(eq=False)
class Product(Entity[str]):
    """Parent product row.

    Attributes:
        id: Product id.
        organization_id: Owning tenant.
        name: Display name.
        description: Free-form description.
        type: simple or variable.
        status: draft, published or archived.
        sku: Parent SKU.
        price: Price; only set for simple products.
        image_url: Parent image.
        created_at: Creation timestamp.
        updated_at: Last update timestamp.
    """

    organization_id: str
    name: str
    type: ProductType
    status: ProductStatus
    description: str | None = None
    sku: str | None = None
    price: Decimal | None = None
    image_url: str | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)


@dataclass(eq=False)
class CategoryAssignment(Entity[str]):
    """Links a product to a category."""

    organization_id: str
    product_id: str
    category_id: str


@dataclass(eq=False)
class AttributeAssignment(Entity[str]):
    """Links a product to an attribute. One row per (product, attribute)."""

    organization_id: str
    product_id: str
    attribute_id: str
    used_for_variation: bool = False


@dataclass(eq=False)
class ProductTerm(Entity[str]):
    """A non-variation term attached to the whole product."""

    organization_id: str
    product_id: str
    attribute_id: str
    term_id: str


@dataclass(eq=False)
class Variant(Entity[str]):
    """A purchasable variant. Simple products have exactly one.

    ``position`` is the variant's index in the last written payload.
    """

    organization_id: str
    product_id: str
    sku: str | None
    price: Decimal
    image_url: str | None = None
    position: int = 0
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)


@dataclass(eq=False)
class VariantTerm(Entity[str]):
    """A variation term on a variant. One row per (variant, attribute)."""

    organization_id: str
    variant_id: str
    attribute_id: str
    term_id: str


@dataclass(eq=False)
class StockRecord(Entity[str]):
    """Per-country stock of one variant. Unique on (variant_id, country_code)."""

    organization_id: str
    variant_id: str
    country_code: str
    level: StockLevel
    visibility: bool = True
    allow_backorder: bool = False

    @property
    def manage_stock(self) -> bool:
        """Whether stock is tracked for this row."""
        return not self.level.is_unlimited

    @property
    def stock_level(self) -> int:
        """Persisted stock level (sentinel when unmanaged)."""
        return self.level.persisted
