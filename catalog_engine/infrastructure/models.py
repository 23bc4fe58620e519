"""SQLAlchemy models for the catalog tables.

Every table carries ``organization_id``. Product-owned tables cascade on
delete from their parent; registry tables (attributes, terms,
categories) are referenced but never owned by products.
Ids are plain strings so a malformed id from a caller simply matches
nothing.
"""

from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from catalog_engine.domain import (
    Attribute,
    AttributeAssignment,
    Category,
    CategoryAssignment,
    Product,
    ProductStatus,
    ProductTerm,
    ProductType,
    StockLevel,
    StockRecord,
    Term,
    Variant,
    VariantTerm,
)
from catalog_engine.infrastructure.database import Base


def _uuid_pk() -> Mapped[str]:
    return mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid4()),
    )


def _org_column() -> Mapped[str]:
    return mapped_column(String(100), nullable=False, index=True)


def _now() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================================
# Registry Tables
# ============================================================================


class AttributeModel(Base):
    """Product attribute (e.g. Color)."""

    __tablename__ = "product_attributes"
    __table_args__ = (
        UniqueConstraint("organization_id", "slug", name="uq_attributes_org_slug"),
    )

    id: Mapped[str] = _uuid_pk()
    organization_id: Mapped[str] = _org_column()
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(200), nullable=False)

    def to_entity(self) -> Attribute:
        return Attribute(
            id=self.id,
            organization_id=self.organization_id,
            name=self.name,
            slug=self.slug,
        )


class TermModel(Base):
    """Attribute term (e.g. Red)."""

    __tablename__ = "product_attribute_terms"
    __table_args__ = (
        UniqueConstraint(
            "organization_id", "attribute_id", "slug", name="uq_terms_org_attribute_slug"
        ),
    )

    id: Mapped[str] = _uuid_pk()
    organization_id: Mapped[str] = _org_column()
    attribute_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("product_attributes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(200), nullable=False)

    def to_entity(self) -> Term:
        return Term(
            id=self.id,
            organization_id=self.organization_id,
            attribute_id=self.attribute_id,
            name=self.name,
            slug=self.slug,
        )


class CategoryModel(Base):
    """Product category; ``parent_id`` forms the tree."""

    __tablename__ = "product_categories"
    __table_args__ = (
        UniqueConstraint("organization_id", "slug", name="uq_categories_org_slug"),
    )

    id: Mapped[str] = _uuid_pk()
    organization_id: Mapped[str] = _org_column()
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(200), nullable=False)
    image: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    parent_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("product_categories.id"),
        nullable=True,
        index=True,
    )

    def to_entity(self) -> Category:
        return Category(
            id=self.id,
            organization_id=self.organization_id,
            name=self.name,
            slug=self.slug,
            image=self.image,
            parent_id=self.parent_id,
        )


# ============================================================================
# Product Tables
# ============================================================================


class ProductModel(Base):
    """Parent product row."""

    __tablename__ = "products"

    id: Mapped[str] = _uuid_pk()
    organization_id: Mapped[str] = _org_column()
    name: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    sku: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    price: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    image_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_now, onupdate=_now
    )

    def to_entity(self) -> Product:
        return Product(
            id=self.id,
            organization_id=self.organization_id,
            name=self.name,
            description=self.description,
            type=ProductType(self.type),
            sku=self.sku,
            price=self.price,
            status=ProductStatus(self.status),
            image_url=self.image_url,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class CategoryAssignmentModel(Base):
    """Product to category link."""

    __tablename__ = "product_category_assignments"
    __table_args__ = (
        UniqueConstraint("product_id", "category_id", name="uq_category_assignments"),
    )

    id: Mapped[str] = _uuid_pk()
    organization_id: Mapped[str] = _org_column()
    product_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    category_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("product_categories.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    def to_entity(self) -> CategoryAssignment:
        return CategoryAssignment(
            id=self.id,
            organization_id=self.organization_id,
            product_id=self.product_id,
            category_id=self.category_id,
        )


class AttributeAssignmentModel(Base):
    """Product to attribute link with the variation flag."""

    __tablename__ = "product_attribute_assignments"
    __table_args__ = (
        UniqueConstraint("product_id", "attribute_id", name="uq_attribute_assignments"),
    )

    id: Mapped[str] = _uuid_pk()
    organization_id: Mapped[str] = _org_column()
    product_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    attribute_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("product_attributes.id"),
        nullable=False,
        index=True,
    )
    used_for_variation: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    def to_entity(self) -> AttributeAssignment:
        return AttributeAssignment(
            id=self.id,
            organization_id=self.organization_id,
            product_id=self.product_id,
            attribute_id=self.attribute_id,
            used_for_variation=self.used_for_variation,
        )


class ProductTermModel(Base):
    """Non-variation term attached to a product."""

    __tablename__ = "product_terms"
    __table_args__ = (UniqueConstraint("product_id", "term_id", name="uq_product_terms"),)

    id: Mapped[str] = _uuid_pk()
    organization_id: Mapped[str] = _org_column()
    product_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    attribute_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("product_attributes.id"), nullable=False
    )
    term_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("product_attribute_terms.id"), nullable=False, index=True
    )

    def to_entity(self) -> ProductTerm:
        return ProductTerm(
            id=self.id,
            organization_id=self.organization_id,
            product_id=self.product_id,
            attribute_id=self.attribute_id,
            term_id=self.term_id,
        )


class VariantModel(Base):
    """Purchasable variant of a product."""

    __tablename__ = "product_variants"

    id: Mapped[str] = _uuid_pk()
    organization_id: Mapped[str] = _org_column()
    product_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    sku: Mapped[str | None] = mapped_column(String(100), nullable=True)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    image_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_now, onupdate=_now
    )

    def to_entity(self) -> Variant:
        return Variant(
            id=self.id,
            organization_id=self.organization_id,
            product_id=self.product_id,
            sku=self.sku,
            price=self.price,
            image_url=self.image_url,
            position=self.position,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class VariantTermModel(Base):
    """Variation term of a variant; one per (variant, attribute)."""

    __tablename__ = "product_variant_terms"
    __table_args__ = (
        UniqueConstraint("variant_id", "attribute_id", name="uq_variant_terms_variant_attribute"),
    )

    id: Mapped[str] = _uuid_pk()
    organization_id: Mapped[str] = _org_column()
    variant_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("product_variants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    attribute_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("product_attributes.id"), nullable=False
    )
    term_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("product_attribute_terms.id"), nullable=False, index=True
    )

    def to_entity(self) -> VariantTerm:
        return VariantTerm(
            id=self.id,
            organization_id=self.organization_id,
            variant_id=self.variant_id,
            attribute_id=self.attribute_id,
            term_id=self.term_id,
        )


class StockModel(Base):
    """Per-country stock row of a variant."""

    __tablename__ = "product_stock"
    __table_args__ = (
        UniqueConstraint("variant_id", "country_code", name="uq_stock_variant_country"),
    )

    id: Mapped[str] = _uuid_pk()
    organization_id: Mapped[str] = _org_column()
    variant_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("product_variants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    country_code: Mapped[str] = mapped_column(String(2), nullable=False)
    stock_level: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    visibility: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    manage_stock: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    allow_backorder: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    def to_entity(self) -> StockRecord:
        return StockRecord(
            id=self.id,
            organization_id=self.organization_id,
            variant_id=self.variant_id,
            country_code=self.country_code,
            level=StockLevel.from_persisted(self.stock_level, self.manage_stock),
            visibility=self.visibility,
            allow_backorder=self.allow_backorder,
        )
