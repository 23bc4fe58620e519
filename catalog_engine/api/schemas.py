"""API schemas for the Catalog Engine.

Pydantic models for request/response validation and serialization.
Fields are camelCase on the wire; snake_case is also accepted on input.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from catalog_engine.domain import ProductStatus, ProductType


class CamelModel(BaseModel):
    """Base model with camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# Common Schemas
# ============================================================================


class ErrorDetail(BaseModel):
    """Detailed error information."""

    field: str | None = Field(default=None, description="Field that caused the error")
    message: str = Field(..., description="Error message")
    context: dict[str, Any] | None = Field(default=None, description="Error context")


class ErrorResponse(BaseModel):
    """Standard error response.

    All API errors follow this format for consistency.
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: list[ErrorDetail] = Field(
        default_factory=list, description="Additional error details"
    )
    request_id: str | None = Field(
        default=None, description="Request ID for correlation"
    )


class SuccessResponse(CamelModel):
    """Acknowledgement of a delete."""

    success: bool = True


class SlugCheckResponse(CamelModel):
    """Slug availability result."""

    exists: bool = Field(..., description="Whether the slug is already taken")


# ============================================================================
# Attribute and Term Schemas
# ============================================================================


class AttributeRequest(CamelModel):
    """Request to create or update an attribute."""

    name: str = Field(..., min_length=1, description="Display name, e.g. Color")
    slug: str | None = Field(default=None, description="URL slug; derived from name if omitted")


class AttributeResponse(CamelModel):
    """Attribute representation."""

    id: str
    name: str
    slug: str


class TermCreateRequest(CamelModel):
    """Request to create an attribute term."""

    attribute_id: str = Field(..., description="Owning attribute")
    name: str = Field(..., min_length=1, description="Display name, e.g. Red")
    slug: str | None = Field(default=None, description="URL slug; derived from name if omitted")


class TermUpdateRequest(CamelModel):
    """Request to update an attribute term."""

    name: str | None = Field(default=None, min_length=1)
    slug: str | None = None


class TermResponse(CamelModel):
    """Attribute term representation."""

    id: str
    attribute_id: str
    name: str
    slug: str


class BulkDeleteRequest(CamelModel):
    """Request to delete several terms."""

    ids: list[str] = Field(..., description="Term IDs to delete")


class BulkDeleteResponse(CamelModel):
    """Result of a bulk delete."""

    success: bool = True
    deleted: int = Field(..., description="Number of terms deleted")


# ============================================================================
# Category Schemas
# ============================================================================


class CategoryRequest(CamelModel):
    """Request to create or replace a category."""

    name: str = Field(..., min_length=1)
    slug: str | None = Field(default=None, description="URL slug; derived from name if omitted")
    image: str | None = None
    parent_id: str | None = Field(default=None, description="Parent category in the same tenant")


class CategoryResponse(CamelModel):
    """Category representation."""

    id: str
    name: str
    slug: str
    image: str | None = None
    parent_id: str | None = None


class CategoryTreeNodeResponse(CategoryResponse):
    """Category with nested children."""

    children: list["CategoryTreeNodeResponse"] = Field(default_factory=list)


class FlatCategoryResponse(CategoryResponse):
    """Category with its depth in the tree."""

    level: int = Field(..., ge=0, description="Depth below the nearest root")


# ============================================================================
# Stock Schemas
# ============================================================================


class StockSchema(CamelModel):
    """Stock of one variant in one country."""

    country_code: str = Field(..., description="Two-letter country code")
    stock_level: int | None = Field(default=0, description="Units on hand")
    visibility: bool = True
    manage_stock: bool = Field(default=True, description="Track stock; unlimited when false")
    allow_backorder: bool = False


class StockUpsertRequest(StockSchema):
    """Request to upsert the stock row of a variant in one country."""

    variant_id: str


class StockRecordResponse(CamelModel):
    """Persisted stock row."""

    id: str
    variant_id: str
    country_code: str
    stock_level: int = Field(..., description="Units on hand, or 999999999 when unmanaged")
    visibility: bool
    manage_stock: bool
    allow_backorder: bool


# ============================================================================
# Product Schemas
# ============================================================================


class VariationTermSchema(CamelModel):
    """Term chosen for one variation attribute."""

    attribute_id: str
    term_id: str


class VariationSchema(CamelModel):
    """One variant of a variable product."""

    sku: str | None = None
    price: float | None = Field(default=None, ge=0)
    image_url: str | None = Field(default=None, alias="imageURL")
    terms: list[VariationTermSchema] = Field(default_factory=list)
    stock: list[StockSchema] = Field(default_factory=list)


class ProductAttributeSchema(CamelModel):
    """Attribute assigned to a product with its selected term IDs."""

    attribute_id: str
    used_for_variation: bool = False
    terms: list[str] = Field(default_factory=list)


class ProductRequest(CamelModel):
    """Complete desired state of a product (create and full-replace update)."""

    name: str = Field(..., min_length=1)
    description: str | None = None
    type: ProductType
    status: ProductStatus = ProductStatus.DRAFT
    sku: str | None = None
    price: float | None = Field(default=None, ge=0, description="Required for simple products")
    image_url: str | None = Field(default=None, alias="imageURL")
    categories: list[str] = Field(default_factory=list, description="Category IDs")
    attributes: list[ProductAttributeSchema] = Field(default_factory=list)
    variations: list[VariationSchema] = Field(
        default_factory=list, description="Variants of a variable product"
    )
    stock: list[StockSchema] = Field(
        default_factory=list, description="Stock of a simple product"
    )


class ProductResponse(CamelModel):
    """Parent product representation."""

    id: str
    name: str
    description: str | None = None
    type: ProductType
    status: ProductStatus
    sku: str | None = None
    price: float | None = None
    image_url: str | None = Field(default=None, alias="imageURL")
    created_at: datetime
    updated_at: datetime


class ProductAttributeResponse(CamelModel):
    """Attribute of a product with resolved terms."""

    id: str
    name: str
    slug: str
    used_for_variation: bool
    terms: list[TermResponse] = Field(default_factory=list)


class VariantResponse(CamelModel):
    """Variant with its terms and stock."""

    id: str
    sku: str | None = None
    price: float
    image_url: str | None = Field(default=None, alias="imageURL")
    terms: list[TermResponse] = Field(default_factory=list)
    stock: list[StockRecordResponse] = Field(default_factory=list)


class ProductDetailResponse(ProductResponse):
    """Product with categories, attributes and variants."""

    categories: list[CategoryResponse] = Field(default_factory=list)
    attributes: list[ProductAttributeResponse] = Field(default_factory=list)
    variants: list[VariantResponse] = Field(default_factory=list)


class ProductSummaryResponse(ProductResponse):
    """Product list entry with aggregates."""

    categories: list[CategoryResponse] = Field(default_factory=list)
    variant_count: int
    total_stock: int = Field(..., description="Sum of managed stock")
    has_unlimited_stock: bool = Field(..., description="Whether any stock row is unmanaged")
    variable_min_price: float | None = None
    variable_max_price: float | None = None
