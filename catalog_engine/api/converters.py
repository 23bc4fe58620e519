"""Converters between domain objects and API schemas."""

from decimal import Decimal

from catalog_engine.api.schemas import (
    AttributeResponse,
    CategoryResponse,
    CategoryTreeNodeResponse,
    FlatCategoryResponse,
    ProductAttributeResponse,
    ProductAttributeSchema,
    ProductDetailResponse,
    ProductRequest,
    ProductSummaryResponse,
    StockRecordResponse,
    StockSchema,
    TermResponse,
    VariantResponse,
    VariationSchema,
)
from catalog_engine.catalog.categories import CategoryNode, FlatCategory
from catalog_engine.catalog.payloads import (
    AttributeInput,
    ProductPayload,
    StockInput,
    VariationInput,
    VariationTermInput,
)
from catalog_engine.catalog.query import ProductDetail, ProductSummary
from catalog_engine.domain import Attribute, Category, Product, StockRecord, Term


def to_decimal(value: float | None) -> Decimal | None:
    """Convert a wire price to Decimal without binary float noise."""
    if value is None:
        return None
    return Decimal(str(value))


def to_float(value: Decimal | None) -> float | None:
    if value is None:
        return None
    return float(value)


# ============================================================================
# Requests
# ============================================================================


def stock_to_input(stock: StockSchema) -> StockInput:
    return StockInput(
        country_code=stock.country_code,
        stock_level=stock.stock_level,
        visibility=stock.visibility,
        manage_stock=stock.manage_stock,
        allow_backorder=stock.allow_backorder,
    )


def _attribute_to_input(attribute: ProductAttributeSchema) -> AttributeInput:
    return AttributeInput(
        attribute_id=attribute.attribute_id,
        used_for_variation=attribute.used_for_variation,
        terms=list(attribute.terms),
    )


def _variation_to_input(variation: VariationSchema) -> VariationInput:
    return VariationInput(
        sku=variation.sku,
        price=to_decimal(variation.price),
        image_url=variation.image_url,
        terms=[VariationTermInput(t.attribute_id, t.term_id) for t in variation.terms],
        stock=[stock_to_input(s) for s in variation.stock],
    )


def request_to_payload(request: ProductRequest) -> ProductPayload:
    """Convert a product request body into a ProductPayload."""
    return ProductPayload(
        name=request.name,
        description=request.description,
        type=request.type,
        status=request.status,
        sku=request.sku,
        price=to_decimal(request.price),
        image_url=request.image_url,
        categories=list(request.categories),
        attributes=[_attribute_to_input(a) for a in request.attributes],
        variations=[_variation_to_input(v) for v in request.variations],
        stock=[stock_to_input(s) for s in request.stock],
    )


# ============================================================================
# Responses
# ============================================================================


def attribute_to_response(attribute: Attribute) -> AttributeResponse:
    return AttributeResponse(id=attribute.id, name=attribute.name, slug=attribute.slug)


def term_to_response(term: Term) -> TermResponse:
    return TermResponse(
        id=term.id,
        attribute_id=term.attribute_id,
        name=term.name,
        slug=term.slug,
    )


def category_to_response(category: Category) -> CategoryResponse:
    return CategoryResponse(
        id=category.id,
        name=category.name,
        slug=category.slug,
        image=category.image,
        parent_id=category.parent_id,
    )


def node_to_response(node: CategoryNode) -> CategoryTreeNodeResponse:
    category = node.category
    return CategoryTreeNodeResponse(
        id=category.id,
        name=category.name,
        slug=category.slug,
        image=category.image,
        parent_id=category.parent_id,
        children=[node_to_response(child) for child in node.children],
    )


def flat_to_response(flat: FlatCategory) -> FlatCategoryResponse:
    category = flat.category
    return FlatCategoryResponse(
        id=category.id,
        name=category.name,
        slug=category.slug,
        image=category.image,
        parent_id=category.parent_id,
        level=flat.level,
    )


def stock_to_response(record: StockRecord) -> StockRecordResponse:
    return StockRecordResponse(
        id=record.id,
        variant_id=record.variant_id,
        country_code=record.country_code,
        stock_level=record.stock_level,
        visibility=record.visibility,
        manage_stock=record.manage_stock,
        allow_backorder=record.allow_backorder,
    )


def _product_fields(product: Product) -> dict:
    return {
        "id": product.id,
        "name": product.name,
        "description": product.description,
        "type": product.type,
        "status": product.status,
        "sku": product.sku,
        "price": to_float(product.price),
        "image_url": product.image_url,
        "created_at": product.created_at,
        "updated_at": product.updated_at,
    }


def detail_to_response(detail: ProductDetail) -> ProductDetailResponse:
    """Convert an assembled ProductDetail to its response schema."""
    return ProductDetailResponse(
        **_product_fields(detail.product),
        categories=[category_to_response(c) for c in detail.categories],
        attributes=[
            ProductAttributeResponse(
                id=a.attribute.id,
                name=a.attribute.name,
                slug=a.attribute.slug,
                used_for_variation=a.used_for_variation,
                terms=[term_to_response(t) for t in a.terms],
            )
            for a in detail.attributes
        ],
        variants=[
            VariantResponse(
                id=v.variant.id,
                sku=v.variant.sku,
                price=float(v.variant.price),
                image_url=v.variant.image_url,
                terms=[term_to_response(t) for t in v.terms],
                stock=[stock_to_response(s) for s in v.stock],
            )
            for v in detail.variants
        ],
    )


def summary_to_response(summary: ProductSummary) -> ProductSummaryResponse:
    return ProductSummaryResponse(
        **_product_fields(summary.product),
        categories=[category_to_response(c) for c in summary.categories],
        variant_count=summary.variant_count,
        total_stock=summary.total_stock,
        has_unlimited_stock=summary.has_unlimited_stock,
        variable_min_price=to_float(summary.variable_min_price),
        variable_max_price=to_float(summary.variable_max_price),
    )
