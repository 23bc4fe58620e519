"""Domain layer - entities, value objects and exceptions.

Example usage:
    from catalog_engine.domain import StockLevel, StockRecord

    record = StockRecord(
        id=new_id(),
        organization_id="org-1",
        variant_id=variant.id,
        country_code="US",
        level=StockLevel.unlimited(),
    )
    record.stock_level  # 999999999
"""

from catalog_engine.domain.base import Entity, ValueObject
from catalog_engine.domain.entities import (
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
    new_id,
    utcnow,
)
from catalog_engine.domain.value_objects import (
    UNLIMITED_STOCK_SENTINEL,
    ProductStatus,
    ProductType,
    StockLevel,
    normalize_country_code,
    require_tenant,
    slugify,
)

__all__ = [
    # Base
    "Entity",
    "ValueObject",
    # Entities
    "Attribute",
    "AttributeAssignment",
    "Category",
    "CategoryAssignment",
    "Product",
    "ProductTerm",
    "StockRecord",
    "Term",
    "Variant",
    "VariantTerm",
    "new_id",
    "utcnow",
    # Value objects
    "UNLIMITED_STOCK_SENTINEL",
    "ProductStatus",
    "ProductType",
    "StockLevel",
    "normalize_country_code",
    "require_tenant",
    "slugify",
]
