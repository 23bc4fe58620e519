#!/usr/bin/env python3
"""Seed demo catalog script.

Creates attributes, terms, categories, one simple and one variable
product for a demo organization, going through the catalog services so
every validation rule applies.

Usage:
    python scripts/seed_catalog.py
    python scripts/seed_catalog.py --organization org-demo --create-tables
"""

import argparse
import asyncio
import sys
from decimal import Decimal
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from catalog_engine.catalog import (
    AttributeInput,
    ProductPayload,
    StockInput,
    VariationInput,
    VariationTermInput,
    get_category_store,
    get_term_registry,
    get_variant_synchronizer,
)
from catalog_engine.domain import ProductStatus, ProductType
from catalog_engine.infrastructure import models  # noqa: F401  registers tables
from catalog_engine.infrastructure.database import Base, engine
from catalog_engine.infrastructure.logging import configure_logging


async def create_tables() -> None:
    """Create database tables if they don't exist."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def seed_organization(organization_id: str) -> dict:
    """Seed the demo catalog for one organization.

    Args:
        organization_id: Tenant to seed.

    Returns:
        Seeding result.
    """
    registry = get_term_registry(request_id="seed")
    categories = get_category_store(request_id="seed")
    synchronizer = get_variant_synchronizer(request_id="seed")

    color = await registry.create_attribute(organization_id, name="Color")
    size = await registry.create_attribute(organization_id, name="Size")
    material = await registry.create_attribute(organization_id, name="Material")
    red = await registry.create_term(organization_id, color.id, name="Red")
    blue = await registry.create_term(organization_id, color.id, name="Blue")
    small = await registry.create_term(organization_id, size.id, name="S")
    large = await registry.create_term(organization_id, size.id, name="L")
    ceramic = await registry.create_term(organization_id, material.id, name="Ceramic")
    cotton = await registry.create_term(organization_id, material.id, name="Cotton")

    home = await categories.create_category(organization_id, name="Home")
    kitchen = await categories.create_category(organization_id, name="Kitchen", parent_id=home.id)
    apparel = await categories.create_category(organization_id, name="Apparel")

    mug = await synchronizer.create(
        organization_id,
        ProductPayload(
            name="Mug",
            type=ProductType.SIMPLE,
            status=ProductStatus.PUBLISHED,
            sku="MUG-1",
            price=Decimal("9.99"),
            categories=[kitchen.id],
            attributes=[AttributeInput(attribute_id=material.id, terms=[ceramic.id])],
            stock=[
                StockInput(country_code="US", stock_level=5),
                StockInput(country_code="DE", manage_stock=False),
            ],
        ),
    )

    variations = []
    for color_term in (red, blue):
        for size_term, price in ((small, "19.00"), (large, "21.00")):
            variations.append(
                VariationInput(
                    sku=f"TEE-{color_term.slug.upper()}-{size_term.slug.upper()}",
                    price=Decimal(price),
                    terms=[
                        VariationTermInput(color.id, color_term.id),
                        VariationTermInput(size.id, size_term.id),
                    ],
                    stock=[StockInput(country_code="US", stock_level=10)],
                )
            )
    tee = await synchronizer.create(
        organization_id,
        ProductPayload(
            name="T-Shirt",
            type=ProductType.VARIABLE,
            status=ProductStatus.PUBLISHED,
            sku="TEE",
            categories=[apparel.id],
            attributes=[
                AttributeInput(attribute_id=color.id, used_for_variation=True),
                AttributeInput(attribute_id=size.id, used_for_variation=True),
                AttributeInput(attribute_id=material.id, terms=[cotton.id]),
            ],
            variations=variations,
        ),
    )

    return {
        "attributes": 3,
        "terms": 6,
        "categories": 3,
        "products": [mug.id, tee.id],
        "variants": 1 + len(variations),
    }


async def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Seed a demo product catalog")
    parser.add_argument(
        "--organization",
        default="org-demo",
        help="Organization ID to seed (default: org-demo)",
    )
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create tables with metadata.create_all instead of relying on alembic",
    )
    args = parser.parse_args()
    configure_logging()

    print("=" * 60)
    print("Catalog Engine Seeder")
    print("=" * 60)
    print(f"Organization: {args.organization}")
    print()

    if args.create_tables:
        print("Creating database tables...")
        await create_tables()
        print("Tables ready.")
        print()

    try:
        result = await seed_organization(args.organization)
    except Exception as e:
        print(f"  ✗ Error: {e}")
        await engine.dispose()
        sys.exit(1)

    print(f"  ✓ Attributes: {result['attributes']}")
    print(f"  ✓ Terms: {result['terms']}")
    print(f"  ✓ Categories: {result['categories']}")
    print(f"  ✓ Products: {len(result['products'])}")
    print(f"  ✓ Variants: {result['variants']}")
    print()
    print("=" * 60)
    print("Seeding complete!")
    print("=" * 60)

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
