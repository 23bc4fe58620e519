"""Tests for catalog reads."""

from datetime import timedelta
from decimal import Decimal

import pytest

from catalog_engine.catalog import (
    AttributeInput,
    CatalogQueryService,
    InMemoryCatalogStore,
    ProductPayload,
    StockInput,
    VariantSynchronizer,
    VariationInput,
    VariationTermInput,
)
from catalog_engine.catalog.query import price_range
from catalog_engine.domain import Product, ProductStatus, ProductType, Variant
from catalog_engine.domain.exceptions import ProductNotFoundError, ValidationError

ORG = "org-1"


def _mug(seeded) -> ProductPayload:
    return ProductPayload(
        name="Mug",
        type=ProductType.SIMPLE,
        status=ProductStatus.PUBLISHED,
        sku="MUG-1",
        price=Decimal("9.99"),
        categories=[seeded.kitchen.id],
        attributes=[AttributeInput(attribute_id=seeded.material.id, terms=[seeded.ceramic.id])],
        stock=[
            StockInput(country_code="US", stock_level=5),
            StockInput(country_code="DE", manage_stock=False),
        ],
    )


def _tee(seeded, prices: list[str]) -> ProductPayload:
    combos = [
        (seeded.red, seeded.small),
        (seeded.red, seeded.large),
        (seeded.blue, seeded.small),
        (seeded.blue, seeded.large),
    ]
    return ProductPayload(
        name="T-Shirt",
        type=ProductType.VARIABLE,
        sku="TEE",
        attributes=[
            AttributeInput(attribute_id=seeded.size.id, used_for_variation=True),
            AttributeInput(attribute_id=seeded.color.id, used_for_variation=True),
        ],
        variations=[
            VariationInput(
                sku=f"TEE-{color.slug}-{size.slug}",
                price=Decimal(price),
                terms=[
                    VariationTermInput(seeded.color.id, color.id),
                    VariationTermInput(seeded.size.id, size.id),
                ],
                stock=[StockInput(country_code="US", stock_level=2)],
            )
            for (color, size), price in zip(combos, prices)
        ],
    )


class TestPriceRange:
    """Tests for price_range()."""

    def test_min_and_max(self) -> None:
        """Range spans the cheapest and dearest variant."""
        variants = [
            Variant(id=str(i), organization_id=ORG, product_id="p", sku=None, price=Decimal(p))
            for i, p in enumerate(["25", "10", "40", "25"])
        ]
        assert price_range(variants) == (Decimal("10"), Decimal("40"))

    def test_no_variants(self) -> None:
        """Without variants the range is zero."""
        assert price_range([]) == (Decimal("0"), Decimal("0"))


class TestGetOne:
    """Tests for product detail assembly."""

    @pytest.mark.asyncio
    async def test_by_id_and_sku(
        self, synchronizer: VariantSynchronizer, queries: CatalogQueryService, seeded
    ) -> None:
        """Products are found by id or by parent sku."""
        product = await synchronizer.create(ORG, _mug(seeded))

        by_id = await queries.get_one(ORG, product_id=product.id)
        by_sku = await queries.get_one(ORG, sku="MUG-1")

        assert by_id.product.id == by_sku.product.id == product.id

    @pytest.mark.asyncio
    async def test_requires_a_key(self, queries: CatalogQueryService) -> None:
        """Either id or sku must be given."""
        with pytest.raises(ValidationError):
            await queries.get_one(ORG)

    @pytest.mark.asyncio
    async def test_other_tenant_not_found(
        self, synchronizer: VariantSynchronizer, queries: CatalogQueryService, seeded
    ) -> None:
        """Another tenant cannot read the product."""
        product = await synchronizer.create(ORG, _mug(seeded))
        with pytest.raises(ProductNotFoundError):
            await queries.get_one("org-2", product_id=product.id)
        with pytest.raises(ProductNotFoundError):
            await queries.get_one("org-2", sku="MUG-1")

    @pytest.mark.asyncio
    async def test_mug_detail(
        self, synchronizer: VariantSynchronizer, queries: CatalogQueryService, seeded
    ) -> None:
        """Simple product detail carries its category, terms and stock."""
        product = await synchronizer.create(ORG, _mug(seeded))

        detail = await queries.get_one(ORG, product_id=product.id)

        assert [c.name for c in detail.categories] == ["Kitchen"]
        (attribute,) = detail.attributes
        assert attribute.attribute.name == "Material"
        assert attribute.used_for_variation is False
        assert [t.name for t in attribute.terms] == ["Ceramic"]
        (variant,) = detail.variants
        assert variant.variant.sku == "MUG-1"
        assert [(s.country_code, s.stock_level, s.manage_stock) for s in variant.stock] == [
            ("DE", 999_999_999, False),
            ("US", 5, True),
        ]

    @pytest.mark.asyncio
    async def test_variation_attributes_show_used_terms(
        self, synchronizer: VariantSynchronizer, queries: CatalogQueryService, seeded
    ) -> None:
        """Variation attributes list the distinct terms of their variants, by name."""
        product = await synchronizer.create(ORG, _tee(seeded, ["10", "25", "25", "40"]))

        detail = await queries.get_one(ORG, product_id=product.id)

        assert [a.attribute.name for a in detail.attributes] == ["Color", "Size"]
        color, size = detail.attributes
        assert color.used_for_variation and size.used_for_variation
        assert [t.name for t in color.terms] == ["Blue", "Red"]
        assert [t.name for t in size.terms] == ["L", "S"]
        assert len(detail.variants) == 4


class TestListAll:
    """Tests for the product list."""

    @pytest.mark.asyncio
    async def test_aggregates(
        self,
        synchronizer: VariantSynchronizer,
        queries: CatalogQueryService,
        store: InMemoryCatalogStore,
        seeded,
    ) -> None:
        """Summaries carry stock totals and variable price ranges, newest first."""
        mug = await synchronizer.create(ORG, _mug(seeded))
        tee = await synchronizer.create(ORG, _tee(seeded, ["10", "25", "25", "40"]))
        async with store.transaction() as uow:
            stored = await uow.products.get(ORG, mug.id)
            stored.created_at = tee.created_at - timedelta(minutes=1)
            await uow.products.update(stored)

        summaries = await queries.list_all(ORG)

        assert [s.product.id for s in summaries] == [tee.id, mug.id]
        tee_summary, mug_summary = summaries

        assert tee_summary.variant_count == 4
        assert tee_summary.total_stock == 8
        assert tee_summary.has_unlimited_stock is False
        assert tee_summary.variable_min_price == Decimal("10")
        assert tee_summary.variable_max_price == Decimal("40")

        assert mug_summary.variant_count == 1
        assert mug_summary.total_stock == 5
        assert mug_summary.has_unlimited_stock is True
        assert mug_summary.variable_min_price is None
        assert mug_summary.variable_max_price is None
        assert [c.name for c in mug_summary.categories] == ["Kitchen"]

    @pytest.mark.asyncio
    async def test_variable_without_variants(
        self, queries: CatalogQueryService, store: InMemoryCatalogStore
    ) -> None:
        """A variable product with no variants reports a zero price range."""
        async with store.transaction() as uow:
            await uow.products.add(
                Product(
                    id="p1",
                    organization_id=ORG,
                    name="Empty",
                    type=ProductType.VARIABLE,
                    status=ProductStatus.DRAFT,
                )
            )

        (summary,) = await queries.list_all(ORG)

        assert summary.variant_count == 0
        assert summary.total_stock == 0
        assert summary.variable_min_price == Decimal("0")
        assert summary.variable_max_price == Decimal("0")

    @pytest.mark.asyncio
    async def test_scoped_to_tenant(
        self, synchronizer: VariantSynchronizer, queries: CatalogQueryService, seeded
    ) -> None:
        """Another tenant sees an empty catalog."""
        await synchronizer.create(ORG, _mug(seeded))
        assert await queries.list_all("org-2") == []
