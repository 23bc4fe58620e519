"""Shared fixtures for catalog tests."""

from dataclasses import dataclass

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from catalog_engine.catalog import (
    CatalogQueryService,
    CategoryTreeStore,
    InMemoryCatalogStore,
    StockLedger,
    TermRegistry,
    VariantSynchronizer,
    reset_catalog_store,
)
from catalog_engine.domain import Attribute, Category, Term
from catalog_engine.main import app


@pytest.fixture(autouse=True)
def store() -> InMemoryCatalogStore:
    """Fresh in-memory catalog store, installed as the process-wide store."""
    return reset_catalog_store()


@pytest.fixture
def client() -> TestClient:
    """Create test client without authentication."""
    return TestClient(app)


@pytest.fixture
def registry(store: InMemoryCatalogStore) -> TermRegistry:
    return TermRegistry(store=store)


@pytest.fixture
def categories(store: InMemoryCatalogStore) -> CategoryTreeStore:
    return CategoryTreeStore(store=store)


@pytest.fixture
def ledger(store: InMemoryCatalogStore) -> StockLedger:
    return StockLedger(store=store)


@pytest.fixture
def synchronizer(store: InMemoryCatalogStore) -> VariantSynchronizer:
    return VariantSynchronizer(store=store)


@pytest.fixture
def queries(store: InMemoryCatalogStore) -> CatalogQueryService:
    return CatalogQueryService(store=store)


@dataclass
class SeededRegistry:
    """Registry rows of organization "org-1" used by product tests."""

    color: Attribute
    size: Attribute
    material: Attribute
    red: Term
    blue: Term
    small: Term
    large: Term
    cotton: Term
    ceramic: Term
    kitchen: Category
    apparel: Category


@pytest_asyncio.fixture
async def seeded(registry: TermRegistry, categories: CategoryTreeStore) -> SeededRegistry:
    """Create Color, Size and Material with terms, plus two categories."""
    org = "org-1"
    color = await registry.create_attribute(org, name="Color")
    size = await registry.create_attribute(org, name="Size")
    material = await registry.create_attribute(org, name="Material")
    return SeededRegistry(
        color=color,
        size=size,
        material=material,
        red=await registry.create_term(org, color.id, name="Red"),
        blue=await registry.create_term(org, color.id, name="Blue"),
        small=await registry.create_term(org, size.id, name="S"),
        large=await registry.create_term(org, size.id, name="L"),
        cotton=await registry.create_term(org, material.id, name="Cotton"),
        ceramic=await registry.create_term(org, material.id, name="Ceramic"),
        kitchen=await categories.create_category(org, name="Kitchen"),
        apparel=await categories.create_category(org, name="Apparel"),
    )
