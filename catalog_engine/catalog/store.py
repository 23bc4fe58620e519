"""Catalog store factory.

Holds the process-wide ``CatalogStore`` used by every catalog service.
"""

import structlog

from catalog_engine.catalog.memory import InMemoryCatalogStore
from catalog_engine.catalog.ports import CatalogStore
from catalog_engine.infrastructure.config import settings

logger = structlog.get_logger()

# Global store instance
_catalog_store: CatalogStore | None = None


def get_catalog_store() -> CatalogStore:
    """Get catalog store singleton.

    The backend is picked from ``settings.catalog_backend``.

    Returns:
        The shared CatalogStore.

    Raises:
        ValueError: If the configured backend is unknown.
    """
    global _catalog_store
    if _catalog_store is None:
        backend = settings.catalog_backend.lower()
        if backend == "memory":
            _catalog_store = InMemoryCatalogStore()
        elif backend == "sql":
            from catalog_engine.catalog.repository import SqlAlchemyCatalogStore

            _catalog_store = SqlAlchemyCatalogStore()
        else:
            raise ValueError(f"Unknown catalog backend: {settings.catalog_backend}")
        logger.info("Catalog store initialized", backend=backend)
    return _catalog_store


def reset_catalog_store() -> InMemoryCatalogStore:
    """Install a fresh in-memory store (for testing).

    Returns:
        The new in-memory store.
    """
    global _catalog_store
    store = InMemoryCatalogStore()
    _catalog_store = store
    return store
