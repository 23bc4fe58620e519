"""Shared fixtures for API tests."""

import pytest
from fastapi.testclient import TestClient

from catalog_engine.infrastructure.config import settings
from catalog_engine.main import app


@pytest.fixture
def auth_headers() -> dict[str, str]:
    """Get authentication and tenant headers for organization org-1."""
    return {
        "Authorization": f"Bearer {settings.catalog_api_key}",
        settings.tenant_header: "org-1",
    }


@pytest.fixture
def auth_client(auth_headers: dict[str, str]) -> TestClient:
    """Create test client authenticated as organization org-1."""
    return TestClient(app, headers=auth_headers)


@pytest.fixture
def other_client() -> TestClient:
    """Create test client authenticated as organization org-2."""
    return TestClient(
        app,
        headers={
            "Authorization": f"Bearer {settings.catalog_api_key}",
            settings.tenant_header: "org-2",
        },
    )
