"""Tests for domain value objects."""

import pytest

from catalog_engine.domain import (
    UNLIMITED_STOCK_SENTINEL,
    StockLevel,
    StockRecord,
    normalize_country_code,
    require_tenant,
    slugify,
)
from catalog_engine.domain.exceptions import UnauthorizedError, ValidationError


class TestStockLevel:
    """Tests for StockLevel value object."""

    def test_managed_level(self) -> None:
        """Managed stock keeps its quantity."""
        level = StockLevel.managed(5)
        assert level.quantity == 5
        assert not level.is_unlimited
        assert level.persisted == 5

    def test_unlimited_level_persists_as_sentinel(self) -> None:
        """Unlimited stock is written as the sentinel and nowhere else."""
        level = StockLevel.unlimited()
        assert level.quantity is None
        assert level.is_unlimited
        assert level.persisted == UNLIMITED_STOCK_SENTINEL == 999_999_999

    def test_negative_level_rejected(self) -> None:
        """Negative managed stock is a validation error."""
        with pytest.raises(ValidationError):
            StockLevel.managed(-1)

    def test_from_input_ignores_level_when_unmanaged(self) -> None:
        """The caller's level is dropped when stock is not managed."""
        assert StockLevel.from_input(7, manage_stock=False).is_unlimited
        assert StockLevel.from_input(None, manage_stock=True) == StockLevel.managed(0)

    def test_from_persisted_round_trip(self) -> None:
        """A stored row rebuilds the same level."""
        assert StockLevel.from_persisted(UNLIMITED_STOCK_SENTINEL, False).is_unlimited
        assert StockLevel.from_persisted(3, True) == StockLevel.managed(3)

    def test_str(self) -> None:
        """String form shows the quantity or 'unlimited'."""
        assert str(StockLevel.managed(4)) == "4"
        assert str(StockLevel.unlimited()) == "unlimited"

    def test_record_exposes_manage_flag(self) -> None:
        """StockRecord derives manage_stock and stock_level from its level."""
        record = StockRecord(
            id="s1",
            organization_id="org-1",
            variant_id="v1",
            country_code="US",
            level=StockLevel.unlimited(),
        )
        assert record.manage_stock is False
        assert record.stock_level == UNLIMITED_STOCK_SENTINEL


class TestCountryCode:
    """Tests for country code normalization."""

    def test_upper_cases(self) -> None:
        """Codes are trimmed and upper-cased."""
        assert normalize_country_code(" us ") == "US"

    @pytest.mark.parametrize("code", ["", "USA", "U1", "1"])
    def test_rejects_invalid(self, code: str) -> None:
        """Anything but two letters is rejected."""
        with pytest.raises(ValidationError) as exc_info:
            normalize_country_code(code)
        assert exc_info.value.field == "countryCode"


class TestSlugify:
    """Tests for slug derivation."""

    def test_lowercases_and_hyphenates(self) -> None:
        """Spaces and punctuation collapse to single hyphens."""
        assert slugify("Dark Blue") == "dark-blue"
        assert slugify("  T-Shirts & Tops!! ") == "t-shirts-tops"

    def test_symbols_only_gives_empty_slug(self) -> None:
        """A name without letters or digits has no slug."""
        assert slugify("***") == ""


class TestRequireTenant:
    """Tests for tenant scope checks."""

    def test_returns_stripped_id(self) -> None:
        """A present tenant id is returned."""
        assert require_tenant(" org-1 ") == "org-1"

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_missing_tenant_is_unauthorized(self, value: str | None) -> None:
        """Missing or blank tenant ids are rejected."""
        with pytest.raises(UnauthorizedError):
            require_tenant(value)
