"""Tests for stock endpoints."""

from fastapi.testclient import TestClient


def _mug_variant_id(client: TestClient) -> str:
    response = client.post(
        "/products", json={"name": "Mug", "type": "simple", "sku": "MUG-1", "price": 9.99}
    )
    assert response.status_code == 201
    return response.json()["variants"][0]["id"]


class TestStockEndpoints:
    """Tests for /products/stock."""

    def test_upsert_creates_then_replaces(self, auth_client: TestClient) -> None:
        """Posting the same country twice keeps a single row."""
        variant_id = _mug_variant_id(auth_client)

        first = auth_client.post(
            "/products/stock",
            json={"variantId": variant_id, "countryCode": "us", "stockLevel": 5},
        )
        assert first.status_code == 201
        assert first.json()["countryCode"] == "US"

        second = auth_client.post(
            "/products/stock",
            json={"variantId": variant_id, "countryCode": "US", "stockLevel": 7},
        )
        assert second.json()["id"] == first.json()["id"]

        rows = auth_client.get("/products/stock", params={"variantId": variant_id}).json()
        assert [(r["countryCode"], r["stockLevel"]) for r in rows] == [("US", 7)]

    def test_unmanaged_stock_reads_as_sentinel(self, auth_client: TestClient) -> None:
        """Unmanaged stock is reported with the sentinel level."""
        variant_id = _mug_variant_id(auth_client)

        response = auth_client.post(
            "/products/stock",
            json={
                "variantId": variant_id,
                "countryCode": "DE",
                "stockLevel": 3,
                "manageStock": False,
            },
        )
        body = response.json()
        assert body["manageStock"] is False
        assert body["stockLevel"] == 999_999_999

    def test_unknown_variant(self, auth_client: TestClient) -> None:
        """Stock for an unknown variant is a 404."""
        response = auth_client.post(
            "/products/stock", json={"variantId": "missing", "countryCode": "US"}
        )
        assert response.status_code == 404
        assert response.json()["error_code"] == "VARIANT_NOT_FOUND"

    def test_negative_level(self, auth_client: TestClient) -> None:
        """Negative managed stock is a 400."""
        variant_id = _mug_variant_id(auth_client)
        response = auth_client.post(
            "/products/stock",
            json={"variantId": variant_id, "countryCode": "US", "stockLevel": -2},
        )
        assert response.status_code == 400
        assert response.json()["details"][0]["field"] == "stockLevel"

    def test_other_tenant(self, auth_client: TestClient, other_client: TestClient) -> None:
        """Another tenant cannot write stock for the variant."""
        variant_id = _mug_variant_id(auth_client)
        response = other_client.post(
            "/products/stock", json={"variantId": variant_id, "countryCode": "US"}
        )
        assert response.status_code == 404
