"""Tests for product endpoints."""

import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def registry_ids(auth_client: TestClient) -> dict[str, str]:
    """Create attributes, terms and categories over the API."""
    ids: dict[str, str] = {}
    for name in ("Color", "Size", "Material"):
        ids[name] = auth_client.post("/products/attributes", json={"name": name}).json()["id"]
    for attribute, term in (
        ("Color", "Red"),
        ("Color", "Blue"),
        ("Size", "S"),
        ("Size", "L"),
        ("Material", "Ceramic"),
    ):
        response = auth_client.post(
            "/products/attribute-terms", json={"attributeId": ids[attribute], "name": term}
        )
        ids[term] = response.json()["id"]
    for category in ("Kitchen", "Apparel"):
        ids[category] = auth_client.post(
            "/products/categories", json={"name": category}
        ).json()["id"]
    return ids


def mug_body(ids: dict[str, str]) -> dict:
    return {
        "name": "Mug",
        "type": "simple",
        "status": "published",
        "sku": "MUG-1",
        "price": 9.99,
        "imageURL": "https://cdn.example.com/mug.png",
        "categories": [ids["Kitchen"]],
        "attributes": [{"attributeId": ids["Material"], "terms": [ids["Ceramic"]]}],
        "stock": [
            {"countryCode": "US", "stockLevel": 5},
            {"countryCode": "DE", "manageStock": False},
        ],
    }


def tee_variation(ids: dict[str, str], color: str, size: str, price: float) -> dict:
    return {
        "sku": f"TEE-{color}-{size}".upper(),
        "price": price,
        "terms": [
            {"attributeId": ids["Color"], "termId": ids[color]},
            {"attributeId": ids["Size"], "termId": ids[size]},
        ],
        "stock": [{"countryCode": "US", "stockLevel": 4}],
    }


def tee_body(ids: dict[str, str], variations: list[dict] | None = None) -> dict:
    return {
        "name": "T-Shirt",
        "type": "variable",
        "sku": "TEE",
        "categories": [ids["Apparel"]],
        "attributes": [
            {"attributeId": ids["Color"], "usedForVariation": True},
            {"attributeId": ids["Size"], "usedForVariation": True},
        ],
        "variations": variations
        if variations is not None
        else [
            tee_variation(ids, "Red", "S", 19.0),
            tee_variation(ids, "Blue", "L", 21.5),
        ],
    }


class TestCreateProduct:
    """Tests for POST /products."""

    def test_create_simple(self, auth_client: TestClient, registry_ids: dict) -> None:
        """Creating a simple product returns its full detail."""
        response = auth_client.post("/products", json=mug_body(registry_ids))

        assert response.status_code == 201
        body = response.json()
        assert body["type"] == "simple"
        assert body["price"] == 9.99
        assert body["imageURL"] == "https://cdn.example.com/mug.png"
        assert [c["name"] for c in body["categories"]] == ["Kitchen"]
        assert body["attributes"][0]["usedForVariation"] is False
        assert [t["name"] for t in body["attributes"][0]["terms"]] == ["Ceramic"]
        (variant,) = body["variants"]
        assert variant["sku"] == "MUG-1"
        assert {s["countryCode"]: s["stockLevel"] for s in variant["stock"]} == {
            "DE": 999_999_999,
            "US": 5,
        }

    def test_create_variable(self, auth_client: TestClient, registry_ids: dict) -> None:
        """Variable products get one variant per variation."""
        response = auth_client.post("/products", json=tee_body(registry_ids))

        assert response.status_code == 201
        body = response.json()
        assert body["price"] is None
        assert sorted(v["sku"] for v in body["variants"]) == ["TEE-BLUE-L", "TEE-RED-S"]
        assert [a["name"] for a in body["attributes"]] == ["Color", "Size"]

    def test_variable_without_variations(
        self, auth_client: TestClient, registry_ids: dict
    ) -> None:
        """Variable products need variations."""
        response = auth_client.post("/products", json=tee_body(registry_ids, variations=[]))
        assert response.status_code == 400
        assert response.json()["details"][0]["field"] == "variations"

    def test_unknown_type(self, auth_client: TestClient) -> None:
        """Unknown product types fail request validation."""
        response = auth_client.post(
            "/products", json={"name": "Mug", "type": "bundle", "price": 1}
        )
        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_foreign_category(
        self, auth_client: TestClient, other_client: TestClient, registry_ids: dict
    ) -> None:
        """Categories of another tenant cannot be referenced."""
        foreign = other_client.post("/products/categories", json={"name": "Kitchen"}).json()
        body = mug_body(registry_ids)
        body["categories"] = [foreign["id"]]

        response = auth_client.post("/products", json=body)

        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_REFERENCE"
        assert auth_client.get("/products").json() == []


class TestReadProducts:
    """Tests for GET /products and GET /products/{id}."""

    def test_list_with_aggregates(self, auth_client: TestClient, registry_ids: dict) -> None:
        """The list carries stock totals and price ranges."""
        auth_client.post("/products", json=mug_body(registry_ids))
        auth_client.post("/products", json=tee_body(registry_ids))

        response = auth_client.get("/products")

        assert response.status_code == 200
        by_name = {p["name"]: p for p in response.json()}
        mug, tee = by_name["Mug"], by_name["T-Shirt"]
        assert mug["totalStock"] == 5
        assert mug["hasUnlimitedStock"] is True
        assert mug["variableMinPrice"] is None
        assert tee["variantCount"] == 2
        assert tee["totalStock"] == 8
        assert tee["variableMinPrice"] == 19.0
        assert tee["variableMaxPrice"] == 21.5

    def test_get_by_query(self, auth_client: TestClient, registry_ids: dict) -> None:
        """?id= and ?sku= return the product detail."""
        created = auth_client.post("/products", json=mug_body(registry_ids)).json()

        by_sku = auth_client.get("/products", params={"sku": "MUG-1"})
        by_id = auth_client.get("/products", params={"id": created["id"]})

        assert by_sku.status_code == 200
        assert by_sku.json()["id"] == created["id"]
        assert by_id.json()["variants"][0]["sku"] == "MUG-1"

    def test_get_by_path(self, auth_client: TestClient, registry_ids: dict) -> None:
        """GET /products/{id} returns the detail."""
        created = auth_client.post("/products", json=mug_body(registry_ids)).json()
        response = auth_client.get(f"/products/{created['id']}")
        assert response.status_code == 200
        assert response.json()["name"] == "Mug"

    def test_not_found(self, auth_client: TestClient) -> None:
        """Unknown products are a 404."""
        response = auth_client.get("/products/missing")
        assert response.status_code == 404
        assert response.json()["error_code"] == "PRODUCT_NOT_FOUND"

    def test_other_tenant(
        self, auth_client: TestClient, other_client: TestClient, registry_ids: dict
    ) -> None:
        """Products are invisible to other tenants."""
        created = auth_client.post("/products", json=mug_body(registry_ids)).json()
        assert other_client.get(f"/products/{created['id']}").status_code == 404
        assert other_client.get("/products").json() == []


class TestUpdateProduct:
    """Tests for PUT /products/{id}."""

    def test_full_replace(self, auth_client: TestClient, registry_ids: dict) -> None:
        """Variations left out of the body are removed."""
        created = auth_client.post("/products", json=tee_body(registry_ids)).json()
        kept = {v["sku"]: v["id"] for v in created["variants"]}["TEE-RED-S"]

        response = auth_client.put(
            f"/products/{created['id']}",
            json=tee_body(registry_ids, [tee_variation(registry_ids, "Red", "S", 18.0)]),
        )

        assert response.status_code == 200
        (variant,) = response.json()["variants"]
        assert variant["id"] == kept
        assert variant["price"] == 18.0
        assert [t["name"] for t in response.json()["attributes"][0]["terms"]] == ["Red"]

    def test_update_missing(self, auth_client: TestClient, registry_ids: dict) -> None:
        """Updating an unknown product is a 404."""
        response = auth_client.put("/products/missing", json=mug_body(registry_ids))
        assert response.status_code == 404


class TestDeleteProduct:
    """Tests for DELETE /products/{id}."""

    def test_delete(self, auth_client: TestClient, registry_ids: dict) -> None:
        """Deleted products are gone; their terms become deletable."""
        created = auth_client.post("/products", json=mug_body(registry_ids)).json()

        refused = auth_client.delete(f"/products/attribute-terms/{registry_ids['Ceramic']}")
        assert refused.status_code == 400
        assert refused.json()["error_code"] == "RESOURCE_IN_USE"

        response = auth_client.delete(f"/products/{created['id']}")
        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert auth_client.get(f"/products/{created['id']}").status_code == 404

        freed = auth_client.delete(f"/products/attribute-terms/{registry_ids['Ceramic']}")
        assert freed.status_code == 200
