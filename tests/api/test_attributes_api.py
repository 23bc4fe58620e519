"""Tests for attribute and term endpoints."""

from fastapi.testclient import TestClient


def _create_attribute(client: TestClient, name: str, **extra) -> dict:
    response = client.post("/products/attributes", json={"name": name, **extra})
    assert response.status_code == 201
    return response.json()


def _create_term(client: TestClient, attribute_id: str, name: str) -> dict:
    response = client.post(
        "/products/attribute-terms", json={"attributeId": attribute_id, "name": name}
    )
    assert response.status_code == 201
    return response.json()


class TestAttributeEndpoints:
    """Tests for /products/attributes."""

    def test_create_and_list(self, auth_client: TestClient) -> None:
        """Created attributes are listed with derived slugs."""
        created = _create_attribute(auth_client, "Fabric Type")
        assert created["slug"] == "fabric-type"

        response = auth_client.get("/products/attributes")
        assert response.status_code == 200
        assert [a["id"] for a in response.json()] == [created["id"]]

    def test_get_and_update(self, auth_client: TestClient) -> None:
        """Attributes can be fetched and renamed."""
        created = _create_attribute(auth_client, "Color")

        response = auth_client.put(
            f"/products/attributes/{created['id']}", json={"name": "Colour", "slug": "colour"}
        )
        assert response.status_code == 200
        assert response.json()["slug"] == "colour"

        fetched = auth_client.get(f"/products/attributes/{created['id']}").json()
        assert fetched["name"] == "Colour"

    def test_duplicate_slug(self, auth_client: TestClient) -> None:
        """Duplicate slugs are a 400 with SLUG_ALREADY_EXISTS."""
        _create_attribute(auth_client, "Color")
        response = auth_client.post("/products/attributes", json={"name": "Color"})
        assert response.status_code == 400
        body = response.json()
        assert body["error_code"] == "SLUG_ALREADY_EXISTS"
        assert body["details"][0]["field"] == "slug"

    def test_slug_check(self, auth_client: TestClient) -> None:
        """Slug check reports taken slugs, ignoring the excluded id."""
        created = _create_attribute(auth_client, "Color")

        taken = auth_client.get("/products/attributes/slug-check", params={"slug": "color"})
        assert taken.json() == {"exists": True}
        own = auth_client.get(
            "/products/attributes/slug-check",
            params={"slug": "color", "excludeId": created["id"]},
        )
        assert own.json() == {"exists": False}

    def test_other_tenant_gets_404(
        self, auth_client: TestClient, other_client: TestClient
    ) -> None:
        """Attributes are invisible to other tenants."""
        created = _create_attribute(auth_client, "Color")
        response = other_client.get(f"/products/attributes/{created['id']}")
        assert response.status_code == 404
        assert response.json()["error_code"] == "ATTRIBUTE_NOT_FOUND"

    def test_delete(self, auth_client: TestClient) -> None:
        """Unused attributes can be deleted."""
        created = _create_attribute(auth_client, "Color")
        _create_term(auth_client, created["id"], "Red")

        response = auth_client.delete(f"/products/attributes/{created['id']}")
        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert auth_client.get(f"/products/attributes/{created['id']}").status_code == 404

    def test_blank_name_rejected(self, auth_client: TestClient) -> None:
        """Request validation failures are 400, not 422."""
        response = auth_client.post("/products/attributes", json={"name": ""})
        assert response.status_code == 400
        body = response.json()
        assert body["error_code"] == "VALIDATION_ERROR"
        assert body["details"][0]["field"] == "name"


class TestTermEndpoints:
    """Tests for /products/attribute-terms."""

    def test_create_and_list(self, auth_client: TestClient) -> None:
        """Terms are listed per attribute, by name."""
        color = _create_attribute(auth_client, "Color")
        _create_term(auth_client, color["id"], "Red")
        _create_term(auth_client, color["id"], "Blue")

        response = auth_client.get(
            "/products/attribute-terms", params={"attributeId": color["id"]}
        )
        assert response.status_code == 200
        terms = response.json()
        assert [t["name"] for t in terms] == ["Blue", "Red"]
        assert all(t["attributeId"] == color["id"] for t in terms)

    def test_list_requires_attribute(self, auth_client: TestClient) -> None:
        """attributeId is mandatory."""
        response = auth_client.get("/products/attribute-terms")
        assert response.status_code == 400

    def test_unknown_attribute(self, auth_client: TestClient) -> None:
        """Terms of an unknown attribute are a 404."""
        response = auth_client.post(
            "/products/attribute-terms", json={"attributeId": "missing", "name": "Red"}
        )
        assert response.status_code == 404

    def test_update_and_slug_check(self, auth_client: TestClient) -> None:
        """Terms can be renamed; the slug check follows."""
        color = _create_attribute(auth_client, "Color")
        red = _create_term(auth_client, color["id"], "Red")

        response = auth_client.put(
            f"/products/attribute-terms/{red['id']}", json={"name": "Crimson", "slug": "crimson"}
        )
        assert response.status_code == 200
        assert response.json()["slug"] == "crimson"

        check = auth_client.get(
            "/products/attribute-terms/slug-check",
            params={"attributeId": color["id"], "slug": "crimson"},
        )
        assert check.json() == {"exists": True}

    def test_delete_and_bulk_delete(self, auth_client: TestClient) -> None:
        """Single and bulk deletes remove terms."""
        color = _create_attribute(auth_client, "Color")
        red = _create_term(auth_client, color["id"], "Red")
        blue = _create_term(auth_client, color["id"], "Blue")
        green = _create_term(auth_client, color["id"], "Green")

        assert auth_client.delete(f"/products/attribute-terms/{red['id']}").status_code == 200

        response = auth_client.post(
            "/products/attribute-terms/bulk-delete", json={"ids": [blue["id"], green["id"]]}
        )
        assert response.status_code == 200
        assert response.json() == {"success": True, "deleted": 2}
        remaining = auth_client.get(
            "/products/attribute-terms", params={"attributeId": color["id"]}
        ).json()
        assert remaining == []
