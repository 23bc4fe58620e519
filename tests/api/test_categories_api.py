"""Tests for category endpoints."""

from fastapi.testclient import TestClient


def _create(client: TestClient, name: str, parent_id: str | None = None) -> dict:
    response = client.post("/products/categories", json={"name": name, "parentId": parent_id})
    assert response.status_code == 201
    return response.json()


class TestCategoryEndpoints:
    """Tests for /products/categories."""

    def test_create_and_get(self, auth_client: TestClient) -> None:
        """Categories round-trip through create and get."""
        home = _create(auth_client, "Home")
        kitchen = _create(auth_client, "Kitchen", parent_id=home["id"])

        response = auth_client.get(f"/products/categories/{kitchen['id']}")
        assert response.status_code == 200
        body = response.json()
        assert body["parentId"] == home["id"]
        assert body["slug"] == "kitchen"

    def test_tree_and_flat(self, auth_client: TestClient) -> None:
        """Tree nests children; flat lists levels depth-first."""
        home = _create(auth_client, "Home")
        _create(auth_client, "Kitchen", parent_id=home["id"])
        _create(auth_client, "Apparel")

        tree = auth_client.get("/products/categories/tree").json()
        assert [n["name"] for n in tree] == ["Apparel", "Home"]
        assert [c["name"] for c in tree[1]["children"]] == ["Kitchen"]

        flat = auth_client.get("/products/categories/flat").json()
        assert [(c["name"], c["level"]) for c in flat] == [
            ("Apparel", 0),
            ("Home", 0),
            ("Kitchen", 1),
        ]

    def test_cycle_rejected(self, auth_client: TestClient) -> None:
        """Moving a category under its descendant is a 400."""
        home = _create(auth_client, "Home")
        kitchen = _create(auth_client, "Kitchen", parent_id=home["id"])

        response = auth_client.put(
            f"/products/categories/{home['id']}",
            json={"name": "Home", "parentId": kitchen["id"]},
        )
        assert response.status_code == 400
        assert response.json()["error_code"] == "CATEGORY_CYCLE"

    def test_delete_with_children_refused(self, auth_client: TestClient) -> None:
        """Parents cannot be deleted before their children."""
        home = _create(auth_client, "Home")
        _create(auth_client, "Kitchen", parent_id=home["id"])

        response = auth_client.delete(f"/products/categories/{home['id']}")
        assert response.status_code == 400
        assert response.json()["error_code"] == "CATEGORY_HAS_CHILDREN"

    def test_slug_check(self, auth_client: TestClient) -> None:
        """Slug check reports taken category slugs."""
        _create(auth_client, "Home")
        response = auth_client.get("/products/categories/slug-check", params={"slug": "home"})
        assert response.json() == {"exists": True}

    def test_foreign_parent(self, auth_client: TestClient, other_client: TestClient) -> None:
        """A parent from another tenant is an invalid reference."""
        foreign = _create(other_client, "Home")
        response = auth_client.post(
            "/products/categories", json={"name": "Kitchen", "parentId": foreign["id"]}
        )
        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_REFERENCE"

    def test_list_is_tenant_scoped(
        self, auth_client: TestClient, other_client: TestClient
    ) -> None:
        """Each tenant lists only its own categories."""
        _create(auth_client, "Home")
        assert other_client.get("/products/categories").json() == []
