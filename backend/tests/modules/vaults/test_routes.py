"""
Tests for vault API endpoints.

Vault routes use the container's in-memory store; connections are made
through the request endpoints so grants pass the connection check.
"""

import pytest
from fastapi.testclient import TestClient

from api import app

client = TestClient(app)


@pytest.fixture
def headers(make_headers):
    users = {
        "alice": make_headers("alice-id", email="alice@example.com", name="Alice"),
        "bob": make_headers("bob-id", email="bob@example.com", name="Bob"),
        "carol": make_headers("carol-id", email="carol@example.com", name="Carol"),
    }
    for user_headers in users.values():
        client.post("/api/users/me", headers=user_headers)
    return users


@pytest.fixture
def connected(headers):
    """alice and bob connected on both sides."""
    request = client.post(
        "/api/connection-requests", json={"to_user_id": "alice-id"}, headers=headers["bob"]
    ).json()
    client.post(f"/api/connection-requests/{request['id']}/accept", headers=headers["alice"])
    client.post("/api/connection-requests/reconcile", headers=headers["bob"])
    return headers


def create_vault(headers, name: str = "Photos") -> dict:
    response = client.post("/api/vaults", json={"name": name}, headers=headers)
    assert response.status_code == 201
    return response.json()


class TestVaultEndpoints:
    def test_requires_auth(self):
        assert client.get("/api/vaults").status_code == 401

    def test_create_list_get(self, headers):
        vault = create_vault(headers["alice"], "Photos")

        listed = client.get("/api/vaults", headers=headers["alice"]).json()
        fetched = client.get(f"/api/vaults/{vault['id']}", headers=headers["alice"])

        assert listed["total"] == 1
        assert listed["vaults"][0]["name"] == "Photos"
        assert fetched.status_code == 200
        assert fetched.json()["shared_with"] == []

    def test_create_validation(self, headers):
        response = client.post("/api/vaults", json={"name": ""}, headers=headers["alice"])
        assert response.status_code == 422

    def test_other_users_vault_not_found(self, headers):
        """Should only resolve vaults in the caller's own list."""
        vault = create_vault(headers["alice"])

        response = client.get(f"/api/vaults/{vault['id']}", headers=headers["bob"])

        assert response.status_code == 404
        assert response.json()["error"] == "VAULT_NOT_FOUND"

    def test_update_and_delete(self, headers):
        vault = create_vault(headers["alice"])

        updated = client.patch(
            f"/api/vaults/{vault['id']}",
            json={"description": "Summer 2024"},
            headers=headers["alice"],
        ).json()
        assert updated["name"] == "Photos"
        assert updated["description"] == "Summer 2024"

        assert client.delete(f"/api/vaults/{vault['id']}", headers=headers["alice"]).status_code == 204
        assert client.get(f"/api/vaults/{vault['id']}", headers=headers["alice"]).status_code == 404


class TestAccessEndpoints:
    def test_grant_and_shared_view(self, connected):
        vault = create_vault(connected["alice"])

        granted = client.post(
            f"/api/vaults/{vault['id']}/access",
            json={"connection_id": "bob-id"},
            headers=connected["alice"],
        )
        assert granted.status_code == 201
        assert granted.json()["connection_id"] == "bob-id"

        shared = client.get("/api/vaults/shared", headers=connected["bob"]).json()
        assert shared["total"] == 1
        assert shared["vaults"][0]["id"] == vault["id"]
        assert shared["vaults"][0]["owner_id"] == "alice-id"
        assert shared["vaults"][0]["owner_name"] == "Alice"

    def test_duplicate_grant(self, connected):
        vault = create_vault(connected["alice"])
        path = f"/api/vaults/{vault['id']}/access"
        client.post(path, json={"connection_id": "bob-id"}, headers=connected["alice"])

        response = client.post(path, json={"connection_id": "bob-id"}, headers=connected["alice"])

        assert response.status_code == 409
        assert response.json()["error"] == "ACCESS_ALREADY_GRANTED"

    def test_grant_to_stranger(self, connected):
        vault = create_vault(connected["alice"])

        response = client.post(
            f"/api/vaults/{vault['id']}/access",
            json={"connection_id": "carol-id"},
            headers=connected["alice"],
        )

        assert response.status_code == 400
        assert response.json()["error"] == "GRANT_CONNECTION_NOT_FOUND"

    def test_active_only(self, connected):
        vault = create_vault(connected["alice"])
        client.post(
            f"/api/vaults/{vault['id']}/access",
            json={"connection_id": "bob-id", "expires_at": "2000-01-01T00:00:00Z"},
            headers=connected["alice"],
        )

        assert client.get("/api/vaults/shared", headers=connected["bob"]).json()["total"] == 1
        assert client.get(
            "/api/vaults/shared", params={"active_only": True}, headers=connected["bob"]
        ).json()["total"] == 0

    def test_revoke(self, connected):
        vault = create_vault(connected["alice"])
        client.post(
            f"/api/vaults/{vault['id']}/access",
            json={"connection_id": "bob-id"},
            headers=connected["alice"],
        )

        response = client.delete(
            f"/api/vaults/{vault['id']}/access/bob-id", headers=connected["alice"]
        )

        assert response.status_code == 204
        assert client.get("/api/vaults/shared", headers=connected["bob"]).json()["total"] == 0
