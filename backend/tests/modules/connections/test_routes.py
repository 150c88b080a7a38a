"""
Tests for connection and connection request API endpoints.

Routes run against the in-memory document store the container builds by
default, so each test starts from an empty store.
"""

import json

import pytest
from fastapi.testclient import TestClient
from unittest.mock import AsyncMock, MagicMock

from api import app
from modules.users.repository import USER_DATA_COLLECTION
from modules.connections.models import ConnectionRequest, ConnectionRequestStatus
from modules.connections.repository import ConnectionRepository, ConnectionRequestRepository
from modules.connections.routes import pending_requests_generator
from modules.connections.service import ConnectionRequestService

client = TestClient(app)


@pytest.fixture
def headers(make_headers):
    """Register alice, bob and carol and return their headers."""
    users = {
        "alice": make_headers("alice-id", email="alice@example.com", name="Alice"),
        "bob": make_headers("bob-id", email="bob@example.com", name="Bob"),
        "carol": make_headers("carol-id", email="carol@example.com", name="Carol"),
    }
    for user_headers in users.values():
        assert client.post("/api/users/me", headers=user_headers).status_code == 200
    return users


def send(headers, to_user_id: str) -> dict:
    response = client.post(
        "/api/connection-requests", json={"to_user_id": to_user_id}, headers=headers
    )
    assert response.status_code == 201
    return response.json()


class TestSendRequestEndpoint:
    def test_requires_auth(self):
        """Should reject unauthenticated calls."""
        response = client.post("/api/connection-requests", json={"to_user_id": "bob-id"})
        assert response.status_code == 401

    def test_send(self, headers):
        """Should create a pending request with display snapshots."""
        data = send(headers["alice"], "bob-id")

        assert data["status"] == "pending"
        assert data["from_user_id"] == "alice-id"
        assert data["from_user_name"] == "Alice"
        assert data["to_user_name"] == "Bob"
        assert data["to_user_email"] == "bob@example.com"

    def test_unknown_recipient(self, headers):
        response = client.post(
            "/api/connection-requests", json={"to_user_id": "nobody"}, headers=headers["alice"]
        )
        assert response.status_code == 404
        assert response.json()["error"] == "USER_NOT_FOUND"

    def test_self_request(self, headers):
        response = client.post(
            "/api/connection-requests", json={"to_user_id": "alice-id"}, headers=headers["alice"]
        )
        assert response.status_code == 400
        assert response.json()["error"] == "SELF_CONNECTION"

    def test_duplicate(self, headers):
        send(headers["alice"], "bob-id")

        response = client.post(
            "/api/connection-requests", json={"to_user_id": "alice-id"}, headers=headers["bob"]
        )
        assert response.status_code == 409
        assert response.json()["error"] == "DUPLICATE_REQUEST"


class TestListRequestEndpoints:
    def test_received_and_sent(self, headers):
        request = send(headers["alice"], "bob-id")

        received = client.get("/api/connection-requests/received", headers=headers["bob"]).json()
        sent = client.get("/api/connection-requests/sent", headers=headers["alice"]).json()

        assert received["total"] == 1
        assert received["requests"][0]["id"] == request["id"]
        assert sent["total"] == 1
        assert client.get(
            "/api/connection-requests/received", headers=headers["alice"]
        ).json()["total"] == 0

    def test_get_request_parties_only(self, headers):
        """Should hide a request from users who are not a party to it."""
        request = send(headers["alice"], "bob-id")
        path = f"/api/connection-requests/{request['id']}"

        assert client.get(path, headers=headers["bob"]).status_code == 200
        assert client.get(path, headers=headers["carol"]).status_code == 404


class TestAcceptFlow:
    def test_accept_then_reconcile(self, headers):
        """Should converge to a symmetric edge once the sender reconciles."""
        request = send(headers["alice"], "bob-id")

        accepted = client.post(
            f"/api/connection-requests/{request['id']}/accept", headers=headers["bob"]
        )
        assert accepted.status_code == 200
        assert accepted.json()["created"] is True
        assert accepted.json()["request"]["status"] == "accepted"

        bob_connections = client.get("/api/connections", headers=headers["bob"]).json()
        assert [c["id"] for c in bob_connections["connections"]] == ["alice-id"]
        assert client.get("/api/connections", headers=headers["alice"]).json()["total"] == 0

        reconciled = client.post("/api/connection-requests/reconcile", headers=headers["alice"])
        assert reconciled.json() == {"created": 1}

        alice_connections = client.get("/api/connections", headers=headers["alice"]).json()
        assert [c["id"] for c in alice_connections["connections"]] == ["bob-id"]
        assert alice_connections["connections"][0]["trust_level"] == "known"

    def test_sender_cannot_accept(self, headers):
        request = send(headers["alice"], "bob-id")

        response = client.post(
            f"/api/connection-requests/{request['id']}/accept", headers=headers["alice"]
        )
        assert response.status_code == 403
        assert response.json()["error"] == "REQUEST_ACCESS_DENIED"

    def test_accept_missing(self, headers):
        response = client.post("/api/connection-requests/missing/accept", headers=headers["bob"])
        assert response.status_code == 404

    def test_reject_then_accept(self, headers):
        request = send(headers["alice"], "bob-id")

        rejected = client.post(
            f"/api/connection-requests/{request['id']}/reject", headers=headers["bob"]
        )
        assert rejected.json()["status"] == "rejected"

        response = client.post(
            f"/api/connection-requests/{request['id']}/accept", headers=headers["bob"]
        )
        assert response.status_code == 400
        assert response.json()["error"] == "REQUEST_NOT_ACTIONABLE"

    def test_cancel(self, headers):
        request = send(headers["alice"], "bob-id")

        assert client.delete(
            f"/api/connection-requests/{request['id']}", headers=headers["bob"]
        ).status_code == 403
        assert client.delete(
            f"/api/connection-requests/{request['id']}", headers=headers["alice"]
        ).status_code == 204
        assert client.get(
            "/api/connection-requests/received", headers=headers["bob"]
        ).json()["total"] == 0


class TestConnectionEndpoints:
    @pytest.fixture
    def connected(self, headers):
        request = send(headers["alice"], "bob-id")
        client.post(f"/api/connection-requests/{request['id']}/accept", headers=headers["bob"])
        return headers

    def test_get_and_update(self, connected):
        response = client.patch(
            "/api/connections/alice-id",
            json={"trust_level": "trusted", "notes": "neighbour"},
            headers=connected["bob"],
        )
        assert response.status_code == 200
        assert response.json()["trust_level"] == "trusted"

        fetched = client.get("/api/connections/alice-id", headers=connected["bob"]).json()
        assert fetched["notes"] == "neighbour"

    def test_null_notes_clears_them(self, connected):
        client.patch(
            "/api/connections/alice-id",
            json={"trust_level": "close", "notes": "neighbour"},
            headers=connected["bob"],
        )
        response = client.patch(
            "/api/connections/alice-id", json={"notes": None}, headers=connected["bob"]
        )

        assert response.status_code == 200
        assert response.json().get("notes") is None
        assert response.json()["trust_level"] == "close"

    def test_invalid_trust_level(self, connected):
        response = client.patch(
            "/api/connections/alice-id",
            json={"trust_level": "best-friend"},
            headers=connected["bob"],
        )
        assert response.status_code == 422

    def test_get_missing(self, connected):
        response = client.get("/api/connections/carol-id", headers=connected["bob"])
        assert response.status_code == 404
        assert response.json()["error"] == "CONNECTION_NOT_FOUND"

    def test_delete(self, connected):
        assert client.delete("/api/connections/alice-id", headers=connected["bob"]).status_code == 204
        assert client.delete("/api/connections/alice-id", headers=connected["bob"]).status_code == 404


def pending(request_id: str) -> ConnectionRequest:
    return ConnectionRequest(
        id=request_id,
        from_user_id="alice-id",
        to_user_id="bob-id",
        status=ConnectionRequestStatus.PENDING,
        created_at="2024-01-01T00:00:00Z",
        updated_at="2024-01-01T00:00:00Z",
    )


class TestPendingRequestsStream:
    @pytest.mark.asyncio
    async def test_yields_current_list_and_unsubscribes(self):
        """Should emit the pending list as an SSE event and clean up on close."""
        subscription = MagicMock()
        accepted_subscription = MagicMock()

        async def subscribe(user_id, on_change):
            assert user_id == "bob-id"
            on_change([pending("req-1")])
            return subscription

        service = MagicMock()
        service.subscribe_pending_received = subscribe
        service.subscribe_accepted_sent = AsyncMock(return_value=accepted_subscription)

        stream = pending_requests_generator("bob-id", service)
        event = await stream.__anext__()
        await stream.aclose()

        assert event["event"] == "pending_requests"
        payload = json.loads(event["data"])
        assert payload["total"] == 1
        assert payload["requests"][0]["id"] == "req-1"
        subscription.unsubscribe.assert_called_once()
        accepted_subscription.unsubscribe.assert_called_once()

    @pytest.mark.asyncio
    async def test_slow_reader_gets_latest_snapshot(self):
        """Should replace an unread snapshot instead of queueing every change."""

        async def subscribe(user_id, on_change):
            on_change([])
            on_change([pending("req-1")])
            on_change([pending("req-1"), pending("req-2")])
            return MagicMock()

        service = MagicMock()
        service.subscribe_pending_received = subscribe
        service.subscribe_accepted_sent = AsyncMock(return_value=MagicMock())

        stream = pending_requests_generator("bob-id", service)
        event = await stream.__anext__()
        await stream.aclose()

        payload = json.loads(event["data"])
        assert [r["id"] for r in payload["requests"]] == ["req-1", "req-2"]

    @pytest.mark.asyncio
    async def test_reconciles_sender_edges_while_open(self, store, alice, bob, carol):
        """Should give the sender an edge as soon as the recipient accepts."""
        service = ConnectionRequestService(
            ConnectionRequestRepository(store), ConnectionRepository(store)
        )
        request = await service.send_request(alice, bob)

        stream = pending_requests_generator("alice-id", service)
        first = await stream.__anext__()
        assert json.loads(first["data"])["total"] == 0

        await service.accept_request(request.id, "bob-id")
        alice_data = await store.get(USER_DATA_COLLECTION, "alice-id")
        assert [c["id"] for c in alice_data.data["connections"]] == ["bob-id"]

        await stream.aclose()

        # Closed streams stop reconciling.
        other = await service.send_request(alice, carol)
        await service.accept_request(other.id, "carol-id")
        alice_data = await store.get(USER_DATA_COLLECTION, "alice-id")
        assert [c["id"] for c in alice_data.data["connections"]] == ["bob-id"]
