"""Tests for health check endpoints."""

from fastapi.testclient import TestClient
from unittest.mock import AsyncMock, MagicMock

from api import app
from api.routes.health import get_document_store
from shared.exceptions import TransientStoreError


client = TestClient(app)


class TestHealthEndpoints:
    """Tests for health check endpoints."""

    def test_health_check(self):
        """Health endpoint should return 200 with status."""
        response = client.get("/api/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["version"] == "0.1.0"

    def test_readiness_check(self):
        """Readiness endpoint should report the reachable store."""
        response = client.get("/api/ready")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ready"
        assert data["document_store"] == "memory"
        assert data["store"] == "connected"

    def test_health_response_structure(self):
        """Health response should have correct structure."""
        response = client.get("/api/health")
        data = response.json()
        assert set(data.keys()) == {"status", "version"}

    def test_readiness_response_structure(self):
        """Readiness response should have correct structure."""
        response = client.get("/api/ready")
        data = response.json()
        assert set(data.keys()) == {"status", "document_store", "store"}

    def test_readiness_store_unavailable(self):
        """Readiness should return 503 when the store query fails."""
        store = MagicMock()
        store.query = AsyncMock(side_effect=TransientStoreError("timeout", operation="query"))
        app.dependency_overrides[get_document_store] = lambda: store
        try:
            response = client.get("/api/ready")
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 503
        assert response.json()["store"] == "unreachable"
