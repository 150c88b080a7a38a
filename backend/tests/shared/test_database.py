"""Tests for shared/database.py."""

import os

import pytest
from unittest.mock import patch, MagicMock

from shared.database import (
    get_supabase_client,
    get_document_store,
    reset_client_cache,
)
from shared.store import MemoryDocumentStore, SupabaseDocumentStore


# Environment variables for integration tests
SUPABASE_URL = os.environ.get("SUPABASE_URL", "")
SUPABASE_SERVICE_ROLE_KEY = os.environ.get("SUPABASE_SERVICE_ROLE_KEY", "")


class TestSupabaseClient:
    def setup_method(self):
        """Reset cache before each test."""
        reset_client_cache()

    @patch("shared.database.create_client")
    @patch("shared.database.get_settings")
    def test_get_supabase_client_creates_client(self, mock_settings, mock_create):
        """Should create client with service role key."""
        mock_settings.return_value.supabase_url = "https://test.supabase.co"
        mock_settings.return_value.supabase_service_role_key = "test-key"
        mock_create.return_value = MagicMock()

        client = get_supabase_client()

        mock_create.assert_called_once_with("https://test.supabase.co", "test-key")
        assert client is not None

    @patch("shared.database.create_client")
    @patch("shared.database.get_settings")
    def test_get_supabase_client_caches_client(self, mock_settings, mock_create):
        """Should cache the client and not recreate it."""
        mock_settings.return_value.supabase_url = "https://test.supabase.co"
        mock_settings.return_value.supabase_service_role_key = "test-key"
        mock_create.return_value = MagicMock()

        client1 = get_supabase_client()
        client2 = get_supabase_client()

        mock_create.assert_called_once()
        assert client1 is client2

    @patch("shared.database.get_settings")
    def test_get_supabase_client_raises_without_url(self, mock_settings):
        """Should raise if URL is missing."""
        mock_settings.return_value.supabase_url = ""
        mock_settings.return_value.supabase_service_role_key = "test-key"

        with pytest.raises(RuntimeError, match="configuration missing"):
            get_supabase_client()

    @patch("shared.database.get_settings")
    def test_get_supabase_client_raises_without_key(self, mock_settings):
        """Should raise if service role key is missing."""
        mock_settings.return_value.supabase_url = "https://test.supabase.co"
        mock_settings.return_value.supabase_service_role_key = ""

        with pytest.raises(RuntimeError, match="configuration missing"):
            get_supabase_client()


class TestDocumentStoreFactory:
    def setup_method(self):
        reset_client_cache()

    @patch("shared.database.get_settings")
    def test_memory_backend(self, mock_settings):
        """DOCUMENT_STORE=memory should give an in-memory store."""
        mock_settings.return_value.document_store = "memory"
        mock_settings.return_value.store_transaction_max_attempts = 3

        store = get_document_store()

        assert isinstance(store, MemoryDocumentStore)
        assert store._max_transaction_attempts == 3

    @patch("shared.database.create_client")
    @patch("shared.database.get_settings")
    def test_supabase_backend(self, mock_settings, mock_create):
        """DOCUMENT_STORE=supabase should wrap the service-role client."""
        mock_settings.return_value.document_store = "supabase"
        mock_settings.return_value.supabase_url = "https://test.supabase.co"
        mock_settings.return_value.supabase_service_role_key = "test-key"
        mock_settings.return_value.documents_table = "documents"
        mock_settings.return_value.store_poll_interval_seconds = 2.0
        mock_settings.return_value.store_transaction_max_attempts = 5
        client = MagicMock()
        mock_create.return_value = client

        store = get_document_store()

        assert isinstance(store, SupabaseDocumentStore)
        assert store._db is client
        assert store._table_name == "documents"
        assert store._poll_interval == 2.0

    @patch("shared.database.get_settings")
    def test_store_is_cached_until_reset(self, mock_settings):
        """The store should be process-wide until reset_client_cache."""
        mock_settings.return_value.document_store = "memory"
        mock_settings.return_value.store_transaction_max_attempts = 5

        first = get_document_store()
        assert get_document_store() is first

        reset_client_cache()
        assert get_document_store() is not first


class TestResetClientCache:
    def setup_method(self):
        """Reset cache before each test."""
        reset_client_cache()

    @patch("shared.database.create_client")
    @patch("shared.database.get_settings")
    def test_reset_client_cache(self, mock_settings, mock_create):
        """Should reset the cache and allow new client creation."""
        mock_settings.return_value.supabase_url = "https://test.supabase.co"
        mock_settings.return_value.supabase_service_role_key = "test-key"
        mock_create.side_effect = [MagicMock(name="client1"), MagicMock(name="client2")]

        client1 = get_supabase_client()
        reset_client_cache()
        client2 = get_supabase_client()

        assert mock_create.call_count == 2
        assert client1 is not client2


# =============================================================================
# Integration Tests - Require real Supabase credentials
# =============================================================================


@pytest.mark.skipif(
    not SUPABASE_URL or not SUPABASE_SERVICE_ROLE_KEY,
    reason="SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY environment variables not set"
)
class TestSupabaseIntegration:
    """Integration tests requiring real Supabase credentials.

    These tests are skipped by default. To run them:
        SUPABASE_URL=https://xxx.supabase.co SUPABASE_SERVICE_ROLE_KEY=xxx \
            uv run pytest tests/shared/test_database.py -v -k Integration
    """

    def setup_method(self):
        reset_client_cache()

    def test_client_caching_with_real_connection(self):
        """Verify client caching works with real credentials."""
        from shared.config import get_settings
        get_settings.cache_clear()

        client1 = get_supabase_client()
        client2 = get_supabase_client()

        assert client1 is client2
