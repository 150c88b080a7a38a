"""
Database client factory for Supabase and the document store.

Provides the service-role client (for backend operations bypassing RLS) and
the process-wide DocumentStore the services are built on.
"""

import logging
from typing import Optional
from supabase import create_client, Client

from .config import get_settings
from .store import BaseDocumentStore, MemoryDocumentStore, SupabaseDocumentStore

logger = logging.getLogger(__name__)

# Module-level client cache
_service_client: Optional[Client] = None
_document_store: Optional[BaseDocumentStore] = None


def get_supabase_client() -> Client:
    """
    Get Supabase client with service role (bypasses RLS).

    Use this for backend operations that need full database access,
    such as the grant-index maintenance scan.

    Returns:
        Supabase client configured with service role key
    """
    global _service_client

    if _service_client is None:
        settings = get_settings()
        if not settings.supabase_url or not settings.supabase_service_role_key:
            raise RuntimeError(
                "Supabase configuration missing. "
                "Set SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY environment variables."
            )
        _service_client = create_client(
            settings.supabase_url,
            settings.supabase_service_role_key,
        )

    return _service_client


def get_document_store() -> BaseDocumentStore:
    """
    Get the process-wide document store.

    DOCUMENT_STORE selects the backend: "memory" (default) or "supabase".
    """
    global _document_store

    if _document_store is None:
        settings = get_settings()
        if settings.document_store == "supabase":
            _document_store = SupabaseDocumentStore(
                get_supabase_client(),
                table=settings.documents_table,
                poll_interval=settings.store_poll_interval_seconds,
                max_transaction_attempts=settings.store_transaction_max_attempts,
            )
        else:
            _document_store = MemoryDocumentStore(
                max_transaction_attempts=settings.store_transaction_max_attempts,
            )
        logger.info(f"Using {settings.document_store} document store")

    return _document_store


def reset_client_cache() -> None:
    """
    Reset the cached database client and document store.

    Useful for testing or when configuration changes.
    """
    global _service_client, _document_store
    _service_client = None
    _document_store = None
