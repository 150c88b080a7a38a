"""
Shared infrastructure for TrustCircle backend.

This package contains cross-cutting concerns that are used by multiple modules:
- config: Centralized settings management
- database: Supabase client and document store factory
- exceptions: Base exception classes
- store: Document store adapter (interface, memory and Supabase backends)

Note: Business logic should NOT go here. This is for infrastructure only.
"""

from .config import Settings, get_settings
from .database import (
    get_supabase_client,
    get_document_store,
    reset_client_cache,
)
from .exceptions import (
    TrustCircleError,
    NotFoundError,
    AlreadyExistsError,
    ValidationError,
    AuthenticationError,
    AuthorizationError,
    ExternalServiceError,
    TransientStoreError,
)
from .models import AuthenticatedUser, Identity

__all__ = [
    "Settings",
    "get_settings",
    "get_supabase_client",
    "get_document_store",
    "reset_client_cache",
    "TrustCircleError",
    "NotFoundError",
    "AlreadyExistsError",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "ExternalServiceError",
    "TransientStoreError",
    "AuthenticatedUser",
    "Identity",
]
