"""
Shared test fixtures and utilities.

This module provides common test infrastructure used across all test modules.
"""

from datetime import datetime, timezone, timedelta
from typing import Callable

import pytest
from jose import jwt

from api.dependencies import reset_container
from shared.config import get_settings
from shared.database import reset_client_cache
from shared.models import Identity
from shared.store import MemoryDocumentStore


# Test JWT secret (only for testing)
TEST_JWT_SECRET = "test-secret-key-for-testing-only"


def create_test_token(
    user_id: str = "test-user-123",
    email: str = "test@example.com",
    name: str = "Test User",
    expired: bool = False,
    email_verified: bool = True,
    secret: str = TEST_JWT_SECRET,
) -> str:
    """
    Create a test JWT token for authentication.

    Args:
        user_id: User ID to include in the token
        email: Email to include in the token
        name: Display name placed in user_metadata
        expired: If True, creates an expired token
        email_verified: Whether the email should be marked as verified
        secret: Signing secret

    Returns:
        JWT token string
    """
    now = datetime.now(timezone.utc)
    exp = now - timedelta(hours=1) if expired else now + timedelta(hours=1)

    payload = {
        "sub": user_id,
        "email": email,
        "email_confirmed_at": now.isoformat() if email_verified else None,
        "aud": "authenticated",
        "role": "authenticated",
        "exp": int(exp.timestamp()),
        "iat": int(now.timestamp()),
        "user_metadata": {
            "full_name": name,
            "avatar_url": f"https://avatars.example.com/{user_id}.png",
        },
    }
    return jwt.encode(payload, secret, algorithm="HS256")


@pytest.fixture(autouse=True)
def reset_singletons():
    """Fresh settings, document store and service container for every test."""
    get_settings.cache_clear()
    reset_client_cache()
    reset_container()
    yield
    reset_container()
    reset_client_cache()
    get_settings.cache_clear()


@pytest.fixture
def jwt_secret(monkeypatch) -> str:
    """Configure the API to accept tokens from create_test_token."""
    monkeypatch.setenv("TRUSTCIRCLE_SUPABASE_JWT_SECRET", TEST_JWT_SECRET)
    return TEST_JWT_SECRET


@pytest.fixture
def make_headers(jwt_secret: str) -> Callable[..., dict[str, str]]:
    """Build Authorization headers for any test user."""

    def _make(user_id: str = "test-user-123", **claims) -> dict[str, str]:
        token = create_test_token(user_id=user_id, **claims)
        return {"Authorization": f"Bearer {token}"}

    return _make


@pytest.fixture
def auth_headers(make_headers) -> dict[str, str]:
    """Authorization headers for the default test user."""
    return make_headers()


@pytest.fixture
def store() -> MemoryDocumentStore:
    """An empty in-memory document store."""
    return MemoryDocumentStore()


@pytest.fixture
def alice() -> Identity:
    return Identity(
        user_id="alice-id",
        name="Alice",
        email="alice@example.com",
        picture="https://avatars.example.com/alice.png",
    )


@pytest.fixture
def bob() -> Identity:
    return Identity(
        user_id="bob-id",
        name="Bob",
        email="bob@example.com",
        picture="https://avatars.example.com/bob.png",
    )


@pytest.fixture
def carol() -> Identity:
    return Identity(user_id="carol-id", name="Carol", email="carol@example.com")
