"""
Tests for shared models.
"""

import pytest
from datetime import datetime, timezone
from pydantic import ValidationError

from shared.models import AuthenticatedUser, Identity


class TestAuthenticatedUser:
    """Tests for the AuthenticatedUser model in shared."""

    def test_create_with_required_fields(self):
        """Should create user with only required fields."""
        user = AuthenticatedUser(id="user-123", email="test@example.com")
        assert user.id == "user-123"
        assert user.email == "test@example.com"

    def test_default_values(self):
        """Should have correct default values."""
        user = AuthenticatedUser(id="user-123", email="test@example.com")
        assert user.email_verified is False
        assert user.role == "user"
        assert user.name == ""
        assert user.picture == ""
        assert user.created_at is None
        assert user.last_sign_in is None

    def test_all_fields(self):
        """Should accept all fields."""
        now = datetime.now(timezone.utc)
        user = AuthenticatedUser(
            id="user-123",
            email="test@example.com",
            email_verified=True,
            name="Test User",
            picture="https://example.com/a.png",
            created_at=now,
            last_sign_in=now,
            role="admin",
        )
        assert user.email_verified is True
        assert user.role == "admin"
        assert user.name == "Test User"
        assert user.created_at == now

    def test_email_validation(self):
        """Should reject malformed emails."""
        with pytest.raises(ValidationError):
            AuthenticatedUser(id="user-123", email="not-an-email")

    def test_is_frozen(self):
        """Should be immutable."""
        user = AuthenticatedUser(id="user-123", email="test@example.com")
        with pytest.raises(ValidationError):
            user.name = "Changed"

    def test_ignores_extra_fields(self):
        """Extra JWT claims should be ignored."""
        user = AuthenticatedUser(id="user-123", email="test@example.com", aud="authenticated")
        assert not hasattr(user, "aud")


class TestToIdentity:
    def test_projects_display_fields(self):
        """Should carry id, name, email and picture over."""
        user = AuthenticatedUser(
            id="user-123",
            email="test@example.com",
            name="Test User",
            picture="https://example.com/a.png",
        )
        identity = user.to_identity()

        assert identity == Identity(
            user_id="user-123",
            name="Test User",
            email="test@example.com",
            picture="https://example.com/a.png",
        )

    def test_name_falls_back_to_email_local_part(self):
        """Users without a display name should be named after their email."""
        user = AuthenticatedUser(id="user-123", email="jane.doe@example.com")
        assert user.to_identity().name == "jane.doe"
