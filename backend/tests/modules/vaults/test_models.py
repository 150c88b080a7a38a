"""Tests for vaults module models."""

import pytest
from datetime import datetime, timedelta, timezone
from pydantic import ValidationError

from modules.vaults.models import (
    CreateVaultRequest,
    SharedVault,
    UpdateVaultRequest,
    Vault,
    VaultAccess,
)

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


class TestVaultAccess:
    def test_no_expiry_never_expires(self):
        access = VaultAccess(connection_id="bob-id", granted_at=NOW)
        assert access.is_expired(NOW + timedelta(days=3650)) is False
        assert access.can_revoke is True

    def test_expired_at_and_after_expiry(self):
        access = VaultAccess(connection_id="bob-id", granted_at=NOW, expires_at=NOW)
        assert access.is_expired(NOW - timedelta(microseconds=1)) is False
        assert access.is_expired(NOW) is True

    def test_naive_datetimes_are_utc(self):
        access = VaultAccess(
            connection_id="bob-id",
            granted_at=datetime(2024, 6, 1),
            expires_at=datetime(2024, 6, 2),
        )
        assert access.granted_at.tzinfo == timezone.utc
        assert access.is_expired(datetime(2024, 6, 3)) is True


class TestVault:
    def test_grant_for(self):
        vault = Vault(
            id="v1",
            name="Photos",
            created_at=NOW,
            shared_with=[VaultAccess(connection_id="bob-id", granted_at=NOW)],
        )
        assert vault.grant_for("bob-id").connection_id == "bob-id"
        assert vault.grant_for("carol-id") is None

    def test_shared_vault_defaults(self):
        shared = SharedVault(id="v1", name="Photos", created_at=NOW, owner_id="alice-id")
        assert shared.owner_name == "Unknown"
        assert shared.description == ""


class TestRequestBodies:
    def test_name_required(self):
        with pytest.raises(ValidationError):
            CreateVaultRequest(name="")

    def test_name_length(self):
        with pytest.raises(ValidationError):
            CreateVaultRequest(name="x" * 201)

    def test_update_partial(self):
        assert UpdateVaultRequest(name="Albums").model_dump(exclude_none=True) == {"name": "Albums"}
