"""
Vaults module data models.

Vaults live in the owner's user_data document under `vaults`. Ownership is
implied by that location; owner_id/owner_name only appear on SharedVault,
the recipient-side view.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class VaultAccess(BaseModel):
    """
    One grant on a vault. At most one per connection.

    expires_at is advisory: nothing removes an expired grant. Consumers
    check it at read time with is_expired().
    """

    connection_id: str = Field(..., description="User ID of the grantee")
    granted_at: datetime = Field(..., description="When this grant was created")
    expires_at: Optional[datetime] = Field(None, description="Advisory expiry")
    can_revoke: bool = Field(default=True, description="Display hint for the owner's UI")

    @field_validator("granted_at", "expires_at")
    @classmethod
    def _assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def is_expired(self, at: datetime) -> bool:
        if self.expires_at is None:
            return False
        if at.tzinfo is None:
            at = at.replace(tzinfo=timezone.utc)
        return self.expires_at <= at


class Vault(BaseModel):
    """A named, access-controlled vault owned by one user."""

    id: str = Field(..., description="Vault ID (UUID)")
    name: str = Field(..., description="Vault name (not unique per owner)")
    description: str = Field(default="", description="Free-form description")
    created_at: datetime
    shared_with: list[VaultAccess] = Field(default_factory=list)

    def grant_for(self, connection_id: str) -> Optional[VaultAccess]:
        for access in self.shared_with:
            if access.connection_id == connection_id:
                return access
        return None


class SharedVault(Vault):
    """A vault as seen by a grantee, with the owner attached for display."""

    owner_id: str
    owner_name: str = "Unknown"


class GrantIndexEntry(BaseModel):
    """Reverse index entry stored in vault_grants/{recipient_id}."""

    owner_id: str
    vault_id: str
    granted_at: datetime


# =============================================================================
# Request / response bodies
# =============================================================================


class CreateVaultRequest(BaseModel):
    """Request body to create a vault."""

    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field(default="", max_length=2000)


class UpdateVaultRequest(BaseModel):
    """Owner-editable vault fields. None leaves a field unchanged."""

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)


class GrantAccessRequest(BaseModel):
    """Request body to grant a connection access to a vault."""

    connection_id: str = Field(..., min_length=1)
    expires_at: Optional[datetime] = None
    can_revoke: bool = True


class VaultListResponse(BaseModel):
    vaults: list[Vault]
    total: int


class SharedVaultListResponse(BaseModel):
    vaults: list[SharedVault]
    total: int
