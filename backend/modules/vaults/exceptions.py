"""
Vaults module exceptions.
"""

from shared.exceptions import NotFoundError, AlreadyExistsError, ValidationError


class VaultNotFoundError(NotFoundError):
    """Raised when a vault ID does not resolve in the owner's record."""

    def __init__(self, owner_id: str, vault_id: str):
        super().__init__(
            f"Vault not found: {vault_id}",
            code="VAULT_NOT_FOUND",
            details={"owner_id": owner_id, "vault_id": vault_id},
        )


class VaultAccessAlreadyGrantedError(AlreadyExistsError):
    """Raised when a connection already has a grant on the vault."""

    def __init__(self, vault_id: str, connection_id: str):
        super().__init__(
            f"Connection {connection_id} already has access to vault {vault_id}",
            code="ACCESS_ALREADY_GRANTED",
            details={"vault_id": vault_id, "connection_id": connection_id},
        )


class GrantConnectionNotFoundError(ValidationError):
    """Raised when granting to a user who is not one of the owner's connections."""

    def __init__(self, owner_id: str, connection_id: str):
        super().__init__(
            f"Cannot grant access to {connection_id}: not a connection",
            code="GRANT_CONNECTION_NOT_FOUND",
            details={"owner_id": owner_id, "connection_id": connection_id},
        )
