"""
Vaults module interface.

Access control here is a display-time filter. The document store's own
rules are the enforcement point; these operations assume reads that fail
ownership-or-grant are rejected by the store.
"""

from datetime import datetime
from typing import Awaitable, Callable, Optional, Protocol, Union, runtime_checkable

from shared.store import ISubscription

from .models import SharedVault, UpdateVaultRequest, Vault, VaultAccess

SharedVaultsCallback = Callable[[list[SharedVault]], Union[None, Awaitable[None]]]


@runtime_checkable
class IVaultAccessController(Protocol):
    """
    Interface for vault ownership and grants.

    Every mutation is a transaction on the owner's user_data document; grant
    changes also rewrite the recipient's vault_grants index entry in the
    same transaction.
    """

    async def create_vault(self, owner_id: str, name: str, description: str = "") -> Vault:
        """Append a new vault with no grants to the owner's list."""
        ...

    async def get_vault(self, owner_id: str, vault_id: str) -> Vault:
        """
        Raises:
            VaultNotFoundError: If the owner has no such vault
        """
        ...

    async def update_vault(
        self,
        owner_id: str,
        vault_id: str,
        update: UpdateVaultRequest,
    ) -> Vault:
        ...

    async def delete_vault(self, owner_id: str, vault_id: str) -> None:
        """Delete a vault and drop its grants from the recipients' index."""
        ...

    async def grant_access(
        self,
        owner_id: str,
        vault_id: str,
        connection_id: str,
        expires_at: Optional[datetime] = None,
        can_revoke: bool = True,
    ) -> VaultAccess:
        """
        Grant a connection read access to a vault.

        Raises:
            VaultNotFoundError: If the owner has no such vault
            VaultAccessAlreadyGrantedError: If the connection already has a grant
            GrantConnectionNotFoundError: If connection validation is enabled and
                connection_id is not one of the owner's connections
        """
        ...

    async def revoke_access(self, owner_id: str, vault_id: str, connection_id: str) -> bool:
        """
        Remove the connection's grant. No-op if absent.

        Returns:
            True if a grant was removed
        """
        ...

    async def list_owned_vaults(self, owner_id: str) -> list[Vault]:
        ...

    async def list_vaults_shared_with_me(
        self,
        user_id: str,
        active_only: bool = False,
    ) -> list[SharedVault]:
        """
        Vaults of other users whose grants name user_id.

        Expired grants are included unless active_only is set.
        """
        ...

    async def has_access(
        self,
        owner_id: str,
        vault_id: str,
        user_id: str,
        at: Optional[datetime] = None,
    ) -> bool:
        """True if user_id owns the vault or holds an unexpired grant at `at`."""
        ...

    async def subscribe_vaults_shared_with_me(
        self,
        user_id: str,
        on_change: SharedVaultsCallback,
    ) -> ISubscription:
        """
        Live view of list_vaults_shared_with_me.

        Driven by the grant index and by the documents of the owners it
        names, so renames and other owner edits are pushed too.
        """
        ...

    async def rebuild_grant_index(self) -> int:
        """
        Rebuild vault_grants from every owner's vaults.

        Full scan; for backfilling or repairing the index.

        Returns:
            Number of index entries written
        """
        ...
