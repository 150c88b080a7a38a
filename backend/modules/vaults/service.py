"""
Vault access controller implementation.

Grants live on the vault inside the owner's user_data document. Each grant
is mirrored into vault_grants/{recipient_id} within the same transaction,
so a recipient's shared-with-me view is one index read plus one read per
owner instead of a scan of every user.
"""

import asyncio
import inspect
import logging
import uuid
from datetime import datetime
from typing import Optional

from shared.config import get_settings
from shared.repository import utc_now
from shared.store import ISubscription, ITransaction, Subscription
from modules.users.interfaces import IUserService
from modules.users.repository import USER_DATA_COLLECTION

from .interfaces import IVaultAccessController, SharedVaultsCallback
from .models import (
    GrantIndexEntry,
    SharedVault,
    UpdateVaultRequest,
    Vault,
    VaultAccess,
)
from .repository import VAULT_GRANTS_COLLECTION, VaultRepository
from .exceptions import (
    GrantConnectionNotFoundError,
    VaultAccessAlreadyGrantedError,
    VaultNotFoundError,
)

logger = logging.getLogger(__name__)


def _find(vaults: list[Vault], vault_id: str) -> Optional[int]:
    for index, vault in enumerate(vaults):
        if vault.id == vault_id:
            return index
    return None


class VaultAccessController(IVaultAccessController):
    """
    Vault ownership and grants on the document store.
    """

    def __init__(
        self,
        repository: VaultRepository,
        users: Optional[IUserService] = None,
        require_connection: Optional[bool] = None,
    ):
        self._repository = repository
        self._store = repository.store
        self._users = users
        if require_connection is None:
            require_connection = get_settings().vault_require_connection
        self._require_connection = require_connection

    # -------------------------------------------------------------------------
    # Owner operations
    # -------------------------------------------------------------------------

    async def create_vault(self, owner_id: str, name: str, description: str = "") -> Vault:
        vault = Vault(
            id=str(uuid.uuid4()),
            name=name,
            description=description,
            created_at=utc_now(),
            shared_with=[],
        )

        async def write(tx: ITransaction) -> None:
            owner_doc = await tx.get(USER_DATA_COLLECTION, owner_id)
            stored = self._repository.raw_vaults(owner_doc)
            stored.append(self._repository.to_stored(vault))
            tx.set(USER_DATA_COLLECTION, owner_id, {"vaults": stored}, merge=True)

        await self._store.run_transaction(write)
        logger.info(f"User {owner_id} created vault {vault.id}")
        return vault

    async def get_vault(self, owner_id: str, vault_id: str) -> Vault:
        vaults = await self._repository.list_vaults(owner_id)
        index = _find(vaults, vault_id)
        if index is None:
            raise VaultNotFoundError(owner_id, vault_id)
        return vaults[index]

    async def update_vault(
        self,
        owner_id: str,
        vault_id: str,
        update: UpdateVaultRequest,
    ) -> Vault:
        async def write(tx: ITransaction) -> Vault:
            owner_doc = await tx.get(USER_DATA_COLLECTION, owner_id)
            vaults = self._repository.map_vaults(owner_doc)
            index = _find(vaults, vault_id)
            if index is None:
                raise VaultNotFoundError(owner_id, vault_id)

            vaults[index] = vaults[index].model_copy(update=update.model_dump(exclude_none=True))
            self._write_vaults(tx, owner_id, vaults)
            return vaults[index]

        return await self._store.run_transaction(write)

    async def delete_vault(self, owner_id: str, vault_id: str) -> None:
        async def write(tx: ITransaction) -> None:
            owner_doc = await tx.get(USER_DATA_COLLECTION, owner_id)
            vaults = self._repository.map_vaults(owner_doc)
            index = _find(vaults, vault_id)
            if index is None:
                raise VaultNotFoundError(owner_id, vault_id)

            vault = vaults.pop(index)
            # All reads happen before the first buffered write.
            indexes = {}
            for access in vault.shared_with:
                indexes[access.connection_id] = await tx.get(
                    VAULT_GRANTS_COLLECTION, access.connection_id
                )

            self._write_vaults(tx, owner_id, vaults)
            for recipient_id, index_doc in indexes.items():
                entries = self._repository.map_grant_entries(index_doc)
                self._write_index(tx, recipient_id, self._without(entries, owner_id, vault_id))

        await self._store.run_transaction(write)
        logger.info(f"User {owner_id} deleted vault {vault_id}")

    async def list_owned_vaults(self, owner_id: str) -> list[Vault]:
        return await self._repository.list_vaults(owner_id)

    # -------------------------------------------------------------------------
    # Grants
    # -------------------------------------------------------------------------

    async def grant_access(
        self,
        owner_id: str,
        vault_id: str,
        connection_id: str,
        expires_at: Optional[datetime] = None,
        can_revoke: bool = True,
    ) -> VaultAccess:
        async def write(tx: ITransaction) -> VaultAccess:
            owner_doc = await tx.get(USER_DATA_COLLECTION, owner_id)
            index_doc = await tx.get(VAULT_GRANTS_COLLECTION, connection_id)

            vaults = self._repository.map_vaults(owner_doc)
            index = _find(vaults, vault_id)
            if index is None:
                raise VaultNotFoundError(owner_id, vault_id)
            vault = vaults[index]

            if self._require_connection:
                if connection_id not in self._repository.connection_ids(owner_doc):
                    raise GrantConnectionNotFoundError(owner_id, connection_id)

            if vault.grant_for(connection_id) is not None:
                raise VaultAccessAlreadyGrantedError(vault_id, connection_id)

            access = VaultAccess(
                connection_id=connection_id,
                granted_at=utc_now(),
                expires_at=expires_at,
                can_revoke=can_revoke,
            )
            vaults[index] = vault.model_copy(update={"shared_with": [*vault.shared_with, access]})
            self._write_vaults(tx, owner_id, vaults)

            entries = self._without(
                self._repository.map_grant_entries(index_doc), owner_id, vault_id
            )
            entries.append(
                GrantIndexEntry(owner_id=owner_id, vault_id=vault_id, granted_at=access.granted_at)
            )
            self._write_index(tx, connection_id, entries)
            return access

        access = await self._store.run_transaction(write)
        logger.info(f"User {owner_id} granted {connection_id} access to vault {vault_id}")
        return access

    async def revoke_access(self, owner_id: str, vault_id: str, connection_id: str) -> bool:
        async def write(tx: ITransaction) -> bool:
            owner_doc = await tx.get(USER_DATA_COLLECTION, owner_id)
            index_doc = await tx.get(VAULT_GRANTS_COLLECTION, connection_id)

            vaults = self._repository.map_vaults(owner_doc)
            index = _find(vaults, vault_id)
            if index is None:
                raise VaultNotFoundError(owner_id, vault_id)
            vault = vaults[index]

            remaining = [a for a in vault.shared_with if a.connection_id != connection_id]
            entries = self._repository.map_grant_entries(index_doc)
            remaining_entries = self._without(entries, owner_id, vault_id)

            removed = len(remaining) != len(vault.shared_with)
            if not removed and len(remaining_entries) == len(entries):
                return False

            if removed:
                vaults[index] = vault.model_copy(update={"shared_with": remaining})
                self._write_vaults(tx, owner_id, vaults)
            self._write_index(tx, connection_id, remaining_entries)
            return removed

        removed = await self._store.run_transaction(write)
        if removed:
            logger.info(f"User {owner_id} revoked {connection_id} access to vault {vault_id}")
        return removed

    # -------------------------------------------------------------------------
    # Recipient view
    # -------------------------------------------------------------------------

    async def list_vaults_shared_with_me(
        self,
        user_id: str,
        active_only: bool = False,
    ) -> list[SharedVault]:
        entries = await self._repository.list_grant_entries(user_id)
        owner_ids = list(dict.fromkeys(e.owner_id for e in entries))
        if not owner_ids:
            return []

        owned = await asyncio.gather(*(self._repository.list_vaults(o) for o in owner_ids))
        names = await asyncio.gather(*(self._owner_name(o) for o in owner_ids))

        now = utc_now()
        shared: list[tuple[datetime, SharedVault]] = []
        for owner_id, vaults, owner_name in zip(owner_ids, owned, names):
            wanted = {e.vault_id for e in entries if e.owner_id == owner_id}
            for vault in vaults:
                if vault.id not in wanted:
                    continue
                # The owner's record is authoritative; a stale index entry is skipped.
                access = vault.grant_for(user_id)
                if access is None:
                    continue
                if active_only and access.is_expired(now):
                    continue
                shared.append((
                    access.granted_at,
                    SharedVault(
                        **vault.model_dump(),
                        owner_id=owner_id,
                        owner_name=owner_name,
                    ),
                ))

        shared.sort(key=lambda item: item[0])
        return [vault for _, vault in shared]

    async def has_access(
        self,
        owner_id: str,
        vault_id: str,
        user_id: str,
        at: Optional[datetime] = None,
    ) -> bool:
        vaults = await self._repository.list_vaults(owner_id)
        index = _find(vaults, vault_id)
        if index is None:
            return False
        if user_id == owner_id:
            return True
        access = vaults[index].grant_for(user_id)
        return access is not None and not access.is_expired(at or utc_now())

    async def subscribe_vaults_shared_with_me(
        self,
        user_id: str,
        on_change: SharedVaultsCallback,
    ) -> ISubscription:
        watch = _SharedVaultsWatch(self, user_id, on_change)
        return await watch.start()

    # -------------------------------------------------------------------------
    # Index maintenance
    # -------------------------------------------------------------------------

    async def rebuild_grant_index(self) -> int:
        rebuilt: dict[str, list[GrantIndexEntry]] = {}
        for document in await self._repository.list_all_user_data():
            for vault in self._repository.map_vaults(document):
                for access in vault.shared_with:
                    rebuilt.setdefault(access.connection_id, []).append(
                        GrantIndexEntry(
                            owner_id=document.id,
                            vault_id=vault.id,
                            granted_at=access.granted_at,
                        )
                    )

        stale = [
            d.id for d in await self._repository.list_all_grant_indexes() if d.id not in rebuilt
        ]
        for recipient_id in stale:
            await self._repository.write_grant_entries(recipient_id, [])
        for recipient_id, entries in rebuilt.items():
            await self._repository.write_grant_entries(recipient_id, entries)

        total = sum(len(entries) for entries in rebuilt.values())
        logger.info(
            f"Rebuilt vault grant index: {total} entries for {len(rebuilt)} recipient(s), "
            f"{len(stale)} stale index document(s) removed"
        )
        return total

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    async def _owner_name(self, owner_id: str) -> str:
        if self._users is None:
            return "Unknown"
        return await self._users.get_display_name(owner_id)

    def _write_vaults(self, tx: ITransaction, owner_id: str, vaults: list[Vault]) -> None:
        stored = [self._repository.to_stored(v) for v in vaults]
        tx.set(USER_DATA_COLLECTION, owner_id, {"vaults": stored}, merge=True)

    def _write_index(self, tx: ITransaction, recipient_id: str, entries: list[GrantIndexEntry]) -> None:
        if entries:
            tx.set(
                VAULT_GRANTS_COLLECTION,
                recipient_id,
                {"grants": [e.model_dump(mode="json") for e in entries]},
            )
        else:
            tx.delete(VAULT_GRANTS_COLLECTION, recipient_id)

    @staticmethod
    def _without(
        entries: list[GrantIndexEntry],
        owner_id: str,
        vault_id: str,
    ) -> list[GrantIndexEntry]:
        return [e for e in entries if not (e.owner_id == owner_id and e.vault_id == vault_id)]


class _SharedVaultsWatch:
    """
    Live shared-with-me view for one recipient.

    Listens to the recipient's grant index and to the user_data document of
    every owner it names, so owner edits to a shared vault are pushed as
    well as grants and revocations. A snapshot is pushed only when it
    differs from the previous one.
    """

    def __init__(
        self,
        controller: VaultAccessController,
        user_id: str,
        on_change: SharedVaultsCallback,
    ):
        self._controller = controller
        self._store = controller._store
        self._user_id = user_id
        self._on_change = on_change
        self._index: Optional[ISubscription] = None
        self._owners: dict[str, ISubscription] = {}
        self._last: Optional[list[dict]] = None
        self._closed = False

    async def start(self) -> Subscription:
        self._index = await self._store.subscribe_document(
            VAULT_GRANTS_COLLECTION, self._user_id, self._on_index
        )
        return Subscription(self.close)

    def close(self) -> None:
        self._closed = True
        if self._index is not None:
            self._index.unsubscribe()
        for subscription in self._owners.values():
            subscription.unsubscribe()
        self._owners.clear()

    async def _on_index(self, document) -> None:
        entries = self._controller._repository.map_grant_entries(document)
        owner_ids = {e.owner_id for e in entries}

        for owner_id in list(self._owners):
            if owner_id not in owner_ids:
                self._owners.pop(owner_id).unsubscribe()
        for owner_id in owner_ids - self._owners.keys():
            subscription = await self._store.subscribe_document(
                USER_DATA_COLLECTION, owner_id, self._on_owner
            )
            if self._closed:
                subscription.unsubscribe()
                return
            self._owners[owner_id] = subscription

        await self._push()

    async def _on_owner(self, _document) -> None:
        await self._push()

    async def _push(self) -> None:
        vaults = await self._controller.list_vaults_shared_with_me(self._user_id)
        snapshot = [v.model_dump() for v in vaults]
        if self._closed or snapshot == self._last:
            return
        self._last = snapshot
        result = self._on_change(vaults)
        if inspect.isawaitable(result):
            await result
