"""
Vault repository for document access.

Encapsulates two stores of the same facts:
- user_data/{owner_id}.vaults: the owner's vaults with their grants
  (source of truth)
- vault_grants/{recipient_id}.grants: reverse index of the grants naming a
  recipient, so the recipient's view does not scan every user
"""

from typing import Any, Optional

from shared.repository import BaseRepository
from shared.store import Document, Query
from modules.users.repository import USER_DATA_COLLECTION

from .models import GrantIndexEntry, Vault

VAULT_GRANTS_COLLECTION = "vault_grants"


class VaultRepository(BaseRepository[Vault]):
    """
    Repository for vaults and the grant index.

    Note: This repository does NOT perform ownership checks. Transactional
    read-modify-write sequences live in the service.
    """

    async def list_vaults(self, owner_id: str) -> list[Vault]:
        document = await self._store.get(USER_DATA_COLLECTION, owner_id)
        return self.map_vaults(document)

    async def list_grant_entries(self, recipient_id: str) -> list[GrantIndexEntry]:
        document = await self._store.get(VAULT_GRANTS_COLLECTION, recipient_id)
        return self.map_grant_entries(document)

    async def list_all_user_data(self) -> list[Document]:
        """Every user_data document. Full scan; index maintenance only."""
        return await self._store.query(Query(collection=USER_DATA_COLLECTION))

    async def list_all_grant_indexes(self) -> list[Document]:
        return await self._store.query(Query(collection=VAULT_GRANTS_COLLECTION))

    async def write_grant_entries(self, recipient_id: str, entries: list[GrantIndexEntry]) -> None:
        if entries:
            await self._store.set(
                VAULT_GRANTS_COLLECTION,
                recipient_id,
                {"grants": [e.model_dump(mode="json") for e in entries]},
            )
        else:
            await self._store.delete(VAULT_GRANTS_COLLECTION, recipient_id)

    # -------------------------------------------------------------------------
    # Mapping
    # -------------------------------------------------------------------------

    def raw_vaults(self, document: Optional[Document]) -> list[dict[str, Any]]:
        """The stored vaults array, empty when the document is missing."""
        if document is None:
            return []
        return list(document.data.get("vaults") or [])

    def map_vaults(self, document: Optional[Document]) -> list[Vault]:
        return [self.map_to_vault(v) for v in self.raw_vaults(document)]

    def map_to_vault(self, data: dict[str, Any]) -> Vault:
        return Vault(
            id=str(data["id"]),
            name=data.get("name", ""),
            description=data.get("description") or "",
            created_at=data["created_at"],
            shared_with=data.get("shared_with") or [],
        )

    def to_stored(self, vault: Vault) -> dict[str, Any]:
        return vault.model_dump(mode="json")

    def connection_ids(self, document: Optional[Document]) -> set[str]:
        """IDs of the owner's connections, read from the same user_data document."""
        if document is None:
            return set()
        return {str(c["id"]) for c in document.data.get("connections") or [] if "id" in c}

    def raw_grant_entries(self, document: Optional[Document]) -> list[dict[str, Any]]:
        if document is None:
            return []
        return list(document.data.get("grants") or [])

    def map_grant_entries(self, document: Optional[Document]) -> list[GrantIndexEntry]:
        return [GrantIndexEntry(**e) for e in self.raw_grant_entries(document)]
