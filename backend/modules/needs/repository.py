"""
Need repository for document access.

Encapsulates the `needs` array of each user's user_data document, plus the
poster's connection edges that decide who may see each need.
"""

from typing import Any, Optional

from shared.repository import BaseRepository
from shared.store import Document, DocumentStore
from modules.users.repository import USER_DATA_COLLECTION
from modules.connections.models import Connection
from modules.connections.repository import ConnectionRepository

from .models import Need

NEEDS_FIELD = "needs"


class NeedRepository(BaseRepository[Need]):
    """
    Repository for posted needs.

    Note: This repository does NOT perform ownership or visibility checks.
    """

    def __init__(self, store: DocumentStore) -> None:
        super().__init__(store)
        self._edges = ConnectionRepository(store)

    async def get_user_data(self, user_id: str) -> Optional[Document]:
        return await self._store.get(USER_DATA_COLLECTION, user_id)

    async def list_needs(self, owner_id: str) -> list[Need]:
        return self.map_needs(await self.get_user_data(owner_id))

    def raw_needs(self, document: Optional[Document]) -> list[dict[str, Any]]:
        if document is None:
            return []
        return list(document.data.get(NEEDS_FIELD) or [])

    def map_needs(self, document: Optional[Document]) -> list[Need]:
        return [self.map_to_need(n) for n in self.raw_needs(document)]

    def map_to_need(self, data: dict[str, Any]) -> Need:
        return Need(
            id=str(data["id"]),
            category=data["category"],
            description=data.get("description", ""),
            posted_by=data.get("posted_by") or "Unknown",
            posted_at=data["posted_at"],
            trust_level_required=data.get("trust_level_required") or "known",
        )

    def to_stored(self, need: Need) -> dict[str, Any]:
        return need.model_dump(mode="json")

    def connections(self, document: Optional[Document]) -> list[Connection]:
        return self._edges.map_connections(document)
