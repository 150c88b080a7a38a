"""
Event repository for document access.

Encapsulates the `calendar_events` array of each user's user_data
document. The owner's connections are read from the same document to
validate shared_with and to find whose calendars a viewer can see.
"""

from typing import Any, Optional

from shared.repository import BaseRepository
from shared.store import Document, DocumentStore
from modules.users.repository import USER_DATA_COLLECTION
from modules.connections.models import Connection
from modules.connections.repository import ConnectionRepository

from .models import CalendarEvent

EVENTS_FIELD = "calendar_events"


class EventRepository(BaseRepository[CalendarEvent]):
    """
    Repository for calendar events.

    Note: This repository does NOT perform ownership checks. Transactional
    read-modify-write sequences live in the service.
    """

    def __init__(self, store: DocumentStore) -> None:
        super().__init__(store)
        self._edges = ConnectionRepository(store)

    async def get_user_data(self, user_id: str) -> Optional[Document]:
        return await self._store.get(USER_DATA_COLLECTION, user_id)

    async def list_events(self, owner_id: str) -> list[CalendarEvent]:
        return self.map_events(await self.get_user_data(owner_id))

    # -------------------------------------------------------------------------
    # Mapping
    # -------------------------------------------------------------------------

    def raw_events(self, document: Optional[Document]) -> list[dict[str, Any]]:
        """The stored events array, empty when the document is missing."""
        if document is None:
            return []
        return list(document.data.get(EVENTS_FIELD) or [])

    def map_events(self, document: Optional[Document]) -> list[CalendarEvent]:
        return [self.map_to_event(e) for e in self.raw_events(document)]

    def map_to_event(self, data: dict[str, Any]) -> CalendarEvent:
        return CalendarEvent(
            id=str(data["id"]),
            title=data.get("title", ""),
            date=data["date"],
            shared_with=data.get("shared_with") or [],
            needs_based=bool(data.get("needs_based", False)),
        )

    def to_stored(self, event: CalendarEvent) -> dict[str, Any]:
        return event.model_dump(mode="json")

    def connections(self, document: Optional[Document]) -> list[Connection]:
        """The owner's edges, read from the same user_data document."""
        return self._edges.map_connections(document)
