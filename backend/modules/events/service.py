"""
Event service implementation.

Calendar events are owner-scoped entries in user_data. Sharing is a list
of connection IDs on the event; there is no reverse index, so the
shared-with-me view reads the calendar of each of the caller's
connections.
"""

import asyncio
import logging
import uuid
from typing import Optional

from shared.store import Document, ITransaction
from modules.users.repository import USER_DATA_COLLECTION

from .interfaces import IEventService
from .models import CalendarEvent, CreateEventRequest, SharedCalendarEvent, UpdateEventRequest
from .repository import EVENTS_FIELD, EventRepository
from .exceptions import EventNotFoundError, EventShareTargetError

logger = logging.getLogger(__name__)


def _find(events: list[CalendarEvent], event_id: str) -> Optional[int]:
    for index, event in enumerate(events):
        if event.id == event_id:
            return index
    return None


class EventService(IEventService):
    """
    Calendar events on the document store.
    """

    def __init__(self, repository: EventRepository):
        self._repository = repository
        self._store = repository.store

    async def create_event(self, owner_id: str, body: CreateEventRequest) -> CalendarEvent:
        event = CalendarEvent(id=str(uuid.uuid4()), **body.model_dump())

        async def write(tx: ITransaction) -> None:
            owner_doc = await tx.get(USER_DATA_COLLECTION, owner_id)
            self._check_share_targets(owner_id, owner_doc, event.shared_with)
            events = self._repository.map_events(owner_doc)
            events.append(event)
            self._write_events(tx, owner_id, events)

        await self._store.run_transaction(write)
        logger.info(f"User {owner_id} created event {event.id}")
        return event

    async def list_events(self, owner_id: str) -> list[CalendarEvent]:
        events = await self._repository.list_events(owner_id)
        return sorted(events, key=lambda e: e.date)

    async def get_event(self, owner_id: str, event_id: str) -> CalendarEvent:
        events = await self._repository.list_events(owner_id)
        index = _find(events, event_id)
        if index is None:
            raise EventNotFoundError(owner_id, event_id)
        return events[index]

    async def update_event(
        self,
        owner_id: str,
        event_id: str,
        update: UpdateEventRequest,
    ) -> CalendarEvent:
        changes = update.model_dump(exclude_none=True)

        async def write(tx: ITransaction) -> CalendarEvent:
            owner_doc = await tx.get(USER_DATA_COLLECTION, owner_id)
            events = self._repository.map_events(owner_doc)
            index = _find(events, event_id)
            if index is None:
                raise EventNotFoundError(owner_id, event_id)
            if "shared_with" in changes:
                self._check_share_targets(owner_id, owner_doc, changes["shared_with"])

            events[index] = events[index].model_copy(update=changes)
            self._write_events(tx, owner_id, events)
            return events[index]

        event = await self._store.run_transaction(write)
        logger.debug(f"Updated event {event_id} for {owner_id}")
        return event

    async def delete_event(self, owner_id: str, event_id: str) -> None:
        async def write(tx: ITransaction) -> None:
            owner_doc = await tx.get(USER_DATA_COLLECTION, owner_id)
            events = self._repository.map_events(owner_doc)
            index = _find(events, event_id)
            if index is None:
                raise EventNotFoundError(owner_id, event_id)
            events.pop(index)
            self._write_events(tx, owner_id, events)

        await self._store.run_transaction(write)
        logger.info(f"User {owner_id} deleted event {event_id}")

    async def list_events_shared_with_me(self, user_id: str) -> list[SharedCalendarEvent]:
        viewer_doc = await self._repository.get_user_data(user_id)
        edges = self._repository.connections(viewer_doc)
        if not edges:
            return []

        owner_docs = await asyncio.gather(
            *(self._repository.get_user_data(edge.id) for edge in edges)
        )

        shared: list[SharedCalendarEvent] = []
        for edge, owner_doc in zip(edges, owner_docs):
            for event in self._repository.map_events(owner_doc):
                if not event.is_shared_with(user_id):
                    continue
                shared.append(SharedCalendarEvent(
                    **event.model_dump(),
                    owner_id=edge.id,
                    owner_name=edge.name or "Unknown",
                ))

        shared.sort(key=lambda e: e.date)
        return shared

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _check_share_targets(
        self,
        owner_id: str,
        owner_doc: Optional[Document],
        shared_with: list[str],
    ) -> None:
        connected = {c.id for c in self._repository.connections(owner_doc)}
        strangers = [user_id for user_id in shared_with if user_id not in connected]
        if strangers:
            raise EventShareTargetError(owner_id, strangers)

    def _write_events(self, tx: ITransaction, owner_id: str, events: list[CalendarEvent]) -> None:
        stored = [self._repository.to_stored(e) for e in events]
        tx.set(USER_DATA_COLLECTION, owner_id, {EVENTS_FIELD: stored}, merge=True)
