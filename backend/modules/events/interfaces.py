"""
Events module interface.
"""

from typing import Protocol, runtime_checkable

from .models import (
    CalendarEvent,
    CreateEventRequest,
    SharedCalendarEvent,
    UpdateEventRequest,
)


@runtime_checkable
class IEventService(Protocol):
    """
    Interface for calendar event operations.

    Every mutation is a transaction on the owner's user_data document.
    """

    async def create_event(self, owner_id: str, body: CreateEventRequest) -> CalendarEvent:
        """
        Append a new event to the owner's calendar.

        Raises:
            EventShareTargetError: If shared_with names a user who is not
                one of the owner's connections
        """
        ...

    async def list_events(self, owner_id: str) -> list[CalendarEvent]:
        """The owner's events, earliest first."""
        ...

    async def get_event(self, owner_id: str, event_id: str) -> CalendarEvent:
        """
        Raises:
            EventNotFoundError: If the owner has no such event
        """
        ...

    async def update_event(
        self,
        owner_id: str,
        event_id: str,
        update: UpdateEventRequest,
    ) -> CalendarEvent:
        """
        Apply the given fields to one event.

        Raises:
            EventNotFoundError: If the owner has no such event
            EventShareTargetError: If the new shared_with names a non-connection
        """
        ...

    async def delete_event(self, owner_id: str, event_id: str) -> None:
        """
        Raises:
            EventNotFoundError: If the owner has no such event
        """
        ...

    async def list_events_shared_with_me(self, user_id: str) -> list[SharedCalendarEvent]:
        """
        Events on the calendars of user_id's connections that list user_id
        in shared_with, earliest first.

        Only owners the caller still holds an edge to are consulted.
        """
        ...
