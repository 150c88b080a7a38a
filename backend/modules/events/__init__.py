"""
Events module.

Handles each user's calendar events and sharing them with connections.

Public API:
- IEventService: Interface for calendar event operations
- CalendarEvent, SharedCalendarEvent: Core models
- Event exceptions: EventNotFoundError, EventShareTargetError
"""

from .interfaces import IEventService
from .models import (
    CalendarEvent,
    SharedCalendarEvent,
    CreateEventRequest,
    UpdateEventRequest,
)
from .exceptions import (
    EventNotFoundError,
    EventShareTargetError,
)

__all__ = [
    # Interface
    "IEventService",
    # Models
    "CalendarEvent",
    "SharedCalendarEvent",
    "CreateEventRequest",
    "UpdateEventRequest",
    # Exceptions
    "EventNotFoundError",
    "EventShareTargetError",
]
