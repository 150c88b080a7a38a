"""
Events module data models.

Calendar events live in the owner's user_data document under
`calendar_events`. shared_with holds the user IDs of the owner's
connections who may see the event.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field, field_validator


def _unique(ids: list[str]) -> list[str]:
    return list(dict.fromkeys(ids))


class CalendarEvent(BaseModel):
    """A dated event on the owner's calendar."""

    id: str = Field(..., description="Event ID (UUID)")
    title: str = Field(..., description="Event title")
    date: datetime = Field(..., description="When the event happens")
    shared_with: list[str] = Field(default_factory=list, description="Connection user IDs")
    needs_based: bool = Field(default=False, description="Created in response to a posted need")

    @field_validator("date")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def is_shared_with(self, user_id: str) -> bool:
        return user_id in self.shared_with


class SharedCalendarEvent(CalendarEvent):
    """An event as seen by a connection it is shared with."""

    owner_id: str
    owner_name: str = "Unknown"


# =============================================================================
# Request / response bodies
# =============================================================================


class CreateEventRequest(BaseModel):
    """Request body to add an event to the caller's calendar."""

    title: str = Field(..., min_length=1, max_length=200)
    date: datetime
    shared_with: list[str] = Field(default_factory=list)
    needs_based: bool = False

    @field_validator("shared_with")
    @classmethod
    def _dedupe(cls, value: list[str]) -> list[str]:
        return _unique(value)


class UpdateEventRequest(BaseModel):
    """Owner-editable event fields. None leaves a field unchanged."""

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    date: Optional[datetime] = None
    shared_with: Optional[list[str]] = None
    needs_based: Optional[bool] = None

    @field_validator("date")
    @classmethod
    def _assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @field_validator("shared_with")
    @classmethod
    def _dedupe(cls, value: Optional[list[str]]) -> Optional[list[str]]:
        return None if value is None else _unique(value)


class EventListResponse(BaseModel):
    events: list[CalendarEvent]
    total: int


class SharedEventListResponse(BaseModel):
    events: list[SharedCalendarEvent]
    total: int
