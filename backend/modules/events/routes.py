"""
Calendar event API endpoints.

The caller is always the owner for mutations; /shared lists events other
users have shared with the caller.
"""

from fastapi import APIRouter, Depends

from api.middleware.auth import get_current_user
from api.dependencies import get_event_service
from shared.models import AuthenticatedUser

from .interfaces import IEventService
from .models import (
    CalendarEvent,
    CreateEventRequest,
    EventListResponse,
    SharedEventListResponse,
    UpdateEventRequest,
)

router = APIRouter()


@router.post("", response_model=CalendarEvent, status_code=201)
async def create_event(
    body: CreateEventRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    service: IEventService = Depends(get_event_service),
) -> CalendarEvent:
    """
    Add an event to the caller's calendar.

    shared_with may only name the caller's connections.
    """
    return await service.create_event(user.id, body)


@router.get("", response_model=EventListResponse)
async def list_events(
    user: AuthenticatedUser = Depends(get_current_user),
    service: IEventService = Depends(get_event_service),
) -> EventListResponse:
    events = await service.list_events(user.id)
    return EventListResponse(events=events, total=len(events))


@router.get("/shared", response_model=SharedEventListResponse)
async def list_shared_events(
    user: AuthenticatedUser = Depends(get_current_user),
    service: IEventService = Depends(get_event_service),
) -> SharedEventListResponse:
    """Events from the caller's connections that are shared with the caller."""
    events = await service.list_events_shared_with_me(user.id)
    return SharedEventListResponse(events=events, total=len(events))


@router.get("/{event_id}", response_model=CalendarEvent)
async def get_event(
    event_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    service: IEventService = Depends(get_event_service),
) -> CalendarEvent:
    return await service.get_event(user.id, event_id)


@router.patch("/{event_id}", response_model=CalendarEvent)
async def update_event(
    event_id: str,
    body: UpdateEventRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    service: IEventService = Depends(get_event_service),
) -> CalendarEvent:
    return await service.update_event(user.id, event_id, body)


@router.delete("/{event_id}", status_code=204)
async def delete_event(
    event_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    service: IEventService = Depends(get_event_service),
) -> None:
    await service.delete_event(user.id, event_id)
