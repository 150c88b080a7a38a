"""
Events module exceptions.
"""

from shared.exceptions import NotFoundError, ValidationError


class EventNotFoundError(NotFoundError):
    """Raised when an event ID does not resolve in the owner's calendar."""

    def __init__(self, owner_id: str, event_id: str):
        super().__init__(
            f"Event not found: {event_id}",
            code="EVENT_NOT_FOUND",
            details={"owner_id": owner_id, "event_id": event_id},
        )


class EventShareTargetError(ValidationError):
    """Raised when an event is shared with users who are not connections."""

    def __init__(self, owner_id: str, user_ids: list[str]):
        super().__init__(
            f"Cannot share event with {', '.join(user_ids)}: not a connection",
            code="EVENT_SHARE_TARGET_NOT_CONNECTION",
            details={"owner_id": owner_id, "user_ids": user_ids},
        )
