"""
Connections module exceptions.
"""

from shared.exceptions import (
    NotFoundError,
    AlreadyExistsError,
    ValidationError,
    AuthorizationError,
)


class ConnectionRequestNotFoundError(NotFoundError):
    """Raised when a connection request ID does not resolve."""

    def __init__(self, request_id: str):
        super().__init__(
            f"Connection request not found: {request_id}",
            code="REQUEST_NOT_FOUND",
            details={"request_id": request_id},
        )


class DuplicateRequestError(AlreadyExistsError):
    """Raised when a pending request already exists between two users."""

    def __init__(self, from_user_id: str, to_user_id: str):
        super().__init__(
            "A pending connection request already exists between these users",
            code="DUPLICATE_REQUEST",
            details={"from_user_id": from_user_id, "to_user_id": to_user_id},
        )


class SelfConnectionError(ValidationError):
    """Raised when a user sends a request to themselves."""

    def __init__(self, user_id: str):
        super().__init__(
            "Cannot send a connection request to yourself",
            code="SELF_CONNECTION",
            details={"user_id": user_id},
        )


class RequestNotActionableError(ValidationError):
    """Raised when a request's status does not allow the action."""

    def __init__(self, request_id: str, status: str, action: str):
        super().__init__(
            f"Cannot {action} connection request {request_id} with status '{status}'",
            code="REQUEST_NOT_ACTIONABLE",
            details={"request_id": request_id, "status": status, "action": action},
        )


class RequestAccessDeniedError(AuthorizationError):
    """Raised when a user acts on a request they may not act on."""

    def __init__(self, request_id: str, user_id: str, action: str):
        super().__init__(
            f"User may not {action} connection request: {request_id}",
            code="REQUEST_ACCESS_DENIED",
            details={"request_id": request_id, "user_id": user_id, "action": action},
        )


class ConnectionNotFoundError(NotFoundError):
    """Raised when an edge is missing from the owner's connection list."""

    def __init__(self, user_id: str, connection_id: str):
        super().__init__(
            f"Connection not found: {connection_id}",
            code="CONNECTION_NOT_FOUND",
            details={"user_id": user_id, "connection_id": connection_id},
        )
