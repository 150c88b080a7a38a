"""
Connections module interfaces.

IConnectionRequestService is the request protocol: send, observe, accept,
reject, cancel, and the one-sided edge reconciliation that follows an
acceptance. IConnectionService manages the caller's own edge list.
"""

from typing import Awaitable, Callable, Optional, Protocol, Union, runtime_checkable

from shared.models import Identity
from shared.store import ISubscription

from .models import (
    AcceptResult,
    Connection,
    ConnectionRequest,
    UpdateConnectionRequest,
)

RequestsCallback = Callable[[list[ConnectionRequest]], Union[None, Awaitable[None]]]
ConnectionsCallback = Callable[[list[Connection]], Union[None, Awaitable[None]]]


@runtime_checkable
class IConnectionRequestService(Protocol):
    """
    Interface for the connection request protocol.

    There is no transaction spanning both users' records. Accepting writes
    the request status and the accepting user's edge together; the other
    party appends its own edge when it observes the acceptance.
    """

    async def send_request(self, sender: Identity, recipient: Identity) -> ConnectionRequest:
        """
        Send a connection request.

        Snapshots both identities' display fields. Creates no edges.

        Raises:
            SelfConnectionError: If sender and recipient are the same user
            DuplicateRequestError: If a pending request exists in either direction
                (checked, not atomically enforced)
        """
        ...

    async def check_existing_request(self, user_a: str, user_b: str) -> bool:
        """True if a pending request exists between the two users, either direction."""
        ...

    async def get_request(self, request_id: str) -> ConnectionRequest:
        """
        Raises:
            ConnectionRequestNotFoundError: If the ID does not resolve
        """
        ...

    async def list_pending_received(self, user_id: str) -> list[ConnectionRequest]:
        """Pending requests addressed to user_id, oldest first."""
        ...

    async def list_pending_sent(self, user_id: str) -> list[ConnectionRequest]:
        """Pending requests sent by user_id, oldest first."""
        ...

    async def subscribe_pending_received(
        self,
        user_id: str,
        on_change: RequestsCallback,
    ) -> ISubscription:
        """
        Live view of list_pending_received.

        on_change receives the full current list (oldest first) on
        subscribe and after every change.
        """
        ...

    async def subscribe_accepted_sent(
        self,
        user_id: str,
        on_change: RequestsCallback,
    ) -> ISubscription:
        """Live view of accepted requests sent by user_id."""
        ...

    async def accept_request(self, request_id: str, accepting_user_id: str) -> AcceptResult:
        """
        Accept a request on accepting_user_id's side.

        In one transaction: marks the request accepted (if not already) and
        appends an edge to the other party with trust level 'known' unless
        one exists. Re-invoking is safe and never duplicates the edge.

        Raises:
            ConnectionRequestNotFoundError: If the ID does not resolve
            RequestNotActionableError: If the request was rejected
            RequestAccessDeniedError: If the user is not a party, or is the
                sender of a still-pending request
        """
        ...

    async def reject_request(
        self,
        request_id: str,
        rejecting_user_id: Optional[str] = None,
    ) -> ConnectionRequest:
        """
        Reject a request. Rejecting a rejected request is a no-op.

        Raises:
            ConnectionRequestNotFoundError: If the ID does not resolve
            RequestNotActionableError: If the request was accepted
            RequestAccessDeniedError: If rejecting_user_id is not the recipient
        """
        ...

    async def cancel_request(self, request_id: str, cancelling_user_id: Optional[str] = None) -> None:
        """
        Delete a still-pending request (sender only).

        Raises:
            ConnectionRequestNotFoundError: If the ID does not resolve
            RequestNotActionableError: If the request is no longer pending
            RequestAccessDeniedError: If cancelling_user_id is not the sender
        """
        ...

    async def reconcile_accepted_sent(self, user_id: str) -> int:
        """
        Replay every accepted request user_id sent through accept_request.

        Returns:
            Number of edges created (0 when already reconciled)
        """
        ...


@runtime_checkable
class IConnectionService(Protocol):
    """
    Interface for a user's own connection list.

    All mutations are one-sided: they never touch the other user's list.
    """

    async def list_connections(self, user_id: str) -> list[Connection]:
        ...

    async def get_connection(self, user_id: str, connection_id: str) -> Connection:
        """
        Raises:
            ConnectionNotFoundError: If the edge does not exist
        """
        ...

    async def update_connection(
        self,
        user_id: str,
        connection_id: str,
        update: UpdateConnectionRequest,
    ) -> Connection:
        """
        Change trust level and/or notes on one edge.

        Raises:
            ConnectionNotFoundError: If the edge does not exist
        """
        ...

    async def delete_connection(self, user_id: str, connection_id: str) -> bool:
        """
        Remove one edge from the owner's list.

        Returns:
            True if an edge was removed, False if none existed
        """
        ...

    async def subscribe_connections(
        self,
        user_id: str,
        on_change: ConnectionsCallback,
    ) -> ISubscription:
        """Live view of the user's connection list."""
        ...
