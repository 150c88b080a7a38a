"""
Connections service implementation.

Implements the connection request state machine and the one-sided
reconciliation that turns an accepted request into an edge on each side.

Request lifecycle:
    pending --accept--> accepted   (terminal)
    pending --reject--> rejected   (terminal)
    pending --cancel--> deleted    (sender only)

Every mutation is an optimistic transaction scoped to the documents it
reads, so concurrent writers to the same user_data document cannot lose
each other's updates.
"""

import asyncio
import inspect
import logging
import uuid
from typing import Optional

from shared.models import Identity
from shared.repository import utc_now
from shared.store import ISubscription, ITransaction
from modules.users.repository import USER_DATA_COLLECTION

from .interfaces import (
    ConnectionsCallback,
    IConnectionRequestService,
    IConnectionService,
    RequestsCallback,
)
from .models import (
    AcceptResult,
    Connection,
    ConnectionRequest,
    ConnectionRequestStatus,
    TrustLevel,
    UpdateConnectionRequest,
)
from .repository import REQUESTS_COLLECTION, ConnectionRepository, ConnectionRequestRepository
from .exceptions import (
    ConnectionNotFoundError,
    ConnectionRequestNotFoundError,
    DuplicateRequestError,
    RequestAccessDeniedError,
    RequestNotActionableError,
    SelfConnectionError,
)

logger = logging.getLogger(__name__)


async def _forward(callback, payload) -> None:
    result = callback(payload)
    if inspect.isawaitable(result):
        await result


class ConnectionRequestService(IConnectionRequestService):
    """
    Connection request protocol on the document store.

    The symmetric edge is never written for the other party. The sender's
    side converges when its client observes the acceptance (see
    ConnectionReconciler) or calls reconcile_accepted_sent on next load.
    Until then the graph is intentionally asymmetric.
    """

    def __init__(
        self,
        requests: ConnectionRequestRepository,
        connections: ConnectionRepository,
    ):
        self._requests = requests
        self._connections = connections
        self._store = requests.store

    async def send_request(self, sender: Identity, recipient: Identity) -> ConnectionRequest:
        """Create a pending request with both parties' display fields."""
        if sender.user_id == recipient.user_id:
            raise SelfConnectionError(sender.user_id)

        # Advisory only: two opposite sends racing here can both pass.
        if await self.check_existing_request(sender.user_id, recipient.user_id):
            raise DuplicateRequestError(sender.user_id, recipient.user_id)

        now = utc_now()
        request = ConnectionRequest(
            id=str(uuid.uuid4()),
            from_user_id=sender.user_id,
            from_user_name=sender.name,
            from_user_email=sender.email,
            from_user_picture=sender.picture,
            to_user_id=recipient.user_id,
            to_user_name=recipient.name,
            to_user_email=recipient.email,
            to_user_picture=recipient.picture,
            status=ConnectionRequestStatus.PENDING,
            created_at=now,
            updated_at=now,
        )
        await self._requests.create(request)
        logger.info(
            f"Connection request {request.id} sent from {sender.user_id} to {recipient.user_id}"
        )
        return request

    async def check_existing_request(self, user_a: str, user_b: str) -> bool:
        forward, backward = await asyncio.gather(
            self._requests.list_requests(self._requests.pending_between_query(user_a, user_b)),
            self._requests.list_requests(self._requests.pending_between_query(user_b, user_a)),
        )
        return bool(forward) or bool(backward)

    async def get_request(self, request_id: str) -> ConnectionRequest:
        request = await self._requests.get_by_id(request_id)
        if request is None:
            raise ConnectionRequestNotFoundError(request_id)
        return request

    async def list_pending_received(self, user_id: str) -> list[ConnectionRequest]:
        return await self._requests.list_requests(self._requests.pending_received_query(user_id))

    async def list_pending_sent(self, user_id: str) -> list[ConnectionRequest]:
        return await self._requests.list_requests(self._requests.pending_sent_query(user_id))

    async def subscribe_pending_received(
        self,
        user_id: str,
        on_change: RequestsCallback,
    ) -> ISubscription:
        async def deliver(documents):
            await _forward(on_change, self._requests.map_sorted(documents))

        return await self._store.subscribe(self._requests.pending_received_query(user_id), deliver)

    async def subscribe_accepted_sent(
        self,
        user_id: str,
        on_change: RequestsCallback,
    ) -> ISubscription:
        async def deliver(documents):
            await _forward(on_change, self._requests.map_sorted(documents))

        return await self._store.subscribe(self._requests.accepted_sent_query(user_id), deliver)

    async def accept_request(self, request_id: str, accepting_user_id: str) -> AcceptResult:
        """Accept on one side: request status and this user's edge, atomically."""

        async def accept(tx: ITransaction) -> AcceptResult:
            request_doc = await tx.get(REQUESTS_COLLECTION, request_id)
            if request_doc is None:
                raise ConnectionRequestNotFoundError(request_id)
            request = self._requests.map_to_request(request_doc)

            if not request.involves(accepting_user_id):
                raise RequestAccessDeniedError(request_id, accepting_user_id, "accept")
            if request.status == ConnectionRequestStatus.REJECTED:
                raise RequestNotActionableError(request_id, request.status.value, "accept")
            if (
                request.status == ConnectionRequestStatus.PENDING
                and request.from_user_id == accepting_user_id
            ):
                raise RequestAccessDeniedError(request_id, accepting_user_id, "accept")

            user_doc = await tx.get(USER_DATA_COLLECTION, accepting_user_id)
            stored = self._connections.raw_connections(user_doc)

            now = utc_now()
            if not request.status.is_terminal:
                request = request.model_copy(
                    update={"status": ConnectionRequestStatus.ACCEPTED, "updated_at": now}
                )
                tx.set(REQUESTS_COLLECTION, request_id, self._requests.to_document(request))

            other = request.other_party(accepting_user_id)
            existing = next((c for c in stored if c.get("id") == other.user_id), None)
            if existing is not None:
                return AcceptResult(
                    request=request,
                    connection=self._connections.map_to_connection(existing),
                    created=False,
                )

            connection = Connection(
                id=other.user_id,
                name=other.name,
                email=other.email,
                picture=other.picture,
                trust_level=TrustLevel.KNOWN,
                connected_at=now,
            )
            tx.set(
                USER_DATA_COLLECTION,
                accepting_user_id,
                {"connections": [*stored, self._connections.to_stored(connection)]},
                merge=True,
            )
            return AcceptResult(request=request, connection=connection, created=True)

        result = await self._store.run_transaction(accept)
        if result.created:
            logger.info(
                f"User {accepting_user_id} accepted request {request_id}; "
                f"edge to {result.connection.id} created"
            )
        else:
            logger.debug(f"Request {request_id} already reconciled for {accepting_user_id}")
        return result

    async def reject_request(
        self,
        request_id: str,
        rejecting_user_id: Optional[str] = None,
    ) -> ConnectionRequest:
        async def reject(tx: ITransaction) -> ConnectionRequest:
            request_doc = await tx.get(REQUESTS_COLLECTION, request_id)
            if request_doc is None:
                raise ConnectionRequestNotFoundError(request_id)
            request = self._requests.map_to_request(request_doc)

            if rejecting_user_id is not None and request.to_user_id != rejecting_user_id:
                raise RequestAccessDeniedError(request_id, rejecting_user_id, "reject")
            if request.status == ConnectionRequestStatus.REJECTED:
                return request
            if request.status.is_terminal:
                raise RequestNotActionableError(request_id, request.status.value, "reject")

            request = request.model_copy(
                update={"status": ConnectionRequestStatus.REJECTED, "updated_at": utc_now()}
            )
            tx.set(REQUESTS_COLLECTION, request_id, self._requests.to_document(request))
            return request

        request = await self._store.run_transaction(reject)
        logger.info(f"Connection request {request_id} rejected")
        return request

    async def cancel_request(self, request_id: str, cancelling_user_id: Optional[str] = None) -> None:
        async def cancel(tx: ITransaction) -> None:
            request_doc = await tx.get(REQUESTS_COLLECTION, request_id)
            if request_doc is None:
                raise ConnectionRequestNotFoundError(request_id)
            request = self._requests.map_to_request(request_doc)

            if cancelling_user_id is not None and request.from_user_id != cancelling_user_id:
                raise RequestAccessDeniedError(request_id, cancelling_user_id, "cancel")
            if request.status.is_terminal:
                raise RequestNotActionableError(request_id, request.status.value, "cancel")

            tx.delete(REQUESTS_COLLECTION, request_id)

        await self._store.run_transaction(cancel)
        logger.info(f"Connection request {request_id} cancelled")

    async def reconcile_accepted_sent(self, user_id: str) -> int:
        accepted = await self._requests.list_requests(self._requests.accepted_sent_query(user_id))
        created = 0
        for request in accepted:
            result = await self.accept_request(request.id, user_id)
            if result.created:
                created += 1
        if created:
            logger.info(f"Reconciled {created} accepted request(s) for {user_id}")
        return created


class ConnectionService(IConnectionService):
    """
    Owner-side management of a user's connection list.
    """

    def __init__(self, connections: ConnectionRepository):
        self._connections = connections
        self._store = connections.store

    async def list_connections(self, user_id: str) -> list[Connection]:
        return await self._connections.list_connections(user_id)

    async def get_connection(self, user_id: str, connection_id: str) -> Connection:
        for connection in await self._connections.list_connections(user_id):
            if connection.id == connection_id:
                return connection
        raise ConnectionNotFoundError(user_id, connection_id)

    async def update_connection(
        self,
        user_id: str,
        connection_id: str,
        update: UpdateConnectionRequest,
    ) -> Connection:
        async def write(tx: ITransaction) -> Connection:
            user_doc = await tx.get(USER_DATA_COLLECTION, user_id)
            stored = self._connections.raw_connections(user_doc)

            index = next((i for i, c in enumerate(stored) if c.get("id") == connection_id), None)
            if index is None:
                raise ConnectionNotFoundError(user_id, connection_id)

            connection = self._connections.map_to_connection(stored[index])
            # Explicit nulls clear notes; trust_level always keeps a value.
            changes = update.model_dump(exclude_unset=True)
            if changes.get("trust_level") is None:
                changes.pop("trust_level", None)
            connection = connection.model_copy(update=changes)
            stored[index] = self._connections.to_stored(connection)
            tx.set(USER_DATA_COLLECTION, user_id, {"connections": stored}, merge=True)
            return connection

        connection = await self._store.run_transaction(write)
        logger.debug(f"Updated connection {connection_id} for {user_id}")
        return connection

    async def delete_connection(self, user_id: str, connection_id: str) -> bool:
        async def write(tx: ITransaction) -> bool:
            user_doc = await tx.get(USER_DATA_COLLECTION, user_id)
            stored = self._connections.raw_connections(user_doc)
            remaining = [c for c in stored if c.get("id") != connection_id]
            if len(remaining) == len(stored):
                return False
            tx.set(USER_DATA_COLLECTION, user_id, {"connections": remaining}, merge=True)
            return True

        removed = await self._store.run_transaction(write)
        if removed:
            logger.info(f"User {user_id} removed connection {connection_id}")
        return removed

    async def subscribe_connections(
        self,
        user_id: str,
        on_change: ConnectionsCallback,
    ) -> ISubscription:
        async def deliver(document):
            await _forward(on_change, self._connections.map_connections(document))

        return await self._store.subscribe_document(USER_DATA_COLLECTION, user_id, deliver)
