"""
Connection repositories for document access.

Encapsulates the connection_requests collection and the `connections`
array of each user's user_data document, including the query shapes the
request protocol subscribes to.
"""

from typing import Any, Optional

from shared.repository import BaseRepository
from shared.store import Document, Query
from modules.users.repository import USER_DATA_COLLECTION

from .models import Connection, ConnectionRequest, ConnectionRequestStatus

REQUESTS_COLLECTION = "connection_requests"


class ConnectionRequestRepository(BaseRepository[ConnectionRequest]):
    """
    Repository for connection request documents.

    Note: This repository does NOT perform authorization or state checks.
    The service layer owns the request state machine.
    """

    async def create(self, request: ConnectionRequest) -> ConnectionRequest:
        await self._store.set(REQUESTS_COLLECTION, request.id, self.to_document(request))
        return request

    async def get_by_id(self, request_id: str) -> Optional[ConnectionRequest]:
        document = await self._store.get(REQUESTS_COLLECTION, request_id)
        if document is None:
            return None
        return self.map_to_request(document)

    async def list_requests(self, query: Query) -> list[ConnectionRequest]:
        return self.map_sorted(await self._store.query(query))

    # -------------------------------------------------------------------------
    # Query shapes
    # -------------------------------------------------------------------------

    def _by_status(self, status: ConnectionRequestStatus) -> Query:
        return Query(collection=REQUESTS_COLLECTION, order_by="created_at").where(
            "status", "==", status
        )

    def pending_received_query(self, user_id: str) -> Query:
        return self._by_status(ConnectionRequestStatus.PENDING).where("to_user_id", "==", user_id)

    def pending_sent_query(self, user_id: str) -> Query:
        return self._by_status(ConnectionRequestStatus.PENDING).where("from_user_id", "==", user_id)

    def accepted_sent_query(self, user_id: str) -> Query:
        return self._by_status(ConnectionRequestStatus.ACCEPTED).where("from_user_id", "==", user_id)

    def pending_between_query(self, from_user_id: str, to_user_id: str) -> Query:
        return (
            self._by_status(ConnectionRequestStatus.PENDING)
            .where("from_user_id", "==", from_user_id)
            .where("to_user_id", "==", to_user_id)
        )

    # -------------------------------------------------------------------------
    # Mapping
    # -------------------------------------------------------------------------

    def to_document(self, request: ConnectionRequest) -> dict[str, Any]:
        data = request.model_dump(mode="json")
        data.pop("id")
        return data

    def map_to_request(self, document: Document) -> ConnectionRequest:
        """Map a connection_requests document to ConnectionRequest."""
        return ConnectionRequest(id=document.id, **document.data)

    def map_sorted(self, documents: list[Document]) -> list[ConnectionRequest]:
        """Map documents and order them oldest first (FIFO queue order)."""
        requests = [self.map_to_request(d) for d in documents]
        return sorted(requests, key=lambda r: r.created_at)


class ConnectionRepository(BaseRepository[Connection]):
    """
    Repository for the connection edges embedded in user_data documents.
    """

    async def list_connections(self, user_id: str) -> list[Connection]:
        document = await self._store.get(USER_DATA_COLLECTION, user_id)
        return self.map_connections(document)

    def raw_connections(self, document: Optional[Document]) -> list[dict[str, Any]]:
        """The stored connections array, empty when the document is missing."""
        if document is None:
            return []
        return list(document.data.get("connections") or [])

    def map_connections(self, document: Optional[Document]) -> list[Connection]:
        return [self.map_to_connection(c) for c in self.raw_connections(document)]

    def map_to_connection(self, data: dict[str, Any]) -> Connection:
        """Map one stored edge to Connection."""
        return Connection(
            id=str(data["id"]),
            name=data.get("name", ""),
            email=data.get("email", ""),
            picture=data.get("picture", ""),
            trust_level=data.get("trust_level") or "known",
            connected_at=data["connected_at"],
            notes=data.get("notes"),
        )

    def to_stored(self, connection: Connection) -> dict[str, Any]:
        return connection.model_dump(mode="json", exclude_none=True)
