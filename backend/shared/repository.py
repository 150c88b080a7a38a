"""
Base repository class for document access.

Provides a common abstraction layer for all repositories, encapsulating
DocumentStore access and the dict-to-model mapping conventions.
"""

from datetime import datetime, timezone
from typing import TypeVar, Generic

from .store import DocumentStore


T = TypeVar("T")


def utc_now() -> datetime:
    """Current time, timezone-aware, as stored in documents."""
    return datetime.now(timezone.utc)


class BaseRepository(Generic[T]):
    """
    Base class for all repositories.

    Provides common functionality for document operations:
    - DocumentStore access via self._store
    - Generic type parameter for model type hints

    Subclasses should implement domain-specific data access methods
    and handle dict-to-Pydantic model mapping internally.

    Example:
        class ConnectionRequestRepository(BaseRepository[ConnectionRequest]):
            async def get_by_id(self, request_id: str) -> Optional[ConnectionRequest]:
                document = await self._store.get("connection_requests", request_id)
                if document is None:
                    return None
                return self.map_to_request(document)
    """

    def __init__(self, store: DocumentStore) -> None:
        """
        Initialize the repository with a document store.

        Args:
            store: DocumentStore instance for document operations.
        """
        self._store = store

    @property
    def store(self) -> DocumentStore:
        return self._store
