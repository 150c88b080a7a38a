"""
Document store interface.

Services depend on DocumentStore, not on a concrete backend. This keeps the
connection and vault logic testable against the in-memory store and lets the
Supabase adapter be swapped for another hosted store.
"""

from typing import Any, Awaitable, Callable, Optional, Protocol, TypeVar, Union, runtime_checkable

from .models import Document, Query

T = TypeVar("T")

QueryCallback = Callable[[list[Document]], Union[None, Awaitable[None]]]
DocumentCallback = Callable[[Optional[Document]], Union[None, Awaitable[None]]]


@runtime_checkable
class ISubscription(Protocol):
    """Handle for a live listener. Callers must unsubscribe on teardown."""

    @property
    def active(self) -> bool:
        ...

    def unsubscribe(self) -> None:
        ...


@runtime_checkable
class ITransaction(Protocol):
    """Reads observe one consistent snapshot; writes commit together or not at all."""

    async def get(self, collection: str, doc_id: str) -> Optional[Document]:
        ...

    def set(
        self,
        collection: str,
        doc_id: str,
        data: dict[str, Any],
        merge: bool = False,
    ) -> None:
        ...

    def update(self, collection: str, doc_id: str, fields: dict[str, Any]) -> None:
        ...

    def delete(self, collection: str, doc_id: str) -> None:
        ...


@runtime_checkable
class DocumentStore(Protocol):
    """
    Interface for the reactive document store.

    Single-document writes are serialized by the store. Atomicity across
    documents exists only inside run_transaction.
    """

    async def get(self, collection: str, doc_id: str) -> Optional[Document]:
        """
        Read one document.

        Returns:
            The document, or None if it does not exist

        Raises:
            TransientStoreError: If the store is unavailable
        """
        ...

    async def set(
        self,
        collection: str,
        doc_id: str,
        data: dict[str, Any],
        merge: bool = False,
    ) -> None:
        """Create or overwrite a document (shallow merge when merge=True)."""
        ...

    async def update(self, collection: str, doc_id: str, fields: dict[str, Any]) -> None:
        """
        Merge fields into an existing document.

        Raises:
            DocumentNotFoundError: If the document does not exist
        """
        ...

    async def delete(self, collection: str, doc_id: str) -> None:
        """Delete a document. Deleting a missing document is a no-op."""
        ...

    async def query(self, query: Query) -> list[Document]:
        """Run a filtered query against one collection."""
        ...

    async def run_transaction(
        self,
        fn: Callable[[ITransaction], Awaitable[T]],
        max_attempts: Optional[int] = None,
    ) -> T:
        """
        Run fn inside an optimistic transaction.

        fn may be invoked more than once if a document it read changes
        before commit, so it must not have side effects outside the
        transaction.

        Raises:
            TransactionConflictError: If every attempt conflicted
        """
        ...

    async def subscribe(self, query: Query, on_change: QueryCallback) -> ISubscription:
        """
        Listen to a query.

        on_change receives the full current result set on subscribe and
        after every change to it.
        """
        ...

    async def subscribe_document(
        self,
        collection: str,
        doc_id: str,
        on_change: DocumentCallback,
    ) -> ISubscription:
        """Listen to one document (None while it does not exist)."""
        ...
