"""
Shared machinery for document store backends.

Backends implement versioned reads, an atomic compare-and-set commit and
listener registration. Transactions, the conflict re-run loop and the plain
single-document operations are built on top of those here.
"""

import inspect
import logging
from abc import ABC, abstractmethod
from copy import deepcopy
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, TypeVar

from pydantic import BaseModel, Field

from .exceptions import DocumentNotFoundError, TransactionConflictError, TransactionUsageError
from .interfaces import DocumentCallback, QueryCallback
from .models import Document, Query

logger = logging.getLogger(__name__)

T = TypeVar("T")

DocumentKey = tuple[str, str]


class WriteKind(str, Enum):
    """Kinds of buffered writes."""

    SET = "set"
    UPDATE = "update"
    DELETE = "delete"


class WriteOp(BaseModel):
    """A buffered write, applied at commit time."""

    kind: WriteKind
    collection: str
    id: str
    data: dict[str, Any] = Field(default_factory=dict)
    merge: bool = False


def apply_write(current: Optional[dict[str, Any]], op: WriteOp) -> Optional[dict[str, Any]]:
    """
    Apply one write to a document body.

    Returns the new body, or None when the document is deleted.

    Raises:
        DocumentNotFoundError: If an UPDATE targets a missing document
    """
    if op.kind == WriteKind.DELETE:
        return None
    if op.kind == WriteKind.UPDATE:
        if current is None:
            raise DocumentNotFoundError(op.collection, op.id)
        return {**current, **deepcopy(op.data)}
    if op.merge and current is not None:
        return {**current, **deepcopy(op.data)}
    return deepcopy(op.data)


class Subscription:
    """Listener handle returned by subscribe calls."""

    def __init__(self, on_unsubscribe: Callable[[], None]):
        self._on_unsubscribe = on_unsubscribe
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        """Stop delivery. Safe to call more than once."""
        if self._active:
            self._active = False
            self._on_unsubscribe()


async def notify_listener(
    callback: QueryCallback | DocumentCallback,
    payload: Any,
    description: str,
) -> None:
    """
    Invoke a listener callback, awaiting it if it is a coroutine function.

    A failing listener is logged and does not propagate into the writer that
    triggered the notification.
    """
    try:
        result = callback(payload)
        if inspect.isawaitable(result):
            await result
    except Exception:
        logger.exception(f"Listener for {description} failed")


class Transaction:
    """
    Optimistic transaction buffer.

    Reads go straight to the store and record the version observed; writes
    are buffered and handed to the backend's commit together with those
    versions.
    """

    def __init__(self, store: "BaseDocumentStore"):
        self._store = store
        self._reads: dict[DocumentKey, int] = {}
        self._writes: list[WriteOp] = []

    @property
    def reads(self) -> dict[DocumentKey, int]:
        return dict(self._reads)

    @property
    def writes(self) -> list[WriteOp]:
        return list(self._writes)

    async def get(self, collection: str, doc_id: str) -> Optional[Document]:
        if self._writes:
            raise TransactionUsageError(collection, doc_id)
        document, version = await self._store._read(collection, doc_id)
        self._reads.setdefault((collection, doc_id), version)
        return document

    def set(
        self,
        collection: str,
        doc_id: str,
        data: dict[str, Any],
        merge: bool = False,
    ) -> None:
        self._writes.append(
            WriteOp(kind=WriteKind.SET, collection=collection, id=doc_id, data=data, merge=merge)
        )

    def update(self, collection: str, doc_id: str, fields: dict[str, Any]) -> None:
        self._writes.append(
            WriteOp(kind=WriteKind.UPDATE, collection=collection, id=doc_id, data=fields)
        )

    def delete(self, collection: str, doc_id: str) -> None:
        self._writes.append(WriteOp(kind=WriteKind.DELETE, collection=collection, id=doc_id))


class BaseDocumentStore(ABC):
    """
    Base class for document store backends.

    Subclasses provide:
    - _read: versioned single-document read (version 0 = never written)
    - _commit: atomic check-versions-then-apply-writes
    - query, subscribe, subscribe_document
    """

    def __init__(self, max_transaction_attempts: int = 5) -> None:
        self._max_transaction_attempts = max(1, max_transaction_attempts)

    @abstractmethod
    async def _read(self, collection: str, doc_id: str) -> tuple[Optional[Document], int]:
        """Read a document and the version guarding it."""
        ...

    @abstractmethod
    async def _commit(self, reads: dict[DocumentKey, int], writes: list[WriteOp]) -> None:
        """
        Apply writes atomically if every read version is still current.

        Raises:
            TransactionConflictError: If any read version is stale
            DocumentNotFoundError: If an UPDATE targets a missing document
        """
        ...

    @abstractmethod
    async def query(self, query: Query) -> list[Document]:
        ...

    @abstractmethod
    async def subscribe(self, query: Query, on_change: QueryCallback) -> Subscription:
        ...

    @abstractmethod
    async def subscribe_document(
        self,
        collection: str,
        doc_id: str,
        on_change: DocumentCallback,
    ) -> Subscription:
        ...

    # -------------------------------------------------------------------------
    # Single-document operations
    # -------------------------------------------------------------------------

    async def get(self, collection: str, doc_id: str) -> Optional[Document]:
        document, _ = await self._read(collection, doc_id)
        return document

    async def set(
        self,
        collection: str,
        doc_id: str,
        data: dict[str, Any],
        merge: bool = False,
    ) -> None:
        await self._commit(
            {},
            [WriteOp(kind=WriteKind.SET, collection=collection, id=doc_id, data=data, merge=merge)],
        )

    async def update(self, collection: str, doc_id: str, fields: dict[str, Any]) -> None:
        await self._commit(
            {},
            [WriteOp(kind=WriteKind.UPDATE, collection=collection, id=doc_id, data=fields)],
        )

    async def delete(self, collection: str, doc_id: str) -> None:
        await self._commit(
            {},
            [WriteOp(kind=WriteKind.DELETE, collection=collection, id=doc_id)],
        )

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    async def run_transaction(
        self,
        fn: Callable[[Transaction], Awaitable[T]],
        max_attempts: Optional[int] = None,
    ) -> T:
        """
        Run fn in an optimistic transaction, re-running it on conflict.

        Only TransactionConflictError triggers a re-run; every other error
        raised by fn or by the commit propagates on the first attempt.
        """
        attempts = max_attempts or self._max_transaction_attempts

        for attempt in range(1, attempts + 1):
            tx = Transaction(self)
            result = await fn(tx)
            if not tx.writes:
                return result
            try:
                await self._commit(tx.reads, tx.writes)
            except TransactionConflictError as e:
                if attempt >= attempts:
                    e.details["attempts"] = attempt
                    raise
                logger.warning(
                    f"Transaction conflict on {e.details.get('collection')}/"
                    f"{e.details.get('doc_id')}, retrying (attempt {attempt}/{attempts})"
                )
                continue
            return result

        # Unreachable: the loop either returns or raises.
        raise RuntimeError("transaction loop exited without a result")
