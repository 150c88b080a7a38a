"""
In-process document store.

Backs tests and single-process deployments. Commits are serialized by one
asyncio lock and listeners are pushed the new state right after each commit,
on the committing task.
"""

import asyncio
import logging
from copy import deepcopy
from typing import Optional

from .base import BaseDocumentStore, DocumentKey, Subscription, WriteOp, apply_write, notify_listener
from .exceptions import TransactionConflictError
from .interfaces import DocumentCallback, QueryCallback
from .models import Document, Query

logger = logging.getLogger(__name__)


class _QueryListener:
    def __init__(self, query: Query, callback: QueryCallback):
        self.query = query
        self.callback = callback
        self.active = True
        self.fingerprint: Optional[list[tuple[str, int]]] = None


class _DocumentListener:
    def __init__(self, key: DocumentKey, callback: DocumentCallback):
        self.key = key
        self.callback = callback
        self.active = True
        self.version: Optional[int] = None


class MemoryDocumentStore(BaseDocumentStore):
    """
    Document store held in process memory.

    Versions are tracked per key and survive deletion, so a document that is
    deleted and re-created never reuses a version a transaction may have read.
    """

    def __init__(self, max_transaction_attempts: int = 5) -> None:
        super().__init__(max_transaction_attempts)
        self._documents: dict[str, dict[str, Document]] = {}
        self._versions: dict[DocumentKey, int] = {}
        self._lock = asyncio.Lock()
        self._query_listeners: list[_QueryListener] = []
        self._document_listeners: list[_DocumentListener] = []

    # -------------------------------------------------------------------------
    # Backend primitives
    # -------------------------------------------------------------------------

    async def _read(self, collection: str, doc_id: str) -> tuple[Optional[Document], int]:
        document = self._documents.get(collection, {}).get(doc_id)
        version = self._versions.get((collection, doc_id), 0)
        return (deepcopy(document) if document else None), version

    async def _commit(self, reads: dict[DocumentKey, int], writes: list[WriteOp]) -> None:
        async with self._lock:
            for (collection, doc_id), version in reads.items():
                if self._versions.get((collection, doc_id), 0) != version:
                    raise TransactionConflictError(collection, doc_id)

            # Stage everything first so a failing write leaves the store untouched.
            staged: dict[DocumentKey, Optional[dict]] = {}
            for op in writes:
                key = (op.collection, op.id)
                if key in staged:
                    current = staged[key]
                else:
                    existing = self._documents.get(op.collection, {}).get(op.id)
                    current = existing.data if existing else None
                staged[key] = apply_write(current, op)

            for (collection, doc_id), data in staged.items():
                version = self._versions.get((collection, doc_id), 0) + 1
                self._versions[(collection, doc_id)] = version
                bucket = self._documents.setdefault(collection, {})
                if data is None:
                    bucket.pop(doc_id, None)
                else:
                    bucket[doc_id] = Document(
                        collection=collection, id=doc_id, data=data, version=version
                    )

        logger.debug(f"Committed {len(writes)} write(s) to {sorted(staged)}")
        await self._notify(set(staged))

    async def query(self, query: Query) -> list[Document]:
        documents = list(self._documents.get(query.collection, {}).values())
        return [deepcopy(d) for d in query.apply(documents)]

    # -------------------------------------------------------------------------
    # Subscriptions
    # -------------------------------------------------------------------------

    async def subscribe(self, query: Query, on_change: QueryCallback) -> Subscription:
        listener = _QueryListener(query, on_change)
        self._query_listeners.append(listener)

        def remove() -> None:
            listener.active = False
            if listener in self._query_listeners:
                self._query_listeners.remove(listener)

        subscription = Subscription(remove)
        await self._deliver_query(listener, force=True)
        return subscription

    async def subscribe_document(
        self,
        collection: str,
        doc_id: str,
        on_change: DocumentCallback,
    ) -> Subscription:
        listener = _DocumentListener((collection, doc_id), on_change)
        self._document_listeners.append(listener)

        def remove() -> None:
            listener.active = False
            if listener in self._document_listeners:
                self._document_listeners.remove(listener)

        subscription = Subscription(remove)
        await self._deliver_document(listener, force=True)
        return subscription

    async def _notify(self, changed: set[DocumentKey]) -> None:
        collections = {collection for collection, _ in changed}
        for listener in list(self._query_listeners):
            if listener.query.collection in collections:
                await self._deliver_query(listener)
        for doc_listener in list(self._document_listeners):
            if doc_listener.key in changed:
                await self._deliver_document(doc_listener)

    async def _deliver_query(self, listener: _QueryListener, force: bool = False) -> None:
        if not listener.active:
            return
        documents = await self.query(listener.query)
        fingerprint = [(d.id, d.version) for d in documents]
        if not force and fingerprint == listener.fingerprint:
            return
        listener.fingerprint = fingerprint
        await notify_listener(listener.callback, documents, f"query on {listener.query.collection}")

    async def _deliver_document(self, listener: _DocumentListener, force: bool = False) -> None:
        if not listener.active:
            return
        collection, doc_id = listener.key
        document, version = await self._read(collection, doc_id)
        if not force and version == listener.version:
            return
        listener.version = version
        await notify_listener(listener.callback, document, f"{collection}/{doc_id}")
