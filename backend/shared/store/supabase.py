"""
Supabase-backed document store.

Documents live in one Postgres table (see migrations/001_documents.sql):

    documents(collection text, id text, data jsonb, version bigint)

Deleted documents are kept as tombstones (data = null) so their version keeps
counting. Multi-document commits go through the `commit_documents` function,
which checks every read version and applies every write in one SQL
transaction.

Subscriptions run in a degraded polling mode: the query is re-run every
`poll_interval` seconds and the callback fires when the result changed.
"""

import asyncio
import logging
import re
from typing import Any, Callable, Optional

from supabase import Client

from shared.exceptions import TransientStoreError

from .base import BaseDocumentStore, DocumentKey, Subscription, WriteOp, notify_listener
from .exceptions import DocumentNotFoundError, TransactionConflictError
from .interfaces import DocumentCallback, QueryCallback
from .models import Document, Filter, Query

logger = logging.getLogger(__name__)

# Raised by commit_documents: 'document_not_found:<collection>/<id>'
_NOT_FOUND_PATTERN = re.compile(r"document_not_found:([^/\s\"']+)/([^\s\"']+)")
# Raised by commit_documents: 'version_conflict:<collection>/<id>'
_CONFLICT_PATTERN = re.compile(r"version_conflict:([^/\s\"']+)/([^\s\"']+)")

_FILTER_METHODS = {
    "==": "eq",
    "!=": "neq",
    "<": "lt",
    "<=": "lte",
    ">": "gt",
    ">=": "gte",
}


class SupabaseDocumentStore(BaseDocumentStore):
    """
    Document store on a Supabase Postgres table.

    Filters compare `data->>field` as text, so range filters are only
    meaningful on string fields (ISO timestamps, emails).
    """

    def __init__(
        self,
        client: Client,
        table: str = "documents",
        poll_interval: float = 10.0,
        max_transaction_attempts: int = 5,
    ) -> None:
        super().__init__(max_transaction_attempts)
        self._db = client
        self._table_name = table
        self._poll_interval = poll_interval

    def _table(self):
        return self._db.table(self._table_name)

    def _execute(self, operation: str, call: Callable[[], Any]) -> Any:
        """Run a Supabase call, translating failures into store errors."""
        try:
            return call()
        except Exception as e:
            message = str(e)
            not_found = _NOT_FOUND_PATTERN.search(message)
            if not_found:
                raise DocumentNotFoundError(not_found.group(1), not_found.group(2)) from e
            conflict = _CONFLICT_PATTERN.search(message)
            if conflict:
                raise TransactionConflictError(conflict.group(1), conflict.group(2)) from e
            raise TransientStoreError(
                f"Document store {operation} failed",
                operation=operation,
                original_error=message,
            ) from e

    # -------------------------------------------------------------------------
    # Backend primitives
    # -------------------------------------------------------------------------

    async def _read(self, collection: str, doc_id: str) -> tuple[Optional[Document], int]:
        result = self._execute(
            "read",
            lambda: self._table()
            .select("*")
            .eq("collection", collection)
            .eq("id", doc_id)
            .execute(),
        )
        if not result.data:
            return None, 0
        row = result.data[0]
        return self._map_to_document(row), int(row.get("version") or 0)

    async def _commit(self, reads: dict[DocumentKey, int], writes: list[WriteOp]) -> None:
        payload = {
            "p_reads": [
                {"collection": collection, "id": doc_id, "version": version}
                for (collection, doc_id), version in reads.items()
            ],
            "p_writes": [op.model_dump(mode="json") for op in writes],
        }
        self._execute("commit", lambda: self._db.rpc("commit_documents", payload).execute())
        logger.debug(f"Committed {len(writes)} write(s) via commit_documents")

    async def query(self, query: Query) -> list[Document]:
        def run():
            builder = (
                self._table()
                .select("*")
                .eq("collection", query.collection)
                .not_.is_("data", "null")
            )
            for f in query.filters:
                builder = self._apply_filter(builder, f)
            if query.order_by:
                builder = builder.order(f"data->>{query.order_by}", desc=query.descending)
            if query.limit:
                builder = builder.limit(query.limit)
            return builder.execute()

        result = self._execute("query", run)
        documents = [self._map_to_document(row) for row in result.data or []]
        return [d for d in documents if d is not None]

    def _apply_filter(self, builder, f: Filter):
        method = getattr(builder, _FILTER_METHODS[f.op])
        value = f.value
        if isinstance(value, bool):
            value = "true" if value else "false"
        return method(f"data->>{f.field}", value)

    # -------------------------------------------------------------------------
    # Subscriptions (polling)
    # -------------------------------------------------------------------------

    async def subscribe(self, query: Query, on_change: QueryCallback) -> Subscription:
        async def fetch():
            documents = await self.query(query)
            return documents, [(d.id, d.version) for d in documents]

        return await self._start_polling(fetch, on_change, f"query on {query.collection}")

    async def subscribe_document(
        self,
        collection: str,
        doc_id: str,
        on_change: DocumentCallback,
    ) -> Subscription:
        async def fetch():
            return await self._read(collection, doc_id)

        return await self._start_polling(fetch, on_change, f"{collection}/{doc_id}")

    async def _start_polling(self, fetch, on_change, description: str) -> Subscription:
        """
        Deliver the current value immediately, then poll for changes.

        The first fetch runs on the caller's task so a store failure at
        subscribe time reaches the caller. Later failures are logged and
        retried on the next tick.
        """
        value, fingerprint = await fetch()
        await notify_listener(on_change, value, description)

        async def poll(last_fingerprint):
            while True:
                await asyncio.sleep(self._poll_interval)
                try:
                    value, fingerprint = await fetch()
                except TransientStoreError as e:
                    logger.warning(f"Polling {description} failed: {e.message}")
                    continue
                if fingerprint != last_fingerprint:
                    last_fingerprint = fingerprint
                    await notify_listener(on_change, value, description)

        task = asyncio.get_running_loop().create_task(poll(fingerprint))
        logger.debug(f"Polling {description} every {self._poll_interval}s")
        return Subscription(task.cancel)

    # -------------------------------------------------------------------------
    # Private mapping methods
    # -------------------------------------------------------------------------

    def _map_to_document(self, row: dict[str, Any]) -> Optional[Document]:
        """Map a table row to a Document (None for tombstones)."""
        if row.get("data") is None:
            return None
        return Document(
            collection=row["collection"],
            id=str(row["id"]),
            data=row["data"],
            version=int(row.get("version") or 0),
        )
