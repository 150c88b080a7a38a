"""
Document store adapter.

The connection and vault modules talk to storage only through DocumentStore:
- models: Document, Filter, Query
- interfaces: DocumentStore, ITransaction, ISubscription
- memory: in-process backend with push subscriptions
- supabase: Postgres-table backend with polling subscriptions
"""

from .base import BaseDocumentStore, Subscription, Transaction, WriteKind, WriteOp
from .exceptions import DocumentNotFoundError, TransactionConflictError, TransactionUsageError
from .interfaces import DocumentStore, ISubscription, ITransaction
from .memory import MemoryDocumentStore
from .models import Document, Filter, Query
from .supabase import SupabaseDocumentStore

__all__ = [
    # Interface
    "DocumentStore",
    "ITransaction",
    "ISubscription",
    # Implementations
    "BaseDocumentStore",
    "MemoryDocumentStore",
    "SupabaseDocumentStore",
    "Subscription",
    "Transaction",
    "WriteKind",
    "WriteOp",
    # Models
    "Document",
    "Filter",
    "Query",
    # Exceptions
    "DocumentNotFoundError",
    "TransactionConflictError",
    "TransactionUsageError",
]
