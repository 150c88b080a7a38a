"""
Document store exceptions.
"""

from shared.exceptions import NotFoundError, TrustCircleError


class DocumentNotFoundError(NotFoundError):
    """Raised when an update targets a document that does not exist."""

    def __init__(self, collection: str, doc_id: str):
        super().__init__(
            f"Document not found: {collection}/{doc_id}",
            code="DOCUMENT_NOT_FOUND",
            details={"collection": collection, "doc_id": doc_id},
        )


class TransactionConflictError(TrustCircleError):
    """
    Raised when a document read inside a transaction changed before commit.

    The store re-runs the transaction function on this error until its
    attempt budget is exhausted, then lets it propagate.
    """

    def __init__(self, collection: str, doc_id: str, attempts: int = 1):
        super().__init__(
            f"Transaction conflict on {collection}/{doc_id}",
            code="TRANSACTION_CONFLICT",
            details={"collection": collection, "doc_id": doc_id, "attempts": attempts},
        )


class TransactionUsageError(TrustCircleError):
    """Raised when a transaction function reads after it has started writing."""

    def __init__(self, collection: str, doc_id: str):
        super().__init__(
            f"Transaction reads must happen before writes (read {collection}/{doc_id})",
            code="TRANSACTION_USAGE",
            details={"collection": collection, "doc_id": doc_id},
        )
