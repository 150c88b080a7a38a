"""
Document store data models.

A document is a JSON object addressed by (collection, id). Every committed
write bumps the document's version; transactions use the versions they read
as compare-and-set guards.
"""

from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, field_validator


FilterOp = Literal["==", "!=", "<", "<=", ">", ">="]


class Document(BaseModel):
    """A stored document snapshot."""

    collection: str = Field(..., description="Collection name")
    id: str = Field(..., description="Document ID, unique within the collection")
    data: dict[str, Any] = Field(default_factory=dict, description="Document body")
    version: int = Field(default=0, ge=0, description="Monotonic write counter")


class Filter(BaseModel):
    """A single `field op value` predicate on a document body."""

    field: str
    op: FilterOp = "=="
    value: Any = None

    model_config = {"frozen": True}

    @field_validator("value")
    @classmethod
    def _unwrap_enum(cls, value: Any) -> Any:
        # Bodies hold plain JSON values, so compare against the enum's value.
        if isinstance(value, Enum):
            return value.value
        return value

    def matches(self, data: dict[str, Any]) -> bool:
        """Evaluate the predicate against a document body."""
        actual = data.get(self.field)
        if self.op == "==":
            return actual == self.value
        if self.op == "!=":
            return actual != self.value
        if actual is None or self.value is None:
            return False
        try:
            if self.op == "<":
                return actual < self.value
            if self.op == "<=":
                return actual <= self.value
            if self.op == ">":
                return actual > self.value
            return actual >= self.value
        except TypeError:
            return False


class Query(BaseModel):
    """A collection query: conjunctive filters, optional ordering and limit."""

    collection: str
    filters: list[Filter] = Field(default_factory=list)
    order_by: Optional[str] = None
    descending: bool = False
    limit: Optional[int] = Field(default=None, ge=1)

    model_config = {"frozen": True}

    def where(self, field: str, op: FilterOp, value: Any) -> "Query":
        """Return a copy of this query with one more filter."""
        return self.model_copy(
            update={"filters": [*self.filters, Filter(field=field, op=op, value=value)]}
        )

    def matches(self, document: Document) -> bool:
        """Whether a document satisfies every filter of this query."""
        return document.collection == self.collection and all(
            f.matches(document.data) for f in self.filters
        )

    def apply(self, documents: list[Document]) -> list[Document]:
        """
        Filter, order and limit a list of documents.

        Documents missing the order field sort first, as the store keeps
        them in insertion order otherwise.
        """
        selected = [d for d in documents if self.matches(d)]
        if self.order_by:
            key = self.order_by
            selected.sort(
                key=lambda d: (d.data.get(key) is not None, d.data.get(key) or ""),
                reverse=self.descending,
            )
        if self.limit is not None:
            selected = selected[: self.limit]
        return selected
