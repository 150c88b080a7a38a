"""
Connections module data models.

Two kinds of records live here:
- ConnectionRequest: a directed request between two users, stored once in
  connection_requests/{id} and moved pending -> accepted | rejected.
- Connection: an adjacency edge embedded in the owner's user_data document.
  Each side keeps its own edge list, so the graph is only eventually
  symmetric.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from shared.models import Identity


class TrustLevel(str, Enum):
    """Trust tier a user assigns to one of their own connections."""

    KNOWN = "known"
    TRUSTED = "trusted"
    CLOSE = "close"
    CORE = "core"

    @property
    def rank(self) -> int:
        """Position in the ordering known < trusted < close < core."""
        return _TRUST_ORDER.index(self)

    def at_least(self, other: "TrustLevel") -> bool:
        return self.rank >= other.rank


_TRUST_ORDER = [TrustLevel.KNOWN, TrustLevel.TRUSTED, TrustLevel.CLOSE, TrustLevel.CORE]


class ConnectionRequestStatus(str, Enum):
    """Connection request lifecycle."""

    PENDING = "pending"    # Sent, awaiting the recipient
    ACCEPTED = "accepted"  # Terminal
    REJECTED = "rejected"  # Terminal

    @property
    def is_terminal(self) -> bool:
        return self != ConnectionRequestStatus.PENDING


class ConnectionRequest(BaseModel):
    """
    A connection request.

    Both parties' display fields are snapshotted when the request is sent
    and are not refreshed afterwards.
    """

    id: str = Field(..., description="Request ID (UUID)")
    from_user_id: str = Field(..., description="Sender user ID")
    from_user_name: str = Field(default="", description="Sender name at send time")
    from_user_email: str = Field(default="", description="Sender email at send time")
    from_user_picture: str = Field(default="", description="Sender avatar at send time")
    to_user_id: str = Field(..., description="Recipient user ID")
    to_user_name: str = Field(default="", description="Recipient name at send time")
    to_user_email: str = Field(default="", description="Recipient email at send time")
    to_user_picture: str = Field(default="", description="Recipient avatar at send time")
    status: ConnectionRequestStatus = Field(default=ConnectionRequestStatus.PENDING)
    created_at: datetime = Field(..., description="Send time")
    updated_at: datetime = Field(..., description="Last status change")

    def involves(self, user_id: str) -> bool:
        return user_id in (self.from_user_id, self.to_user_id)

    def other_party(self, user_id: str) -> Identity:
        """
        The party of this request that is not user_id.

        Raises:
            ValueError: If user_id is not a party of the request
        """
        if user_id == self.to_user_id:
            return Identity(
                user_id=self.from_user_id,
                name=self.from_user_name,
                email=self.from_user_email,
                picture=self.from_user_picture,
            )
        if user_id == self.from_user_id:
            return Identity(
                user_id=self.to_user_id,
                name=self.to_user_name,
                email=self.to_user_email,
                picture=self.to_user_picture,
            )
        raise ValueError(f"User {user_id} is not a party of request {self.id}")


class Connection(BaseModel):
    """An edge in the owner's connection list. id is the other user's ID."""

    id: str = Field(..., description="The connected user's ID")
    name: str = Field(default="", description="Connected user's name")
    email: str = Field(default="", description="Connected user's email")
    picture: str = Field(default="", description="Connected user's avatar")
    trust_level: TrustLevel = Field(default=TrustLevel.KNOWN)
    connected_at: datetime = Field(..., description="When this side created the edge")
    notes: Optional[str] = Field(None, max_length=5000, description="Private notes")


class AcceptResult(BaseModel):
    """Outcome of accepting (or re-accepting) a request on one side."""

    request: ConnectionRequest
    connection: Connection
    created: bool = Field(..., description="False if the edge already existed")


class SendConnectionRequest(BaseModel):
    """Request body to send a connection request."""

    to_user_id: str = Field(..., min_length=1, description="Recipient user ID")


class UpdateConnectionRequest(BaseModel):
    """Owner-editable edge fields. Omitted fields are unchanged; a null clears notes."""

    trust_level: Optional[TrustLevel] = None
    notes: Optional[str] = Field(None, max_length=5000)


class ConnectionListResponse(BaseModel):
    """The caller's connections."""

    connections: list[Connection]
    total: int


class ConnectionRequestListResponse(BaseModel):
    """A list of requests, oldest first."""

    requests: list[ConnectionRequest]
    total: int


class ReconcileResponse(BaseModel):
    """Result of replaying accepted sent requests."""

    created: int = Field(..., description="Edges created by this run")
