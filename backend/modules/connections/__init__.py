"""
Connections module.

Handles connection requests between users and each user's own list of
trusted connections.

Public API:
- IConnectionRequestService: Interface for the request protocol
- IConnectionService: Interface for a user's connection list
- ConnectionReconciler: Sender-side edge reconciliation loop
- ConnectionRequest, Connection, TrustLevel: Core models
- Connection exceptions
"""

from .interfaces import IConnectionRequestService, IConnectionService
from .models import (
    AcceptResult,
    Connection,
    ConnectionRequest,
    ConnectionRequestStatus,
    TrustLevel,
    SendConnectionRequest,
    UpdateConnectionRequest,
)
from .reconciler import ConnectionReconciler
from .exceptions import (
    ConnectionRequestNotFoundError,
    DuplicateRequestError,
    SelfConnectionError,
    RequestNotActionableError,
    RequestAccessDeniedError,
    ConnectionNotFoundError,
)

__all__ = [
    # Interfaces
    "IConnectionRequestService",
    "IConnectionService",
    "ConnectionReconciler",
    # Models
    "AcceptResult",
    "Connection",
    "ConnectionRequest",
    "ConnectionRequestStatus",
    "TrustLevel",
    "SendConnectionRequest",
    "UpdateConnectionRequest",
    # Exceptions
    "ConnectionRequestNotFoundError",
    "DuplicateRequestError",
    "SelfConnectionError",
    "RequestNotActionableError",
    "RequestAccessDeniedError",
    "ConnectionNotFoundError",
]
