"""
Connection API endpoints.

Two routers:
- router: the caller's own connection list (/api/connections)
- requests_router: the request protocol (/api/connection-requests)

Module exceptions propagate to the application's TrustCircleError handler,
which maps them to HTTP status codes.
"""

import asyncio

from fastapi import APIRouter, Depends, HTTPException
from sse_starlette.sse import EventSourceResponse

from api.config import get_settings as get_api_settings
from api.middleware.auth import get_current_identity, get_current_user
from api.dependencies import (
    get_connection_request_service,
    get_connection_service,
    get_user_service,
)
from shared.models import AuthenticatedUser, Identity
from modules.users.interfaces import IUserService

from .interfaces import IConnectionRequestService, IConnectionService
from .models import (
    Connection,
    ConnectionListResponse,
    ConnectionRequest,
    ConnectionRequestListResponse,
    AcceptResult,
    ReconcileResponse,
    SendConnectionRequest,
    UpdateConnectionRequest,
)
from .reconciler import ConnectionReconciler

router = APIRouter()
requests_router = APIRouter()


# =============================================================================
# Connections
# =============================================================================


@router.get("", response_model=ConnectionListResponse)
async def list_connections(
    user: AuthenticatedUser = Depends(get_current_user),
    service: IConnectionService = Depends(get_connection_service),
) -> ConnectionListResponse:
    """
    List the caller's connections.

    Only the caller's side of each edge is returned. A user who accepted
    your request appears here once this side has been reconciled.
    """
    connections = await service.list_connections(user.id)
    return ConnectionListResponse(connections=connections, total=len(connections))


@router.get("/{connection_id}", response_model=Connection)
async def get_connection(
    connection_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    service: IConnectionService = Depends(get_connection_service),
) -> Connection:
    return await service.get_connection(user.id, connection_id)


@router.patch("/{connection_id}", response_model=Connection)
async def update_connection(
    connection_id: str,
    update: UpdateConnectionRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    service: IConnectionService = Depends(get_connection_service),
) -> Connection:
    """
    Change the trust level or notes of one of the caller's connections.
    """
    return await service.update_connection(user.id, connection_id, update)


@router.delete("/{connection_id}", status_code=204)
async def delete_connection(
    connection_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    service: IConnectionService = Depends(get_connection_service),
) -> None:
    """
    Remove a connection from the caller's list only.
    """
    removed = await service.delete_connection(user.id, connection_id)
    if not removed:
        raise HTTPException(status_code=404, detail="Connection not found")


# =============================================================================
# Connection requests
# =============================================================================


@requests_router.post("", response_model=ConnectionRequest, status_code=201)
async def send_connection_request(
    body: SendConnectionRequest,
    sender: Identity = Depends(get_current_identity),
    service: IConnectionRequestService = Depends(get_connection_request_service),
    users: IUserService = Depends(get_user_service),
) -> ConnectionRequest:
    """
    Send a connection request to another registered user.
    """
    recipient = await users.require_profile(body.to_user_id)
    return await service.send_request(sender, recipient.to_identity())


@requests_router.get("/received", response_model=ConnectionRequestListResponse)
async def list_received_requests(
    user: AuthenticatedUser = Depends(get_current_user),
    service: IConnectionRequestService = Depends(get_connection_request_service),
) -> ConnectionRequestListResponse:
    """Pending requests addressed to the caller, oldest first."""
    requests = await service.list_pending_received(user.id)
    return ConnectionRequestListResponse(requests=requests, total=len(requests))


@requests_router.get("/sent", response_model=ConnectionRequestListResponse)
async def list_sent_requests(
    user: AuthenticatedUser = Depends(get_current_user),
    service: IConnectionRequestService = Depends(get_connection_request_service),
) -> ConnectionRequestListResponse:
    """Pending requests the caller has sent, oldest first."""
    requests = await service.list_pending_sent(user.id)
    return ConnectionRequestListResponse(requests=requests, total=len(requests))


def offer_latest(queue: asyncio.Queue, item) -> None:
    """Put item on a bounded queue, dropping the snapshot it replaces."""
    if queue.full():
        queue.get_nowait()
    queue.put_nowait(item)


async def pending_requests_generator(user_id: str, service: IConnectionRequestService):
    """
    Yield the caller's pending received requests each time they change.

    While the stream is open the caller's accepted sent requests are also
    reconciled, so edges to users who accepted appear without a reload.

    Yields events in the format:
        event: pending_requests
        data: {"requests": [...], "total": N}
    """
    # Each delivery is a full snapshot; a slow client only needs the newest.
    queue: asyncio.Queue = asyncio.Queue(maxsize=1)
    subscription = await service.subscribe_pending_received(
        user_id, lambda requests: offer_latest(queue, requests)
    )
    reconciler = ConnectionReconciler(service)
    try:
        await reconciler.start(user_id)
        while True:
            requests = await queue.get()
            payload = ConnectionRequestListResponse(requests=requests, total=len(requests))
            yield {"event": "pending_requests", "data": payload.model_dump_json()}
    finally:
        reconciler.stop()
        subscription.unsubscribe()


@requests_router.get("/received/stream")
async def stream_received_requests(
    user: AuthenticatedUser = Depends(get_current_user),
    service: IConnectionRequestService = Depends(get_connection_request_service),
):
    """
    Stream the caller's pending received requests via SSE.

    The full list is sent on connect and again after every change. The
    caller's own edges for accepted sent requests are reconciled for as
    long as the stream stays open.
    """
    return EventSourceResponse(
        pending_requests_generator(user.id, service),
        media_type="text/event-stream",
        ping=get_api_settings().sse_ping_seconds,
    )


@requests_router.post("/reconcile", response_model=ReconcileResponse)
async def reconcile_accepted_requests(
    user: AuthenticatedUser = Depends(get_current_user),
    service: IConnectionRequestService = Depends(get_connection_request_service),
) -> ReconcileResponse:
    """
    Create the caller's edges for every request of theirs that was accepted.

    Safe to call on every load; already-reconciled requests are skipped.
    """
    created = await service.reconcile_accepted_sent(user.id)
    return ReconcileResponse(created=created)


@requests_router.get("/{request_id}", response_model=ConnectionRequest)
async def get_connection_request(
    request_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    service: IConnectionRequestService = Depends(get_connection_request_service),
) -> ConnectionRequest:
    request = await service.get_request(request_id)
    if not request.involves(user.id):
        raise HTTPException(status_code=404, detail="Connection request not found")
    return request


@requests_router.post("/{request_id}/accept", response_model=AcceptResult)
async def accept_connection_request(
    request_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    service: IConnectionRequestService = Depends(get_connection_request_service),
) -> AcceptResult:
    """
    Accept a request addressed to the caller.

    Writes the caller's edge only. The sender's edge is created when the
    sender reconciles.
    """
    return await service.accept_request(request_id, user.id)


@requests_router.post("/{request_id}/reject", response_model=ConnectionRequest)
async def reject_connection_request(
    request_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    service: IConnectionRequestService = Depends(get_connection_request_service),
) -> ConnectionRequest:
    return await service.reject_request(request_id, user.id)


@requests_router.delete("/{request_id}", status_code=204)
async def cancel_connection_request(
    request_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    service: IConnectionRequestService = Depends(get_connection_request_service),
) -> None:
    """Withdraw a pending request the caller sent."""
    await service.cancel_request(request_id, user.id)
