"""
Sender-side edge reconciliation.

When a recipient accepts a request, only the recipient's edge is written.
ConnectionReconciler runs on behalf of the sender: it watches the
sender's accepted requests and replays accept_request for each, which
appends the sender's own edge exactly once.
"""

import logging
from typing import Optional

from shared.exceptions import TrustCircleError
from shared.store import ISubscription

from .interfaces import IConnectionRequestService
from .models import ConnectionRequest

logger = logging.getLogger(__name__)


class ConnectionReconciler:
    """
    Live reconciliation loop for one user.

    Usage:
        reconciler = ConnectionReconciler(service)
        await reconciler.start(user_id)
        ...
        reconciler.stop()
    """

    def __init__(self, service: IConnectionRequestService):
        self._service = service
        self._subscription: Optional[ISubscription] = None
        self._user_id: Optional[str] = None
        self._handled: set[str] = set()

    @property
    def running(self) -> bool:
        return self._subscription is not None and self._subscription.active

    @property
    def user_id(self) -> Optional[str]:
        return self._user_id

    async def start(self, user_id: str) -> None:
        """Subscribe to user_id's accepted sent requests. Restarts if running."""
        self.stop()
        self._user_id = user_id
        self._handled = set()
        self._subscription = await self._service.subscribe_accepted_sent(
            user_id, self._on_accepted
        )
        logger.debug(f"Connection reconciler started for {user_id}")

    def stop(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            logger.debug(f"Connection reconciler stopped for {self._user_id}")
        self._subscription = None

    async def _on_accepted(self, requests: list[ConnectionRequest]) -> None:
        # Only ids still in the accepted set can be redelivered.
        self._handled &= {request.id for request in requests}
        for request in requests:
            if request.id in self._handled:
                continue
            try:
                await self._service.accept_request(request.id, self._user_id)
            except TrustCircleError as e:
                # Retried on the next delivery or the next reconcile pass.
                logger.warning(f"Failed to reconcile request {request.id}: {e.message}")
                continue
            self._handled.add(request.id)
