"""
Need service implementation.

Posting and editing are transactions on the poster's user_data document.
Visibility uses the poster's side of the edge: the trust level the poster
assigned to the viewer, not the other way round.
"""

import asyncio
import logging
import uuid
from typing import Optional

from shared.models import Identity
from shared.repository import utc_now
from shared.store import ITransaction
from modules.users.repository import USER_DATA_COLLECTION

from .interfaces import INeedService
from .models import CreateNeedRequest, Need, NeedCategory, UpdateNeedRequest, VisibleNeed
from .repository import NEEDS_FIELD, NeedRepository
from .exceptions import NeedNotFoundError

logger = logging.getLogger(__name__)


def _find(needs: list[Need], need_id: str) -> Optional[int]:
    for index, need in enumerate(needs):
        if need.id == need_id:
            return index
    return None


class NeedService(INeedService):
    def __init__(self, repository: NeedRepository):
        self._repository = repository
        self._store = repository.store

    async def create_need(self, poster: Identity, body: CreateNeedRequest) -> Need:
        need = Need(
            id=str(uuid.uuid4()),
            posted_by=poster.name or poster.email,
            posted_at=utc_now(),
            **body.model_dump(),
        )

        async def write(tx: ITransaction) -> None:
            owner_doc = await tx.get(USER_DATA_COLLECTION, poster.user_id)
            needs = self._repository.map_needs(owner_doc)
            needs.append(need)
            self._write_needs(tx, poster.user_id, needs)

        await self._store.run_transaction(write)
        logger.info(f"User {poster.user_id} posted need {need.id}")
        return need

    async def list_needs(self, owner_id: str) -> list[Need]:
        needs = await self._repository.list_needs(owner_id)
        return sorted(needs, key=lambda n: n.posted_at, reverse=True)

    async def get_need(self, owner_id: str, need_id: str) -> Need:
        needs = await self._repository.list_needs(owner_id)
        index = _find(needs, need_id)
        if index is None:
            raise NeedNotFoundError(owner_id, need_id)
        return needs[index]

    async def update_need(self, owner_id: str, need_id: str, update: UpdateNeedRequest) -> Need:
        async def write(tx: ITransaction) -> Need:
            owner_doc = await tx.get(USER_DATA_COLLECTION, owner_id)
            needs = self._repository.map_needs(owner_doc)
            index = _find(needs, need_id)
            if index is None:
                raise NeedNotFoundError(owner_id, need_id)

            needs[index] = needs[index].model_copy(update=update.model_dump(exclude_none=True))
            self._write_needs(tx, owner_id, needs)
            return needs[index]

        return await self._store.run_transaction(write)

    async def delete_need(self, owner_id: str, need_id: str) -> None:
        async def write(tx: ITransaction) -> None:
            owner_doc = await tx.get(USER_DATA_COLLECTION, owner_id)
            needs = self._repository.map_needs(owner_doc)
            index = _find(needs, need_id)
            if index is None:
                raise NeedNotFoundError(owner_id, need_id)
            needs.pop(index)
            self._write_needs(tx, owner_id, needs)

        await self._store.run_transaction(write)
        logger.info(f"User {owner_id} deleted need {need_id}")

    async def list_visible_needs(
        self,
        viewer_id: str,
        search: Optional[str] = None,
        category: Optional[NeedCategory] = None,
    ) -> list[VisibleNeed]:
        viewer_doc = await self._repository.get_user_data(viewer_id)
        poster_ids = [edge.id for edge in self._repository.connections(viewer_doc)]
        if not poster_ids:
            return []

        poster_docs = await asyncio.gather(
            *(self._repository.get_user_data(p) for p in poster_ids)
        )

        visible: list[VisibleNeed] = []
        for poster_id, poster_doc in zip(poster_ids, poster_docs):
            edge = next(
                (c for c in self._repository.connections(poster_doc) if c.id == viewer_id),
                None,
            )
            # The poster has not reconciled or has removed the viewer.
            if edge is None:
                continue
            for need in self._repository.map_needs(poster_doc):
                if need.visible_at(edge.trust_level) and need.matches(search, category):
                    visible.append(VisibleNeed(**need.model_dump(), owner_id=poster_id))

        visible.sort(key=lambda n: n.posted_at, reverse=True)
        return visible

    def _write_needs(self, tx: ITransaction, owner_id: str, needs: list[Need]) -> None:
        stored = [self._repository.to_stored(n) for n in needs]
        tx.set(USER_DATA_COLLECTION, owner_id, {NEEDS_FIELD: stored}, merge=True)
