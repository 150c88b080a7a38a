"""
Needs module interface.
"""

from typing import Optional, Protocol, runtime_checkable

from shared.models import Identity

from .models import CreateNeedRequest, Need, NeedCategory, UpdateNeedRequest, VisibleNeed


@runtime_checkable
class INeedService(Protocol):
    """
    Interface for posting needs and browsing the needs of connections.
    """

    async def create_need(self, poster: Identity, body: CreateNeedRequest) -> Need:
        """
        Post a need, stamped with the poster's display name and the time.
        """
        ...

    async def list_needs(self, owner_id: str) -> list[Need]:
        """The owner's own needs, newest first."""
        ...

    async def get_need(self, owner_id: str, need_id: str) -> Need:
        """
        Raises:
            NeedNotFoundError: If the owner has no such need
        """
        ...

    async def update_need(self, owner_id: str, need_id: str, update: UpdateNeedRequest) -> Need:
        """
        Raises:
            NeedNotFoundError: If the owner has no such need
        """
        ...

    async def delete_need(self, owner_id: str, need_id: str) -> None:
        """
        Raises:
            NeedNotFoundError: If the owner has no such need
        """
        ...

    async def list_visible_needs(
        self,
        viewer_id: str,
        search: Optional[str] = None,
        category: Optional[NeedCategory] = None,
    ) -> list[VisibleNeed]:
        """
        Needs posted by viewer_id's connections that viewer_id may see.

        A need is visible when the poster holds an edge to the viewer whose
        trust level is at least the need's trust_level_required. Newest first.

        Args:
            viewer_id: The browsing user
            search: Case-insensitive substring of description or category
            category: Only needs in this category
        """
        ...
