"""
Users service implementation.

Keeps the public profile in sync with the auth provider's identity and
answers email searches used to find people to connect with.
"""

import logging
from typing import Optional

from shared.config import get_settings
from shared.models import Identity

from .interfaces import IUserService
from .models import UserProfile
from .repository import UserRepository
from .exceptions import InvalidSearchError, UserProfileNotFoundError

logger = logging.getLogger(__name__)


class UserService(IUserService):
    """
    User profile service on the document store.
    """

    def __init__(self, repository: UserRepository, search_limit: Optional[int] = None):
        self._repository = repository
        self._search_limit = search_limit or get_settings().search_result_limit

    async def initialize_profile(self, identity: Identity) -> UserProfile:
        """Create or refresh the caller's profile and data document."""
        profile = await self._repository.upsert_profile(identity)
        logger.debug(f"Initialized profile for user {identity.user_id}")
        return profile

    async def get_profile(self, user_id: str) -> Optional[UserProfile]:
        return await self._repository.get_profile(user_id)

    async def require_profile(self, user_id: str) -> UserProfile:
        profile = await self._repository.get_profile(user_id)
        if profile is None:
            raise UserProfileNotFoundError(user_id)
        return profile

    async def get_display_name(self, user_id: str, default: str = "Unknown") -> str:
        """Name to show for a user, falling back to default."""
        profile = await self._repository.get_profile(user_id)
        if profile is None or not profile.name:
            return default
        return profile.name

    async def search_by_email(
        self,
        prefix: str,
        limit: Optional[int] = None,
        exclude_user_id: Optional[str] = None,
    ) -> list[UserProfile]:
        """Prefix search on email, excluding the caller if requested."""
        prefix = prefix.strip()
        if not prefix:
            raise InvalidSearchError(prefix, "search prefix must not be empty")

        limit = limit or self._search_limit
        # Fetch one extra so excluding the caller still fills the page.
        fetch_limit = limit + 1 if exclude_user_id else limit
        profiles = await self._repository.search_by_email_prefix(prefix, fetch_limit)
        if exclude_user_id:
            profiles = [p for p in profiles if p.user_id != exclude_user_id]
        return profiles[:limit]
