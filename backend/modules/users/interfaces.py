"""
Users module interface.

Other modules should depend on IUserService, not the concrete implementation.
"""

from typing import Protocol, Optional, runtime_checkable

from shared.models import Identity

from .models import UserProfile


@runtime_checkable
class IUserService(Protocol):
    """
    Interface for user profile operations.
    """

    async def initialize_profile(self, identity: Identity) -> UserProfile:
        """
        Create or refresh a user's profile on login.

        Also makes sure the user's data document (connections, vaults,
        calendar events, needs) exists so later read-modify-write
        transactions have a target.

        Args:
            identity: Identity issued by the auth provider

        Returns:
            The stored profile
        """
        ...

    async def get_profile(self, user_id: str) -> Optional[UserProfile]:
        """
        Get a user's profile by ID.

        Returns:
            UserProfile if found, None otherwise
        """
        ...

    async def require_profile(self, user_id: str) -> UserProfile:
        """
        Get a user's profile by ID.

        Raises:
            UserProfileNotFoundError: If the user has no profile
        """
        ...

    async def get_display_name(self, user_id: str, default: str = "Unknown") -> str:
        """Display name for a user, or default if they have none."""
        ...

    async def search_by_email(
        self,
        prefix: str,
        limit: Optional[int] = None,
        exclude_user_id: Optional[str] = None,
    ) -> list[UserProfile]:
        """
        Find users whose email starts with prefix.

        Args:
            prefix: Email prefix (case-sensitive, as stored)
            limit: Maximum results (defaults to SEARCH_RESULT_LIMIT)
            exclude_user_id: Drop this user from the results (the caller)

        Raises:
            InvalidSearchError: If prefix is blank
        """
        ...
