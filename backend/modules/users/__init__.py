"""
Users module.

Handles the public profile derived from the auth provider's identity.

Public API:
- IUserService: Interface for profile operations
- UserProfile: Stored profile
- User exceptions: UserProfileNotFoundError, InvalidSearchError
"""

from .interfaces import IUserService
from .models import UserProfile, UserSearchResponse
from .exceptions import UserProfileNotFoundError, InvalidSearchError

__all__ = [
    # Interface
    "IUserService",
    # Models
    "UserProfile",
    "UserSearchResponse",
    # Exceptions
    "UserProfileNotFoundError",
    "InvalidSearchError",
]
