"""
Users module exceptions.
"""

from shared.exceptions import NotFoundError, ValidationError


class UserProfileNotFoundError(NotFoundError):
    """Raised when a user has no profile (never logged in)."""

    def __init__(self, user_id: str):
        super().__init__(
            f"User not found: {user_id}",
            code="USER_NOT_FOUND",
            details={"user_id": user_id},
        )


class InvalidSearchError(ValidationError):
    """Raised when an email search prefix is unusable."""

    def __init__(self, query: str, reason: str):
        super().__init__(
            f"Invalid search '{query}': {reason}",
            code="INVALID_SEARCH",
            details={"query": query, "reason": reason},
        )
