"""API models package."""

from .user import AuthenticatedUser, TokenPayload
from .errors import ErrorResponse

__all__ = [
    "AuthenticatedUser",
    "TokenPayload",
    "ErrorResponse",
]
