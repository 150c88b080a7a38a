"""
User models for authentication.

AuthenticatedUser is defined in shared.models and re-exported here; this
module adds the raw JWT payload it is built from.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from shared.models import AuthenticatedUser


class TokenPayload(BaseModel):
    """JWT token payload structure."""
    model_config = ConfigDict(extra="ignore")

    sub: str  # User ID
    email: str
    email_confirmed_at: Optional[str] = None
    aud: str  # Audience
    exp: int  # Expiration timestamp
    iat: int  # Issued at timestamp
    user_metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def display_name(self) -> str:
        return str(self.user_metadata.get("full_name") or self.user_metadata.get("name") or "")

    @property
    def picture(self) -> str:
        return str(self.user_metadata.get("avatar_url") or self.user_metadata.get("picture") or "")


__all__ = ["AuthenticatedUser", "TokenPayload"]
