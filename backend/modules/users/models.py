"""
Users module data models.

Profiles mirror the identity issued by the auth provider so other users can
find each other by email and so shared vaults can show their owner's name.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from shared.models import Identity


class UserProfile(BaseModel):
    """
    Public profile stored at users/{user_id}.

    Display fields are refreshed on every login; created_at is kept from the
    first one.
    """

    user_id: str = Field(..., description="User ID")
    email: str = Field(..., description="Email address")
    name: str = Field(default="", description="Display name")
    picture: str = Field(default="", description="Avatar URL")
    created_at: datetime = Field(..., description="First login time")
    updated_at: Optional[datetime] = Field(None, description="Last profile refresh")

    def to_identity(self) -> Identity:
        """Project the profile onto the identity contract."""
        return Identity(
            user_id=self.user_id,
            name=self.name,
            email=self.email,
            picture=self.picture,
        )


class UserSearchResponse(BaseModel):
    """Email prefix search results."""

    users: list[UserProfile] = Field(default_factory=list)
    query: str = Field(..., description="The prefix that was searched")
