"""
Shared data models used across modules.

These models are shared infrastructure, not business logic.
Module-specific models should stay in their respective module directories.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field


class Identity(BaseModel):
    """
    Verified identity issued by the authentication provider.

    Display fields (name, picture) may be refreshed on login; the id never changes.
    """

    user_id: str = Field(..., description="User ID (UUID from Supabase)")
    name: str = Field(default="", description="Display name")
    email: str = Field(..., description="Email address")
    picture: str = Field(default="", description="Avatar URL")

    model_config = {"frozen": True}


class AuthenticatedUser(BaseModel):
    """
    Represents an authenticated user in the system.

    This model is populated from JWT claims and made available
    to route handlers via dependency injection.
    """

    id: str = Field(..., description="User ID (UUID from Supabase)")
    email: EmailStr = Field(..., description="User's email address")
    email_verified: bool = Field(default=False, description="Whether email is verified")
    name: str = Field(default="", description="Display name from user metadata")
    picture: str = Field(default="", description="Avatar URL from user metadata")

    # Timestamps (optional for backward compatibility)
    created_at: Optional[datetime] = Field(None, description="Account creation time")
    last_sign_in: Optional[datetime] = Field(None, description="Last sign-in time")

    role: str = Field(default="user", description="User role")

    model_config = {
        "frozen": True,  # Make immutable for safety
        "extra": "ignore",  # Ignore extra fields from JWT
    }

    def to_identity(self) -> Identity:
        """Project the authenticated user onto the identity contract."""
        return Identity(
            user_id=self.id,
            name=self.name or self.email.split("@")[0],
            email=self.email,
            picture=self.picture,
        )
