"""
User-related endpoints.

Provides the caller's profile, profile sync on login, and email search for
finding people to connect with.
"""

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, EmailStr

from shared.models import AuthenticatedUser, Identity
from modules.users.interfaces import IUserService
from modules.users.models import UserProfile, UserSearchResponse
from ..dependencies import get_user_service
from ..middleware.auth import get_current_identity, get_current_user

router = APIRouter()


class UserProfileResponse(BaseModel):
    """User profile response model."""

    id: str
    email: EmailStr
    email_verified: bool
    name: str
    picture: str
    role: str


@router.get("/me", response_model=UserProfileResponse)
async def get_current_user_profile(
    user: AuthenticatedUser = Depends(get_current_user),
) -> UserProfileResponse:
    """
    Get the current user's profile.

    Requires authentication.
    """
    return UserProfileResponse(
        id=user.id,
        email=user.email,
        email_verified=user.email_verified,
        name=user.name,
        picture=user.picture,
        role=user.role,
    )


@router.post("/me", response_model=UserProfile)
async def sync_current_user_profile(
    identity: Identity = Depends(get_current_identity),
    service: IUserService = Depends(get_user_service),
) -> UserProfile:
    """
    Create or refresh the caller's stored profile from the token's identity.

    Call once per login, before any connection or vault operation.
    """
    return await service.initialize_profile(identity)


@router.get("/search", response_model=UserSearchResponse)
async def search_users(
    q: str = Query(..., min_length=1, description="Email prefix"),
    limit: int = Query(default=10, ge=1, le=50),
    user: AuthenticatedUser = Depends(get_current_user),
    service: IUserService = Depends(get_user_service),
) -> UserSearchResponse:
    """
    Find registered users by email prefix, excluding the caller.
    """
    users = await service.search_by_email(q, limit=limit, exclude_user_id=user.id)
    return UserSearchResponse(users=users, query=q.strip())
