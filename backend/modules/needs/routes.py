"""
Need API endpoints.

/visible is the search page: needs from the caller's connections that the
caller is trusted enough to see.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from api.middleware.auth import get_current_identity, get_current_user
from api.dependencies import get_need_service
from shared.models import AuthenticatedUser, Identity

from .interfaces import INeedService
from .models import (
    CreateNeedRequest,
    Need,
    NeedCategory,
    NeedListResponse,
    UpdateNeedRequest,
    VisibleNeedListResponse,
)

router = APIRouter()


@router.post("", response_model=Need, status_code=201)
async def create_need(
    body: CreateNeedRequest,
    poster: Identity = Depends(get_current_identity),
    service: INeedService = Depends(get_need_service),
) -> Need:
    return await service.create_need(poster, body)


@router.get("", response_model=NeedListResponse)
async def list_needs(
    user: AuthenticatedUser = Depends(get_current_user),
    service: INeedService = Depends(get_need_service),
) -> NeedListResponse:
    """List the needs the caller has posted, newest first."""
    needs = await service.list_needs(user.id)
    return NeedListResponse(needs=needs, total=len(needs))


@router.get("/visible", response_model=VisibleNeedListResponse)
async def list_visible_needs(
    q: Optional[str] = Query(default=None, description="Match description or category"),
    category: Optional[NeedCategory] = Query(default=None),
    user: AuthenticatedUser = Depends(get_current_user),
    service: INeedService = Depends(get_need_service),
) -> VisibleNeedListResponse:
    """
    Browse needs posted by the caller's connections.

    Each poster's trust level for the caller must meet the need's
    trust_level_required.
    """
    needs = await service.list_visible_needs(user.id, search=q, category=category)
    return VisibleNeedListResponse(needs=needs, total=len(needs))


@router.get("/{need_id}", response_model=Need)
async def get_need(
    need_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    service: INeedService = Depends(get_need_service),
) -> Need:
    return await service.get_need(user.id, need_id)


@router.patch("/{need_id}", response_model=Need)
async def update_need(
    need_id: str,
    body: UpdateNeedRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    service: INeedService = Depends(get_need_service),
) -> Need:
    return await service.update_need(user.id, need_id, body)


@router.delete("/{need_id}", status_code=204)
async def delete_need(
    need_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    service: INeedService = Depends(get_need_service),
) -> None:
    await service.delete_need(user.id, need_id)
