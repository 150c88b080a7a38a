"""
Vault API endpoints.

The caller is always the owner for mutations; /shared is the recipient view.
"""

from fastapi import APIRouter, Depends, Query

from api.middleware.auth import get_current_user
from api.dependencies import get_vault_service
from shared.models import AuthenticatedUser

from .interfaces import IVaultAccessController
from .models import (
    CreateVaultRequest,
    GrantAccessRequest,
    SharedVaultListResponse,
    UpdateVaultRequest,
    Vault,
    VaultAccess,
    VaultListResponse,
)

router = APIRouter()


@router.post("", response_model=Vault, status_code=201)
async def create_vault(
    body: CreateVaultRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    service: IVaultAccessController = Depends(get_vault_service),
) -> Vault:
    return await service.create_vault(user.id, body.name, body.description)


@router.get("", response_model=VaultListResponse)
async def list_vaults(
    user: AuthenticatedUser = Depends(get_current_user),
    service: IVaultAccessController = Depends(get_vault_service),
) -> VaultListResponse:
    """List the caller's own vaults with their grants."""
    vaults = await service.list_owned_vaults(user.id)
    return VaultListResponse(vaults=vaults, total=len(vaults))


@router.get("/shared", response_model=SharedVaultListResponse)
async def list_shared_vaults(
    active_only: bool = Query(default=False, description="Hide grants past their expiry"),
    user: AuthenticatedUser = Depends(get_current_user),
    service: IVaultAccessController = Depends(get_vault_service),
) -> SharedVaultListResponse:
    """
    List other users' vaults shared with the caller.

    Expiry is advisory; expired grants are listed unless active_only is set.
    """
    vaults = await service.list_vaults_shared_with_me(user.id, active_only=active_only)
    return SharedVaultListResponse(vaults=vaults, total=len(vaults))


@router.get("/{vault_id}", response_model=Vault)
async def get_vault(
    vault_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    service: IVaultAccessController = Depends(get_vault_service),
) -> Vault:
    return await service.get_vault(user.id, vault_id)


@router.patch("/{vault_id}", response_model=Vault)
async def update_vault(
    vault_id: str,
    body: UpdateVaultRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    service: IVaultAccessController = Depends(get_vault_service),
) -> Vault:
    return await service.update_vault(user.id, vault_id, body)


@router.delete("/{vault_id}", status_code=204)
async def delete_vault(
    vault_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    service: IVaultAccessController = Depends(get_vault_service),
) -> None:
    await service.delete_vault(user.id, vault_id)


@router.post("/{vault_id}/access", response_model=VaultAccess, status_code=201)
async def grant_vault_access(
    vault_id: str,
    body: GrantAccessRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    service: IVaultAccessController = Depends(get_vault_service),
) -> VaultAccess:
    """
    Grant one of the caller's connections access to a vault.

    Returns 409 if the connection already has access.
    """
    return await service.grant_access(
        user.id,
        vault_id,
        body.connection_id,
        expires_at=body.expires_at,
        can_revoke=body.can_revoke,
    )


@router.delete("/{vault_id}/access/{connection_id}", status_code=204)
async def revoke_vault_access(
    vault_id: str,
    connection_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    service: IVaultAccessController = Depends(get_vault_service),
) -> None:
    """Revoke a grant. Revoking an absent grant is a no-op."""
    await service.revoke_access(user.id, vault_id, connection_id)
