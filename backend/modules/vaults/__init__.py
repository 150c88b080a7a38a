"""
Vaults module.

Handles owner-scoped vaults and the per-connection grants that let other
users see them.

Public API:
- IVaultAccessController: Interface for vault and grant operations
- Vault, VaultAccess, SharedVault: Core models
- Vault exceptions: VaultNotFoundError, VaultAccessAlreadyGrantedError,
  GrantConnectionNotFoundError
"""

from .interfaces import IVaultAccessController
from .models import (
    Vault,
    VaultAccess,
    SharedVault,
    CreateVaultRequest,
    UpdateVaultRequest,
    GrantAccessRequest,
)
from .exceptions import (
    VaultNotFoundError,
    VaultAccessAlreadyGrantedError,
    GrantConnectionNotFoundError,
)

__all__ = [
    # Interface
    "IVaultAccessController",
    # Models
    "Vault",
    "VaultAccess",
    "SharedVault",
    "CreateVaultRequest",
    "UpdateVaultRequest",
    "GrantAccessRequest",
    # Exceptions
    "VaultNotFoundError",
    "VaultAccessAlreadyGrantedError",
    "GrantConnectionNotFoundError",
]
