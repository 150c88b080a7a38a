"""
Needs module.

Handles needs users post to their circle and trust-gated browsing of the
needs their connections have posted.

Public API:
- INeedService: Interface for need operations
- Need, VisibleNeed, NeedCategory: Core models
- Need exceptions: NeedNotFoundError
"""

from .interfaces import INeedService
from .models import (
    Need,
    VisibleNeed,
    NeedCategory,
    CreateNeedRequest,
    UpdateNeedRequest,
)
from .exceptions import NeedNotFoundError

__all__ = [
    # Interface
    "INeedService",
    # Models
    "Need",
    "VisibleNeed",
    "NeedCategory",
    "CreateNeedRequest",
    "UpdateNeedRequest",
    # Exceptions
    "NeedNotFoundError",
]
