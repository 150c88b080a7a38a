"""
Needs module exceptions.
"""

from shared.exceptions import NotFoundError


class NeedNotFoundError(NotFoundError):
    """Raised when a need ID does not resolve in the poster's record."""

    def __init__(self, owner_id: str, need_id: str):
        super().__init__(
            f"Need not found: {need_id}",
            code="NEED_NOT_FOUND",
            details={"owner_id": owner_id, "need_id": need_id},
        )
