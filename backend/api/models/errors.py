"""
Error response models.

Standardized error responses for the API.
"""

from typing import Any

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standard error response format, as produced by TrustCircleError.to_dict()."""

    error: str
    message: str
    details: dict[str, Any] = Field(default_factory=dict)

