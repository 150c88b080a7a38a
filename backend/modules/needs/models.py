"""
Needs module data models.

Needs live in the poster's user_data document under `needs`. A need is
visible to a connection only when the poster trusts that connection at
least as much as trust_level_required.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from modules.connections.models import TrustLevel


class NeedCategory(str, Enum):
    PROFESSIONAL = "Professional"
    PERSONAL = "Personal"
    SKILL_SHARE = "Skill Share"
    COMMUNITY = "Community"


class Need(BaseModel):
    """A request for help posted to the poster's circle."""

    id: str = Field(..., description="Need ID (UUID)")
    category: NeedCategory
    description: str
    posted_by: str = Field(..., description="Poster's display name when posted")
    posted_at: datetime
    trust_level_required: TrustLevel = TrustLevel.KNOWN

    def visible_at(self, trust_level: TrustLevel) -> bool:
        """True if a connection the poster trusts at trust_level may see this need."""
        return trust_level.at_least(self.trust_level_required)

    def matches(self, search: Optional[str] = None, category: Optional[NeedCategory] = None) -> bool:
        if category is not None and self.category != category:
            return False
        if search:
            needle = search.lower()
            return needle in self.description.lower() or needle in self.category.value.lower()
        return True


class VisibleNeed(Need):
    """A need as seen by one of the poster's connections."""

    owner_id: str


# =============================================================================
# Request / response bodies
# =============================================================================


class CreateNeedRequest(BaseModel):
    """Request body to post a need."""

    category: NeedCategory = NeedCategory.PROFESSIONAL
    description: str = Field(..., min_length=1, max_length=2000)
    trust_level_required: TrustLevel = TrustLevel.KNOWN


class UpdateNeedRequest(BaseModel):
    """Poster-editable need fields. None leaves a field unchanged."""

    category: Optional[NeedCategory] = None
    description: Optional[str] = Field(None, min_length=1, max_length=2000)
    trust_level_required: Optional[TrustLevel] = None


class NeedListResponse(BaseModel):
    needs: list[Need]
    total: int


class VisibleNeedListResponse(BaseModel):
    needs: list[VisibleNeed]
    total: int
