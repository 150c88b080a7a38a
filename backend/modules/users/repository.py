"""
User repository for document access.

Encapsulates the two per-user documents:
- users/{user_id}: public profile (UserProfile)
- user_data/{user_id}: the user's own connections, vaults, calendar_events
  and needs arrays

The user_data document is written by the connections, vaults, events and
needs modules; this repository only creates it.
"""

from datetime import datetime
from typing import Optional, Any

from shared.repository import BaseRepository, utc_now
from shared.store import Document, ITransaction, Query
from shared.models import Identity

from .models import UserProfile

USERS_COLLECTION = "users"
USER_DATA_COLLECTION = "user_data"

# Highest code point in the Basic Multilingual Plane's private use area;
# sorts after any character that appears in an email address.
PREFIX_RANGE_END = "\uf8ff"


def empty_user_data() -> dict[str, Any]:
    """Body of a freshly created user_data document."""
    return {"connections": [], "vaults": [], "calendar_events": [], "needs": []}


class UserRepository(BaseRepository[UserProfile]):
    """
    Repository for user profile access.

    Note: This repository does NOT perform authorization checks.
    """

    async def get_profile(self, user_id: str) -> Optional[UserProfile]:
        document = await self._store.get(USERS_COLLECTION, user_id)
        if document is None:
            return None
        return self._map_to_profile(document)

    async def upsert_profile(self, identity: Identity) -> UserProfile:
        """
        Create or refresh a profile and ensure the user_data document exists.

        Runs as one transaction over both documents.
        """

        async def write(tx: ITransaction) -> UserProfile:
            existing = await tx.get(USERS_COLLECTION, identity.user_id)
            user_data = await tx.get(USER_DATA_COLLECTION, identity.user_id)

            now = utc_now()
            created_at: datetime = now
            if existing is not None:
                created_at = self._map_to_profile(existing).created_at

            profile = UserProfile(
                user_id=identity.user_id,
                email=identity.email,
                name=identity.name,
                picture=identity.picture,
                created_at=created_at,
                updated_at=now,
            )
            tx.set(USERS_COLLECTION, identity.user_id, profile.model_dump(mode="json"))
            if user_data is None:
                tx.set(USER_DATA_COLLECTION, identity.user_id, empty_user_data())
            return profile

        return await self._store.run_transaction(write)

    async def search_by_email_prefix(self, prefix: str, limit: int) -> list[UserProfile]:
        query = (
            Query(collection=USERS_COLLECTION, order_by="email", limit=limit)
            .where("email", ">=", prefix)
            .where("email", "<=", prefix + PREFIX_RANGE_END)
        )
        documents = await self._store.query(query)
        return [self._map_to_profile(d) for d in documents]

    # -------------------------------------------------------------------------
    # Private mapping methods
    # -------------------------------------------------------------------------

    def _map_to_profile(self, document: Document) -> UserProfile:
        """Map a users document to UserProfile."""
        data = document.data
        return UserProfile(
            user_id=data.get("user_id") or document.id,
            email=data.get("email", ""),
            name=data.get("name", ""),
            picture=data.get("picture", ""),
            created_at=data.get("created_at") or utc_now(),
            updated_at=data.get("updated_at"),
        )
