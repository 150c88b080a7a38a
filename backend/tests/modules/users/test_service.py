"""Tests for users service on the in-memory document store."""

import pytest
from unittest.mock import MagicMock, AsyncMock

from shared.models import Identity
from modules.users.exceptions import InvalidSearchError, UserProfileNotFoundError
from modules.users.repository import USER_DATA_COLLECTION, UserRepository
from modules.users.service import UserService


@pytest.fixture
def service(store) -> UserService:
    return UserService(UserRepository(store), search_limit=10)


class TestInitializeProfile:
    @pytest.mark.asyncio
    async def test_creates_profile_and_user_data(self, service, store, alice):
        """First login should create the profile and an empty data document."""
        profile = await service.initialize_profile(alice)

        assert profile.user_id == "alice-id"
        assert profile.name == "Alice"
        assert profile.email == "alice@example.com"
        user_data = await store.get(USER_DATA_COLLECTION, "alice-id")
        assert user_data.data == {
            "connections": [], "vaults": [], "calendar_events": [], "needs": []
        }

    @pytest.mark.asyncio
    async def test_refresh_keeps_created_at_and_user_data(self, service, store, alice):
        """Later logins should refresh display fields only."""
        first = await service.initialize_profile(alice)
        await store.set(USER_DATA_COLLECTION, "alice-id", {"vaults": [{"id": "v"}]}, merge=True)

        renamed = alice.model_copy(update={"name": "Alice B."})
        second = await service.initialize_profile(renamed)

        assert second.name == "Alice B."
        assert second.created_at == first.created_at
        assert second.updated_at >= first.updated_at
        user_data = await store.get(USER_DATA_COLLECTION, "alice-id")
        assert user_data.data["vaults"] == [{"id": "v"}]


class TestGetProfile:
    @pytest.mark.asyncio
    async def test_get_missing(self, service):
        assert await service.get_profile("nobody") is None

    @pytest.mark.asyncio
    async def test_require_missing_raises(self, service):
        with pytest.raises(UserProfileNotFoundError):
            await service.require_profile("nobody")

    @pytest.mark.asyncio
    async def test_display_name(self, service, alice):
        await service.initialize_profile(alice)

        assert await service.get_display_name("alice-id") == "Alice"
        assert await service.get_display_name("nobody") == "Unknown"


class TestSearchByEmail:
    @pytest.mark.asyncio
    async def test_prefix_match(self, service):
        for user_id, email in [
            ("u1", "sam@example.com"),
            ("u2", "samantha@example.com"),
            ("u3", "sally@example.com"),
            ("u4", "bob@example.com"),
        ]:
            await service.initialize_profile(Identity(user_id=user_id, email=email))

        results = await service.search_by_email("sam")

        assert [p.email for p in results] == ["sam@example.com", "samantha@example.com"]

    @pytest.mark.asyncio
    async def test_excludes_caller_and_fills_page(self, service):
        for user_id, email in [("u1", "sa1@x.com"), ("u2", "sa2@x.com"), ("u3", "sa3@x.com")]:
            await service.initialize_profile(Identity(user_id=user_id, email=email))

        results = await service.search_by_email("sa", limit=2, exclude_user_id="u1")

        assert [p.user_id for p in results] == ["u2", "u3"]

    @pytest.mark.asyncio
    async def test_limit(self, service):
        for i in range(5):
            await service.initialize_profile(Identity(user_id=f"u{i}", email=f"a{i}@x.com"))

        assert len(await service.search_by_email("a", limit=3)) == 3

    @pytest.mark.asyncio
    async def test_blank_prefix_rejected(self, service):
        with pytest.raises(InvalidSearchError):
            await service.search_by_email("   ")


class TestServiceWithMockRepository:
    @pytest.mark.asyncio
    async def test_default_limit_from_settings(self):
        """search_limit should come from settings when not given."""
        repository = MagicMock(spec=UserRepository)
        repository.search_by_email_prefix = AsyncMock(return_value=[])
        service = UserService(repository)

        await service.search_by_email("a")

        repository.search_by_email_prefix.assert_awaited_once_with("a", 10)
