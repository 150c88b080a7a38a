"""Tests for EventService on the in-memory store."""

import pytest
from datetime import datetime, timezone

from modules.users.repository import USER_DATA_COLLECTION
from modules.events import IEventService
from modules.events.exceptions import EventNotFoundError, EventShareTargetError
from modules.events.models import CreateEventRequest, UpdateEventRequest
from modules.events.repository import EventRepository
from modules.events.service import EventService

JUNE_1 = datetime(2024, 6, 1, 18, 0, tzinfo=timezone.utc)
JUNE_8 = datetime(2024, 6, 8, 18, 0, tzinfo=timezone.utc)


@pytest.fixture
def service(store) -> EventService:
    return EventService(EventRepository(store))


async def connect(store, owner_id: str, *others: tuple[str, str]) -> None:
    """Give owner_id one-sided edges to (id, name) pairs."""
    await store.set(
        USER_DATA_COLLECTION,
        owner_id,
        {
            "connections": [
                {"id": other_id, "name": name, "connected_at": "2024-01-01T00:00:00+00:00"}
                for other_id, name in others
            ]
        },
        merge=True,
    )


class TestOwnerOperations:
    @pytest.mark.asyncio
    async def test_create_and_list_by_date(self, service):
        """Should list the owner's events earliest first."""
        later = await service.create_event(
            "alice-id", CreateEventRequest(title="Dinner", date=JUNE_8)
        )
        earlier = await service.create_event(
            "alice-id", CreateEventRequest(title="Movie night", date=JUNE_1, needs_based=True)
        )

        events = await service.list_events("alice-id")

        assert [e.id for e in events] == [earlier.id, later.id]
        assert events[0].needs_based is True
        assert events[1].shared_with == []

    @pytest.mark.asyncio
    async def test_list_without_user_data(self, service):
        assert await service.list_events("nobody") == []

    @pytest.mark.asyncio
    async def test_preserves_other_user_data_fields(self, service, store):
        await connect(store, "alice-id", ("bob-id", "Bob"))
        await service.create_event("alice-id", CreateEventRequest(title="Dinner", date=JUNE_1))

        document = await store.get(USER_DATA_COLLECTION, "alice-id")
        assert [c["id"] for c in document.data["connections"]] == ["bob-id"]
        assert len(document.data["calendar_events"]) == 1

    @pytest.mark.asyncio
    async def test_get_and_missing(self, service):
        event = await service.create_event("alice-id", CreateEventRequest(title="Dinner", date=JUNE_1))

        assert (await service.get_event("alice-id", event.id)).title == "Dinner"
        with pytest.raises(EventNotFoundError):
            await service.get_event("bob-id", event.id)

    @pytest.mark.asyncio
    async def test_update_changes_only_given_fields(self, service, store):
        await connect(store, "alice-id", ("bob-id", "Bob"))
        event = await service.create_event("alice-id", CreateEventRequest(title="Dinner", date=JUNE_1))

        updated = await service.update_event(
            "alice-id", event.id, UpdateEventRequest(date=JUNE_8, shared_with=["bob-id"])
        )

        assert updated.title == "Dinner"
        assert updated.date == JUNE_8
        assert updated.shared_with == ["bob-id"]
        assert await service.get_event("alice-id", event.id) == updated

    @pytest.mark.asyncio
    async def test_update_missing(self, service):
        with pytest.raises(EventNotFoundError):
            await service.update_event("alice-id", "missing", UpdateEventRequest(title="x"))

    @pytest.mark.asyncio
    async def test_delete(self, service):
        event = await service.create_event("alice-id", CreateEventRequest(title="Dinner", date=JUNE_1))

        await service.delete_event("alice-id", event.id)

        assert await service.list_events("alice-id") == []
        with pytest.raises(EventNotFoundError):
            await service.delete_event("alice-id", event.id)


class TestSharing:
    @pytest.mark.asyncio
    async def test_share_targets_must_be_connections(self, service, store):
        await connect(store, "alice-id", ("bob-id", "Bob"))

        with pytest.raises(EventShareTargetError) as exc_info:
            await service.create_event(
                "alice-id",
                CreateEventRequest(title="Dinner", date=JUNE_1, shared_with=["bob-id", "carol-id"]),
            )

        assert exc_info.value.details["user_ids"] == ["carol-id"]
        assert await service.list_events("alice-id") == []

    @pytest.mark.asyncio
    async def test_update_checks_share_targets(self, service, store):
        event = await service.create_event("alice-id", CreateEventRequest(title="Dinner", date=JUNE_1))

        with pytest.raises(EventShareTargetError):
            await service.update_event(
                "alice-id", event.id, UpdateEventRequest(shared_with=["bob-id"])
            )

    @pytest.mark.asyncio
    async def test_shared_with_me(self, service, store):
        """Should list connections' events that name the caller, earliest first."""
        await connect(store, "alice-id", ("bob-id", "Bob"), ("carol-id", "Carol"))
        await connect(store, "carol-id", ("bob-id", "Bob"), ("alice-id", "Alice"))
        await connect(store, "bob-id", ("alice-id", "Alice"), ("carol-id", "Carol"))

        dinner = await service.create_event(
            "alice-id", CreateEventRequest(title="Dinner", date=JUNE_8, shared_with=["bob-id"])
        )
        await service.create_event(
            "alice-id", CreateEventRequest(title="Private", date=JUNE_1, shared_with=["carol-id"])
        )
        hike = await service.create_event(
            "carol-id", CreateEventRequest(title="Hike", date=JUNE_1, shared_with=["bob-id"])
        )

        shared = await service.list_events_shared_with_me("bob-id")

        assert [e.id for e in shared] == [hike.id, dinner.id]
        assert shared[0].owner_id == "carol-id"
        assert shared[0].owner_name == "Carol"
        assert shared[1].owner_name == "Alice"

    @pytest.mark.asyncio
    async def test_shared_with_me_needs_own_edge(self, service, store):
        """Should skip owners the caller holds no edge to."""
        await connect(store, "alice-id", ("bob-id", "Bob"))
        await service.create_event(
            "alice-id", CreateEventRequest(title="Dinner", date=JUNE_1, shared_with=["bob-id"])
        )

        assert await service.list_events_shared_with_me("bob-id") == []


class TestInterface:
    def test_implements_interface(self, service):
        assert isinstance(service, IEventService)
