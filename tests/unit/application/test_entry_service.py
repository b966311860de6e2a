"""Tests for EntryService."""

from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest

from timelapse.application.services import EntryDraft, EntryService
from timelapse.domain.entities import EntryType
from timelapse.domain.errors import ProjectNotFoundError, TimeEntryNotFoundError
from timelapse.infrastructure.repositories import InMemoryTimelapseRepository


@pytest.fixture
def service() -> EntryService:
    return EntryService(InMemoryTimelapseRepository())


@pytest.fixture
def user_id():
    return uuid4()


def at(hour: int, day: int = 2) -> datetime:
    return datetime(2024, 1, day, hour, 0, tzinfo=UTC)


class TestCreateEntry:
    """Test entry creation."""

    @pytest.mark.asyncio
    async def test_create_open_entry(self, service, user_id):
        """Test that an entry without end is stored open."""
        project = await service.projects.create_project(user_id, "acme")

        entry = await service.create_entry(user_id, "acme", EntryDraft(start=at(9)))

        assert entry.is_open
        assert entry.project_id == project.id
        assert entry.user_id == user_id

    @pytest.mark.asyncio
    async def test_unknown_project(self, service, user_id):
        """Test creating an entry in a missing project."""
        with pytest.raises(ProjectNotFoundError):
            await service.create_entry(user_id, "ghost", EntryDraft(start=at(9)))


class TestReadEntries:
    """Test entry reads."""

    @pytest.mark.asyncio
    async def test_project_entries_sorted_by_start(self, service, user_id):
        """Test ordering with start-less entries last."""
        await service.projects.create_project(user_id, "acme")
        late = await service.create_entry(user_id, "acme", EntryDraft(start=at(15)))
        startless = await service.create_entry(user_id, "acme", EntryDraft(end=at(12)))
        early = await service.create_entry(user_id, "acme", EntryDraft(start=at(9)))

        entries = await service.list_project_entries(user_id, "acme")

        assert [e.id for e in entries] == [early.id, late.id, startless.id]

    @pytest.mark.asyncio
    async def test_user_entries_carry_project(self, service, user_id):
        """Test that entries across projects come with their project."""
        await service.projects.create_project(user_id, "acme")
        await service.projects.create_project(user_id, "globex")
        await service.create_entry(user_id, "globex", EntryDraft(start=at(8)))
        await service.create_entry(user_id, "acme", EntryDraft(start=at(10)))
        await service.projects.create_project(uuid4(), "acme")

        items = await service.list_user_entries(user_id)

        assert [item.project.name for item in items] == ["globex", "acme"]

    @pytest.mark.asyncio
    async def test_entry_of_other_project_not_found(self, service, user_id):
        """Test that entries are only found through their own project."""
        await service.projects.create_project(user_id, "acme")
        await service.projects.create_project(user_id, "globex")
        entry = await service.create_entry(user_id, "acme", EntryDraft(start=at(9)))

        with pytest.raises(TimeEntryNotFoundError, match=f"globex/{entry.id}"):
            await service.get_entry(user_id, "globex", entry.id)


class TestUpdateEntry:
    """Test entry updates."""

    @pytest.mark.asyncio
    async def test_update_closes_entry(self, service, user_id):
        """Test replacing the client-supplied fields."""
        await service.projects.create_project(user_id, "acme")
        entry = await service.create_entry(user_id, "acme", EntryDraft(start=at(9)))

        updated = await service.update_entry(
            user_id,
            "acme",
            entry.id,
            EntryDraft(
                type=EntryType.WORK,
                start=at(9),
                end=at(17),
                breaks=timedelta(minutes=30),
                comment="done",
            ),
        )

        assert updated.id == entry.id
        assert not updated.is_open
        assert updated.elapsed() == timedelta(hours=7, minutes=30)
        stored = await service.get_entry(user_id, "acme", entry.id)
        assert stored.comment == "done"

    @pytest.mark.asyncio
    async def test_update_missing_entry(self, service, user_id):
        """Test updating an entry that does not exist."""
        await service.projects.create_project(user_id, "acme")

        with pytest.raises(TimeEntryNotFoundError):
            await service.update_entry(user_id, "acme", uuid4(), EntryDraft())
