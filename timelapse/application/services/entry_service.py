"""Entry service - time entries booked against a user's projects."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import NamedTuple
from uuid import UUID, uuid4

from timelapse.application.services.project_service import ProjectService
from timelapse.domain.entities import EntryType, Project, TimeEntry, sort_entries
from timelapse.domain.errors import TimeEntryNotFoundError
from timelapse.domain.protocols import TimelapseRepository
from timelapse.infrastructure.telemetry import get_logger

logger = get_logger(__name__)


@dataclass
class EntryDraft:
    """Client-supplied fields of a time entry."""

    type: EntryType = EntryType.WORK
    start: datetime | None = None
    end: datetime | None = None
    breaks: timedelta = field(default_factory=timedelta)
    comment: str = ""


class ProjectEntry(NamedTuple):
    project: Project
    entry: TimeEntry


class EntryService:
    """Service for time entries. Every lookup goes through the owning project."""

    def __init__(self, repository: TimelapseRepository):
        self.repository = repository
        self.projects = ProjectService(repository)

    async def list_project_entries(self, user_id: UUID, project_name: str) -> list[TimeEntry]:
        """Entries of one project ordered by start (start-less entries last)."""
        project = await self.projects.get_project(user_id, project_name)
        entries = await self.repository.list_project_entries(user_id, project.id)
        return sort_entries(entries)

    async def list_user_entries(self, user_id: UUID) -> list[ProjectEntry]:
        """All of the user's entries ordered by start, each with its project."""
        projects = {p.id: p for p in await self.repository.list_projects(user_id)}
        entries = sort_entries(await self.repository.list_user_entries(user_id))
        return [
            ProjectEntry(projects[entry.project_id], entry)
            for entry in entries
            if entry.project_id in projects
        ]

    async def create_entry(self, user_id: UUID, project_name: str, draft: EntryDraft) -> TimeEntry:
        project = await self.projects.get_project(user_id, project_name)
        entry = TimeEntry(
            id=uuid4(),
            project_id=project.id,
            user_id=user_id,
            type=draft.type,
            start=draft.start,
            end=draft.end,
            breaks=draft.breaks,
            comment=draft.comment,
        )
        created = await self.repository.add_time_entry(user_id, project.id, entry)

        logger.info(
            "Time entry created",
            extra={
                "entry_id": str(created.id),
                "project_id": str(project.id),
                "open": created.is_open,
            },
        )
        return created

    async def get_entry(self, user_id: UUID, project_name: str, entry_id: UUID) -> TimeEntry:
        """Get an entry of a project.

        Raises:
            ProjectNotFoundError: If the user has no such project
            TimeEntryNotFoundError: If the project has no such entry
        """
        project = await self.projects.get_project(user_id, project_name)
        entry = await self.repository.get_time_entry(user_id, project.id, entry_id)
        if entry is None:
            raise TimeEntryNotFoundError(
                message=f"Time entry not found: {project_name}/{entry_id}",
                details={"project": project_name, "entry_id": str(entry_id)},
            )
        return entry

    async def update_entry(
        self,
        user_id: UUID,
        project_name: str,
        entry_id: UUID,
        draft: EntryDraft,
    ) -> TimeEntry:
        """Replace every client-supplied field of an existing entry."""
        existing = await self.get_entry(user_id, project_name, entry_id)
        existing.type = draft.type
        existing.start = draft.start
        existing.end = draft.end
        existing.breaks = draft.breaks
        existing.comment = draft.comment
        updated = await self.repository.update_time_entry(user_id, existing.project_id, existing)

        logger.info(
            "Time entry updated",
            extra={"entry_id": str(updated.id), "open": updated.is_open},
        )
        return updated
