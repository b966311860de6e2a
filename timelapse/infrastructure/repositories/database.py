"""SQLAlchemy-backed implementation of the timelapse repository contract."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from timelapse.domain.entities import Project, TimeEntry, User
from timelapse.domain.errors import RepositoryError
from timelapse.infrastructure.repositories.project_repository import ProjectRepositoryImpl
from timelapse.infrastructure.repositories.time_entry_repository import TimeEntryRepositoryImpl
from timelapse.infrastructure.repositories.user_repository import UserRepositoryImpl
from timelapse.infrastructure.telemetry.logging import get_logger

logger = get_logger(__name__)


class DatabaseTimelapseRepository:
    """Implements ``TimelapseRepository`` on one request-scoped session.

    Every write commits immediately; no transaction spans a request.
    Driver failures and timeouts surface as ``RepositoryError``.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.users = UserRepositoryImpl(session)
        self.projects = ProjectRepositoryImpl(session)
        self.entries = TimeEntryRepositoryImpl(session)

    @asynccontextmanager
    async def _operation(self, name: str, commit: bool = False) -> AsyncIterator[None]:
        try:
            yield
            if commit:
                await self.session.commit()
        except (SQLAlchemyError, TimeoutError, OSError) as exc:
            logger.error(
                "Repository operation failed",
                extra={"operation": name, "error_type": type(exc).__name__},
            )
            await self.session.rollback()
            raise RepositoryError(
                message=f"Repository operation failed: {name}",
                operation=name,
                details={"error": str(exc)},
            ) from exc

    async def get_or_create_user(
        self, issuer: str, subject_id: str, email: str
    ) -> tuple[User, bool]:
        async with self._operation("get_or_create_user", commit=True):
            return await self.users.get_or_create_by_identity(issuer, subject_id, email)

    async def add_project(self, project: Project) -> Project:
        async with self._operation("add_project", commit=True):
            return await self.projects.create(project)

    async def get_project(self, user_id: UUID, name: str) -> Project | None:
        async with self._operation("get_project"):
            return await self.projects.get_by_name(user_id, name)

    async def list_projects(self, user_id: UUID) -> list[Project]:
        async with self._operation("list_projects"):
            return await self.projects.list_by_user(user_id)

    async def update_project(self, user_id: UUID, project: Project) -> Project:
        if project.user_id != user_id:
            raise ValueError("Project does not belong to user")
        async with self._operation("update_project", commit=True):
            return await self.projects.update(project)

    async def add_time_entry(self, user_id: UUID, project_id: UUID, entry: TimeEntry) -> TimeEntry:
        _check_entry_owner(entry, user_id, project_id)
        async with self._operation("add_time_entry", commit=True):
            return await self.entries.create(entry)

    async def get_time_entry(
        self, user_id: UUID, project_id: UUID, entry_id: UUID
    ) -> TimeEntry | None:
        async with self._operation("get_time_entry"):
            return await self.entries.get_in_project(user_id, project_id, entry_id)

    async def update_time_entry(
        self, user_id: UUID, project_id: UUID, entry: TimeEntry
    ) -> TimeEntry:
        _check_entry_owner(entry, user_id, project_id)
        async with self._operation("update_time_entry", commit=True):
            return await self.entries.update(entry)

    async def list_project_entries(self, user_id: UUID, project_id: UUID) -> list[TimeEntry]:
        async with self._operation("list_project_entries"):
            return await self.entries.list_by_project(user_id, project_id)

    async def list_user_entries(self, user_id: UUID) -> list[TimeEntry]:
        async with self._operation("list_user_entries"):
            return await self.entries.list_by_user(user_id)


def _check_entry_owner(entry: TimeEntry, user_id: UUID, project_id: UUID) -> None:
    if entry.user_id != user_id or entry.project_id != project_id:
        raise ValueError("Time entry does not belong to the given user and project")
