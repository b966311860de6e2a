"""Repository protocol - the single persistence contract of the domain.

Every operation takes the owning user id (and project id where relevant)
explicitly. Nothing can be looked up across an ownership boundary.
"""

from typing import Protocol
from uuid import UUID

from timelapse.domain.entities import Project, TimeEntry, User


class TimelapseRepository(Protocol):
    """Abstract interface for users, projects and time entries."""

    async def get_or_create_user(
        self,
        issuer: str,
        subject_id: str,
        email: str,
    ) -> tuple[User, bool]:
        """Resolve a user by identity, creating one for an unseen identity.

        A stored email that differs from ``email`` is corrected in place.

        Returns:
            Tuple of (user, created).
        """
        ...

    async def add_project(self, project: Project) -> Project:
        """Store a new project."""
        ...

    async def get_project(self, user_id: UUID, name: str) -> Project | None:
        """Get one of the user's projects by name."""
        ...

    async def list_projects(self, user_id: UUID) -> list[Project]:
        """List the user's projects."""
        ...

    async def update_project(self, user_id: UUID, project: Project) -> Project:
        """Replace a project record (matched by id within the user's projects)."""
        ...

    async def add_time_entry(self, user_id: UUID, project_id: UUID, entry: TimeEntry) -> TimeEntry:
        """Store a new entry in the project."""
        ...

    async def get_time_entry(
        self, user_id: UUID, project_id: UUID, entry_id: UUID
    ) -> TimeEntry | None:
        """Get an entry of the project."""
        ...

    async def update_time_entry(
        self, user_id: UUID, project_id: UUID, entry: TimeEntry
    ) -> TimeEntry:
        """Replace an entry record (matched by id within the project)."""
        ...

    async def list_project_entries(self, user_id: UUID, project_id: UUID) -> list[TimeEntry]:
        """List entries of one project."""
        ...

    async def list_user_entries(self, user_id: UUID) -> list[TimeEntry]:
        """List entries across all of the user's projects."""
        ...
