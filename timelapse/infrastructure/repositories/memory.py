"""In-process implementation of the timelapse repository contract.

Selected with ``REPOSITORY_BACKEND=memory``. Data lives as long as the
application instance; records are copied on the way in and out so callers
never share mutable state with the store.
"""

import copy
from uuid import UUID, uuid4

from timelapse.domain.entities import Identity, Project, TimeEntry, User


class InMemoryTimelapseRepository:
    """Implements ``TimelapseRepository`` with plain dictionaries."""

    def __init__(self) -> None:
        self._users: dict[UUID, User] = {}
        self._projects: dict[UUID, Project] = {}
        self._entries: dict[UUID, TimeEntry] = {}

    async def get_or_create_user(
        self, issuer: str, subject_id: str, email: str
    ) -> tuple[User, bool]:
        for user in self._users.values():
            identity = user.identity_for(issuer, subject_id)
            if identity is not None:
                identity.email = email
                return copy.deepcopy(user), False

        user = User(id=uuid4(), identities=[Identity(issuer, subject_id, email)])
        self._users[user.id] = user
        return copy.deepcopy(user), True

    async def add_project(self, project: Project) -> Project:
        self._projects[project.id] = copy.deepcopy(project)
        return copy.deepcopy(project)

    async def get_project(self, user_id: UUID, name: str) -> Project | None:
        for project in self._projects.values():
            if project.user_id == user_id and project.name == name:
                return copy.deepcopy(project)
        return None

    async def list_projects(self, user_id: UUID) -> list[Project]:
        projects = [p for p in self._projects.values() if p.user_id == user_id]
        return copy.deepcopy(sorted(projects, key=lambda p: p.name))

    async def update_project(self, user_id: UUID, project: Project) -> Project:
        stored = self._projects.get(project.id)
        if stored is None or stored.user_id != user_id or project.user_id != user_id:
            raise ValueError("Project does not belong to user")
        self._projects[project.id] = copy.deepcopy(project)
        return copy.deepcopy(project)

    async def add_time_entry(self, user_id: UUID, project_id: UUID, entry: TimeEntry) -> TimeEntry:
        _check_entry_owner(entry, user_id, project_id)
        self._entries[entry.id] = copy.deepcopy(entry)
        return copy.deepcopy(entry)

    async def get_time_entry(
        self, user_id: UUID, project_id: UUID, entry_id: UUID
    ) -> TimeEntry | None:
        entry = self._entries.get(entry_id)
        if entry is None or entry.user_id != user_id or entry.project_id != project_id:
            return None
        return copy.deepcopy(entry)

    async def update_time_entry(
        self, user_id: UUID, project_id: UUID, entry: TimeEntry
    ) -> TimeEntry:
        _check_entry_owner(entry, user_id, project_id)
        self._entries[entry.id] = copy.deepcopy(entry)
        return copy.deepcopy(entry)

    async def list_project_entries(self, user_id: UUID, project_id: UUID) -> list[TimeEntry]:
        return [
            copy.deepcopy(e)
            for e in self._entries.values()
            if e.user_id == user_id and e.project_id == project_id
        ]

    async def list_user_entries(self, user_id: UUID) -> list[TimeEntry]:
        return [copy.deepcopy(e) for e in self._entries.values() if e.user_id == user_id]


def _check_entry_owner(entry: TimeEntry, user_id: UUID, project_id: UUID) -> None:
    if entry.user_id != user_id or entry.project_id != project_id:
        raise ValueError("Time entry does not belong to the given user and project")
