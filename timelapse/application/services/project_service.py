"""Project service - named projects owned by a user."""

from datetime import UTC, datetime
from uuid import UUID, uuid4

from timelapse.domain.entities import Project
from timelapse.domain.errors import DuplicateProjectError, ProjectNotFoundError, ValidationError
from timelapse.domain.protocols import TimelapseRepository
from timelapse.infrastructure.telemetry import get_logger

logger = get_logger(__name__)


class ProjectService:
    """Service for managing a user's projects.

    Name uniqueness is check-then-act: two concurrent creates with the same
    name can both succeed.
    """

    def __init__(self, repository: TimelapseRepository):
        self.repository = repository

    async def create_project(
        self,
        user_id: UUID,
        name: str,
        description: str = "",
        billable: bool = False,
    ) -> Project:
        """Create a new project.

        Raises:
            ValidationError: If the name is blank
            DuplicateProjectError: If the user already has a project with this name
        """
        _require_name(name)
        if await self.repository.get_project(user_id, name) is not None:
            raise DuplicateProjectError(
                message=f"A project with this name already exists: {name}",
                details={"name": name},
            )

        project = Project(
            id=uuid4(),
            user_id=user_id,
            name=name,
            description=description,
            billable=billable,
        )
        created = await self.repository.add_project(project)

        logger.info(
            "Project created",
            extra={"project_id": str(created.id), "user_id": str(user_id)},
        )
        return created

    async def get_project(self, user_id: UUID, name: str) -> Project:
        """Get a project by name.

        Raises:
            ProjectNotFoundError: If the user has no such project
        """
        project = await self.repository.get_project(user_id, name)
        if project is None:
            raise ProjectNotFoundError(
                message=f"Project not found: {name}",
                details={"name": name},
            )
        return project

    async def list_projects(self, user_id: UUID) -> list[Project]:
        return await self.repository.list_projects(user_id)

    async def update_project(
        self,
        user_id: UUID,
        name: str,
        new_name: str,
        description: str = "",
        billable: bool = False,
    ) -> Project:
        """Replace a project's name, description and billable flag.

        Raises:
            ValidationError: If the new name is blank
            ProjectNotFoundError: If the user has no project called ``name``
            DuplicateProjectError: If renaming onto another existing project
        """
        _require_name(new_name)
        project = await self.get_project(user_id, name)

        if new_name != project.name:
            if await self.repository.get_project(user_id, new_name) is not None:
                raise DuplicateProjectError(
                    message=f"A project with this name already exists: {new_name}",
                    details={"name": new_name},
                )

        project.name = new_name
        project.description = description
        project.billable = billable
        project.updated_at = datetime.now(UTC)
        updated = await self.repository.update_project(user_id, project)

        logger.info(
            "Project updated",
            extra={"project_id": str(updated.id), "user_id": str(user_id)},
        )
        return updated


def _require_name(name: str) -> None:
    if not name or not name.strip():
        raise ValidationError(message="required attribute: name")
