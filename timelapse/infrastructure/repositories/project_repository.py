"""Project repository implementation."""

from uuid import UUID

from sqlalchemy import select

from timelapse.domain.entities.project import Project
from timelapse.infrastructure.database.models.project import ProjectModel
from timelapse.infrastructure.repositories.base import UserScopedRepository


class ProjectRepositoryImpl(UserScopedRepository[ProjectModel, Project]):
    """SQLAlchemy implementation of project access."""

    model_class = ProjectModel

    async def get_by_name(self, user_id: UUID, name: str) -> Project | None:
        stmt = select(ProjectModel).where(
            ProjectModel.user_id == user_id,
            ProjectModel.name == name,
        )
        result = await self.session.execute(stmt)
        model = result.scalars().first()
        if model is None:
            return None
        return model.to_entity()

    async def list_by_user(self, user_id: UUID) -> list[Project]:
        stmt = (
            select(ProjectModel)
            .where(ProjectModel.user_id == user_id)
            .order_by(ProjectModel.name)
        )
        result = await self.session.execute(stmt)
        return [model.to_entity() for model in result.scalars().all()]
