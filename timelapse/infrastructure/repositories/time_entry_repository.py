"""Time entry repository implementation."""

from uuid import UUID

from sqlalchemy import select

from timelapse.domain.entities.time_entry import TimeEntry
from timelapse.infrastructure.database.models.time_entry import TimeEntryModel
from timelapse.infrastructure.repositories.base import UserScopedRepository


class TimeEntryRepositoryImpl(UserScopedRepository[TimeEntryModel, TimeEntry]):
    """SQLAlchemy implementation of time entry access."""

    model_class = TimeEntryModel

    async def get_in_project(
        self, user_id: UUID, project_id: UUID, entry_id: UUID
    ) -> TimeEntry | None:
        stmt = select(TimeEntryModel).where(
            TimeEntryModel.id == entry_id,
            TimeEntryModel.project_id == project_id,
            TimeEntryModel.user_id == user_id,
        )
        result = await self.session.execute(stmt)
        model = result.scalar_one_or_none()
        if model is None:
            return None
        return model.to_entity()

    async def list_by_project(self, user_id: UUID, project_id: UUID) -> list[TimeEntry]:
        stmt = (
            select(TimeEntryModel)
            .where(
                TimeEntryModel.project_id == project_id,
                TimeEntryModel.user_id == user_id,
            )
            .order_by(TimeEntryModel.start_at.asc().nulls_last(), TimeEntryModel.created_at)
        )
        result = await self.session.execute(stmt)
        return [model.to_entity() for model in result.scalars().all()]

    async def list_by_user(self, user_id: UUID) -> list[TimeEntry]:
        stmt = (
            select(TimeEntryModel)
            .where(TimeEntryModel.user_id == user_id)
            .order_by(TimeEntryModel.start_at.asc().nulls_last(), TimeEntryModel.created_at)
        )
        result = await self.session.execute(stmt)
        return [model.to_entity() for model in result.scalars().all()]
