"""Base repositories with common CRUD operations."""

from typing import Generic, TypeVar
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from timelapse.infrastructure.database.models.base import Base

ModelType = TypeVar("ModelType", bound=Base)
EntityType = TypeVar("EntityType")


class BaseRepository(Generic[ModelType, EntityType]):
    """Base repository providing common CRUD operations.

    Subclasses set ``model_class``; models provide ``to_entity`` and
    ``from_entity``.
    """

    model_class: type[ModelType]

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, entity: EntityType) -> EntityType:
        """Create a new entity."""
        model = self.model_class.from_entity(entity)
        self.session.add(model)
        await self.session.flush()
        return model.to_entity()

    async def update(self, entity: EntityType) -> EntityType:
        """Update an existing entity."""
        model = self.model_class.from_entity(entity)
        merged = await self.session.merge(model)
        await self.session.flush()
        return merged.to_entity()


class UserScopedRepository(BaseRepository[ModelType, EntityType]):
    """Repository for user-owned records.

    All queries are scoped to the owning user.
    """

    async def get_by_id(self, id: UUID, user_id: UUID) -> EntityType | None:
        """Get a record by ID within the user's scope."""
        stmt = select(self.model_class).where(
            self.model_class.id == id,
            self.model_class.user_id == user_id,
        )
        result = await self.session.execute(stmt)
        model = result.scalar_one_or_none()
        if model is None:
            return None
        return model.to_entity()

    async def list_by_user(self, user_id: UUID) -> list[EntityType]:
        """List all of a user's records."""
        stmt = select(self.model_class).where(self.model_class.user_id == user_id)
        result = await self.session.execute(stmt)
        return [model.to_entity() for model in result.scalars().all()]
