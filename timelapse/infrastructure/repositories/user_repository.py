"""User repository implementation."""

from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from timelapse.domain.entities.user import User
from timelapse.infrastructure.database.models.user import UserIdentityModel, UserModel
from timelapse.infrastructure.telemetry.logging import get_logger

logger = get_logger(__name__)


class UserRepositoryImpl:
    """SQLAlchemy access to users and their identities."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_identity(self, issuer: str, subject_id: str) -> UserModel | None:
        stmt = (
            select(UserModel)
            .join(UserIdentityModel, UserIdentityModel.user_id == UserModel.id)
            .where(
                UserIdentityModel.issuer == issuer,
                UserIdentityModel.subject_id == subject_id,
            )
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_or_create_by_identity(
        self,
        issuer: str,
        subject_id: str,
        email: str,
    ) -> tuple[User, bool]:
        """Get existing user or create new one.

        Returns:
            Tuple of (user, created) where created is True if new user was created.
        """
        existing = await self.get_by_identity(issuer, subject_id)
        if existing is not None:
            identity = next(
                item
                for item in existing.identities
                if item.issuer == issuer and item.subject_id == subject_id
            )
            if identity.email != email:
                logger.info(
                    "Updating identity email",
                    extra={"user_id": str(existing.id), "issuer": issuer},
                )
                identity.email = email
                await self.session.flush()
            return existing.to_entity(), False

        model = UserModel(
            id=uuid4(),
            identities=[
                UserIdentityModel(
                    id=uuid4(),
                    issuer=issuer,
                    subject_id=subject_id,
                    email=email,
                    position=0,
                )
            ],
        )
        self.session.add(model)
        await self.session.flush()
        return model.to_entity(), True
