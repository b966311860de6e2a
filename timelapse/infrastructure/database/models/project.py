"""Project database model."""

from uuid import UUID, uuid4

from sqlalchemy import Boolean, ForeignKey, Index, String, Text
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.orm import Mapped, mapped_column

from timelapse.domain.entities.project import Project
from timelapse.infrastructure.database.models.base import Base, TimestampMixin


class ProjectModel(Base, TimestampMixin):
    """SQLAlchemy model for projects table.

    Name uniqueness per user is checked by the application, not the schema.
    """

    __tablename__ = "projects"

    id: Mapped[UUID] = mapped_column(PGUUID(as_uuid=True), primary_key=True, default=uuid4)
    user_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    billable: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (Index("ix_projects_user_id_name", "user_id", "name"),)

    def to_entity(self) -> Project:
        """Convert to domain entity."""
        return Project(
            id=self.id,
            user_id=self.user_id,
            name=self.name,
            description=self.description,
            billable=self.billable,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_entity(cls, entity: Project) -> "ProjectModel":
        """Create from domain entity."""
        return cls(
            id=entity.id,
            user_id=entity.user_id,
            name=entity.name,
            description=entity.description,
            billable=entity.billable,
            created_at=entity.created_at,
        )
