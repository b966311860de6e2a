"""Time entry database model."""

from datetime import datetime, timedelta
from uuid import UUID, uuid4

from sqlalchemy import DateTime, ForeignKey, Interval, String, Text
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.orm import Mapped, mapped_column

from timelapse.domain.entities.time_entry import EntryType, TimeEntry
from timelapse.infrastructure.database.models.base import Base, TimestampMixin


class TimeEntryModel(Base, TimestampMixin):
    """SQLAlchemy model for time_entries table."""

    __tablename__ = "time_entries"

    id: Mapped[UUID] = mapped_column(PGUUID(as_uuid=True), primary_key=True, default=uuid4)
    project_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    type: Mapped[str] = mapped_column(String(32), nullable=False, default=EntryType.WORK.value)
    start_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    end_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    breaks: Mapped[timedelta] = mapped_column(Interval, nullable=False, default=timedelta)
    comment: Mapped[str] = mapped_column(Text, nullable=False, default="")

    def to_entity(self) -> TimeEntry:
        """Convert to domain entity."""
        return TimeEntry(
            id=self.id,
            project_id=self.project_id,
            user_id=self.user_id,
            type=EntryType(self.type),
            start=self.start_at,
            end=self.end_at,
            breaks=self.breaks,
            comment=self.comment,
        )

    @classmethod
    def from_entity(cls, entity: TimeEntry) -> "TimeEntryModel":
        """Create from domain entity."""
        return cls(
            id=entity.id,
            project_id=entity.project_id,
            user_id=entity.user_id,
            type=entity.type.value,
            start_at=entity.start,
            end_at=entity.end,
            breaks=entity.breaks,
            comment=entity.comment,
        )
