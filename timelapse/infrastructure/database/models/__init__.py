"""SQLAlchemy database models."""

from timelapse.infrastructure.database.models.base import Base, TimestampMixin
from timelapse.infrastructure.database.models.project import ProjectModel
from timelapse.infrastructure.database.models.time_entry import TimeEntryModel
from timelapse.infrastructure.database.models.user import UserIdentityModel, UserModel

__all__ = [
    "Base",
    "TimestampMixin",
    "UserModel",
    "UserIdentityModel",
    "ProjectModel",
    "TimeEntryModel",
]
