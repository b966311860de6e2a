"""Wire models shared by the HTTP API and the command line client."""

from datetime import UTC, datetime, timedelta
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from timelapse.domain.entities import EntryType, Identity, Project, TimeEntry, User

EntryTypeName = Literal["work", "sick", "sick-child", "vacation"]


class IdentityResponse(BaseModel):
    """One login identity of a user."""

    issuer: str
    subject_id: str
    email: str

    @classmethod
    def from_entity(cls, identity: Identity) -> "IdentityResponse":
        return cls(issuer=identity.issuer, subject_id=identity.subject_id, email=identity.email)


class UserResponse(BaseModel):
    """The authenticated user."""

    id: str
    identities: list[IdentityResponse]

    @classmethod
    def from_entity(cls, user: User) -> "UserResponse":
        return cls(
            id=str(user.id),
            identities=[IdentityResponse.from_entity(identity) for identity in user.identities],
        )


class ProjectRequest(BaseModel):
    """Full project record sent on create and update."""

    model_config = ConfigDict(extra="ignore")

    name: str = ""
    description: str = ""
    billable: bool = False


class ProjectResponse(BaseModel):
    """Project response."""

    id: str
    user_id: str
    name: str
    description: str = ""
    billable: bool = False

    @classmethod
    def from_entity(cls, project: Project) -> "ProjectResponse":
        return cls(
            id=str(project.id),
            user_id=str(project.user_id),
            name=project.name,
            description=project.description,
            billable=project.billable,
        )

    def to_entity(self) -> Project:
        return Project(
            id=UUID(self.id),
            user_id=UUID(self.user_id),
            name=self.name,
            description=self.description,
            billable=self.billable,
        )


def _assume_utc(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class TimeEntryRequest(BaseModel):
    """Full time entry record sent on create and update. ``breaks`` is in seconds."""

    model_config = ConfigDict(extra="ignore")

    id: str = ""
    type: EntryTypeName = "work"
    start: datetime | None = None
    end: datetime | None = None
    breaks: int = Field(default=0, ge=0)
    comment: str = ""

    @field_validator("start", "end")
    @classmethod
    def _naive_is_utc(cls, value: datetime | None) -> datetime | None:
        return _assume_utc(value)

    @property
    def entry_type(self) -> EntryType:
        return EntryType(self.type)

    @property
    def breaks_delta(self) -> timedelta:
        return timedelta(seconds=self.breaks)


class TimeEntryResponse(BaseModel):
    """Time entry response."""

    id: str
    project_id: str
    user_id: str
    project_name: str = ""
    type: EntryTypeName = "work"
    start: datetime | None = None
    end: datetime | None = None
    breaks: int = 0
    comment: str = ""

    @field_validator("start", "end")
    @classmethod
    def _naive_is_utc(cls, value: datetime | None) -> datetime | None:
        return _assume_utc(value)

    @classmethod
    def from_entity(cls, entry: TimeEntry, project_name: str) -> "TimeEntryResponse":
        return cls(
            id=str(entry.id),
            project_id=str(entry.project_id),
            user_id=str(entry.user_id),
            project_name=project_name,
            type=entry.type.value,
            start=entry.start,
            end=entry.end,
            breaks=int(entry.breaks.total_seconds()),
            comment=entry.comment,
        )

    def to_entity(self) -> TimeEntry:
        return TimeEntry(
            id=UUID(self.id),
            project_id=UUID(self.project_id),
            user_id=UUID(self.user_id),
            type=EntryType(self.type),
            start=self.start,
            end=self.end,
            breaks=timedelta(seconds=self.breaks),
            comment=self.comment,
        )


class ErrorResponse(BaseModel):
    """Body of every error response."""

    message: str
