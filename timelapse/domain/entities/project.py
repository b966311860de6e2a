"""Project entity."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID


@dataclass
class Project:
    """A named bucket of time entries owned by exactly one user."""

    id: UUID
    user_id: UUID
    name: str
    description: str = ""
    billable: bool = False
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Project name is required")
