"""Domain entities - pure Python dataclasses representing business objects."""

from timelapse.domain.entities.project import Project
from timelapse.domain.entities.time_entry import (
    DAY_TYPES,
    EntryType,
    TimeEntry,
    sort_entries,
)
from timelapse.domain.entities.user import Identity, User

__all__ = [
    "User",
    "Identity",
    "Project",
    "TimeEntry",
    "EntryType",
    "DAY_TYPES",
    "sort_entries",
]
