"""Time entry entity and entry ordering."""

import math
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from enum import Enum
from uuid import UUID


class EntryType(str, Enum):
    """Kind of time recorded. Only work entries track clock time and breaks."""

    WORK = "work"
    SICK = "sick"
    SICK_CHILD = "sick-child"
    VACATION = "vacation"


DAY_TYPES = (EntryType.SICK, EntryType.SICK_CHILD, EntryType.VACATION)

_DAY = timedelta(days=1)


@dataclass
class TimeEntry:
    """A span of time booked against a project.

    An entry with no end is open: tracking is still in progress.
    """

    id: UUID
    project_id: UUID
    user_id: UUID
    type: EntryType = EntryType.WORK
    start: datetime | None = None
    end: datetime | None = None
    breaks: timedelta = field(default_factory=timedelta)
    comment: str = ""

    def __post_init__(self) -> None:
        self.type = EntryType(self.type)
        if self.breaks < timedelta(0):
            raise ValueError("Breaks cannot be negative")

    @property
    def is_open(self) -> bool:
        return self.end is None

    @property
    def is_work(self) -> bool:
        return self.type is EntryType.WORK

    def elapsed(self, now: datetime | None = None) -> timedelta:
        """Return the span between start and end, net of breaks for work.

        A missing start or end is taken to be ``now``.
        """
        if now is None:
            now = datetime.now(UTC)
        end = self.end if self.end is not None else now
        start = self.start if self.start is not None else now
        duration = end - start
        if self.is_work:
            duration -= self.breaks
        return duration

    def day_count(self, now: datetime | None = None) -> int:
        """Whole calendar days covered, counting both the first and last day."""
        days = self.elapsed(now) / _DAY
        return math.floor(days + 0.5) + 1

    def starts_before(self, other: "TimeEntry") -> bool:
        """Order by start; entries without a start sort after everything else."""
        if self.start is None:
            return False
        if other.start is None:
            return True
        return self.start < other.start


def _sort_key(entry: TimeEntry) -> tuple[bool, datetime]:
    if entry.start is None:
        return (True, datetime.min.replace(tzinfo=UTC))
    return (False, entry.start)


def sort_entries(entries: Iterable[TimeEntry]) -> list[TimeEntry]:
    """Return entries ordered by start, start-less entries last (stable)."""
    return sorted(entries, key=_sort_key)
