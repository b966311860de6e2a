"""Fixed-width, human-readable rendering of projects and time entries.

Used by the command line client; this is a display format, not a wire format.
"""

import math
from datetime import datetime, timedelta, tzinfo

from timelapse.domain.entities import Project, TimeEntry

TIME_WIDTH = 16
BREAKS_WIDTH = 9

_SECONDS_PER_DAY = 86_400
_SECONDS_PER_HOUR = 3_600


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _signed(seconds: float, split) -> tuple[str, int, int]:
    """Split ``abs(seconds)`` with ``split`` and return the sign separately."""
    major, minor = split(abs(seconds))
    sign = "-" if seconds < 0 and (major or minor) else ""
    return sign, major, minor


def _hours_minutes(seconds: float) -> tuple[int, int]:
    """Split non-negative seconds into whole hours and rounded minutes, carrying 60."""
    hours = int(seconds // _SECONDS_PER_HOUR)
    minutes = _round_half_up((seconds % _SECONDS_PER_HOUR) / 60)
    if minutes == 60:
        hours, minutes = hours + 1, 0
    return hours, minutes


def _days_hours(seconds: float) -> tuple[int, int]:
    days = int(seconds // _SECONDS_PER_DAY)
    hours = _round_half_up((seconds % _SECONDS_PER_DAY) / _SECONDS_PER_HOUR)
    if hours == 24:
        days, hours = days + 1, 0
    return days, hours


def format_instant(instant: datetime | None, is_work: bool, tz: tzinfo | None = None) -> str:
    if instant is None:
        return " " * TIME_WIDTH
    local = instant.astimezone(tz)
    if is_work:
        return local.strftime("%Y-%m-%d %H:%M")
    return local.strftime("%Y-%m-%d").ljust(TIME_WIDTH)


def format_breaks(entry: TimeEntry) -> str:
    if not entry.is_work or entry.breaks <= timedelta(0):
        return " " * BREAKS_WIDTH
    hours, minutes = _hours_minutes(entry.breaks.total_seconds())
    return f"(-{hours:2d}h{minutes:02d}m)"


def format_duration(entry: TimeEntry, now: datetime | None = None) -> str:
    """Render elapsed time: hours and minutes, days and hours, or whole days."""
    if not entry.is_work:
        return f"{entry.day_count(now):2d}d     "

    seconds = entry.elapsed(now).total_seconds()
    if abs(seconds) > _SECONDS_PER_DAY:
        sign, days, hours = _signed(seconds, _days_hours)
        return f"{sign + str(days):>2}d{hours:02d}h  "
    sign, hours, minutes = _signed(seconds, _hours_minutes)
    return f"  {sign + str(hours):>2}h{minutes:02d}m"


def format_total(duration: timedelta) -> str:
    sign, hours, minutes = _signed(duration.total_seconds(), _hours_minutes)
    return f"{sign}{hours}h{minutes:02d}m"


def format_entry(
    entry: TimeEntry,
    project_name: str,
    tz: tzinfo | None = None,
    now: datetime | None = None,
) -> str:
    """One display line for an entry.

    Layout: ``<id> <start> - <end> <breaks> (<duration>): <project> <type> <comment>``.
    Instants are shown in ``tz`` (the local zone when omitted).
    """
    start = format_instant(entry.start, entry.is_work, tz)
    end = format_instant(entry.end, entry.is_work, tz)
    return (
        f"{entry.id} {start} - {end} {format_breaks(entry)} "
        f"({format_duration(entry, now)}): {project_name} {entry.type.value} {entry.comment}"
    )


def format_project(project: Project) -> str:
    billable = "true" if project.billable else "false"
    return f"Project: {project.name} ({project.description}) (billable: {billable})"
