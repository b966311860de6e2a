"""Parsing of free-form time references and compact durations.

A time reference is resolved against a reference instant, usually "now":

    >>> parse_time_reference("yesterday at 13:24", reference)
    >>> parse_time_reference("18th jun at 13:24", reference)
    >>> parse_time_reference("1978-10-09 15:16", reference)

Absolute timestamps are tried first. Anything else goes through a small
token grammar that consumes the input from the left, transforming a running
instant one token at a time. Rule order decides ambiguous input; there is no
backtracking.

Durations use the compact unit syntax ``1h10m``, ``90m``, ``-3s``, ``1.5h``.
"""

import re
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from dateutil.relativedelta import relativedelta

from timelapse.domain.errors import TimeReferenceParseError

# Offset-qualified timestamps (RFC 3339).
ZONED_FORMATS: tuple[str, ...] = (
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S.%f%z",
)

# Wall-clock timestamps read in the reference instant's zone, with a flag
# telling whether the format carries a year.
LOCAL_FORMATS: tuple[tuple[str, bool], ...] = (
    ("%Y-%m-%dT%H:%M:%S", True),
    ("%Y-%m-%d %H:%M", True),
    ("%d.%m.%Y %H:%M", True),
    ("%d.%m %H:%M", False),
)

MONTHS: tuple[str, ...] = (
    "january",
    "february",
    "march",
    "april",
    "may",
    "june",
    "july",
    "august",
    "september",
    "october",
    "november",
    "december",
)

# Microseconds per unit.
_DURATION_UNITS: dict[str, float] = {
    "ns": 0.001,
    "us": 1,
    "µs": 1,
    "μs": 1,
    "ms": 1_000,
    "s": 1_000_000,
    "m": 60_000_000,
    "h": 3_600_000_000,
}

_DURATION_COMPONENT = re.compile(r"(\d+\.?\d*|\.\d+)([^\d.]*)")
_FIRST_WORD = re.compile(r"\S+")
_CLOCK = re.compile(r"(\d+):(\d+)")
_DAY_OF_MONTH = re.compile(r"(\d+)(\.|th|nd)")
_AGO = re.compile(r"(\d+)\s+(second|minute|hour|day|week|month|year)s?\s+ago")

_CALENDAR_UNITS = {
    "day": "days",
    "week": "weeks",
    "month": "months",
    "year": "years",
}

Rule = Callable[[str, datetime], tuple[datetime, int] | None]


def parse_duration(text: str) -> timedelta:
    """Parse a compact duration such as ``1h10m``, ``90m`` or ``-1.5h``.

    Valid units are ns, us (or µs), ms, s, m and h. A sign applies to the
    whole expression. A bare ``0`` is the only value allowed without a unit.

    Raises:
        TimeReferenceParseError: If the text is not a valid duration.
    """
    body = text
    sign = 1
    if body[:1] in ("-", "+"):
        sign = -1 if body[0] == "-" else 1
        body = body[1:]
    if body == "0":
        return timedelta(0)
    if not body:
        raise TimeReferenceParseError(f"Invalid duration: {text}")

    total = 0.0
    position = 0
    while position < len(body):
        match = _DURATION_COMPONENT.match(body, position)
        if match is None:
            raise TimeReferenceParseError(f"Invalid duration: {text}")
        number, unit = match.groups()
        if not unit:
            raise TimeReferenceParseError(f"Missing unit in duration: {text}")
        factor = _DURATION_UNITS.get(unit)
        if factor is None:
            raise TimeReferenceParseError(f"Unknown unit {unit!r} in duration: {text}")
        total += float(number) * factor
        position = match.end()

    return sign * timedelta(microseconds=total)


def parse_time_reference(text: str, reference: datetime) -> datetime:
    """Resolve ``text`` to an absolute instant relative to ``reference``.

    Raises:
        TimeReferenceParseError: If no grammar accepts the whole input.
    """
    absolute = _parse_absolute(text.strip(), reference)
    if absolute is not None:
        return absolute

    remaining = text.lower().strip()
    if not remaining:
        raise TimeReferenceParseError(f"Could not parse date/time: {text!r}")

    current = reference
    while remaining:
        for rule in _RELATIVE_RULES:
            result = rule(remaining, current)
            if result is not None:
                current, consumed = result
                break
        else:
            raise TimeReferenceParseError(f"Could not parse date/time: {remaining}")
        remaining = remaining[consumed:].lstrip()

    return current


def _parse_absolute(text: str, reference: datetime) -> datetime | None:
    for fmt in ZONED_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue

    for fmt, has_year in LOCAL_FORMATS:
        candidate, pattern = (text, fmt)
        if not has_year:
            candidate, pattern = f"{text} {reference.year}", f"{fmt} %Y"
        try:
            parsed = datetime.strptime(candidate, pattern)
        except ValueError:
            continue
        return parsed.replace(tzinfo=reference.tzinfo)

    return None


def _shift(instant: datetime, delta: timedelta) -> datetime:
    """Move by a fixed duration in absolute time, keeping the zone."""
    if instant.tzinfo is None:
        return instant + delta
    return (instant.astimezone(UTC) + delta).astimezone(instant.tzinfo)


def _with_day(instant: datetime, day: int) -> datetime:
    """Replace the day of month; an overflowing day rolls into the next month."""
    return instant.replace(day=1) + timedelta(days=day - 1)


def _first_word(text: str) -> str:
    match = _FIRST_WORD.match(text)
    return match.group() if match else ""


def _now(text: str, current: datetime) -> tuple[datetime, int] | None:
    if text != "now":
        return None
    return current, len(text)


def _bare_duration(text: str, current: datetime) -> tuple[datetime, int] | None:
    word = _first_word(text)
    try:
        delta = parse_duration(word)
    except TimeReferenceParseError:
        return None
    return _shift(current, delta), len(word)


def _fixed_word(word: str, delta: timedelta) -> Rule:
    def rule(text: str, current: datetime) -> tuple[datetime, int] | None:
        if _first_word(text) != word:
            return None
        return _shift(current, delta), len(word)

    return rule


def _month_name(text: str, current: datetime) -> tuple[datetime, int] | None:
    word = _first_word(text)
    if len(word) < 3:
        return None
    candidates = [number for number, name in enumerate(MONTHS, start=1) if name.startswith(word)]
    if len(candidates) != 1:
        return None
    # The running day is clamped to the month's length.
    return current + relativedelta(month=candidates[0]), len(word)


def _clock_time(text: str, current: datetime) -> tuple[datetime, int] | None:
    match = _CLOCK.match(text)
    if match is None:
        return None
    hour, minute = int(match[1]), int(match[2])
    if not (0 <= hour <= 23 and 0 <= minute <= 60):
        return None
    top_of_hour = current.replace(hour=hour, minute=0, second=0, microsecond=0)
    return top_of_hour + timedelta(minutes=minute), match.end()


def _day_of_month(text: str, current: datetime) -> tuple[datetime, int] | None:
    match = _DAY_OF_MONTH.match(text)
    if match is None:
        return None
    day = int(match[1])
    if not 1 <= day <= 31:
        return None
    return _with_day(current, day), match.end()


def _ago(text: str, current: datetime) -> tuple[datetime, int] | None:
    match = _AGO.match(text)
    if match is None:
        return None
    amount, unit = int(match[1]), match[2]
    if unit in _CALENDAR_UNITS:
        # Calendar arithmetic on the wall clock: a month is not a fixed span.
        result = current - relativedelta(**{_CALENDAR_UNITS[unit]: amount})
    else:
        result = _shift(current, -timedelta(**{f"{unit}s": amount}))
    return result, match.end()


_RELATIVE_RULES: tuple[Rule, ...] = (
    _now,
    _bare_duration,
    _fixed_word("yesterday", timedelta(hours=-24)),
    _fixed_word("tomorrow", timedelta(hours=24)),
    _fixed_word("at", timedelta(0)),
    _month_name,
    _clock_time,
    _day_of_month,
    _ago,
)
