"""Tests for the fixed-width display format."""

from datetime import UTC, datetime, timedelta
from uuid import UUID, uuid4

from timelapse.domain.entities import EntryType, Project, TimeEntry
from timelapse.domain.formatting import (
    BREAKS_WIDTH,
    TIME_WIDTH,
    format_breaks,
    format_duration,
    format_entry,
    format_instant,
    format_project,
    format_total,
)

ENTRY_ID = UUID("6f1c1d2e-4d9b-4b8e-9a55-2b7c0f1d9a10")


def make_entry(**kwargs) -> TimeEntry:
    defaults = {"id": ENTRY_ID, "project_id": uuid4(), "user_id": uuid4()}
    return TimeEntry(**{**defaults, **kwargs})


class TestFormatInstant:
    """Test instant columns."""

    def test_work_shows_minutes(self):
        """Test that work instants show date and clock time."""
        instant = datetime(2024, 1, 2, 9, 5, tzinfo=UTC)
        assert format_instant(instant, is_work=True, tz=UTC) == "2024-01-02 09:05"

    def test_day_types_show_date_padded(self):
        """Test that day instants show the date padded to the column width."""
        result = format_instant(datetime(2024, 1, 2, tzinfo=UTC), is_work=False, tz=UTC)
        assert result == "2024-01-02      "
        assert len(result) == TIME_WIDTH

    def test_missing_instant_is_blank(self):
        """Test that a missing instant keeps the column width."""
        assert format_instant(None, is_work=True) == " " * TIME_WIDTH


class TestFormatDuration:
    """Test the duration column."""

    def test_hours_and_minutes(self):
        """Test a regular working day."""
        entry = make_entry(
            start=datetime(2024, 1, 2, 9, 0, tzinfo=UTC),
            end=datetime(2024, 1, 2, 17, 30, tzinfo=UTC),
            breaks=timedelta(minutes=30),
        )
        assert format_duration(entry) == "   8h00m"

    def test_minutes_round_into_the_hour(self):
        """Test that 59.7 minutes renders as a full hour."""
        start = datetime(2024, 1, 2, 9, 0, tzinfo=UTC)
        entry = make_entry(start=start, end=start + timedelta(seconds=3580))
        assert format_duration(entry) == "   1h00m"

    def test_more_than_a_day_shows_days_and_hours(self):
        """Test long work spans."""
        entry = make_entry(
            start=datetime(2024, 1, 1, 9, 0, tzinfo=UTC),
            end=datetime(2024, 1, 2, 19, 0, tzinfo=UTC),
        )
        assert format_duration(entry) == " 1d10h  "

    def test_breaks_longer_than_span_are_negative(self):
        """Test that a negative span keeps its magnitude and shows a sign."""
        entry = make_entry(
            start=datetime(2024, 1, 2, 9, 0, tzinfo=UTC),
            end=datetime(2024, 1, 2, 9, 10, tzinfo=UTC),
            breaks=timedelta(minutes=40),
        )
        assert entry.elapsed() == timedelta(minutes=-30)
        assert format_duration(entry) == "  -0h30m"

    def test_future_start_is_negative(self):
        """Test an open entry whose start lies ahead of now."""
        now = datetime(2024, 1, 2, 9, 0, tzinfo=UTC)
        entry = make_entry(start=now + timedelta(hours=1, minutes=15))
        assert format_duration(entry, now) == "  -1h15m"

    def test_negative_days_and_hours(self):
        now = datetime(2024, 1, 1, 9, 0, tzinfo=UTC)
        entry = make_entry(start=now + timedelta(days=1, hours=10))
        assert format_duration(entry, now) == "-1d10h  "


    def test_day_types_show_days(self):
        """Test that day entries count whole days."""
        entry = make_entry(
            type=EntryType.VACATION,
            start=datetime(2024, 1, 1, tzinfo=UTC),
            end=datetime(2024, 1, 3, tzinfo=UTC),
        )
        assert format_duration(entry) == " 3d     "


class TestFormatBreaks:
    """Test the breaks column."""

    def test_breaks_shown_for_work(self):
        """Test rendering of breaks."""
        entry = make_entry(breaks=timedelta(minutes=30))
        assert format_breaks(entry) == "(- 0h30m)"

    def test_no_breaks_is_blank(self):
        """Test that zero breaks and day entries leave the column blank."""
        assert format_breaks(make_entry()) == " " * BREAKS_WIDTH
        day = make_entry(type=EntryType.SICK, breaks=timedelta(hours=1))
        assert format_breaks(day) == " " * BREAKS_WIDTH


class TestFormatEntry:
    """Test full entry lines."""

    def test_closed_work_entry(self):
        """Test the layout of a closed work entry."""
        entry = make_entry(
            start=datetime(2024, 1, 2, 9, 0, tzinfo=UTC),
            end=datetime(2024, 1, 2, 17, 30, tzinfo=UTC),
            breaks=timedelta(minutes=30),
            comment="coding",
        )

        assert format_entry(entry, "acme", tz=UTC) == (
            f"{ENTRY_ID} 2024-01-02 09:00 - 2024-01-02 17:30 "
            "(- 0h30m) (   8h00m): acme work coding"
        )

    def test_open_entry_runs_until_now(self):
        """Test that an open entry has a blank end and counts up to now."""
        entry = make_entry(start=datetime(2024, 1, 2, 9, 0, tzinfo=UTC))
        now = datetime(2024, 1, 2, 11, 45, tzinfo=UTC)

        line = format_entry(entry, "acme", tz=UTC, now=now)

        assert f"2024-01-02 09:00 - {' ' * TIME_WIDTH} " in line
        assert "(   2h45m)" in line

    def test_vacation_entry(self):
        """Test the layout of a day entry."""
        entry = make_entry(
            type=EntryType.VACATION,
            start=datetime(2024, 1, 1, tzinfo=UTC),
            end=datetime(2024, 1, 3, tzinfo=UTC),
        )

        assert format_entry(entry, "acme", tz=UTC) == (
            f"{ENTRY_ID} 2024-01-01       - 2024-01-03       {' ' * BREAKS_WIDTH} "
            f"( 3d     ): acme vacation "
        )


class TestFormatTotalsAndProjects:
    """Test totals and project lines."""

    def test_total(self):
        """Test total durations."""
        assert format_total(timedelta(hours=8)) == "8h00m"
        assert format_total(timedelta(hours=26, minutes=5)) == "26h05m"
        assert format_total(timedelta()) == "0h00m"
        assert format_total(timedelta(minutes=-30)) == "-0h30m"
        assert format_total(timedelta(hours=-2, minutes=-5)) == "-2h05m"
        assert format_total(timedelta(seconds=-10)) == "0h00m"

    def test_project(self):
        """Test project lines."""
        project = Project(
            id=uuid4(), user_id=uuid4(), name="acme", description="Client work", billable=True
        )
        assert format_project(project) == "Project: acme (Client work) (billable: true)"
