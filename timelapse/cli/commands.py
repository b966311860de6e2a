"""Command implementations of the ``timelapse`` command line client.

Each command takes the parsed ``CommandOptions`` and a ``CommandContext``
and prints its result to ``context.out``.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, tzinfo
from pathlib import Path
from typing import TextIO
from uuid import UUID

import httpx

from timelapse.cli.client import ApiClient
from timelapse.cli.config_store import ClientConfiguration, ConfigStore
from timelapse.cli.errors import CommandError
from timelapse.cli.login import OAuthClientConfig, run_login
from timelapse.domain.entities import EntryType, TimeEntry, sort_entries
from timelapse.domain.formatting import format_entry, format_project, format_total
from timelapse.domain.timeref import parse_duration, parse_time_reference
from timelapse.infrastructure.telemetry import get_logger
from timelapse.presentation.http.schemas import ProjectRequest, TimeEntryRequest, TimeEntryResponse

logger = get_logger(__name__)

# Ids of an entry that the server has not created yet.
UNSAVED_ID = UUID(int=0)


@dataclass
class CommandOptions:
    """Options of one invocation, as given on the command line."""

    command: str
    config_dir: Path
    server_url: str | None = None
    trace: bool = False
    project: str | None = None
    entry_id: str | None = None
    start: str | None = None
    end: str | None = None
    breaks: str | None = None
    entry_type: str | None = None
    comment: str | None = None
    description: str | None = None
    billable: bool | None = None
    rename: str | None = None


@dataclass
class CommandContext:
    """Collaborators shared by the commands of one invocation."""

    client: ApiClient
    store: ConfigStore
    http_client: httpx.Client
    oauth: OAuthClientConfig
    out: TextIO
    now: datetime = field(default_factory=lambda: datetime.now().astimezone())

    @property
    def tz(self) -> tzinfo | None:
        return self.now.tzinfo


def _require_project(options: CommandOptions) -> str:
    if not options.project:
        raise CommandError("A project name is required")
    return options.project


def _entry_type(options: CommandOptions, default: EntryType = EntryType.WORK) -> EntryType:
    if options.entry_type is None:
        return default
    try:
        return EntryType(options.entry_type.lower())
    except ValueError as exc:
        valid = ", ".join(t.value for t in EntryType)
        raise CommandError(f"Unknown entry type: {options.entry_type} (valid: {valid})") from exc


def _instant(text: str | None, context: CommandContext) -> datetime | None:
    if text is None:
        return None
    return parse_time_reference(text, context.now)


def _breaks(text: str | None) -> timedelta | None:
    if text is None:
        return None
    breaks = parse_duration(text)
    if breaks < timedelta(0):
        raise CommandError(f"Breaks cannot be negative: {text}")
    return breaks


def _start_of_day(instant: datetime | None, tz: tzinfo | None) -> datetime | None:
    """Day entries cover whole local days."""
    if instant is None:
        return None
    return instant.astimezone(tz).replace(hour=0, minute=0, second=0, microsecond=0)


def _request(
    entry: TimeEntry,
    context: CommandContext,
    include_id: bool = False,
) -> TimeEntryRequest:
    if not entry.is_work:
        entry.start = _start_of_day(entry.start, context.tz)
        entry.end = _start_of_day(entry.end, context.tz)
    return TimeEntryRequest(
        id=str(entry.id) if include_id else "",
        type=entry.type.value,
        start=entry.start,
        end=entry.end,
        breaks=int(entry.breaks.total_seconds()),
        comment=entry.comment,
    )


def _show_entry(response: TimeEntryResponse, context: CommandContext) -> str:
    return format_entry(response.to_entity(), response.project_name, context.tz, context.now)


# Projects


def add_project(options: CommandOptions, context: CommandContext) -> None:
    project = context.client.add_project(
        ProjectRequest(
            name=_require_project(options),
            description=options.description or "",
            billable=bool(options.billable),
        )
    )
    print(format_project(project.to_entity()), file=context.out)


def get_project(options: CommandOptions, context: CommandContext) -> None:
    project = context.client.get_project(_require_project(options))
    print(format_project(project.to_entity()), file=context.out)


def update_project(options: CommandOptions, context: CommandContext) -> None:
    """Send the full record back with only the given options changed."""
    name = _require_project(options)
    existing = context.client.get_project(name)
    request = ProjectRequest(
        name=options.rename or existing.name,
        description=existing.description if options.description is None else options.description,
        billable=existing.billable if options.billable is None else options.billable,
    )
    project = context.client.update_project(name, request)
    print(format_project(project.to_entity()), file=context.out)


def list_projects(options: CommandOptions, context: CommandContext) -> None:
    for project in context.client.list_projects():
        print(format_project(project.to_entity()), file=context.out)


# Time entries


def add_entry(options: CommandOptions, context: CommandContext) -> None:
    project_name = _require_project(options)
    if options.start is None and options.end is None:
        raise CommandError("Either a start or an end time is required")

    entry = _draft_entry(options, context)
    entry.end = _instant(options.end, context)
    created = context.client.add_entry(project_name, _request(entry, context))
    print(_show_entry(created, context), file=context.out)


def get_entries(options: CommandOptions, context: CommandContext) -> None:
    """Print entries starting at or after FROM and ending no later than TO, then the work total.

    With TO given, open entries are left out.
    """
    since = _instant(options.start, context)
    until = _instant(options.end, context)

    responses = context.client.list_entries(options.project)
    selected = []
    for response in responses:
        entry = response.to_entity()
        if since is not None and (entry.start is None or entry.start < since):
            continue
        if until is not None and (entry.end is None or entry.end > until):
            continue
        selected.append((entry, response.project_name))

    total = timedelta()
    ordered = sort_entries(entry for entry, _ in selected)
    names = {entry.id: name for entry, name in selected}
    for entry in ordered:
        print(format_entry(entry, names[entry.id], context.tz, context.now), file=context.out)
        if entry.is_work:
            total += entry.elapsed(context.now)
    print(f"Total duration: {format_total(total)}", file=context.out)


def start(options: CommandOptions, context: CommandContext) -> None:
    """Open a new entry unless one of the project is still running."""
    project_name = _require_project(options)
    for response in context.client.list_entries(project_name):
        if response.end is None:
            raise CommandError(
                f'Already started entry: "{_show_entry(response, context)}" - close it first'
            )

    entry = _draft_entry(options, context)
    if entry.start is None:
        entry.start = context.now
    created = context.client.add_entry(project_name, _request(entry, context))
    print(_show_entry(created, context), file=context.out)


def stop(options: CommandOptions, context: CommandContext) -> None:
    """Close the latest open entry, of one project or across all projects."""
    open_entries = [r for r in context.client.list_entries(options.project) if r.end is None]
    if not open_entries:
        raise CommandError("Did not find any time entry to close")

    by_id = {response.id: response for response in open_entries}
    latest = sort_entries(response.to_entity() for response in open_entries)[-1]
    project_name = by_id[str(latest.id)].project_name

    _apply(latest, options, context)
    latest.end = _instant(options.end, context) or context.now
    updated = context.client.update_entry(
        project_name, str(latest.id), _request(latest, context, include_id=True)
    )
    print(_show_entry(updated, context), file=context.out)


def update_entry(options: CommandOptions, context: CommandContext) -> None:
    project_name = _require_project(options)
    if not options.entry_id:
        raise CommandError("An entry ID is required")

    entry = context.client.get_entry(project_name, options.entry_id).to_entity()
    _apply(entry, options, context)
    if options.start is not None:
        entry.start = _instant(options.start, context)
    if options.end is not None:
        entry.end = _instant(options.end, context)
    updated = context.client.update_entry(
        project_name, str(entry.id), _request(entry, context, include_id=True)
    )
    print(_show_entry(updated, context), file=context.out)


def _draft_entry(options: CommandOptions, context: CommandContext) -> TimeEntry:
    return TimeEntry(
        id=UNSAVED_ID,
        project_id=UNSAVED_ID,
        user_id=UNSAVED_ID,
        type=_entry_type(options),
        start=_instant(options.start, context),
        breaks=_breaks(options.breaks) or timedelta(),
        comment=options.comment or "",
    )


def _apply(entry: TimeEntry, options: CommandOptions, context: CommandContext) -> None:
    """Overwrite type, breaks and comment where the options give them."""
    entry.type = _entry_type(options, default=entry.type)
    breaks = _breaks(options.breaks)
    if breaks is not None:
        entry.breaks = breaks
    if options.comment is not None:
        entry.comment = options.comment


# Session


def login(options: CommandOptions, context: CommandContext) -> None:
    tokens = run_login(context.oauth, context.http_client, context.out)

    credentials = context.store.load_credentials()
    credentials.credentials[context.oauth.provider] = tokens
    credentials.default_provider = context.oauth.provider
    context.store.save_credentials(credentials)

    if options.server_url:
        context.store.save_configuration(ClientConfiguration(base_url=options.server_url))

    logger.debug("Stored credentials", extra={"provider": context.oauth.provider})
    print(f"Logged in with {context.oauth.provider}", file=context.out)


COMMANDS: dict[str, Callable[[CommandOptions, CommandContext], None]] = {
    "add-project": add_project,
    "get-project": get_project,
    "update-project": update_project,
    "list-projects": list_projects,
    "add-entry": add_entry,
    "get-entries": get_entries,
    "start": start,
    "stop": stop,
    "update-entry": update_entry,
    "login": login,
}
