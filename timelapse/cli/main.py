"""Entry point of the ``timelapse`` command line client.

Usage:
    timelapse [--server-url URL] [--config DIR] [--trace] COMMAND [ARGS]
"""

import argparse
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import TextIO

import httpx

from timelapse.cli.client import ApiClient
from timelapse.cli.commands import COMMANDS, CommandContext, CommandOptions
from timelapse.cli.config_store import ConfigStore, default_config_dir
from timelapse.cli.errors import CLIError
from timelapse.cli.login import OAuthClientConfig, refresh_tokens
from timelapse.config import ClientSettings
from timelapse.domain.errors import AppError
from timelapse.infrastructure.telemetry import configure_logging, get_logger

logger = get_logger(__name__)

CLI_LOGGER = "timelapse.cli"


def _add_entry_options(parser: argparse.ArgumentParser, times: bool = True) -> None:
    if times:
        parser.add_argument("-s", "--start", help="Start time, e.g. 'yesterday at 9:00'")
        parser.add_argument("-e", "--end", help="End time, e.g. '2 hours ago'")
    parser.add_argument("-b", "--breaks", help="Breaks as a duration, e.g. 45m")
    parser.add_argument(
        "-t",
        "--type",
        dest="entry_type",
        help="Entry type: work, sick, sick-child or vacation",
    )
    parser.add_argument("-c", "--comment", help="Free-text comment")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="timelapse",
        description="Track working time, sick days and vacations.",
    )
    parser.add_argument("--server-url", help="Base URL of the timelapse server")
    parser.add_argument("--config", type=Path, help="Directory holding the client configuration")
    parser.add_argument("--trace", action="store_true", help="Log HTTP traffic to stderr")

    commands = parser.add_subparsers(dest="command", required=True, metavar="COMMAND")

    add_project = commands.add_parser("add-project", help="Create a project")
    add_project.add_argument("project", metavar="NAME")
    add_project.add_argument("-d", "--description")
    add_project.add_argument("-b", "--billable", action="store_true", default=None)

    get_project = commands.add_parser("get-project", help="Show one project")
    get_project.add_argument("project", metavar="NAME")

    update_project = commands.add_parser("update-project", help="Change a project")
    update_project.add_argument("project", metavar="NAME")
    update_project.add_argument("-r", "--rename", metavar="NEW_NAME")
    update_project.add_argument("-d", "--description")
    update_project.add_argument(
        "-b",
        "--billable",
        action=argparse.BooleanOptionalAction,
        default=None,
    )

    commands.add_parser("list-projects", help="List all projects")

    add_entry = commands.add_parser("add-entry", help="Book a time entry")
    add_entry.add_argument("project", metavar="PROJECT")
    _add_entry_options(add_entry)

    get_entries = commands.add_parser("get-entries", help="List time entries and their total")
    get_entries.add_argument("project", metavar="PROJECT", nargs="?")
    get_entries.add_argument("-s", "--start", metavar="FROM", help="Entries starting from FROM")
    get_entries.add_argument(
        "-e", "--end", metavar="TO", help="Entries ending no later than TO (open ones excluded)"
    )

    start = commands.add_parser("start", help="Start tracking time on a project")
    start.add_argument("project", metavar="PROJECT")
    start.add_argument("start", metavar="START", nargs="?", help="Start time (default: now)")
    _add_entry_options(start, times=False)

    stop = commands.add_parser("stop", help="Close the running time entry")
    stop.add_argument("project", metavar="PROJECT", nargs="?")
    stop.add_argument("end", metavar="END", nargs="?", help="End time (default: now)")
    _add_entry_options(stop, times=False)

    update_entry = commands.add_parser("update-entry", help="Change a time entry")
    update_entry.add_argument("project", metavar="PROJECT")
    update_entry.add_argument("entry_id", metavar="ENTRY_ID")
    _add_entry_options(update_entry)

    commands.add_parser("login", help="Log in through the browser")

    return parser


def _options(args: argparse.Namespace, settings: ClientSettings) -> CommandOptions:
    return CommandOptions(
        command=args.command,
        config_dir=args.config or default_config_dir(settings),
        server_url=args.server_url,
        trace=args.trace,
        project=getattr(args, "project", None),
        entry_id=getattr(args, "entry_id", None),
        start=getattr(args, "start", None),
        end=getattr(args, "end", None),
        breaks=getattr(args, "breaks", None),
        entry_type=getattr(args, "entry_type", None),
        comment=getattr(args, "comment", None),
        description=getattr(args, "description", None),
        billable=getattr(args, "billable", None),
        rename=getattr(args, "rename", None),
    )


def main(
    argv: Sequence[str] | None = None,
    *,
    http_client: httpx.Client | None = None,
    settings: ClientSettings | None = None,
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> int:
    """Run one command; returns the process exit code."""
    out = out or sys.stdout
    err = err or sys.stderr
    settings = settings or ClientSettings()

    args = build_parser().parse_args(argv)
    options = _options(args, settings)

    configure_logging(
        level="DEBUG" if options.trace else "WARNING",
        format_type="text",
        service_name="timelapse-cli",
        stream=err,
        logger_name=CLI_LOGGER,
    )

    owns_client = http_client is None
    if http_client is None:
        http_client = httpx.Client(timeout=settings.http_timeout_seconds)

    try:
        store = ConfigStore(options.config_dir)
        base_url = (
            options.server_url or store.load_configuration().base_url or settings.server_url
        )
        oauth = OAuthClientConfig.from_settings(settings)
        client = ApiClient(
            http_client,
            base_url,
            store,
            token_refresher=lambda tokens: refresh_tokens(http_client, oauth, tokens),
        )
        context = CommandContext(
            client=client,
            store=store,
            http_client=http_client,
            oauth=oauth,
            out=out,
        )
        COMMANDS[options.command](options, context)
    except (CLIError, AppError) as exc:
        logger.debug("Command failed", extra={"command": options.command, "error": str(exc)})
        print(f"Error: {exc}", file=err)
        return 1
    finally:
        if owns_client:
            http_client.close()

    return 0

