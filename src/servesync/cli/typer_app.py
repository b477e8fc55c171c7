"""
servesync Typer CLI Application

Command-line access to the list synchronization stack: resolve a window,
watch for upstream changes, and inspect the effective configuration.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Optional

import typer

from servesync.cli.common.context import CliContext, LogLevel, set_cli_context
from servesync.cli.common.options import (
    config_option,
    json_output_option,
    log_level_option,
    verbose_option,
    version_option,
)
from servesync.cli.config_handler import show_config_command
from servesync.cli.list_handler import list_command
from servesync.cli.watch_handler import watch_command
from servesync.shared.constants import Application, CLICommands, CLIHelp, Pagination
from servesync.shared.logging import setup_structured_logger

__version__ = Application.VERSION


app = typer.Typer(
    name=CLIHelp.APP_NAME,
    help=CLIHelp.APP_DESCRIPTION,
    rich_markup_mode=CLIHelp.APP_STYLE,
    no_args_is_help=True,
)

config_app = typer.Typer(help="Inspect configuration.", no_args_is_help=True)
app.add_typer(config_app, name=CLICommands.CONFIG)


@app.callback()
def main(
    verbose: Annotated[int, verbose_option] = 0,
    log_level: Annotated[LogLevel, log_level_option] = LogLevel.WARNING,
    config: Annotated[Optional[Path], config_option] = None,
    version: Annotated[bool, version_option] = False,
) -> None:
    """Set up logging and the shared CLI context."""
    context = CliContext(verbose=verbose, log_level=log_level, config_path=config)
    set_cli_context(context)
    setup_structured_logger(level=context.get_effective_log_level())


@app.command(CLICommands.LIST)
def list_command_typer(
    resource: str = typer.Argument(..., help=CLIHelp.RESOURCE_HELP),
    offset: int = typer.Option(0, "--offset", min=0, help=CLIHelp.OFFSET_HELP),
    limit: Optional[int] = typer.Option(
        None,
        "--limit",
        "-n",
        min=1,
        max=Pagination.MAX_LIMIT,
        help=CLIHelp.LIMIT_HELP,
    ),
    search: str = typer.Option("", "--search", "-s", help=CLIHelp.SEARCH_HELP),
    sort: Optional[str] = typer.Option(None, "--sort", help=CLIHelp.SORT_HELP),
    desc: bool = typer.Option(False, "--desc", help=CLIHelp.DESC_HELP),
    status: Optional[str] = typer.Option(None, "--status", help=CLIHelp.STATUS_HELP),
    refresh: bool = typer.Option(False, "--refresh", help=CLIHelp.REFRESH_HELP),
    json_output: Annotated[bool, json_output_option] = False,
) -> None:
    """
    Resolve one window of a list and print it.

    Data comes from the cache when fresh, otherwise from the first data
    source in the fallback chain that answers (primary, legacy, sample).

    Examples:
        # First page of jobs, newest first
        servesync list jobs

        # Second page of 25 pending jobs sorted by recipient
        servesync list jobs --offset 25 --limit 25 --status pending --sort recipient
    """
    list_command(
        resource,
        offset=offset,
        limit=limit,
        search=search,
        sort=sort,
        desc=desc,
        status=status,
        refresh=refresh,
        json_output=json_output,
    )


@app.command(CLICommands.WATCH)
def watch_command_typer(
    resource: str = typer.Argument(..., help=CLIHelp.RESOURCE_HELP),
    interval: Optional[float] = typer.Option(None, "--interval", min=0.0, help=CLIHelp.INTERVAL_HELP),
    checks: Optional[int] = typer.Option(None, "--checks", min=1, help=CLIHelp.CHECKS_HELP),
) -> None:
    """
    Load the first page and report upstream changes as they are detected.

    Runs until interrupted, or until --checks background checks ran.
    """
    watch_command(resource, interval=interval, checks=checks)


@config_app.command(CLICommands.SHOW)
def show_config_typer(
    json_output: Annotated[bool, json_output_option] = False,
) -> None:
    """Print the effective configuration (API key masked)."""
    show_config_command(json_output=json_output)


if __name__ == "__main__":
    app()
