"""
Reusable Typer Options Module

Common option definitions shared by the main callback and the commands.
"""

from __future__ import annotations

import typer

from servesync.shared.constants import Application, CLIHelp

verbose_option = typer.Option(
    "--verbose",
    "-v",
    count=True,
    help="Enable verbose output (equivalent to --log-level DEBUG).",
)

log_level_option = typer.Option(
    "--log-level",
    case_sensitive=False,
    help="Set the logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL). Default: WARNING.",
)

config_option = typer.Option(
    "--config",
    "-c",
    exists=True,
    dir_okay=False,
    readable=True,
    help="Path to a TOML configuration file.",
)


def version_callback(value: bool) -> None:
    """Print version information and exit."""
    if value:
        typer.echo(CLIHelp.VERSION_TEXT.format(version=Application.VERSION))
        raise typer.Exit


version_option = typer.Option(
    "--version",
    "-V",
    is_eager=True,
    callback=version_callback,
    help="Show version information and exit.",
)

json_output_option = typer.Option(
    "--json",
    help=CLIHelp.JSON_HELP,
)
