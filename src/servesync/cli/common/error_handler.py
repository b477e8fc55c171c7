"""
CLI Error Handling Utilities

Maps exceptions raised by command handlers to exit codes and renders them
on stderr, or as a JSON document on stdout when --json is active.
"""

from __future__ import annotations

import logging

import typer

from servesync.cli.common.output import format_json_output
from servesync.shared.constants import ExitCodes
from servesync.shared.errors import ErrorCode, FetchError, ServeSyncError

logger = logging.getLogger(__name__)


def handle_cli_error(
    error: Exception,
    command: str,
    *,
    json_output: bool = False,
) -> int:
    """Handle a command failure with consistent formatting and logging.

    Args:
        error: The exception that occurred
        command: The CLI command being executed
        json_output: Whether to output JSON format

    Returns:
        ExitCodes.SYNC_ERROR for ServeSyncError, ExitCodes.UNEXPECTED_ERROR otherwise
    """
    if isinstance(error, ServeSyncError):
        exit_code = ExitCodes.SYNC_ERROR
        code = error.code.value
        message = error.message
        logger.debug("Command '%s' failed: %s", command, error, extra={"error_code": code})
    else:
        exit_code = ExitCodes.UNEXPECTED_ERROR
        code = ErrorCode.CLI_UNEXPECTED_ERROR.value
        message = f"Unexpected error: {error}"
        logger.exception("Unexpected error in '%s'", command)

    if json_output:
        typer.echo(
            format_json_output(
                success=False,
                command=command,
                data={"code": code},
                errors=[message],
            ).decode()
        )
    else:
        typer.echo(f"Error: {message}", err=True)
        if isinstance(error, FetchError) and error.attempted_sources:
            typer.echo(f"Tried sources: {', '.join(error.attempted_sources)}", err=True)
            typer.echo("Run again with --refresh to retry.", err=True)

    return exit_code


__all__ = ["handle_cli_error"]
