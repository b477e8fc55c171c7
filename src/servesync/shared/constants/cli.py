"""
CLI Constants

Command names, help text and formatting used by the Typer application.
"""

from .system import Application


class CLICommands:
    """CLI command names."""

    LIST = "list"
    WATCH = "watch"
    CONFIG = "config"
    SHOW = "show"


class CLIHelp:
    """CLI help text."""

    APP_NAME = Application.NAME
    APP_DESCRIPTION = "Resilient list synchronization for the process-serving dashboard."
    APP_STYLE = "rich"
    VERSION_TEXT = "servesync v{version}"
    RESOURCE_HELP = "Resource to list (jobs, invoices, clients)"
    OFFSET_HELP = "Offset of the first record in the window"
    LIMIT_HELP = "Number of records per page"
    SEARCH_HELP = "Case-insensitive search across the searchable fields"
    SORT_HELP = "Field to sort by"
    DESC_HELP = "Sort descending (with --sort)"
    STATUS_HELP = "Only show records with this status"
    REFRESH_HELP = "Ignore cached data and fetch again"
    JSON_HELP = "Output in JSON format"
    INTERVAL_HELP = "Seconds between background checks"
    CHECKS_HELP = "Number of background checks to run before exiting"


class ExitCodes:
    """Process exit codes."""

    SUCCESS = 0
    SYNC_ERROR = 1
    UNEXPECTED_ERROR = 2
