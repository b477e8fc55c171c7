"""List command handler.

Resolves one window of a resource through the full sync stack (cache,
fallback chain, filter/sort engine) and prints it.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from typing import Optional

import typer
from rich.console import Console

from servesync.cli.common.context import load_cli_settings
from servesync.cli.common.error_handler import handle_cli_error
from servesync.cli.common.output import format_json_output, print_window, window_payload
from servesync.config import Settings
from servesync.core.view import SortSpec
from servesync.services.controller import ListSyncController
from servesync.services.factory import build_controller
from servesync.shared.constants import CLICommands, SortDirection

logger = logging.getLogger(__name__)


def configure_window(
    controller: ListSyncController,
    *,
    offset: int,
    limit: Optional[int],
    status: Optional[str],
) -> None:
    """Apply the requested window to the controller's pagination state."""
    state = controller.pagination.set_filters({"status": status} if status else None)
    if limit is not None:
        state = state.set_limit(limit, controller.pagination_settings.max_limit)
    controller.pagination = replace(state, offset=offset)


def configure_sort(controller: ListSyncController, sort: Optional[str], desc: bool) -> None:
    if sort is None:
        return
    controller.toggle_sort(sort)
    if desc:
        controller.sort = SortSpec(sort, SortDirection.DESC)


async def _list_window(
    settings: Settings,
    resource: str,
    *,
    offset: int,
    limit: Optional[int],
    search: str,
    sort: Optional[str],
    desc: bool,
    status: Optional[str],
    refresh: bool,
    json_output: bool,
) -> None:
    async with build_controller(resource, settings) as controller:
        configure_window(controller, offset=offset, limit=limit, status=status)
        configure_sort(controller, sort, desc)

        entry = await controller.load(force_refresh=refresh)
        if entry is None:
            return
        records = controller.set_search(search)
        age = controller.cache_age() or 0.0

        if json_output:
            payload = window_payload(resource, records, entry, controller.pagination)
            typer.echo(format_json_output(True, CLICommands.LIST, payload).decode())
        else:
            print_window(Console(), resource, records, entry, controller.pagination, age)


def list_command(
    resource: str,
    *,
    offset: int = 0,
    limit: Optional[int] = None,
    search: str = "",
    sort: Optional[str] = None,
    desc: bool = False,
    status: Optional[str] = None,
    refresh: bool = False,
    json_output: bool = False,
) -> None:
    """Run the list command and exit with the mapped code on failure."""
    try:
        settings = load_cli_settings()
        asyncio.run(
            _list_window(
                settings,
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
        )
    except Exception as e:
        exit_code = handle_cli_error(e, CLICommands.LIST, json_output=json_output)
        raise typer.Exit(exit_code) from e


__all__ = ["configure_sort", "configure_window", "list_command"]
