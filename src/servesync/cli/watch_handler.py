"""Watch command handler: runs the freshness monitor in the foreground."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Optional

import typer
from rich.console import Console

from servesync.cli.common.context import load_cli_settings
from servesync.cli.common.error_handler import handle_cli_error
from servesync.config import Settings
from servesync.services.cache_store import CacheEntry
from servesync.services.factory import build_controller
from servesync.shared.constants import CLICommands

logger = logging.getLogger(__name__)


async def _watch(
    settings: Settings,
    resource: str,
    console: Console,
    *,
    interval: Optional[float],
    checks: Optional[int],
) -> int:
    changes = 0

    def on_change(entry: CacheEntry) -> None:
        nonlocal changes
        changes += 1
        stamp = datetime.now().strftime("%H:%M:%S")
        console.print(f"[green]{stamp} Updated {resource} detected: {entry.total} total[/green]")

    async with build_controller(resource, settings) as controller:
        entry = await controller.load()
        if entry is None:
            return changes
        console.print(
            f"Watching {resource}: {entry.total} records from {entry.source} "
            f"(interval {settings.sync.poll_interval if interval is None else interval:g}s)"
        )
        controller.start_monitoring(on_change, poll_interval=interval, max_checks=checks)
        await controller.monitor.wait()

        status = controller.status
        console.print(
            f"{changes} change(s) detected | consecutive failures: "
            f"{status.consecutive_failures} | circuit open: {status.circuit_open}",
            style="dim",
        )
    return changes


def watch_command(
    resource: str,
    *,
    interval: Optional[float] = None,
    checks: Optional[int] = None,
) -> None:
    """Run the watch command until ``checks`` checks ran or the user interrupts."""
    console = Console()
    try:
        settings = load_cli_settings()
        asyncio.run(_watch(settings, resource, console, interval=interval, checks=checks))
    except KeyboardInterrupt:
        console.print("Stopped.")
    except Exception as e:
        exit_code = handle_cli_error(e, CLICommands.WATCH)
        raise typer.Exit(exit_code) from e


__all__ = ["watch_command"]
