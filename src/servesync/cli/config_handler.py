"""Config command handler."""

from __future__ import annotations

from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from servesync.cli.common.context import load_cli_settings
from servesync.cli.common.error_handler import handle_cli_error
from servesync.cli.common.output import format_json_output
from servesync.config import Settings
from servesync.shared.constants import CLICommands

MASK = "****"


def masked_settings(settings: Settings) -> dict[str, Any]:
    """Settings as plain data with the API key masked."""
    data = settings.model_dump(mode="json")
    if data.get("api", {}).get("api_key"):
        data["api"]["api_key"] = MASK
    return data


def flatten(data: dict[str, Any], prefix: str = "") -> list[tuple[str, Any]]:
    items: list[tuple[str, Any]] = []
    for key, value in data.items():
        name = f"{prefix}.{key}" if prefix else key
        if isinstance(value, dict):
            items.extend(flatten(value, name))
        else:
            items.append((name, value))
    return items


def show_config_command(*, json_output: bool = False) -> None:
    """Print the effective configuration."""
    try:
        data = masked_settings(load_cli_settings())
    except Exception as e:
        exit_code = handle_cli_error(e, f"{CLICommands.CONFIG} {CLICommands.SHOW}", json_output=json_output)
        raise typer.Exit(exit_code) from e

    if json_output:
        typer.echo(format_json_output(True, CLICommands.CONFIG, data).decode())
        return

    table = Table(title="Effective configuration", header_style="bold cyan")
    table.add_column("Setting")
    table.add_column("Value")
    for name, value in flatten(data):
        table.add_row(name, str(value))
    Console().print(table)


__all__ = ["flatten", "masked_settings", "show_config_command"]
