"""Tests for the servesync command line."""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from servesync.cli.common.context import clear_cli_context
from servesync.cli.typer_app import app

SAMPLE_ONLY_CONFIG = """\
[api]
api_key = "top-secret"

[api.primary]
enabled = false

[api.legacy]
enabled = false

[sync]
initial_delay = 0
"""


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "servesync.toml"
    path.write_text(SAMPLE_ONLY_CONFIG, encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def reset_context():
    clear_cli_context()
    yield
    clear_cli_context()


def invoke(runner: CliRunner, config_file: Path, *args: str):
    return runner.invoke(app, ["--config", str(config_file), *args], env={"COLUMNS": "200"})


class TestListCommand:
    """Test `servesync list`."""

    def test_json_output(self, runner, config_file) -> None:
        """Test the JSON envelope for a window served by the sample source."""
        result = invoke(runner, config_file, "list", "jobs", "--json")

        assert result.exit_code == 0
        output = json.loads(result.stdout)
        assert output["success"] is True
        assert output["command"] == "list"
        data = output["data"]
        assert data["source"] == "sample"
        assert data["mock"] is True
        assert data["total"] == 3
        assert data["page"] == 1
        assert [record["id"] for record in data["records"]] == ["demo-1", "demo-2", "demo-3"]

    def test_search(self, runner, config_file) -> None:
        """Test the case-insensitive search option."""
        result = invoke(runner, config_file, "list", "jobs", "--search", "SMITH", "--json")

        records = json.loads(result.stdout)["data"]["records"]
        assert [record["id"] for record in records] == ["demo-1"]

    @pytest.mark.parametrize(
        ("extra", "expected"),
        [
            ((), ["demo-2", "demo-1", "demo-3"]),
            (("--desc",), ["demo-3", "demo-1", "demo-2"]),
        ],
    )
    def test_sort_by_recipient(self, runner, config_file, extra, expected) -> None:
        """Test sorting by recipient name in both directions."""
        result = invoke(runner, config_file, "list", "jobs", "--sort", "recipient", *extra, "--json")

        records = json.loads(result.stdout)["data"]["records"]
        assert [record["id"] for record in records] == expected

    def test_status_filter(self, runner, config_file) -> None:
        """Test that the status filter applies to sources without server-side filtering."""
        result = invoke(runner, config_file, "list", "jobs", "--status", "served", "--json")

        records = json.loads(result.stdout)["data"]["records"]
        assert [record["id"] for record in records] == ["demo-3"]

    def test_table_output(self, runner, config_file) -> None:
        """Test the Rich table and the sample data notice."""
        result = invoke(runner, config_file, "list", "jobs")

        assert result.exit_code == 0
        assert "Using sample data" in result.stdout
        assert "DEMO-001" in result.stdout
        assert "Page 1 of 1 (3 total)" in result.stdout

    def test_unknown_resource(self, runner, config_file) -> None:
        """Test the error envelope for an unknown resource."""
        result = invoke(runner, config_file, "list", "payments", "--json")

        assert result.exit_code == 1
        output = json.loads(result.stdout)
        assert output["success"] is False
        assert output["data"] == {"code": "UNKNOWN_RESOURCE"}
        assert output["errors"]

    def test_unknown_sort_field(self, runner, config_file) -> None:
        """Test the plain-text error for an invalid sort field."""
        result = invoke(runner, config_file, "list", "jobs", "--sort", "amount")

        assert result.exit_code == 1
        assert "Error: Unknown sort field 'amount'" in result.output

    def test_invalid_configuration(self, runner, tmp_path) -> None:
        """Test that invalid settings map to the sync error exit code."""
        bad_config = tmp_path / "bad.toml"
        bad_config.write_text("[cache]\nttl = -1\n", encoding="utf-8")

        result = invoke(runner, bad_config, "list", "jobs")

        assert result.exit_code == 1
        assert "Invalid configuration" in result.output

    def test_missing_config_file(self, runner, tmp_path) -> None:
        """Test that --config must point at an existing file."""
        result = invoke(runner, tmp_path / "absent.toml", "list", "jobs")

        assert result.exit_code == 2


class TestWatchCommand:
    """Test `servesync watch`."""

    def test_single_check_without_changes(self, runner, config_file) -> None:
        """Test one background check against unchanged sample data."""
        result = invoke(runner, config_file, "watch", "jobs", "--interval", "0.01", "--checks", "1")

        assert result.exit_code == 0
        assert "Watching jobs: 3 records from sample" in result.stdout
        assert "0 change(s) detected" in result.stdout
        assert "circuit open: False" in result.stdout

    def test_unknown_resource(self, runner, config_file) -> None:
        """Test the exit code for an unknown resource."""
        result = invoke(runner, config_file, "watch", "payments", "--checks", "1")

        assert result.exit_code == 1
        assert "Unknown resource" in result.output


class TestConfigCommand:
    """Test `servesync config show`."""

    def test_json_masks_api_key(self, runner, config_file) -> None:
        """Test that the API key is masked in JSON output."""
        result = invoke(runner, config_file, "config", "show", "--json")

        assert result.exit_code == 0
        assert "top-secret" not in result.stdout
        data = json.loads(result.stdout)["data"]
        assert data["api"]["api_key"] == "****"
        assert data["api"]["primary"]["enabled"] is False
        assert data["cache"]["ttl"] == 30

    def test_table(self, runner, config_file) -> None:
        """Test the flattened settings table."""
        result = invoke(runner, config_file, "config", "show")

        assert result.exit_code == 0
        assert "cache.ttl" in result.stdout
        assert "top-secret" not in result.stdout


class TestMainCallback:
    """Test global options."""

    def test_version(self, runner) -> None:
        """Test the eager version option."""
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert "servesync v0.3.0" in result.stdout

    def test_help_lists_commands(self, runner) -> None:
        """Test the top-level help."""
        result = runner.invoke(app, ["--help"], env={"COLUMNS": "200"})

        assert result.exit_code == 0
        for command in ("list", "watch", "config"):
            assert command in result.stdout
