"""Tests for shared CLI helpers."""

import json

import orjson
import pytest

from servesync.cli.common.context import CliContext, LogLevel, clear_cli_context, get_cli_context, set_cli_context
from servesync.cli.common.error_handler import handle_cli_error
from servesync.cli.common.output import describe_window, format_json_output, record_rows
from servesync.cli.config_handler import flatten, masked_settings
from servesync.config.models.settings import Settings
from servesync.core.pagination import PaginationState
from servesync.core.records import JobRecord
from servesync.services.cache_store import CacheEntry, CacheKey
from servesync.shared.errors import FetchError


class TestCliContext:
    """Test the CLI context."""

    def test_verbose_forces_debug(self) -> None:
        """Test that verbose mode overrides the log level."""
        context = CliContext(verbose=1, log_level=LogLevel.ERROR)

        assert context.is_verbose() is True
        assert context.get_effective_log_level() == "DEBUG"

    def test_defaults_when_unset(self) -> None:
        """Test get_cli_context without a callback run."""
        clear_cli_context()

        context = get_cli_context()

        assert context.log_level == LogLevel.WARNING
        assert context.config_path is None

    def test_set_and_clear(self) -> None:
        set_cli_context(CliContext(verbose=2))
        assert get_cli_context().verbose == 2

        clear_cli_context()
        assert get_cli_context().verbose == 0


class TestFormatJsonOutput:
    """Test the JSON envelope."""

    def test_success_envelope(self) -> None:
        """Test the envelope keys."""
        output = orjson.loads(format_json_output(True, "list", {"total": 3}))

        assert output["success"] is True
        assert output["command"] == "list"
        assert output["data"] == {"total": 3}
        assert output["errors"] == []
        assert "timestamp" in output

    def test_errors_mark_failure(self) -> None:
        """Test that any error turns success off."""
        output = orjson.loads(format_json_output(True, "list", errors=["boom"]))

        assert output["success"] is False


class TestHandleCliError:
    """Test error to exit code mapping."""

    def test_fetch_error_text(self, capsys) -> None:
        """Test the stderr rendering of an exhausted chain."""
        error = FetchError("all sources failed", attempted_sources=["primary", "legacy", "sample"])

        exit_code = handle_cli_error(error, "list")

        captured = capsys.readouterr()
        assert exit_code == 1
        assert "Error: all sources failed" in captured.err
        assert "Tried sources: primary, legacy, sample" in captured.err
        assert captured.out == ""

    def test_unexpected_error_json(self, capsys) -> None:
        """Test the JSON rendering of an unexpected exception."""
        exit_code = handle_cli_error(RuntimeError("kaboom"), "watch", json_output=True)

        output = json.loads(capsys.readouterr().out)
        assert exit_code == 2
        assert output["success"] is False
        assert output["command"] == "watch"
        assert output["data"] == {"code": "CLI_UNEXPECTED_ERROR"}
        assert output["errors"] == ["Unexpected error: kaboom"]


class TestWindowOutput:
    """Test table rows and the window summary."""

    def test_describe_window(self) -> None:
        """Test the one-line summary."""
        entry = CacheEntry(key=CacheKey("jobs", 50, 50), total=120, source="primary")
        pagination = PaginationState(offset=50, limit=50, total=120)

        summary = describe_window(entry, pagination, 12.4)

        assert summary == "Page 2 of 3 (120 total) | source: primary | cached data (12s old)"

    def test_record_rows_use_aliases(self) -> None:
        """Test nested and flat field aliases with a placeholder for gaps."""
        records = [
            JobRecord(id=1, job_number="J-1", recipient={"name": "John Smith"}, status="pending"),
        ]

        row = record_rows("jobs", records)[0]

        assert row[0] == "J-1"
        assert row[1] == "John Smith"
        assert row[3] == "pending"
        assert row[5] == "-"


class TestConfigOutput:
    """Test configuration rendering helpers."""

    def test_masked_settings(self) -> None:
        settings = Settings(api={"api_key": "top-secret"})

        data = masked_settings(settings)

        assert data["api"]["api_key"] == "****"
        assert settings.api.api_key == "top-secret"

    def test_empty_key_is_left_empty(self) -> None:
        assert masked_settings(Settings(api={"api_key": ""}))["api"]["api_key"] == ""

    @pytest.mark.parametrize(
        ("data", "expected"),
        [
            ({"a": 1}, [("a", 1)]),
            ({"a": {"b": {"c": True}}, "d": None}, [("a.b.c", True), ("d", None)]),
        ],
    )
    def test_flatten(self, data, expected) -> None:
        assert flatten(data) == expected
