"""Tests for building sources and controllers from settings."""

import pytest

from servesync.config.models.api_settings import APISettings, SourceSettings
from servesync.config.models.settings import Settings
from servesync.config.models.sync_settings import SyncSettings
from servesync.services.factory import build_controller, build_sources
from servesync.services.session_manager import AsyncSessionManager
from servesync.services.sources.http_source import HttpDataSource
from servesync.services.sources.sample_source import SampleDataSource
from servesync.shared.errors import ApplicationError, DomainError, ErrorCode


def sample_only_settings() -> Settings:
    return Settings(
        api=APISettings(
            primary=SourceSettings(enabled=False),
            legacy=SourceSettings(enabled=False, priority=1),
        ),
        sync=SyncSettings(initial_delay=0),
    )


class TestBuildSources:
    """Test source construction."""

    def test_default_chain(self) -> None:
        """Test primary, legacy and sample with their settings."""
        settings = Settings(api=APISettings(base_url="https://dash.example.test", api_key="k"))

        sources = build_sources("jobs", settings, AsyncSessionManager())

        assert [source.name for source in sources] == ["primary", "legacy", "sample"]
        primary, legacy, sample = sources
        assert isinstance(primary, HttpDataSource)
        assert isinstance(legacy, HttpDataSource)
        assert isinstance(sample, SampleDataSource)
        assert primary.url == "https://dash.example.test/api/jobs"
        assert legacy.url == "https://dash.example.test/api/legacy/jobs"
        assert primary.retry_policy.timeout == 15
        assert legacy.retry_policy.timeout == 10
        assert primary.server_side_filters is True
        assert legacy.server_side_filters is False
        assert list(primary.retry_policy.delays()) == [1.0, 2.0, 3.0]
        assert sample.retry_policy.max_retries == 0
        assert [source.priority for source in sources] == [0, 1, 2]

    def test_disabled_sources_are_skipped(self) -> None:
        """Test that disabled adapters are left out of the chain."""
        sources = build_sources("invoices", sample_only_settings(), AsyncSessionManager())

        assert [source.name for source in sources] == ["sample"]
        assert sources[0].resource == "invoices"


class TestBuildController:
    """Test controller construction."""

    def test_unknown_resource(self) -> None:
        """Test validation of the resource name."""
        with pytest.raises(DomainError) as exc_info:
            build_controller("payments", Settings())

        assert exc_info.value.code == ErrorCode.UNKNOWN_RESOURCE

    def test_every_source_disabled(self) -> None:
        """Test that an empty chain is a configuration error."""
        settings = sample_only_settings()
        settings.api.sample.enabled = False

        with pytest.raises(ApplicationError) as exc_info:
            build_controller("jobs", settings)

        assert exc_info.value.code == ErrorCode.EMPTY_FALLBACK_CHAIN

    def test_settings_are_applied(self) -> None:
        """Test TTL and pagination settings reach the controller."""
        settings = Settings(cache={"ttl": 12}, pagination={"default_limit": 20, "max_limit": 40})

        controller = build_controller("clients", settings)

        assert controller.store.ttl == 12
        assert controller.pagination.limit == 20
        assert controller.chain.names == ["primary", "legacy", "sample"]

    @pytest.mark.asyncio
    async def test_owned_session_is_closed(self, mocker) -> None:
        """Test that a controller closes the session it created."""
        close = mocker.patch.object(AsyncSessionManager, "close")

        async with build_controller("jobs", sample_only_settings()):
            pass

        close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_shared_session_is_left_open(self, mocker) -> None:
        """Test that a caller-provided session stays with the caller."""
        session_manager = mocker.AsyncMock(spec=AsyncSessionManager)

        async with build_controller("jobs", sample_only_settings(), session_manager):
            pass

        session_manager.close.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_sample_only_controller_loads_demo_data(self) -> None:
        """Test an end-to-end load served by the sample source."""
        async with build_controller("jobs", sample_only_settings()) as controller:
            entry = await controller.load()

            assert entry is not None
            assert entry.source == "sample"
            assert entry.mock is True
            assert controller.status.using_sample_data is True
            assert len(controller.set_search("smith")) == 1
