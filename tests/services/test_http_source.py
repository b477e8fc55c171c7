"""Tests for the aiohttp-backed data source adapter."""

import json
from typing import Any, Optional

import aiohttp
import pytest

from conftest import FakeClock, RecordingSleep
from servesync.core.pagination import FetchWindow
from servesync.services.cache_store import CacheStore
from servesync.services.fetch_orchestrator import FetchOrchestrator
from servesync.services.session_manager import AsyncSessionManager
from servesync.services.sources.chain import FallbackChain
from servesync.services.sources.http_source import HttpDataSource
from servesync.services.sources.sample_source import SampleDataSource
from servesync.shared.errors import (
    ErrorCode,
    SourceStructuralError,
    SourceTransientError,
)


@pytest.fixture
def mock_session(mocker):
    """Mock aiohttp session whose get() is an async context manager."""
    return mocker.AsyncMock(spec=aiohttp.ClientSession)


@pytest.fixture
def session_manager(mocker, mock_session):
    manager = mocker.AsyncMock(spec=AsyncSessionManager)
    manager.get_session.return_value = mock_session
    return manager


def respond(mocker, session, status: int, body: Any, *, raw: Optional[bytes] = None) -> None:
    """Configure ``session.get`` to answer with ``status`` and ``body``."""
    response = mocker.MagicMock()
    response.status = status
    response.read = mocker.AsyncMock(return_value=raw if raw is not None else json.dumps(body).encode())
    session.get.return_value.__aenter__.return_value = response


def make_source(session_manager, **kwargs: Any) -> HttpDataSource:
    options: dict[str, Any] = {
        "base_url": "https://api.example.test/",
        "path": "/api/{resource}",
    }
    options.update(kwargs)
    return HttpDataSource("primary", session_manager, **options)


class TestRequest:
    """Test request construction."""

    def test_url_substitutes_resource(self, session_manager) -> None:
        """Test URL building from base URL and path template."""
        source = make_source(session_manager, path="/api/legacy/{resource}", resource="invoices")

        assert source.url == "https://api.example.test/api/legacy/invoices"

    def test_page_style_params(self, session_manager) -> None:
        """Test page/limit parameters with forwarded filters."""
        source = make_source(session_manager)
        window = FetchWindow(offset=100, limit=50, filters=(("status", "pending"),))

        assert source.build_params(window) == {"limit": "50", "page": "3", "status": "pending"}

    def test_offset_style_params(self, session_manager) -> None:
        """Test offset/limit parameters."""
        source = make_source(session_manager, paging="offset")

        assert source.build_params(FetchWindow(offset=25, limit=25)) == {"limit": "25", "offset": "25"}

    def test_filters_not_forwarded_when_disabled(self, session_manager) -> None:
        """Test adapters without server-side filtering."""
        source = make_source(session_manager, server_side_filters=False)
        window = FetchWindow(filters=(("status", "served"),))

        assert "status" not in source.build_params(window)

    @pytest.mark.asyncio
    async def test_get_is_issued_with_auth_header(self, mocker, session_manager, mock_session) -> None:
        """Test the outgoing request."""
        respond(mocker, mock_session, 200, {"jobs": [], "total": 0})
        source = make_source(session_manager, api_key="secret-token")

        await source.fetch(FetchWindow())

        mock_session.get.assert_called_once_with(
            "https://api.example.test/api/jobs",
            params={"limit": "50", "page": "1"},
            headers={"Authorization": "Bearer secret-token"},
        )


class TestResponses:
    """Test response parsing and failure classification."""

    @pytest.mark.asyncio
    async def test_success(self, mocker, session_manager, mock_session) -> None:
        """Test a well-formed page."""
        respond(
            mocker,
            mock_session,
            200,
            {"jobs": [{"id": 1, "status": "pending"}, {"id": 2}], "total": 120, "response_time_ms": 42},
        )
        source = make_source(session_manager)

        page = await source.fetch(FetchWindow())

        assert [record.id for record in page.records] == ["1", "2"]
        assert page.total == 120
        assert page.mock is False
        assert page.response_time_ms == 42

    @pytest.mark.asyncio
    async def test_response_time_is_measured_when_missing(self, mocker, session_manager, mock_session) -> None:
        """Test that the measured duration fills response_time_ms."""
        respond(mocker, mock_session, 200, {"jobs": [{"id": 1}]})
        source = make_source(session_manager)

        page = await source.fetch(FetchWindow())

        assert page.total == 1
        assert page.response_time_ms is not None
        assert page.response_time_ms >= 0

    @pytest.mark.asyncio
    async def test_resource_collection_field(self, mocker, session_manager, mock_session) -> None:
        """Test that the record array is read from the resource's field."""
        respond(mocker, mock_session, 200, {"invoices": [{"id": "inv-1"}], "total": 1})
        source = make_source(session_manager, resource="invoices")

        page = await source.fetch(FetchWindow())

        assert page.records[0].id == "inv-1"

    @pytest.mark.asyncio
    async def test_network_error_is_transient(self, session_manager, mock_session) -> None:
        """Test that transport failures are retried upstream."""
        mock_session.get.side_effect = aiohttp.ClientConnectionError("connection reset")
        source = make_source(session_manager)

        with pytest.raises(SourceTransientError) as exc_info:
            await source.fetch(FetchWindow())

        assert exc_info.value.code == ErrorCode.SOURCE_NETWORK_ERROR
        assert exc_info.value.source == "primary"
        assert isinstance(exc_info.value.original_error, aiohttp.ClientConnectionError)

    @pytest.mark.asyncio
    async def test_non_json_success_is_transient(self, mocker, session_manager, mock_session) -> None:
        """Test a 2xx response whose body is not JSON."""
        respond(mocker, mock_session, 200, None, raw=b"<html>maintenance</html>")
        source = make_source(session_manager)

        with pytest.raises(SourceTransientError) as exc_info:
            await source.fetch(FetchWindow())

        assert exc_info.value.code == ErrorCode.SOURCE_MALFORMED_RESPONSE

    @pytest.mark.asyncio
    async def test_server_error_without_body_is_transient(self, mocker, session_manager, mock_session) -> None:
        """Test a 5xx response without a parseable body."""
        respond(mocker, mock_session, 502, None, raw=b"Bad Gateway")
        source = make_source(session_manager)

        with pytest.raises(SourceTransientError) as exc_info:
            await source.fetch(FetchWindow())

        assert exc_info.value.code == ErrorCode.SOURCE_HTTP_ERROR
        assert exc_info.value.status == 502

    @pytest.mark.asyncio
    async def test_error_with_parseable_body_is_structural(self, mocker, session_manager, mock_session) -> None:
        """Test that an HTTP error with a JSON body advances the chain."""
        respond(mocker, mock_session, 500, {"error": "database unavailable"})
        source = make_source(session_manager)

        with pytest.raises(SourceStructuralError) as exc_info:
            await source.fetch(FetchWindow())

        assert exc_info.value.status == 500
        assert "database unavailable" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_client_error_is_structural(self, mocker, session_manager, mock_session) -> None:
        """Test that 4xx responses are structural even without a body."""
        respond(mocker, mock_session, 404, None, raw=b"")
        source = make_source(session_manager)

        with pytest.raises(SourceStructuralError) as exc_info:
            await source.fetch(FetchWindow())

        assert exc_info.value.status == 404
        assert "HTTP 404" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_missing_record_array_is_structural(self, mocker, session_manager, mock_session) -> None:
        """Test a JSON body without the jobs array."""
        respond(mocker, mock_session, 200, {"total": 3})
        source = make_source(session_manager)

        with pytest.raises(SourceStructuralError) as exc_info:
            await source.fetch(FetchWindow())

        assert exc_info.value.code == ErrorCode.SOURCE_INVALID_PAYLOAD

    @pytest.mark.asyncio
    async def test_error_without_records_is_no_data(self, mocker, session_manager, mock_session) -> None:
        """Test an adapter explicitly signalling that it has no data."""
        respond(mocker, mock_session, 200, {"jobs": [], "total": 0, "error": "upstream offline"})
        source = make_source(session_manager)

        with pytest.raises(SourceStructuralError) as exc_info:
            await source.fetch(FetchWindow())

        assert exc_info.value.code == ErrorCode.SOURCE_NO_DATA

    @pytest.mark.asyncio
    async def test_invalid_utf8_body_is_transient(self, mocker, session_manager, mock_session) -> None:
        """Test that a body that is not valid UTF-8 counts as malformed."""
        respond(mocker, mock_session, 200, None, raw=b'{"jobs": [], "total": "\xff\xfe"}')
        source = make_source(session_manager)

        with pytest.raises(SourceTransientError) as exc_info:
            await source.fetch(FetchWindow())

        assert exc_info.value.code == ErrorCode.SOURCE_MALFORMED_RESPONSE

    @pytest.mark.asyncio
    async def test_closed_session_manager_is_structural(self) -> None:
        """Test that a closed session manager fails the adapter, not the caller."""
        session_manager = AsyncSessionManager()
        await session_manager.close()
        source = make_source(session_manager)

        with pytest.raises(SourceStructuralError) as exc_info:
            await source.fetch(FetchWindow())

        assert exc_info.value.code == ErrorCode.SESSION_CLOSED
        assert exc_info.value.source == "primary"


class TestFallbackToSample:
    """Test that adapter failures reach the rest of the chain."""

    @staticmethod
    def orchestrator(source: HttpDataSource, sleep: RecordingSleep) -> FetchOrchestrator:
        chain = FallbackChain([source, SampleDataSource()])
        return FetchOrchestrator("jobs", chain, CacheStore(clock=FakeClock()), sleep=sleep)

    @pytest.mark.asyncio
    async def test_invalid_utf8_body_falls_back(self, mocker, session_manager, mock_session) -> None:
        """Test retries on an undecodable body, then the sample source."""
        respond(mocker, mock_session, 200, None, raw=b'{"jobs": [], "total": "\xff\xfe"}')
        sleep = RecordingSleep()

        entry = await self.orchestrator(make_source(session_manager), sleep).resolve(FetchWindow())

        assert entry.source == "sample"
        assert entry.mock is True
        assert sleep.delays == [1.0, 2.0, 3.0]
        assert mock_session.get.call_count == 4

    @pytest.mark.asyncio
    async def test_closed_session_falls_back_without_retry(self) -> None:
        """Test that a closed session advances the chain immediately."""
        session_manager = AsyncSessionManager()
        await session_manager.close()
        sleep = RecordingSleep()

        entry = await self.orchestrator(make_source(session_manager), sleep).resolve(FetchWindow())

        assert entry.source == "sample"
        assert sleep.delays == []
