"""HTTP data source adapter backed by aiohttp."""

from __future__ import annotations

import logging
import time
from typing import Any, Optional

import aiohttp
import orjson

from servesync.core.pagination import FetchWindow
from servesync.services.retry_policy import RetryPolicy
from servesync.services.session_manager import AsyncSessionManager
from servesync.services.sources.base import DataSource
from servesync.services.sources.models import SourcePage, parse_source_payload
from servesync.shared.constants import HTTPStatusCodes, PagingStyle, Resources
from servesync.shared.errors import (
    ApplicationError,
    ErrorCode,
    SourceStructuralError,
    SourceTransientError,
)
from servesync.shared.logging import log_api_call

logger = logging.getLogger(__name__)

_NO_BODY = object()


def _decode_body(body: bytes) -> Any:
    try:
        return orjson.loads(body)
    except orjson.JSONDecodeError:
        return _NO_BODY


def _error_message(payload: Any, status: int) -> str:
    if isinstance(payload, dict):
        for key in ("error", "message", "detail"):
            if payload.get(key):
                return str(payload[key])
    return f"HTTP {status}"


class HttpDataSource(DataSource):
    """GETs one list window from the case-management API.

    Failures are classified for the fetch orchestrator:

    - transport errors and 2xx bodies that are not JSON are transient;
    - error statuses with a parseable body are structural;
    - error statuses without a parseable body are transient for 5xx and
      structural for 4xx;
    - JSON without the record array is structural.
    - a closed session manager is structural.

    Args:
        name: Adapter name
        session_manager: Provider of the shared aiohttp session
        base_url: API base URL
        path: Path template; ``{resource}`` is substituted
        resource: List resource served
        priority: Position in the chain
        retry_policy: Retry and timeout policy
        paging: ``"page"`` or ``"offset"`` query style
        server_side_filters: Forward window filters as query parameters
        api_key: Optional bearer token
    """

    def __init__(
        self,
        name: str,
        session_manager: AsyncSessionManager,
        *,
        base_url: str,
        path: str,
        resource: str = Resources.JOBS,
        priority: int = 0,
        retry_policy: Optional[RetryPolicy] = None,
        paging: str = PagingStyle.PAGE,
        server_side_filters: bool = True,
        api_key: str = "",
    ) -> None:
        super().__init__(name, resource=resource, priority=priority, retry_policy=retry_policy)
        self._session_manager = session_manager
        self.url = base_url.rstrip("/") + path.format(resource=resource)
        self.paging = paging
        self.server_side_filters = server_side_filters
        self._headers: dict[str, str] = {}
        if api_key:
            self._headers["Authorization"] = f"Bearer {api_key}"

    def build_params(self, window: FetchWindow) -> dict[str, str]:
        """Query parameters for ``window``."""
        params: dict[str, str] = {"limit": str(window.limit)}
        if self.paging == PagingStyle.OFFSET:
            params["offset"] = str(window.offset)
        else:
            params["page"] = str(window.page)
        if self.server_side_filters:
            params.update(window.filters)
        return params

    async def fetch(self, window: FetchWindow) -> SourcePage:
        try:
            session = await self._session_manager.get_session()
        except ApplicationError as e:
            raise SourceStructuralError(
                e.code,
                f"{self.name} is unavailable: {e.message}",
                source=self.name,
                original_error=e,
            ) from e
        params = self.build_params(window)
        start = time.perf_counter()

        try:
            async with session.get(self.url, params=params, headers=self._headers) as response:
                status = response.status
                body = await response.read()
        except aiohttp.ClientError as e:
            raise SourceTransientError(
                ErrorCode.SOURCE_NETWORK_ERROR,
                f"Network error contacting {self.name}: {e}",
                source=self.name,
                original_error=e,
            ) from e

        duration_ms = (time.perf_counter() - start) * 1000
        log_api_call(logger, self.url, "GET", status, duration_ms, {"source": self.name})

        payload = _decode_body(body)

        if not HTTPStatusCodes.is_success(status):
            message = f"{self.name} returned {status}: {_error_message(payload, status)}"
            if payload is not _NO_BODY or not HTTPStatusCodes.is_server_error(status):
                raise SourceStructuralError(
                    ErrorCode.SOURCE_HTTP_ERROR, message, source=self.name, status=status
                )
            raise SourceTransientError(
                ErrorCode.SOURCE_HTTP_ERROR, message, source=self.name, status=status
            )

        if payload is _NO_BODY:
            raise SourceTransientError(
                ErrorCode.SOURCE_MALFORMED_RESPONSE,
                f"{self.name} returned a non-JSON body",
                source=self.name,
                status=status,
            )

        page = parse_source_payload(payload, self.resource, source=self.name)
        if page.response_time_ms is None:
            page = page.model_copy(update={"response_time_ms": int(duration_ms)})
        return page


__all__ = ["HttpDataSource"]
