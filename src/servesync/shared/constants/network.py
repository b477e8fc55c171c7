"""
Network Configuration Constants

This module contains all constants related to the data-source adapters
and the HTTP client configuration used to reach the case-management API.
"""

from .system import Application, BASE_SECOND


class NetworkConfig:
    """Network configuration constants."""

    # Hard timeouts per adapter role
    PRIMARY_TIMEOUT = 15 * BASE_SECOND
    SECONDARY_TIMEOUT = 10 * BASE_SECOND

    # Retry settings (linear backoff: 1s, 2s, 3s)
    DEFAULT_RETRIES = 3
    RETRY_STEP = 1.0 * BASE_SECOND

    # Session-level limits
    CONNECTION_LIMIT = 20
    CONNECTION_LIMIT_PER_HOST = 10
    KEEPALIVE_TIMEOUT = 60

    # User agent
    USER_AGENT = f"{Application.NAME}/{Application.VERSION}"

    # HTTP headers
    ACCEPT_JSON = "application/json"
    NO_CACHE = "no-cache"

    DEFAULT_BASE_URL = "http://localhost:8080"


class SourceNames:
    """Names of the built-in data-source adapters."""

    PRIMARY = "primary"
    LEGACY = "legacy"
    SAMPLE = "sample"


class SourcePaths:
    """Path templates for the HTTP adapters (``{resource}`` is substituted)."""

    PRIMARY = "/api/{resource}"
    LEGACY = "/api/legacy/{resource}"


class PagingStyle:
    """Query-parameter styles understood by the HTTP adapters."""

    PAGE = "page"
    OFFSET = "offset"
