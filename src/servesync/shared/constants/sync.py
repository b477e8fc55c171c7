"""
Synchronization Constants

Pagination defaults and background freshness monitor timings.
"""

from .system import BASE_MINUTE, BASE_SECOND


class Pagination:
    """Pagination window defaults."""

    DEFAULT_LIMIT = 50
    MAX_LIMIT = 500


class FreshnessMonitorConfig:
    """Background freshness monitor defaults."""

    POLL_INTERVAL = 45 * BASE_SECOND
    INITIAL_DELAY = 5 * BASE_SECOND
    PROBE_LIMIT = 50
    MAX_BACKOFF = 2 * BASE_MINUTE
    CIRCUIT_THRESHOLD = 3
    BACKOFF_MULTIPLIER = 2


class Resources:
    """List resources exposed by the case-management API."""

    JOBS = "jobs"
    INVOICES = "invoices"
    CLIENTS = "clients"

    ALL = (JOBS, INVOICES, CLIENTS)
