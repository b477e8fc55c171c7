"""
Cache Configuration Constants

TTL and sizing constants for the in-memory list cache.
"""

from .system import BASE_SECOND


class Cache:
    """List cache constants."""

    # Entries older than this are refreshed on the next resolve
    TTL = 30 * BASE_SECOND

    # fetched_at value used by the "clear cache" action
    CLEARED_TIMESTAMP = 0.0
