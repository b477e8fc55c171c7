"""servesync: resilient list synchronization for the process-serving dashboard.

Fetches jobs, invoices and clients from the case-management API through a
cache with TTL, a retrying fallback chain of data sources, and a background
freshness monitor.
"""

from servesync.shared.constants import Application

__version__ = Application.VERSION

__all__ = ["__version__"]
