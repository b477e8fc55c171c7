"""
servesync Constants Module

Centralized constants for the servesync package. All magic values and
configuration defaults are defined here to keep a single source of truth.
"""

from .cache import Cache
from .cli import CLICommands, CLIHelp, ExitCodes
from .fields import (
    ClientFields,
    FilterValues,
    InvoiceFields,
    JobFields,
    JobSortFields,
    SortDirection,
)
from .http_codes import HTTPStatusCodes
from .network import NetworkConfig, PagingStyle, SourceNames, SourcePaths
from .sync import FreshnessMonitorConfig, Pagination, Resources
from .system import BASE_HOUR, BASE_MINUTE, BASE_SECOND, Application

__all__ = [
    "BASE_HOUR",
    "BASE_MINUTE",
    "BASE_SECOND",
    "Application",
    "CLICommands",
    "CLIHelp",
    "Cache",
    "ClientFields",
    "ExitCodes",
    "FilterValues",
    "FreshnessMonitorConfig",
    "HTTPStatusCodes",
    "InvoiceFields",
    "JobFields",
    "JobSortFields",
    "NetworkConfig",
    "PagingStyle",
    "Pagination",
    "Resources",
    "SortDirection",
    "SourceNames",
    "SourcePaths",
]
