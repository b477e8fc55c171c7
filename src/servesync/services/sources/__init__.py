"""Data source adapters and the fallback chain."""

from servesync.core.pagination import FetchWindow

from .base import DataSource
from .chain import FallbackChain
from .http_source import HttpDataSource
from .models import SourcePage, parse_source_payload
from .sample_source import SAMPLE_DATA, SampleDataSource

__all__ = [
    "SAMPLE_DATA",
    "DataSource",
    "FallbackChain",
    "FetchWindow",
    "HttpDataSource",
    "SampleDataSource",
    "SourcePage",
    "parse_source_payload",
]
