"""Synchronization services: cache, fetch orchestration, monitoring and control."""

from .cache_store import CacheEntry, CacheKey, CacheStore
from .controller import ListSyncController
from .factory import build_controller
from .fetch_orchestrator import FetchOrchestrator
from .freshness_monitor import FreshnessMonitor
from .retry_policy import RetryPolicy, linear_backoff
from .session_manager import AsyncSessionManager
from .state_machine import CircuitState, MonitorCircuitBreaker
from .status import SyncStatus, SyncStatusStore

__all__ = [
    "AsyncSessionManager",
    "CacheEntry",
    "CacheKey",
    "CacheStore",
    "CircuitState",
    "FetchOrchestrator",
    "FreshnessMonitor",
    "ListSyncController",
    "MonitorCircuitBreaker",
    "RetryPolicy",
    "SyncStatus",
    "SyncStatusStore",
    "build_controller",
    "linear_backoff",
]
