"""servesync Error Handling Module

This module defines the error handling system for servesync, providing
structured error classes with context information.

The error hierarchy follows these principles:
- One Source of Truth: All error codes are defined in ErrorCode enum
- Structured Context: ErrorContext provides additional information
- Classified Source Failures: every data-source failure is transient,
  structural or a timeout, and the fetch orchestrator reacts to the class
  rather than to the message
- Proper Exception Chaining: Original exceptions are preserved

External cancellation (navigation, superseded loads) is expressed as
``asyncio.CancelledError`` and is never wrapped in one of these classes.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any, Union

# Type alias for primitive context values (str, int, float, bool only)
PrimitiveContextValue = Union[str, int, float, bool]

# Default keys to mask in safe_dict
SAFE_DICT_MASK_KEYS: tuple[str, ...] = ("api_key",)


class ErrorCode(str, Enum):
    """Error codes for servesync.

    This enum serves as the single source of truth for all error codes
    used throughout the package.
    """

    # Data source errors
    SOURCE_NETWORK_ERROR = "SOURCE_NETWORK_ERROR"
    SOURCE_MALFORMED_RESPONSE = "SOURCE_MALFORMED_RESPONSE"
    SOURCE_HTTP_ERROR = "SOURCE_HTTP_ERROR"
    SOURCE_INVALID_PAYLOAD = "SOURCE_INVALID_PAYLOAD"
    SOURCE_NO_DATA = "SOURCE_NO_DATA"
    SOURCE_TIMEOUT = "SOURCE_TIMEOUT"

    # Resolution errors
    FETCH_EXHAUSTED = "FETCH_EXHAUSTED"
    EMPTY_FALLBACK_CHAIN = "EMPTY_FALLBACK_CHAIN"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_PAGINATION = "INVALID_PAGINATION"
    INVALID_SORT_FIELD = "INVALID_SORT_FIELD"
    UNKNOWN_RESOURCE = "UNKNOWN_RESOURCE"

    # Configuration errors
    CONFIG_MISSING = "CONFIG_MISSING"
    CONFIG_INVALID = "CONFIG_INVALID"

    # Session and lifecycle errors
    SESSION_CLOSED = "SESSION_CLOSED"
    MONITOR_ALREADY_RUNNING = "MONITOR_ALREADY_RUNNING"

    # CLI errors
    CLI_UNEXPECTED_ERROR = "CLI_UNEXPECTED_ERROR"


def _coerce_primitives(value: Any | None) -> dict[str, PrimitiveContextValue] | None:
    """Coerce additional_data values to primitives.

    Converts Path, Enum, Decimal to primitive types.

    Args:
        value: Input dictionary or None

    Returns:
        Dictionary with primitive values only, or None

    Raises:
        TypeError: If value is not a dict or contains unconvertible types
    """
    if value is None:
        return None

    if not isinstance(value, dict):
        error_msg = f"additional_data must be dict, got {type(value).__name__}"
        raise TypeError(error_msg)

    coerced: dict[str, PrimitiveContextValue] = {}
    for key, val in value.items():
        if isinstance(val, (str, int, float, bool)):
            coerced[key] = val
        elif isinstance(val, Path):
            coerced[key] = str(val)
        elif isinstance(val, Enum):
            coerced[key] = val.value
        elif isinstance(val, Decimal):
            coerced[key] = float(val)
        else:
            error_msg = (
                f"Cannot coerce {type(val).__name__} to primitive type. "
                f"Only str, int, float, bool, Path, Enum, Decimal are allowed."
            )
            raise TypeError(error_msg)

    return coerced


@dataclass(frozen=True)
class ErrorContext:
    """Context information for errors.

    Only primitive types (str, int, float, bool) are allowed in
    additional_data to keep log records serializable.

    Attributes:
        operation: Optional operation name that caused the error
        source: Optional data-source name involved in the error
        additional_data: Optional dict with primitive values only
    """

    operation: str | None = None
    source: str | None = None
    additional_data: dict[str, PrimitiveContextValue] | None = None

    def __post_init__(self) -> None:
        """Post-initialization validation and coercion."""
        if self.additional_data is not None:
            coerced = _coerce_primitives(self.additional_data)
            object.__setattr__(self, "additional_data", coerced)

    def safe_dict(self, *, mask_keys: tuple[str, ...] | None = None) -> dict[str, Any]:
        """Export context as dict with sensitive keys removed.

        Args:
            mask_keys: Keys to drop from additional_data. Defaults to SAFE_DICT_MASK_KEYS.

        Returns:
            Dictionary that always contains an ``additional_data`` key.

        Example:
            >>> ErrorContext(operation="resolve", additional_data={"api_key": "x"}).safe_dict()
            {'operation': 'resolve', 'additional_data': {}}
        """
        if mask_keys is None:
            mask_keys = SAFE_DICT_MASK_KEYS

        data: dict[str, Any] = {}
        if self.operation is not None:
            data["operation"] = self.operation
        if self.source is not None:
            data["source"] = self.source

        additional = self.additional_data or {}
        data["additional_data"] = {k: v for k, v in additional.items() if k not in mask_keys}
        return data


class ServeSyncError(Exception):
    """Base exception class for all servesync errors."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        context: ErrorContext | None = None,
        original_error: BaseException | None = None,
    ) -> None:
        """Initialize ServeSyncError.

        Args:
            code: Error code from ErrorCode enum
            message: Human-readable error message
            context: Additional context information
            original_error: Original exception that caused this error
        """
        self.code = code
        self.message = message
        self.context = context or ErrorContext()
        self.original_error = original_error

        super().__init__(f"{code.value}: {message}")

    def __str__(self) -> str:
        """Return string representation of the error."""
        return f"{self.code.value}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging and JSON output."""
        return {
            "code": self.code.value,
            "message": self.message,
            "context": self.context.safe_dict(),
            "original_error": str(self.original_error) if self.original_error else None,
        }


class DomainError(ServeSyncError):
    """Domain rule violations.

    Examples:
    - Non-positive page size
    - Unknown sort field
    - Unknown list resource
    """


class InfrastructureError(ServeSyncError):
    """Errors raised while talking to external systems."""


class ApplicationError(ServeSyncError):
    """Application-level errors (configuration, lifecycle, CLI)."""


class SourceError(InfrastructureError):
    """Base class for a single data-source adapter failure.

    Attributes:
        source: Name of the adapter that failed
        status: HTTP status when one was received, else None
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        *,
        source: str,
        status: int | None = None,
        original_error: BaseException | None = None,
    ) -> None:
        additional: dict[str, PrimitiveContextValue] = {}
        if status is not None:
            additional["status"] = status
        super().__init__(
            code,
            message,
            ErrorContext(operation="source_fetch", source=source, additional_data=additional),
            original_error,
        )
        self.source = source
        self.status = status


class SourceTransientError(SourceError):
    """Recoverable failure: retried on the same adapter with backoff.

    Examples:
    - Connection reset, DNS failure
    - 2xx response whose body is not JSON
    - 5xx response without a parseable error body
    """


class SourceStructuralError(SourceError):
    """Non-recoverable failure for this adapter: advance the chain.

    Examples:
    - 4xx/5xx response with a parseable error body
    - Payload without the record array
    - Adapter explicitly signaling that it has no data
    """


class SourceTimeoutError(SourceError):
    """The orchestrator's hard timeout expired for this adapter."""


class FetchError(InfrastructureError):
    """Every adapter in the fallback chain was exhausted.

    Attributes:
        attempted_sources: Adapter names in the order they were tried
        last_error: The failure reported by the last adapter
    """

    def __init__(
        self,
        message: str,
        *,
        attempted_sources: list[str],
        last_error: SourceError | None = None,
        resource: str | None = None,
    ) -> None:
        additional: dict[str, PrimitiveContextValue] = {
            "attempted_sources": ",".join(attempted_sources),
        }
        if resource is not None:
            additional["resource"] = resource
        super().__init__(
            ErrorCode.FETCH_EXHAUSTED,
            message,
            ErrorContext(operation="resolve", additional_data=additional),
            last_error,
        )
        self.attempted_sources = list(attempted_sources)
        self.last_error = last_error


def create_validation_error(
    message: str,
    field: str | None = None,
    operation: str | None = None,
    code: ErrorCode = ErrorCode.VALIDATION_ERROR,
) -> DomainError:
    """Create a validation error.

    Args:
        message: Validation error message
        field: Field that failed validation
        operation: Operation that was being performed
        code: Specific error code (defaults to VALIDATION_ERROR)

    Returns:
        DomainError with the requested code
    """
    additional: dict[str, PrimitiveContextValue] | None = {"field": field} if field else None
    context = ErrorContext(operation=operation, additional_data=additional)
    return DomainError(code, message, context)


def create_config_error(
    message: str,
    config_path: str | None = None,
    original_error: BaseException | None = None,
) -> ApplicationError:
    """Create a configuration error.

    Args:
        message: Error message
        config_path: Path of the offending configuration file
        original_error: Underlying exception (usually a pydantic ValidationError)

    Returns:
        ApplicationError with CONFIG_INVALID code
    """
    additional: dict[str, PrimitiveContextValue] | None = (
        {"config_path": config_path} if config_path else None
    )
    context = ErrorContext(operation="load_config", additional_data=additional)
    return ApplicationError(ErrorCode.CONFIG_INVALID, message, context, original_error)


__all__ = [
    "ApplicationError",
    "DomainError",
    "ErrorCode",
    "ErrorContext",
    "FetchError",
    "InfrastructureError",
    "ServeSyncError",
    "SourceError",
    "SourceStructuralError",
    "SourceTimeoutError",
    "SourceTransientError",
    "create_config_error",
    "create_validation_error",
]
