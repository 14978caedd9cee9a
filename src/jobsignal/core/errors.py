"""
Structured error types for jobsignal.

Errors raised by jobsignal itself (never by the jobs it instruments) carry
a category and structured context so they can be logged and routed the
same way everywhere.

Manifesto:
    - **Typed Error Hierarchy:** One base class, one subclass per concern
    - **Rich Context:** Errors carry job identifiers for logging
    - **Error Chaining:** Preserve original exceptions as ``cause``
    - **Job errors are not ours:** Exceptions raised by a job are recorded
      and re-raised untouched, they are never wrapped in these types

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────┐
        │                     JobSignalError                        │
        │             (category, context, cause)                    │
        ├──────────────────────────────────────────────────────────┤
        │  JobRecordError     ConfigError        TelemetryError     │
        │  (VALIDATION)       (CONFIG)           (TELEMETRY)        │
        │                          │                   │            │
        │                   InvalidConfigError   DeliveryError      │
        │                                                           │
        │  HookError                                                │
        │  (CONFIG)                                                 │
        └──────────────────────────────────────────────────────────┘

Examples:
    >>> error = JobRecordError("job_class is required", field="job_class")
    >>> error.category
    <ErrorCategory.VALIDATION: 'VALIDATION'>
    >>> error.with_context(job_id="abc-123").context.job_id
    'abc-123'

Tags:
    error-handling, exception-hierarchy, error-context, jobsignal

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """
    Standard error categories for classification and routing.

    Attributes:
        VALIDATION: Malformed job records or arguments
        CONFIG: Missing or invalid settings, hook misconfiguration
        TELEMETRY: Backend delivery failures
        INTERNAL: Bugs, unexpected state
        UNKNOWN: Uncategorized errors
    """

    VALIDATION = "VALIDATION"     # Job record shape, argument types
    CONFIG = "CONFIG"             # Settings, hook installation
    TELEMETRY = "TELEMETRY"       # Backend delivery
    INTERNAL = "INTERNAL"         # Bugs, unexpected state
    UNKNOWN = "UNKNOWN"           # Uncategorized errors


@dataclass
class ErrorContext:
    """
    Structured metadata context for errors.

    Examples:
        >>> ctx = ErrorContext(job_class="OrderJob", job_id="abc-123")
        >>> ctx.to_dict()
        {'job_class': 'OrderJob', 'job_id': 'abc-123'}

    Attributes:
        job_class: Handler name of the job being instrumented
        job_id: Framework-internal job identifier
        correlation_key: Transaction correlation key
        metadata: Additional key-value pairs
    """

    job_class: str | None = None
    job_id: str | None = None
    correlation_key: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["job_class", "job_id", "correlation_key"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class JobSignalError(Exception):
    """
    Base exception for all jobsignal errors.

    Every instance carries:
    - **category:** ErrorCategory for classification
    - **context:** ErrorContext with job identifiers
    - **cause:** Optional underlying exception for chaining

    Subclasses set ``default_category`` to provide the right default.

    Examples:
        >>> try:
        ...     raise ConnectionError("collector unreachable")
        ... except ConnectionError as e:
        ...     error = DeliveryError("Failed to send transaction", cause=e)
        >>> error.cause
        ConnectionError('collector unreachable')
        >>> error.to_dict()["category"]
        'TELEMETRY'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> JobSignalError:
        """
        Add context to this error (fluent API).

        Usage:
            raise JobRecordError("bad record").with_context(job_id="abc")
        """
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context = self.context.to_dict()
        if context:
            result["context"] = context
        if self.cause is not None:
            result["cause"] = f"{type(self.cause).__name__}: {self.cause}"
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class JobRecordError(JobSignalError):
    """
    The job mapping handed over by the host framework is malformed.

    Never retryable; the host must send a well-formed record.
    """

    default_category = ErrorCategory.VALIDATION

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        value: Any = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.field = field
        self.value = value

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.field:
            result["field"] = self.field
        if self.value is not None:
            result["value"] = repr(self.value)
        return result


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(JobSignalError):
    """Configuration error."""

    default_category = ErrorCategory.CONFIG


class InvalidConfigError(ConfigError):
    """Configuration value is invalid."""

    def __init__(self, key: str, value: Any, reason: str, **kwargs: Any):
        super().__init__(f"Invalid config '{key}': {reason}", **kwargs)
        self.key = key
        self.value = value
        self.reason = reason


class HookError(ConfigError):
    """A hook could not be registered or installed."""

    pass


# =============================================================================
# TELEMETRY ERRORS
# =============================================================================


class TelemetryError(JobSignalError):
    """Error talking to the telemetry backend."""

    default_category = ErrorCategory.TELEMETRY


class DeliveryError(TelemetryError):
    """A transaction or counter could not be delivered."""

    pass


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def categorize_error(error: BaseException) -> ErrorCategory:
    """Get the category of an error."""
    if isinstance(error, JobSignalError):
        return error.category
    if isinstance(error, (ValueError, TypeError)):
        return ErrorCategory.VALIDATION
    if isinstance(error, (ConnectionError, TimeoutError)):
        return ErrorCategory.TELEMETRY
    return ErrorCategory.UNKNOWN


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "JobSignalError",
    "JobRecordError",
    "ConfigError",
    "InvalidConfigError",
    "HookError",
    "TelemetryError",
    "DeliveryError",
    "categorize_error",
]
