"""
Core primitives shared by every jobsignal component.

Modules:
    errors.py       Typed error hierarchy (JobSignalError and friends)
    logging.py      Structured logging via structlog
    settings.py     Environment-driven settings (pydantic-settings)
    timestamps.py   UTC / epoch-millisecond helpers
"""

from jobsignal.core.errors import (
    ConfigError,
    DeliveryError,
    ErrorCategory,
    ErrorContext,
    HookError,
    InvalidConfigError,
    JobRecordError,
    JobSignalError,
    TelemetryError,
    categorize_error,
)
from jobsignal.core.logging import (
    LogContext,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    unbind_context,
)
from jobsignal.core.settings import JobSignalSettings, get_settings, reset_settings

__all__ = [
    # errors
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
    # logging
    "configure_logging",
    "get_logger",
    "bind_context",
    "unbind_context",
    "clear_context",
    "LogContext",
    # settings
    "JobSignalSettings",
    "get_settings",
    "reset_settings",
]
