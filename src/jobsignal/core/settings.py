"""Settings for jobsignal.

Configuration is environment-driven and validated once at startup.
``JobSignalSettings`` reads ``JOBSIGNAL_*`` environment variables (and a
``.env`` file when present); unknown variables are ignored.

Examples:
    >>> import os
    >>> os.environ["JOBSIGNAL_FILTER_PARAMETERS"] = '["password", "token"]'
    >>> get_settings().filter_parameters
    ['password', 'token']

Tags:
    settings, configuration, pydantic, environment, jobsignal

Doc-Types:
    - API Reference
    - Configuration Guide
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class JobSignalSettings(BaseSettings):
    """Settings for job instrumentation.

    Fields
    ──────
    active                     : Install hooks at all
    service_name               : Service name attached to every log line
    log_level                  : Structlog log level
    json_logs                  : Force JSON (True) / console (False) logs, None = auto
    filter_parameters          : Argument keys replaced with ``[FILTERED]``
    counter_prefix             : Prefix for every counter name
    max_buffered_transactions  : Bound of the in-memory backend buffer
    """

    model_config = SettingsConfigDict(
        env_prefix="JOBSIGNAL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Activation ───────────────────────────────────────────────
    active: bool = True

    # ── Observability ────────────────────────────────────────────
    service_name: str = "jobsignal"
    log_level: str = "INFO"
    json_logs: bool | None = None

    # ── Instrumentation ──────────────────────────────────────────
    filter_parameters: list[str] = Field(
        default_factory=list,
        description="Job argument keys whose values are redacted",
    )
    counter_prefix: str = "active_job_"
    max_buffered_transactions: int = Field(default=1000, ge=1)

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {value}")
        return level


@lru_cache
def get_settings() -> JobSignalSettings:
    """Get cached settings instance."""
    return JobSignalSettings()


def reset_settings() -> None:
    """Drop the cached settings (for testing)."""
    get_settings.cache_clear()


__all__ = ["JobSignalSettings", "get_settings", "reset_settings"]
