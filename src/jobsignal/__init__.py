"""
jobsignal - Background job instrumentation.

Wraps job execution so every run gets a transaction, tags, timing and
counters, delivered to a telemetry backend.

Subpackages:
    core            errors, logging, settings, timestamps
    transaction     Transaction model and current-transaction register
    observability   telemetry backend boundary, counters
    hooks           framework integrations (job execution interceptor)
    utils           argument sanitization

Example:
    >>> import jobsignal
    >>> jobsignal.start(host=my_job_framework)
"""

from typing import Any

from jobsignal.core.logging import configure_logging
from jobsignal.core.settings import get_settings
from jobsignal.hooks import Hook, JobExecutionInterceptor, JobRecord, instrument_job, load_hooks
from jobsignal.transaction import get_transaction_context

__version__ = "0.1.0"


def start(host: Any = None, **options: Any) -> dict[str, Hook]:
    """Configure logging from settings and install every applicable hook."""
    settings = get_settings()
    configure_logging(
        level=settings.log_level,
        json_format=settings.json_logs,
        service=settings.service_name,
    )
    return load_hooks(host=host, **options)


__all__ = [
    "__version__",
    "start",
    "JobExecutionInterceptor",
    "JobRecord",
    "instrument_job",
    "get_transaction_context",
]
