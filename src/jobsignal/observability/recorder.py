"""Fire-and-forget counter recording.

``MetricsRecorder`` scopes counter names with a component prefix and
forwards them to the telemetry backend. A failing backend is logged and
otherwise ignored: metrics must never decide whether a job succeeds.

Example:
    >>> recorder = MetricsRecorder(backend, prefix="active_job_")
    >>> recorder.increment_counter("queue_job_count", 1, {"status": "processed"})
    # backend receives "active_job_queue_job_count"
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from jobsignal.core.errors import DeliveryError
from jobsignal.core.logging import get_logger
from jobsignal.observability.backend import TelemetryBackend

logger = get_logger(__name__)

DEFAULT_COUNTER_PREFIX = "active_job_"


class MetricsRecorder:
    """Emits prefixed counters to a telemetry backend."""

    def __init__(self, backend: TelemetryBackend, prefix: str = DEFAULT_COUNTER_PREFIX):
        self.backend = backend
        self.prefix = prefix

    def metric_name(self, name: str) -> str:
        return f"{self.prefix}{name}"

    def increment_counter(
        self,
        name: str,
        amount: float = 1,
        tags: Mapping[str, Any] | None = None,
    ) -> None:
        metric = self.metric_name(name)
        try:
            self.backend.increment_counter(metric, amount, dict(tags or {}))
        except Exception as exc:
            error = DeliveryError("counter delivery failed", cause=exc).with_context(metric=metric)
            logger.warning("counter_delivery_failed", **error.to_dict())
