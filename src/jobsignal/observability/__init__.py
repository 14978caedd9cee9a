"""Observability package for jobsignal.

Key components:
- backend: TelemetryBackend protocol and the in-memory implementation
- metrics: Prometheus-style counters
- recorder: prefixed, fire-and-forget counter recording
"""

from .backend import InMemoryBackend, TelemetryBackend
from .metrics import Counter, CounterChild, Labels, MetricsRegistry
from .recorder import DEFAULT_COUNTER_PREFIX, MetricsRecorder

__all__ = [
    "TelemetryBackend",
    "InMemoryBackend",
    "Labels",
    "Counter",
    "CounterChild",
    "MetricsRegistry",
    "MetricsRecorder",
    "DEFAULT_COUNTER_PREFIX",
]
