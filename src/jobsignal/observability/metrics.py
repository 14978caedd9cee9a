"""Prometheus-style counters.

The in-memory telemetry backend keeps job counters here, keyed by name
and label set, and can render them in the Prometheus text format.

Example:
    >>> registry = MetricsRegistry()
    >>> registry.counter("active_job_queue_job_count").labels(
    ...     queue="default", status="processed"
    ... ).inc()
    >>> print(registry.export_prometheus())
    active_job_queue_job_count{queue="default",status="processed"} 1.0
"""

import threading
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Labels:
    """Immutable label set for metrics."""

    _labels: tuple[tuple[str, str], ...]

    @classmethod
    def from_dict(cls, d: dict[str, Any] | None) -> "Labels":
        """Create from dictionary. Values are stringified."""
        if not d:
            return cls(())
        return cls(tuple(sorted((str(k), str(v)) for k, v in d.items())))

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary."""
        return dict(self._labels)

    def __hash__(self) -> int:
        return hash(self._labels)


class Counter:
    """A monotonically increasing counter."""

    def __init__(self, name: str, description: str = ""):
        self.name = name
        self.description = description
        self._lock = threading.Lock()
        self._values: dict[Labels, float] = {}

    def labels(self, **kwargs: Any) -> "CounterChild":
        """Get counter with specific labels."""
        return CounterChild(self, Labels.from_dict(kwargs))

    def inc(self, value: float = 1.0) -> None:
        """Increment counter (no labels)."""
        self.labels().inc(value)

    def _inc(self, labels: Labels, value: float) -> None:
        with self._lock:
            self._values[labels] = self._values.get(labels, 0.0) + value

    def _get(self, labels: Labels) -> float:
        with self._lock:
            return self._values.get(labels, 0.0)

    def collect(self) -> list[dict[str, Any]]:
        """Collect all counter values."""
        with self._lock:
            return [
                {
                    "name": self.name,
                    "type": "counter",
                    "labels": labels.to_dict(),
                    "value": value,
                }
                for labels, value in self._values.items()
            ]


class CounterChild:
    """Counter with fixed labels."""

    def __init__(self, counter: Counter, labels: Labels):
        self._counter = counter
        self._labels = labels

    def inc(self, value: float = 1.0) -> None:
        """Increment the counter."""
        if value < 0:
            raise ValueError("Counter can only increase")
        self._counter._inc(self._labels, value)

    @property
    def value(self) -> float:
        return self._counter._get(self._labels)


class MetricsRegistry:
    """Registry of counters for collection and export."""

    def __init__(self):
        self._metrics: dict[str, Counter] = {}
        self._lock = threading.Lock()

    def counter(self, name: str, description: str = "") -> Counter:
        """Get or create a counter."""
        with self._lock:
            if name not in self._metrics:
                self._metrics[name] = Counter(name, description)
            return self._metrics[name]

    def names(self) -> list[str]:
        with self._lock:
            return sorted(self._metrics)

    def collect(self) -> list[dict[str, Any]]:
        """Collect all metrics."""
        with self._lock:
            metrics = list(self._metrics.values())
        results = []
        for metric in metrics:
            results.extend(metric.collect())
        return results

    def clear(self) -> None:
        with self._lock:
            self._metrics.clear()

    def export_prometheus(self) -> str:
        """Export metrics in Prometheus text format."""
        lines = []

        for data in self.collect():
            labels = data.get("labels", {})
            if labels:
                label_str = "{" + ",".join(f'{k}="{v}"' for k, v in labels.items()) + "}"
            else:
                label_str = ""
            lines.append(f"{data['name']}{label_str} {data['value']}")

        return "\n".join(lines)
