"""Telemetry backend boundary.

jobsignal never talks to a collector directly; it hands completed
transactions and counter increments to a ``TelemetryBackend``. Any
object with these two methods qualifies (an agent SDK adapter, a
StatsD bridge, a test double).

``InMemoryBackend`` is the built-in implementation: it buffers completed
transactions in a bounded deque and keeps counters in a
``MetricsRegistry`` that can be scraped in Prometheus text format.

Tags:
    jobsignal, telemetry, backend, protocol, metrics

Doc-Types:
    api-reference
"""

from __future__ import annotations

import threading
from collections import deque
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from jobsignal.observability.metrics import MetricsRegistry

if TYPE_CHECKING:
    from jobsignal.transaction.models import Transaction


@runtime_checkable
class TelemetryBackend(Protocol):
    """What jobsignal needs from a telemetry backend."""

    def send_transaction(self, transaction: Transaction) -> None:
        """Accept a completed transaction."""
        ...

    def increment_counter(self, name: str, amount: float, tags: Mapping[str, Any]) -> None:
        """Add ``amount`` to the counter ``name`` with the given tags."""
        ...


class InMemoryBackend:
    """Backend that keeps everything in process memory."""

    def __init__(self, max_transactions: int = 1000, registry: MetricsRegistry | None = None):
        self.registry = registry or MetricsRegistry()
        self._transactions: deque[Transaction] = deque(maxlen=max_transactions)
        self._lock = threading.Lock()

    def send_transaction(self, transaction: Transaction) -> None:
        with self._lock:
            self._transactions.append(transaction)

    def increment_counter(self, name: str, amount: float, tags: Mapping[str, Any]) -> None:
        self.registry.counter(name).labels(**dict(tags)).inc(amount)

    @property
    def transactions(self) -> list[Transaction]:
        """Completed transactions, oldest first."""
        with self._lock:
            return list(self._transactions)

    def counter_value(self, name: str, **tags: Any) -> float:
        """Current value of ``name`` for exactly this tag set."""
        return self.registry.counter(name).labels(**tags).value

    def export_prometheus(self) -> str:
        return self.registry.export_prometheus()

    def clear(self) -> None:
        with self._lock:
            self._transactions.clear()
        self.registry.clear()
