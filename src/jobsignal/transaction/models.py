"""Transaction models.

A ``Transaction`` is the observability record for one instrumented
execution: tags, params, error, action name, queue start and timing.
``NullTransaction`` implements the same interface with no-op mutators so
that callers never branch on whether instrumentation is active.

.. code-block:: text

    Transaction
    ├── .id            → correlation key (provider job id or job id)
    ├── .kind          → TransactionKind.BACKGROUND_JOB / HTTP_REQUEST
    ├── .set_tags(...)          → merge, same key overwrites
    ├── .set_params(...)        → sanitized job arguments
    ├── .set_action_if_nil(...) → first write wins
    ├── .set_queue_start(ms)    → enqueue time, epoch milliseconds
    ├── .set_error(exc)         → ErrorRecord(name, message, backtrace)
    └── .complete()             → stamps end time, marks completed

Tags:
    jobsignal, transaction, null-object, observability

Doc-Types:
    api-reference
"""

from __future__ import annotations

import time
import traceback
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from jobsignal.core.logging import get_logger
from jobsignal.core.timestamps import utc_now

logger = get_logger(__name__)


class TransactionKind(str, Enum):
    """What kind of work a transaction measures."""

    BACKGROUND_JOB = "background_job"
    HTTP_REQUEST = "http_request"


@dataclass
class GenericRequest:
    """Request descriptor for transactions that have no HTTP request."""

    env: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ErrorRecord:
    """An exception captured on a transaction."""

    name: str
    message: str
    backtrace: tuple[str, ...] = ()

    @classmethod
    def from_exception(cls, error: BaseException) -> ErrorRecord:
        lines = traceback.format_exception(type(error), error, error.__traceback__)
        return cls(
            name=type(error).__name__,
            message=str(error),
            backtrace=tuple(line.rstrip("\n") for line in lines),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "message": self.message, "backtrace": list(self.backtrace)}


class Transaction:
    """Mutable record of one instrumented execution."""

    def __init__(
        self,
        transaction_id: str,
        kind: TransactionKind,
        request: GenericRequest | None = None,
    ):
        self.id = transaction_id
        self.kind = kind
        self.request = request or GenericRequest()
        self.tags: dict[str, Any] = {}
        self.params: Any = None
        self.action: str | None = None
        self.queue_start: int | None = None
        self.error: ErrorRecord | None = None
        self.completed = False
        self.started_at: datetime = utc_now()
        self.completed_at: datetime | None = None
        self._start_counter = time.perf_counter()
        self.duration_ms: float | None = None

    def is_null(self) -> bool:
        return False

    def set_tags(self, tags: Mapping[str, Any]) -> None:
        """Merge ``tags`` into the recorded tags; same keys overwrite."""
        self.tags.update({str(k): v for k, v in tags.items()})

    def set_params(self, params: Any) -> None:
        self.params = params

    def set_action(self, action: str | None) -> None:
        if not action:
            return
        self.action = action

    def set_action_if_nil(self, action: str | None) -> None:
        """Set the action name unless one is already present."""
        if self.action:
            return
        self.set_action(action)

    def set_queue_start(self, queue_start: int | None) -> None:
        """Record when the job was enqueued, in epoch milliseconds."""
        if queue_start is None:
            return
        self.queue_start = int(queue_start)

    def set_error(self, error: BaseException) -> None:
        if not isinstance(error, BaseException):
            logger.warning(
                "transaction_set_error_ignored",
                transaction_id=self.id,
                reason="not an exception",
                value_type=type(error).__name__,
            )
            return
        self.error = ErrorRecord.from_exception(error)

    def complete(self) -> None:
        if self.completed:
            logger.debug("transaction_already_completed", transaction_id=self.id)
            return
        self.completed = True
        self.completed_at = utc_now()
        self.duration_ms = (time.perf_counter() - self._start_counter) * 1000.0

    def to_dict(self) -> dict[str, Any]:
        """Serialize for backends and logging."""
        return {
            "id": self.id,
            "kind": self.kind.value,
            "action": self.action,
            "tags": dict(self.tags),
            "params": self.params,
            "queue_start": self.queue_start,
            "error": self.error.to_dict() if self.error else None,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "duration_ms": self.duration_ms,
        }

    def __repr__(self) -> str:
        return f"Transaction(id={self.id!r}, kind={self.kind.value!r}, action={self.action!r})"


class NullTransaction:
    """Placeholder used when no transaction is active. Every mutator is a no-op."""

    id = None
    kind = None
    action = None
    error = None
    completed = False

    def is_null(self) -> bool:
        return True

    def set_tags(self, tags: Mapping[str, Any]) -> None:
        pass

    def set_params(self, params: Any) -> None:
        pass

    def set_action(self, action: str | None) -> None:
        pass

    def set_action_if_nil(self, action: str | None) -> None:
        pass

    def set_queue_start(self, queue_start: int | None) -> None:
        pass

    def set_error(self, error: BaseException) -> None:
        pass

    def complete(self) -> None:
        pass

    def __repr__(self) -> str:
        return "NullTransaction()"


NULL_TRANSACTION = NullTransaction()
