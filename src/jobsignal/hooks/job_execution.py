"""Background job execution instrumentation.

Wraps a job framework's ``execute(job)`` call so every run is tied to a
transaction, tagged, timed and counted.

Architecture:

    .. code-block:: text

        JobExecutionInterceptor(job, execute) lifecycle:

        ┌──────────────────────────────────────────────────────────┐
        │ 1. current = context.current()                            │
        │ 2. null?  → create(provider_job_id or job_id)  (owner)    │
        │    else   → reuse current                     (guest)     │
        │ 3. ─── execute(job) ───                                   │
        │ 4. on BaseException: set_error, mark failed, re-raise     │
        │ 5. finally:                                               │
        │    a. tags = queue / priority                             │
        │    b. params, tags + ids, action (if nil), queue start    │
        │    c. owner → complete_current()                          │
        │    d. failed → queue_job_count{status=failed} +1          │
        │    e. always → queue_job_count{status=processed} +1       │
        └──────────────────────────────────────────────────────────┘

    .. mermaid::

        sequenceDiagram
            participant H as Host framework
            participant I as JobExecutionInterceptor
            participant C as TransactionContext
            participant M as MetricsRecorder

            H->>I: interceptor(job, execute)
            I->>C: current()
            alt no active transaction
                I->>C: create(key, BACKGROUND_JOB)
            end
            I->>H: execute(job)
            alt raised
                I->>I: transaction.set_error(exc)
            end
            I->>I: set params / tags / action / queue start
            opt owner
                I->>C: complete_current()
            end
            I->>M: increment_counter("queue_job_count", ...)

Example:
    >>> interceptor = JobExecutionInterceptor()
    >>> run = interceptor.wrap(framework.execute)
    >>> run({"job_class": "OrderJob", "job_id": "a1", "queue_name": "default"})

Tags:
    jobsignal, hooks, background-jobs, interceptor, transaction-ownership

Doc-Types:
    api-reference
"""

from __future__ import annotations

import functools
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from jobsignal.core.errors import JobRecordError, categorize_error
from jobsignal.core.logging import LogContext, get_logger
from jobsignal.core.settings import get_settings
from jobsignal.core.timestamps import iso8601_to_epoch_millis
from jobsignal.hooks.registry import Hook, register_hook
from jobsignal.observability.recorder import MetricsRecorder
from jobsignal.transaction.context import TransactionContext, get_transaction_context
from jobsignal.transaction.models import (
    NULL_TRANSACTION,
    GenericRequest,
    NullTransaction,
    Transaction,
    TransactionKind,
)
from jobsignal.utils.sanitizer import sanitize

logger = get_logger(__name__)

ACTION_MAILER_CLASSES = frozenset(
    {
        "ActionMailer::DeliveryJob",
        "ActionMailer::Parameterized::DeliveryJob",
        "ActionMailer::MailDeliveryJob",
    }
)

QUEUE_JOB_COUNT = "queue_job_count"
STATUS_FAILED = "failed"
STATUS_PROCESSED = "processed"

Execute = Callable[[Any], Any]
Sanitizer = Callable[[Any, Iterable[Any]], Any]


# ── Job record ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class JobRecord:
    """One job invocation as handed over by the host framework."""

    job_class: str
    job_id: str
    provider_job_id: str | None = None
    queue_name: str | None = None
    priority: int | float | None = None
    enqueued_at: str | None = None
    arguments: tuple[Any, ...] = ()

    @property
    def correlation_key(self) -> str:
        """Transport id when the transport assigned one, else the framework id."""
        if self.provider_job_id is not None:
            return self.provider_job_id
        return self.job_id

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> JobRecord:
        """Validate a framework job mapping. Unknown keys are ignored."""
        if not isinstance(data, Mapping):
            raise JobRecordError(
                f"job must be a mapping, got {type(data).__name__}", value=data
            )

        for key in ("job_class", "job_id"):
            value = data.get(key)
            if not isinstance(value, str) or not value:
                raise JobRecordError(f"{key} is required", field=key, value=value)

        priority = data.get("priority")
        if priority is not None and (
            isinstance(priority, bool) or not isinstance(priority, (int, float))
        ):
            raise JobRecordError("priority must be a number", field="priority", value=priority)

        arguments = data.get("arguments") or ()
        if isinstance(arguments, (str, bytes)) or not isinstance(arguments, Iterable):
            raise JobRecordError(
                "arguments must be a sequence", field="arguments", value=arguments
            )

        return cls(
            job_class=data["job_class"],
            job_id=data["job_id"],
            provider_job_id=_optional_str(data, "provider_job_id"),
            queue_name=_optional_str(data, "queue_name"),
            priority=priority,
            enqueued_at=_optional_str(data, "enqueued_at"),
            arguments=tuple(arguments),
        )

    @classmethod
    def coerce(cls, job: JobRecord | Mapping[str, Any]) -> JobRecord:
        if isinstance(job, JobRecord):
            return job
        return cls.from_mapping(job)


def _optional_str(data: Mapping[str, Any], key: str) -> str | None:
    # Only a missing key or None is absent; "" is a present value.
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, (str, int)):
        raise JobRecordError(f"{key} must be a string", field=key, value=value)
    return str(value)


# ── Tag extraction ───────────────────────────────────────────────────


def tags_for_job(job: JobRecord) -> dict[str, Any]:
    """Metric tags for a job: ``queue`` and ``priority`` when known."""
    tags: dict[str, Any] = {}
    if job.queue_name is not None:
        tags["queue"] = job.queue_name
    if job.priority is not None:
        tags["priority"] = job.priority
    return tags


def action_name(job: JobRecord) -> str:
    """``Mailer#method`` for mailer deliveries, ``JobClass#perform`` otherwise."""
    if job.job_class in ACTION_MAILER_CLASSES:
        return "#".join("" if arg is None else str(arg) for arg in job.arguments[:2])
    return f"{job.job_class}#perform"


# ── Interceptor ──────────────────────────────────────────────────────


class JobExecutionInterceptor:
    """Instruments one job execution per call.

    Args:
        context: Current-transaction register (process default if omitted)
        recorder: Counter recorder (prefix from settings if omitted)
        sanitizer: ``sanitize(arguments, filter_parameters)`` callable
        filter_parameters: Keys to redact (settings if omitted)
    """

    def __init__(
        self,
        context: TransactionContext | None = None,
        recorder: MetricsRecorder | None = None,
        sanitizer: Sanitizer = sanitize,
        filter_parameters: Iterable[Any] | None = None,
    ):
        settings = get_settings()
        self.context = context or get_transaction_context()
        self.recorder = recorder or MetricsRecorder(
            self.context.backend, prefix=settings.counter_prefix
        )
        self.sanitizer = sanitizer
        if filter_parameters is None:
            filter_parameters = settings.filter_parameters
        self.filter_parameters = list(filter_parameters)

    def __call__(self, job: Any, execute: Execute) -> Any:
        try:
            record = JobRecord.coerce(job)
        except JobRecordError as exc:
            logger.warning("job_not_instrumented", reason="invalid job record", **exc.to_dict())
            return execute(job)

        with LogContext(job_class=record.job_class, job_id=record.job_id):
            return self._instrument(record, job, execute)

    def wrap(self, execute: Execute) -> Execute:
        """Return ``execute`` wrapped by this interceptor."""

        @functools.wraps(execute)
        def instrumented(job: Any) -> Any:
            return self(job, execute)

        return instrumented

    def _instrument(self, record: JobRecord, job: Any, execute: Execute) -> Any:
        current = self.context.current()
        owner = current.is_null()
        transaction = self._acquire(record) if owner else current
        if owner and transaction.is_null():
            owner = False

        status = None
        try:
            return execute(job)
        except BaseException as exc:
            status = STATUS_FAILED
            self._record_error(transaction, exc)
            raise
        finally:
            self._finalize(record, transaction, owner, status)

    def _acquire(self, record: JobRecord) -> Transaction | NullTransaction:
        try:
            return self.context.create(
                record.correlation_key,
                TransactionKind.BACKGROUND_JOB,
                GenericRequest({}),
            )
        except Exception as exc:
            logger.error(
                "job_transaction_create_failed",
                correlation_key=record.correlation_key,
                error_type=type(exc).__name__,
                category=categorize_error(exc).value,
                error=str(exc),
            )
            return NULL_TRANSACTION

    def _record_error(
        self, transaction: Transaction | NullTransaction, error: BaseException
    ) -> None:
        try:
            transaction.set_error(error)
        except Exception as exc:
            logger.warning(
                "job_transaction_set_error_failed",
                transaction_id=transaction.id,
                error_type=type(exc).__name__,
                category=categorize_error(exc).value,
                error=str(exc),
            )

    def _finalize(
        self,
        record: JobRecord,
        transaction: Transaction | NullTransaction,
        owner: bool,
        status: str | None,
    ) -> None:
        tags = tags_for_job(record)

        try:
            self._annotate(record, transaction, tags)
        except Exception as exc:
            logger.warning(
                "job_transaction_annotation_failed",
                transaction_id=transaction.id,
                error_type=type(exc).__name__,
                category=categorize_error(exc).value,
                error=str(exc),
            )

        if owner:
            try:
                self.context.complete_current()
            except Exception as exc:
                logger.warning(
                    "job_transaction_complete_failed",
                    transaction_id=transaction.id,
                    error_type=type(exc).__name__,
                    category=categorize_error(exc).value,
                    error=str(exc),
                )

        if status:
            self.recorder.increment_counter(QUEUE_JOB_COUNT, 1, {**tags, "status": status})
        self.recorder.increment_counter(QUEUE_JOB_COUNT, 1, {**tags, "status": STATUS_PROCESSED})

    def _annotate(
        self,
        record: JobRecord,
        transaction: Transaction | NullTransaction,
        tags: dict[str, Any],
    ) -> None:
        transaction.set_params(self.sanitizer(list(record.arguments), self.filter_parameters))

        transaction_tags = dict(tags)
        transaction_tags["active_job_id"] = record.job_id
        if record.provider_job_id is not None:
            transaction_tags["provider_job_id"] = record.provider_job_id
        transaction.set_tags(transaction_tags)

        transaction.set_action_if_nil(action_name(record))

        if record.enqueued_at is not None:
            try:
                queue_start = iso8601_to_epoch_millis(record.enqueued_at)
            except ValueError:
                logger.warning(
                    "job_enqueued_at_unparsable",
                    transaction_id=transaction.id,
                    enqueued_at=record.enqueued_at,
                )
            else:
                transaction.set_queue_start(queue_start)


def instrument_job(
    execute: Execute | None = None,
    *,
    interceptor: JobExecutionInterceptor | None = None,
) -> Any:
    """Decorator form of the interceptor.

    Usage:
        @instrument_job
        def execute(job): ...

        @instrument_job(interceptor=JobExecutionInterceptor(context=ctx))
        def execute(job): ...
    """

    def decorator(fn: Execute) -> Execute:
        return (interceptor or JobExecutionInterceptor()).wrap(fn)

    if execute is not None:
        return decorator(execute)
    return decorator


# ── Hook ─────────────────────────────────────────────────────────────


@runtime_checkable
class ExecutionHost(Protocol):
    """A job framework that lets callers intercept job execution.

    ``register_interceptor`` receives a callable ``interceptor(job, execute)``
    which the host must invoke in place of ``execute(job)``.
    """

    def register_interceptor(self, interceptor: Callable[[Any, Execute], Any]) -> None: ...


@register_hook("job_execution")
class JobExecutionHook(Hook):
    """Installs a ``JobExecutionInterceptor`` into an ``ExecutionHost``.

    Options:
        host: The job framework to instrument
        context / recorder / sanitizer / filter_parameters:
            forwarded to the interceptor
    """

    def __init__(self, host: Any = None, **options: Any):
        super().__init__(**options)
        self.host = host
        self.interceptor: JobExecutionInterceptor | None = None

    def dependencies_present(self) -> bool:
        return isinstance(self.host, ExecutionHost)

    def install(self) -> None:
        self.interceptor = JobExecutionInterceptor(**self.options)
        self.host.register_interceptor(self.interceptor)
