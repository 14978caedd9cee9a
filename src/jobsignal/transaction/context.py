"""Current-transaction register.

``TransactionContext`` holds at most one "current" transaction per
execution context. The slot is a ``ContextVar``: every thread and every
asyncio task sees its own value, so concurrent jobs never share a
transaction.

.. code-block:: text

    current()            → Transaction | NULL_TRANSACTION
    create(key, kind, …) → new Transaction, installed as current
    complete_current()   → complete, clear slot, send to backend

Only the code that saw ``current().is_null()`` and then called
``create`` may call ``complete_current``; nested instrumentation reuses
the outer transaction and leaves completion to the outermost layer.

Example:
    >>> ctx = TransactionContext(InMemoryBackend())
    >>> ctx.current().is_null()
    True
    >>> tx = ctx.create("job-1", TransactionKind.BACKGROUND_JOB)
    >>> ctx.current() is tx
    True
    >>> ctx.complete_current()
    >>> ctx.current().is_null()
    True

Tags:
    jobsignal, transaction, contextvars, ownership

Doc-Types:
    api-reference
"""

from __future__ import annotations

import itertools
from contextvars import ContextVar

from jobsignal.core.errors import DeliveryError
from jobsignal.core.logging import get_logger
from jobsignal.core.settings import get_settings
from jobsignal.observability.backend import InMemoryBackend, TelemetryBackend
from jobsignal.transaction.models import (
    NULL_TRANSACTION,
    GenericRequest,
    NullTransaction,
    Transaction,
    TransactionKind,
)

logger = get_logger(__name__)

_slot_ids = itertools.count()


class TransactionContext:
    """Single-slot register of the active transaction."""

    def __init__(self, backend: TelemetryBackend):
        self.backend = backend
        self._slot: ContextVar[Transaction | NullTransaction] = ContextVar(
            f"jobsignal_current_transaction_{next(_slot_ids)}",
            default=NULL_TRANSACTION,
        )

    def current(self) -> Transaction | NullTransaction:
        return self._slot.get()

    def create(
        self,
        correlation_key: str,
        kind: TransactionKind,
        request: GenericRequest | None = None,
    ) -> Transaction:
        previous = self._slot.get()
        if not previous.is_null():
            logger.debug(
                "transaction_replaced",
                previous_id=previous.id,
                transaction_id=correlation_key,
            )
        transaction = Transaction(correlation_key, kind, request)
        self._slot.set(transaction)
        logger.debug("transaction_created", transaction_id=correlation_key, kind=kind.value)
        return transaction

    def complete_current(self) -> None:
        """Complete and clear the current transaction, then deliver it.

        Delivery is best-effort: backend failures are logged, not raised.
        """
        transaction = self._slot.get()
        if transaction.is_null():
            logger.debug("transaction_complete_skipped", reason="no current transaction")
            return

        self._slot.set(NULL_TRANSACTION)
        transaction.complete()
        try:
            self.backend.send_transaction(transaction)
        except Exception as exc:
            error = DeliveryError("transaction delivery failed", cause=exc).with_context(
                correlation_key=transaction.id
            )
            logger.warning("transaction_delivery_failed", **error.to_dict())
            return
        logger.debug(
            "transaction_completed",
            transaction_id=transaction.id,
            action=transaction.action,
            duration_ms=transaction.duration_ms,
        )


_default_context: TransactionContext | None = None


def get_transaction_context() -> TransactionContext:
    """Get the process default context, backed by an in-memory backend."""
    global _default_context
    if _default_context is None:
        backend = InMemoryBackend(max_transactions=get_settings().max_buffered_transactions)
        _default_context = TransactionContext(backend)
    return _default_context


def set_transaction_context(context: TransactionContext | None) -> None:
    """Replace the process default context (``None`` resets it)."""
    global _default_context
    _default_context = context
