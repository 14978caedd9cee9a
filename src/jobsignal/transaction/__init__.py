"""Transaction model and the current-transaction register."""

from .context import TransactionContext, get_transaction_context, set_transaction_context
from .models import (
    NULL_TRANSACTION,
    ErrorRecord,
    GenericRequest,
    NullTransaction,
    Transaction,
    TransactionKind,
)

__all__ = [
    "Transaction",
    "NullTransaction",
    "NULL_TRANSACTION",
    "TransactionKind",
    "GenericRequest",
    "ErrorRecord",
    "TransactionContext",
    "get_transaction_context",
    "set_transaction_context",
]
