"""Domain models for the transaction mirror."""

from txn_mirror.models.account import AccountSnapshot, AccountTotals, Balances
from txn_mirror.models.base import UNKNOWN, UNKNOWN_ACCOUNT
from txn_mirror.models.enums import AccountType, MergePolicy, PaymentChannel
from txn_mirror.models.feed import (
    RejectedEntry,
    SyncCounts,
    SyncDelta,
    SyncPage,
    TokenExchange,
)
from txn_mirror.models.transaction import (
    RemovedTransaction,
    TransactionRecord,
    UpstreamTransaction,
)

__all__ = [
    "AccountSnapshot",
    "AccountTotals",
    "AccountType",
    "Balances",
    "MergePolicy",
    "PaymentChannel",
    "RejectedEntry",
    "RemovedTransaction",
    "SyncCounts",
    "SyncDelta",
    "SyncPage",
    "TokenExchange",
    "TransactionRecord",
    "UNKNOWN",
    "UNKNOWN_ACCOUNT",
    "UpstreamTransaction",
]
