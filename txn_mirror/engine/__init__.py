"""Reconciliation engine and its collaborators."""

from txn_mirror.engine.mapper import FIELD_POLICY, TransactionMapper, split_category
from txn_mirror.engine.reconcile import ReconciliationEngine, ReconcileResult
from txn_mirror.engine.resolver import NOT_FOUND, Found, IdentityResolver, NotFound
from txn_mirror.engine.totals import account_totals, totals_by_account

__all__ = [
    "FIELD_POLICY",
    "Found",
    "IdentityResolver",
    "NOT_FOUND",
    "NotFound",
    "ReconcileResult",
    "ReconciliationEngine",
    "TransactionMapper",
    "account_totals",
    "split_category",
    "totals_by_account",
]
