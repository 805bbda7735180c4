"""Convert upstream transactions into stored records."""

import logging
from typing import Any, Iterable

from txn_mirror.exceptions import DataShapeError
from txn_mirror.models import (
    UNKNOWN,
    UNKNOWN_ACCOUNT,
    AccountSnapshot,
    MergePolicy,
    TransactionRecord,
    UpstreamTransaction,
)

logger = logging.getLogger(__name__)

# Which side owns each field when an existing record is updated.
FIELD_POLICY: dict[str, MergePolicy] = {
    "id": MergePolicy.ALWAYS_OVERWRITE,
    "date": MergePolicy.ALWAYS_OVERWRITE,
    "amount": MergePolicy.ALWAYS_OVERWRITE,
    "pending": MergePolicy.ALWAYS_OVERWRITE,
    "account_ref": MergePolicy.ALWAYS_OVERWRITE,
    "name": MergePolicy.ALWAYS_OVERWRITE,
    "pending_id": MergePolicy.ALWAYS_OVERWRITE,
    "category": MergePolicy.PRESERVE_IF_PRESENT,
    "subcategory": MergePolicy.PRESERVE_IF_PRESENT,
    "channel": MergePolicy.PRESERVE_IF_PRESENT,
    "internal": MergePolicy.DEFAULT_ON_CREATE,
    "notes": MergePolicy.DEFAULT_ON_CREATE,
}


def split_category(path: list[str] | None) -> tuple[str, str]:
    """Split an upstream category path into (category, subcategory).

    >>> split_category(["Food and Drink", "Restaurants", "Coffee Shop"])
    ('Food and Drink', 'Restaurants Coffee Shop')
    """
    if not path:
        return UNKNOWN, UNKNOWN
    return path[0], " ".join(path[1:])


class TransactionMapper:
    """Build records from upstream transactions under ``FIELD_POLICY``."""

    def __init__(self, accounts: Iterable[AccountSnapshot] = ()) -> None:
        self._account_names = {account.id: account.name for account in accounts}

    def resolve_account(self, account_id: str) -> str:
        """Human-readable reference for an upstream account id."""
        return self._account_names.get(account_id, UNKNOWN_ACCOUNT)

    def to_record(
        self,
        txn: UpstreamTransaction,
        existing: TransactionRecord | None = None,
    ) -> TransactionRecord:
        """Map ``txn`` to a record, merging onto ``existing`` when given.

        Raises
        ------
        DataShapeError
            If the upstream amount is not a finite number.
        """
        derived = self._derive(txn, existing)
        if existing is None:
            return TransactionRecord(**derived)

        merged: dict[str, Any] = {}
        for name, policy in FIELD_POLICY.items():
            current = getattr(existing, name)
            if policy is MergePolicy.ALWAYS_OVERWRITE:
                merged[name] = derived[name]
            elif policy is MergePolicy.PRESERVE_IF_PRESENT:
                merged[name] = current if current else derived[name]
            else:
                merged[name] = current
        return TransactionRecord(**merged)

    def _derive(
        self,
        txn: UpstreamTransaction,
        existing: TransactionRecord | None,
    ) -> dict[str, Any]:
        if not txn.amount.is_finite():
            raise DataShapeError(f"transaction {txn.transaction_id}: amount {txn.amount} is not finite")

        account_ref = self.resolve_account(txn.account_id)
        if account_ref == UNKNOWN_ACCOUNT and existing is not None:
            # Account lists are not guaranteed on every sync
            account_ref = existing.account_ref
        elif account_ref == UNKNOWN_ACCOUNT:
            logger.warning(
                "Transaction %s references unknown account %s",
                txn.transaction_id,
                txn.account_id,
            )

        category, subcategory = split_category(txn.category)
        return {
            "id": txn.transaction_id,
            "date": txn.date,
            "amount": -txn.amount,
            "pending": txn.pending,
            "account_ref": account_ref,
            "name": txn.merchant_name or txn.name,
            "pending_id": txn.pending_transaction_id or (existing.pending_id if existing else None),
            "category": category,
            "subcategory": subcategory,
            "channel": txn.payment_channel or UNKNOWN,
            "internal": False,
            "notes": "",
        }
