"""Transaction models: the stored record and its upstream counterpart."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any

from txn_mirror.exceptions import DataShapeError
from txn_mirror.models.base import optional_str, require, to_date, to_decimal


@dataclass
class TransactionRecord:
    """A locally persisted transaction.

    ``amount`` uses the store's sign convention: money out is negative,
    the inverse of the upstream feed. ``category``, ``subcategory`` and
    ``channel`` are seeded from upstream once and may be corrected by the
    user afterwards; ``internal`` and ``notes`` belong to the user alone.
    """

    id: str
    date: date
    amount: Decimal
    pending: bool
    account_ref: str
    category: str
    subcategory: str
    channel: str
    name: str = ""
    internal: bool = False
    notes: str = ""
    pending_id: str | None = None  # id held while the transaction was pending


@dataclass
class UpstreamTransaction:
    """A transaction as delivered in the added/modified lists of the feed."""

    transaction_id: str
    account_id: str
    amount: Decimal  # upstream sign: positive is money out
    date: date
    pending: bool
    name: str = ""
    pending_transaction_id: str | None = None
    category: list[str] | None = None
    payment_channel: str | None = None
    merchant_name: str | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "UpstreamTransaction":
        """Build from a feed entry, raising DataShapeError on a bad shape."""
        context = "transaction"
        transaction_id = require(payload, "transaction_id", context)
        context = f"transaction {transaction_id}"

        category = payload.get("category")
        if category is not None:
            if not isinstance(category, list) or not all(isinstance(c, str) for c in category):
                raise DataShapeError(f"{context}: category must be a list of strings")

        pending = payload.get("pending", False)
        if not isinstance(pending, bool):
            raise DataShapeError(f"{context}: pending must be a boolean")

        return cls(
            transaction_id=str(transaction_id),
            account_id=str(require(payload, "account_id", context)),
            amount=to_decimal(require(payload, "amount", context), f"{context}.amount"),
            date=to_date(require(payload, "date", context), f"{context}.date"),
            pending=pending,
            name=optional_str(payload, "name", context) or "",
            pending_transaction_id=optional_str(payload, "pending_transaction_id", context),
            category=category,
            payment_channel=optional_str(payload, "payment_channel", context),
            merchant_name=optional_str(payload, "merchant_name", context),
        )


@dataclass
class RemovedTransaction:
    """An entry of the feed's removed list."""

    transaction_id: str

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "RemovedTransaction":
        return cls(transaction_id=str(require(payload, "transaction_id", "removed transaction")))
