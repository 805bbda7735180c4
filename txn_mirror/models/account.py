"""Account snapshot model as delivered alongside the change feed."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from txn_mirror.exceptions import DataShapeError
from txn_mirror.models.base import require, to_optional_decimal
from txn_mirror.models.enums import AccountType


@dataclass
class Balances:
    """Provider-reported balances; ``available`` and ``limit`` may be null."""

    current: Decimal | None
    available: Decimal | None = None
    limit: Decimal | None = None
    iso_currency_code: str | None = None


@dataclass
class AccountSnapshot:
    """Provider account metadata. Not persisted by the sync engine."""

    id: str
    name: str
    type: AccountType
    balances: Balances
    subtype: str | None = None
    mask: str | None = None
    official_name: str | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "AccountSnapshot":
        """Build from a feed ``accounts`` entry."""
        account_id = require(payload, "account_id", "account")
        context = f"account {account_id}"
        raw_balances = require(payload, "balances", context)
        if not isinstance(raw_balances, dict):
            raise DataShapeError(f"{context}: balances must be an object")
        return cls(
            id=str(account_id),
            name=str(require(payload, "name", context)),
            type=AccountType.parse(payload.get("type")),
            balances=Balances(
                current=to_optional_decimal(raw_balances.get("current"), f"{context}.current"),
                available=to_optional_decimal(raw_balances.get("available"), f"{context}.available"),
                limit=to_optional_decimal(raw_balances.get("limit"), f"{context}.limit"),
                iso_currency_code=raw_balances.get("iso_currency_code"),
            ),
            subtype=payload.get("subtype"),
            mask=payload.get("mask"),
            official_name=payload.get("official_name"),
        )


@dataclass
class AccountTotals:
    """Display balances derived from an account snapshot."""

    current: Decimal
    available: Decimal
    pending: Decimal
