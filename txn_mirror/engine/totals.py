"""Derive display balances from account snapshots."""

import logging
from decimal import Decimal
from typing import Iterable

from txn_mirror.exceptions import DataShapeError
from txn_mirror.models import AccountSnapshot, AccountTotals, AccountType

logger = logging.getLogger(__name__)


def account_totals(account: AccountSnapshot) -> AccountTotals:
    """Compute current, available and pending balances for one account.

    Credit balances are liabilities, so they are shown negated: the
    available figure is the spend capacity already consumed.

    Raises
    ------
    DataShapeError
        If the balances needed for the account type are missing.
    """
    balances = account.balances
    if balances.current is None:
        raise DataShapeError(f"account {account.id}: missing current balance")

    if account.type is AccountType.CREDIT:
        if balances.limit is None or balances.available is None:
            raise DataShapeError(f"account {account.id}: credit account needs limit and available")
        available = -(balances.limit - balances.available)
        current = -balances.current
        return AccountTotals(current=current, available=available, pending=available - current)

    if balances.available is None:
        return AccountTotals(
            current=balances.current,
            available=balances.current,
            pending=Decimal("0"),
        )
    return AccountTotals(
        current=balances.current,
        available=balances.available,
        pending=balances.available - balances.current,
    )


def totals_by_account(accounts: Iterable[AccountSnapshot]) -> dict[str, AccountTotals]:
    """Totals keyed by account name, skipping accounts with bad balances."""
    totals: dict[str, AccountTotals] = {}
    for account in accounts:
        try:
            totals[account.name] = account_totals(account)
        except DataShapeError as e:
            logger.warning("Skipping totals for %s: %s", account.name, e)
    return totals
