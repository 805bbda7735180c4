"""Pytest configuration and fixtures."""

from datetime import date
from decimal import Decimal
from typing import Any, Callable

import pytest

from txn_mirror.models import (
    AccountSnapshot,
    AccountType,
    Balances,
    TransactionRecord,
    UpstreamTransaction,
)


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def checking_account() -> AccountSnapshot:
    """Sample depository account."""
    return AccountSnapshot(
        id="acct-checking",
        name="Everyday Checking",
        type=AccountType.DEPOSITORY,
        balances=Balances(current=Decimal("500.00"), available=Decimal("450.00")),
    )


@pytest.fixture
def credit_account() -> AccountSnapshot:
    """Sample credit account."""
    return AccountSnapshot(
        id="acct-credit",
        name="Rewards Credit Card",
        type=AccountType.CREDIT,
        balances=Balances(
            current=Decimal("-200"),
            available=Decimal("800"),
            limit=Decimal("1000"),
        ),
    )


@pytest.fixture
def make_record() -> Callable[..., TransactionRecord]:
    """Factory for stored records with sensible defaults."""

    def _make(record_id: str, day: date = date(2024, 1, 1), **overrides: Any) -> TransactionRecord:
        fields: dict[str, Any] = {
            "id": record_id,
            "date": day,
            "amount": Decimal("-10.00"),
            "pending": False,
            "account_ref": "Everyday Checking",
            "category": "Food and Drink",
            "subcategory": "Restaurants",
            "channel": "in store",
            "name": "Cafe",
        }
        fields.update(overrides)
        return TransactionRecord(**fields)

    return _make


@pytest.fixture
def make_txn() -> Callable[..., UpstreamTransaction]:
    """Factory for upstream transactions with sensible defaults."""

    def _make(transaction_id: str, day: date = date(2024, 1, 1), **overrides: Any) -> UpstreamTransaction:
        fields: dict[str, Any] = {
            "transaction_id": transaction_id,
            "account_id": "acct-checking",
            "amount": Decimal("10.00"),
            "date": day,
            "pending": False,
            "name": "CAFE",
            "category": ["Food and Drink", "Restaurants"],
            "payment_channel": "in store",
        }
        fields.update(overrides)
        return UpstreamTransaction(**fields)

    return _make


@pytest.fixture
def txn_payload() -> Callable[..., dict[str, Any]]:
    """Factory for raw feed transaction entries."""

    def _make(transaction_id: str, **overrides: Any) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "transaction_id": transaction_id,
            "account_id": "acct-checking",
            "amount": 12.5,
            "date": "2024-01-02",
            "name": "COFFEE SHOP",
            "merchant_name": "Coffee Shop",
            "pending": False,
            "pending_transaction_id": None,
            "category": ["Food and Drink", "Restaurants", "Coffee Shop"],
            "payment_channel": "in store",
        }
        payload.update(overrides)
        return payload

    return _make


@pytest.fixture
def account_payload() -> dict[str, Any]:
    """Raw feed account entry."""
    return {
        "account_id": "acct-checking",
        "name": "Everyday Checking",
        "type": "depository",
        "subtype": "checking",
        "mask": "0000",
        "balances": {"current": 500, "available": 450, "limit": None, "iso_currency_code": "USD"},
    }


@pytest.fixture
def page_payload(account_payload: dict[str, Any]) -> Callable[..., dict[str, Any]]:
    """Factory for raw ``transactions/sync`` response bodies."""

    def _make(next_cursor: str = "cursor-1", has_more: bool = False, **lists: Any) -> dict[str, Any]:
        return {
            "added": lists.get("added", []),
            "modified": lists.get("modified", []),
            "removed": lists.get("removed", []),
            "accounts": lists.get("accounts", [account_payload]),
            "has_more": has_more,
            "next_cursor": next_cursor,
            "request_id": "req-test",
        }

    return _make
