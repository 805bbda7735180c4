"""Synthetic upstream payloads in the change feed's wire shape."""

from __future__ import annotations

import random
from datetime import date, timedelta
from typing import Any

from faker import Faker

from txn_mirror.models import AccountType, PaymentChannel


class PayloadGenerator:
    """Generate account and transaction payloads for the sandbox feed.

    Parameters
    ----------
    seed : int | None
        Random seed for reproducibility.
    locale : str
        Faker locale (default ``en_US``).
    today : date | None
        Anchor for generated dates (default: ``date.today()``).
    """

    CATEGORIES: list[list[str]] = [
        ["Food and Drink", "Restaurants"],
        ["Food and Drink", "Restaurants", "Coffee Shop"],
        ["Shops", "Supermarkets and Groceries"],
        ["Travel", "Taxi"],
        ["Travel", "Airlines and Aviation Services"],
        ["Transfer", "Payroll"],
        ["Payment", "Credit Card"],
        ["Recreation and Entertainment", "Gyms and Fitness Centers"],
        ["Service", "Utilities", "Electric"],
    ]

    ACCOUNT_TEMPLATES: list[tuple[str, AccountType, str]] = [
        ("Everyday Checking", AccountType.DEPOSITORY, "checking"),
        ("Rewards Credit Card", AccountType.CREDIT, "credit card"),
        ("High Yield Savings", AccountType.DEPOSITORY, "savings"),
    ]

    def __init__(
        self,
        seed: int | None = None,
        locale: str = "en_US",
        today: date | None = None,
    ) -> None:
        self.fake = Faker(locale)
        self.random = random.Random(seed)
        if seed is not None:
            self.fake.seed_instance(seed)
        self.today = today or date.today()

    def account(self, index: int) -> dict[str, Any]:
        """Generate the ``index``-th account, cycling through the templates."""
        name, account_type, subtype = self.ACCOUNT_TEMPLATES[index % len(self.ACCOUNT_TEMPLATES)]
        current = round(self.random.uniform(100, 5000), 2)
        if account_type is AccountType.CREDIT:
            limit = float(self.random.choice([2000, 5000, 10000]))
            balances = {
                "current": current,
                "available": round(limit - current, 2),
                "limit": limit,
                "iso_currency_code": "USD",
            }
        else:
            balances = {
                "current": current,
                "available": None if subtype == "savings" else round(current - self.random.uniform(0, 100), 2),
                "limit": None,
                "iso_currency_code": "USD",
            }
        return {
            "account_id": self.fake.uuid4(),
            "name": name,
            "official_name": f"{self.fake.company()} {name}",
            "type": account_type.value,
            "subtype": subtype,
            "mask": self.fake.numerify("####"),
            "balances": balances,
        }

    def transaction(
        self,
        account_id: str,
        pending: bool = False,
        max_age_days: int = 60,
    ) -> dict[str, Any]:
        """Generate one transaction payload for ``account_id``."""
        age = self.random.randint(0, 3) if pending else self.random.randint(0, max_age_days)
        category = self.random.choice(self.CATEGORIES)
        amount = round(self.random.paretovariate(1.5) * 10, 2)
        if category[0] == "Transfer":
            amount = -amount  # inflow
        merchant = self.fake.company()
        return {
            "transaction_id": self.fake.uuid4(),
            "account_id": account_id,
            "amount": min(amount, 5000.0),
            "iso_currency_code": "USD",
            "date": (self.today - timedelta(days=age)).isoformat(),
            "name": merchant.upper(),
            "merchant_name": merchant,
            "pending": pending,
            "pending_transaction_id": None,
            "category": list(category),
            "payment_channel": self.random.choice(list(PaymentChannel)).value,
        }

    def posted_from(self, pending_payload: dict[str, Any]) -> dict[str, Any]:
        """The posted counterpart of a pending transaction, under a new id."""
        posted = dict(pending_payload)
        posted["transaction_id"] = self.fake.uuid4()
        posted["pending"] = False
        posted["pending_transaction_id"] = pending_payload["transaction_id"]
        # Tips and holds often settle for a slightly different amount.
        if self.random.random() < 0.3:
            posted["amount"] = round(pending_payload["amount"] * self.random.uniform(1.0, 1.2), 2)
        return posted

    def modified_from(self, payload: dict[str, Any]) -> dict[str, Any]:
        """A corrected version of a posted transaction, same id."""
        modified = dict(payload)
        modified["name"] = self.fake.company().upper()
        modified["category"] = list(self.random.choice(self.CATEGORIES))
        return modified
