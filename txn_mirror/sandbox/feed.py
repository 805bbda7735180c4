"""Offline change feed for demos and tests."""

import logging
from datetime import date
from typing import Any

from txn_mirror.sandbox.generator import PayloadGenerator

logger = logging.getLogger(__name__)

CURSOR_PREFIX = "sandbox-"
SANDBOX_ACCESS_TOKEN = "access-sandbox-local"


class SandboxFeed:
    """In-process stand-in for the upstream change feed.

    Keeps an append-only event log of ``(kind, payload)`` pairs. A cursor is
    an offset into that log, so replaying a cursor returns the same pages,
    like the real feed. ``advance()`` appends a new batch of events.

    Parameters
    ----------
    seed : int | None
        Random seed for reproducibility.
    num_accounts : int
        Number of accounts to generate.
    history_size : int
        Number of transactions in the initial history.
    page_size : int
        Events per page when the caller does not request a count.
    pending_rate : float
        Share of generated transactions that start out pending.
    today : date | None
        Anchor date for generated transactions.
    """

    def __init__(
        self,
        seed: int | None = None,
        num_accounts: int = 2,
        history_size: int = 40,
        page_size: int = 10,
        pending_rate: float = 0.2,
        today: date | None = None,
    ) -> None:
        self.generator = PayloadGenerator(seed=seed, today=today)
        self.page_size = page_size
        self.pending_rate = pending_rate
        self.access_token = SANDBOX_ACCESS_TOKEN
        self.accounts = [self.generator.account(i) for i in range(num_accounts)]
        self.events: list[tuple[str, dict[str, Any]]] = []
        self.live: dict[str, dict[str, Any]] = {}
        self.fail_on_page: int | None = None
        self.pages_served = 0

        for _ in range(history_size):
            self._add(self._new_transaction())

    def transactions_sync(
        self,
        access_token: str,
        cursor: str | None = None,
        count: int | None = None,
    ) -> dict[str, Any]:
        """Serve one page after ``cursor`` in the upstream wire shape."""
        if access_token != self.access_token:
            return self._error("INVALID_ACCESS_TOKEN", "provided access token is invalid")

        offset = self._parse_cursor(cursor)
        if offset is None or offset > len(self.events):
            return self._error("TRANSACTIONS_SYNC_INVALID_CURSOR", f"cursor {cursor!r} is not valid")

        self.pages_served += 1
        if self.fail_on_page is not None and self.pages_served == self.fail_on_page:
            logger.debug("Injecting failure on page %d", self.pages_served)
            return self._error(
                "TRANSACTIONS_SYNC_MUTATION_DURING_PAGINATION",
                "underlying transaction data changed during pagination",
            )

        batch = self.events[offset : offset + (count or self.page_size)]
        next_offset = offset + len(batch)
        page: dict[str, Any] = {
            "added": [],
            "modified": [],
            "removed": [],
            "accounts": [dict(a) for a in self.accounts],
            "has_more": next_offset < len(self.events),
            "next_cursor": f"{CURSOR_PREFIX}{next_offset}",
            "request_id": self.generator.fake.bothify("req-????????"),
        }
        for kind, payload in batch:
            page[kind].append(dict(payload))
        return page

    def advance(self, new_transactions: int = 5, modifications: int = 2) -> int:
        """Append a new batch of events; returns how many were queued.

        Every live pending transaction posts (a removal of the pending id
        plus an addition that references it), up to ``modifications``
        posted transactions are corrected, and ``new_transactions`` fresh
        ones arrive.
        """
        before = len(self.events)
        # Corrections only target transactions that were posted before this batch.
        posted = [p for p in self.live.values() if not p["pending"]]
        for payload in [p for p in self.live.values() if p["pending"]]:
            self._remove(payload["transaction_id"])
            self._add(self.generator.posted_from(payload))

        for payload in self.generator.random.sample(posted, min(modifications, len(posted))):
            modified = self.generator.modified_from(payload)
            self.live[modified["transaction_id"]] = modified
            self.events.append(("modified", modified))

        for _ in range(new_transactions):
            self._add(self._new_transaction())
        return len(self.events) - before

    def remove(self, transaction_id: str) -> None:
        """Queue the removal of a live transaction."""
        self._remove(transaction_id)

    def _new_transaction(self) -> dict[str, Any]:
        account = self.generator.random.choice(self.accounts)
        pending = self.generator.random.random() < self.pending_rate
        return self.generator.transaction(account["account_id"], pending=pending)

    def _add(self, payload: dict[str, Any]) -> None:
        self.live[payload["transaction_id"]] = payload
        self.events.append(("added", payload))

    def _remove(self, transaction_id: str) -> None:
        self.live.pop(transaction_id, None)
        self.events.append(("removed", {"transaction_id": transaction_id}))

    @staticmethod
    def _parse_cursor(cursor: str | None) -> int | None:
        if not cursor:
            return 0
        if not cursor.startswith(CURSOR_PREFIX):
            return None
        try:
            return int(cursor[len(CURSOR_PREFIX):])
        except ValueError:
            return None

    @staticmethod
    def _error(error_code: str, error_message: str) -> dict[str, Any]:
        return {
            "error_type": "TRANSACTIONS_ERROR" if error_code.startswith("TRANSACTIONS") else "INVALID_INPUT",
            "error_code": error_code,
            "error_message": error_message,
        }
