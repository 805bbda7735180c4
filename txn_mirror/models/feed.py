"""Change-feed envelopes: a single page and the flattened delta."""

from dataclasses import dataclass, field
from typing import Any

from txn_mirror.models.account import AccountSnapshot
from txn_mirror.models.transaction import RemovedTransaction, UpstreamTransaction


@dataclass
class RejectedEntry:
    """A feed entry that failed to parse; isolated instead of aborting."""

    kind: str  # added, modified or removed
    payload: Any
    reason: str


@dataclass
class SyncPage:
    """One parsed response of the change feed."""

    added: list[UpstreamTransaction]
    modified: list[UpstreamTransaction]
    removed: list[RemovedTransaction]
    accounts: list[AccountSnapshot]
    has_more: bool
    next_cursor: str
    rejected: list[RejectedEntry] = field(default_factory=list)


@dataclass
class SyncDelta:
    """All pages of one fetch concatenated, ready to reconcile."""

    added: list[UpstreamTransaction] = field(default_factory=list)
    modified: list[UpstreamTransaction] = field(default_factory=list)
    removed: list[RemovedTransaction] = field(default_factory=list)
    accounts: list[AccountSnapshot] = field(default_factory=list)
    next_cursor: str | None = None
    rejected: list[RejectedEntry] = field(default_factory=list)
    pages: int = 0

    def extend(self, page: SyncPage) -> None:
        """Append a page; accounts are kept from the first page that has any."""
        self.added.extend(page.added)
        self.modified.extend(page.modified)
        self.removed.extend(page.removed)
        self.rejected.extend(page.rejected)
        if not self.accounts and page.accounts:
            self.accounts = list(page.accounts)
        self.next_cursor = page.next_cursor
        self.pages += 1


@dataclass
class SyncCounts:
    """Sizes of the delta lists, reported to the operator."""

    added: int = 0
    modified: int = 0
    removed: int = 0

    def to_dict(self) -> dict[str, int]:
        return {"added": self.added, "modified": self.modified, "removed": self.removed}


@dataclass
class TokenExchange:
    """Result of exchanging a short-lived public token."""

    access_token: str
    item_id: str
