"""One sync cycle: fetch, reconcile, persist."""

import logging
import time
from dataclasses import dataclass, field

from txn_mirror.engine import ReconciliationEngine, totals_by_account
from txn_mirror.exceptions import UnresolvedReferenceError
from txn_mirror.models import AccountSnapshot, AccountTotals, RejectedEntry, SyncCounts
from txn_mirror.provider import CursorSyncClient
from txn_mirror.store import RecordStore

logger = logging.getLogger(__name__)


@dataclass
class SyncSummary:
    """What one completed cycle did, for reporting to the operator."""

    counts: SyncCounts
    cursor_before: str | None
    cursor_after: str | None
    records: int
    pages: int = 0
    unresolved: list[UnresolvedReferenceError] = field(default_factory=list)
    skipped: list[RejectedEntry] = field(default_factory=list)
    accounts: list[AccountSnapshot] = field(default_factory=list)
    totals: dict[str, AccountTotals] = field(default_factory=dict)
    duration_ms: int = 0


class SyncService:
    """Run sync cycles of one item against one record store.

    The service holds no state between runs. At most one cycle may run
    against a store at a time; enforcing that is the scheduler's job.

    A fetch failure propagates before anything is written. Records are
    written before the cursor: if the cursor write fails, the next cycle
    replays the same delta, which is harmless because every step is keyed
    by transaction id.
    """

    def __init__(
        self,
        client: CursorSyncClient,
        store: RecordStore,
        engine: ReconciliationEngine | None = None,
    ) -> None:
        self.client = client
        self.store = store
        self.engine = engine or ReconciliationEngine()

    def run(self, access_token: str) -> SyncSummary:
        """Run one full cycle.

        Raises
        ------
        FetchError
            If any page of the fetch fails; store and cursor are untouched.
        DataShapeError
            If a page envelope is malformed; store and cursor are untouched.
        StoreError
            If the store cannot be read or written.
        """
        start_time = time.time()
        cursor_before = self.store.load_cursor()
        logger.info("Starting sync from %s", "cursor" if cursor_before else "the beginning")

        delta = self.client.sync(cursor_before, access_token)

        result = self.engine.apply(self.store.load_all(), delta)
        self.store.replace_all(result.records)
        self.store.save_cursor(delta.next_cursor)

        summary = SyncSummary(
            counts=result.counts,
            cursor_before=cursor_before,
            cursor_after=delta.next_cursor,
            records=len(result.records),
            pages=delta.pages,
            unresolved=result.unresolved,
            skipped=[*delta.rejected, *result.skipped],
            accounts=delta.accounts,
            totals=totals_by_account(delta.accounts),
            duration_ms=int((time.time() - start_time) * 1000),
        )
        logger.info(
            "Sync complete: +%d ~%d -%d, %d records in %dms",
            summary.counts.added,
            summary.counts.modified,
            summary.counts.removed,
            summary.records,
            summary.duration_ms,
            extra={"extra": {"counts": summary.counts.to_dict(), "records": summary.records}},
        )
        return summary
