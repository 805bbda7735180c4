"""Apply a fetched change-feed delta onto the stored record set."""

import logging
from dataclasses import dataclass, field

from txn_mirror.engine.mapper import TransactionMapper
from txn_mirror.engine.resolver import Found, IdentityResolver
from txn_mirror.exceptions import DataShapeError, UnresolvedReferenceError
from txn_mirror.models import (
    RejectedEntry,
    SyncCounts,
    SyncDelta,
    TransactionRecord,
    UpstreamTransaction,
)

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    """The next store state plus what happened while building it."""

    records: list[TransactionRecord]
    counts: SyncCounts
    unresolved: list[UnresolvedReferenceError] = field(default_factory=list)
    skipped: list[RejectedEntry] = field(default_factory=list)


class _WorkingSet:
    """Records keyed by id with a display rank for final ordering.

    Existing records rank by their date-sorted position (0, 1, ...). New
    records get negative ranks that decrease with each insertion, so among
    equal dates the most recent insertion sorts first.
    """

    def __init__(self, records: list[TransactionRecord]) -> None:
        ordered = sorted(records, key=lambda r: r.date, reverse=True)
        self.records: dict[str, TransactionRecord] = {}
        self.ranks: dict[str, int] = {}
        self.resolver = IdentityResolver()
        self._next_new_rank = -1
        for rank, record in enumerate(ordered):
            if record.id in self.records:
                logger.warning("Dropping duplicate stored record %s", record.id)
                continue
            self.records[record.id] = record
            self.ranks[record.id] = rank
            self.resolver.add(record)

    def remove(self, record: TransactionRecord) -> None:
        self.resolver.discard(record)
        self.records.pop(record.id, None)
        self.ranks.pop(record.id, None)

    def replace(self, old: TransactionRecord, new: TransactionRecord) -> None:
        """Swap ``old`` for ``new`` keeping ``old``'s display rank."""
        rank = self.ranks[old.id]
        self.remove(old)
        self._evict_conflicts(new)
        self._put(new, rank)

    def insert(self, record: TransactionRecord) -> None:
        self._evict_conflicts(record)
        self._put(record, self._next_new_rank)
        self._next_new_rank -= 1

    def ordered(self) -> list[TransactionRecord]:
        """Records by date descending, then rank."""
        return sorted(
            self.records.values(),
            key=lambda r: (-r.date.toordinal(), self.ranks[r.id]),
        )

    def _put(self, record: TransactionRecord, rank: int) -> None:
        self.records[record.id] = record
        self.ranks[record.id] = rank
        self.resolver.add(record)

    def _evict_conflicts(self, record: TransactionRecord) -> None:
        # One record per id, and a pending id never survives as its own record.
        for conflict_id in (record.id, record.pending_id):
            conflict = self.records.get(conflict_id) if conflict_id else None
            if conflict is not None:
                logger.warning("Record %s supersedes stored record %s", record.id, conflict.id)
                self.remove(conflict)


class ReconciliationEngine:
    """Merge removed, modified and added entries into a record set.

    Steps run in a fixed order: removals, then modifications, then
    additions, each resolving identities against the working set as left by
    the previous step. The input list is never mutated; the caller persists
    ``ReconcileResult.records`` wholesale.
    """

    def apply(self, records: list[TransactionRecord], delta: SyncDelta) -> ReconcileResult:
        """Apply ``delta`` to ``records``.

        Parameters
        ----------
        records : list[TransactionRecord]
            Current store content in display order.
        delta : SyncDelta
            Output of the cursor sync client.

        Returns
        -------
        ReconcileResult
            New ordered record list, counts taken from the delta's list
            sizes, unresolved modifications and entries skipped for bad data.
        """
        working = _WorkingSet(records)
        mapper = TransactionMapper(delta.accounts)
        result = ReconcileResult(
            records=[],
            counts=SyncCounts(
                added=len(delta.added),
                modified=len(delta.modified),
                removed=len(delta.removed),
            ),
        )

        deferred = self._apply_removals(working, delta)
        self._apply_modifications(working, mapper, delta.modified, result)
        self._apply_additions(working, mapper, delta.added, result)
        self._finish_deferred_removals(working, deferred)

        result.records = working.ordered()
        logger.info(
            "Reconciled +%d ~%d -%d: %d -> %d records (%d unresolved, %d skipped)",
            result.counts.added,
            result.counts.modified,
            result.counts.removed,
            len(records),
            len(result.records),
            len(result.unresolved),
            len(result.skipped),
        )
        return result

    def _apply_removals(self, working: _WorkingSet, delta: SyncDelta) -> set[str]:
        """Apply removals; returns ids held back for promotion.

        A pending id named by an added entry is promoted in place later,
        keeping its annotations, rather than removed here.
        """
        promoted = {t.pending_transaction_id for t in delta.added if t.pending_transaction_id}
        deferred: set[str] = set()
        for removed in delta.removed:
            if removed.transaction_id in promoted:
                logger.debug("Keeping %s for promotion", removed.transaction_id)
                deferred.add(removed.transaction_id)
                continue
            match = working.resolver.find_removed(removed.transaction_id)
            if isinstance(match, Found):
                working.remove(match.record)
            else:
                logger.debug("Removed transaction %s not in store", removed.transaction_id)
        return deferred

    def _finish_deferred_removals(self, working: _WorkingSet, deferred: set[str]) -> None:
        # A record still stored under a held-back id was never promoted
        # (its posted entry was skipped), so the upstream removal stands.
        for transaction_id in sorted(deferred):
            record = working.records.get(transaction_id)
            if record is not None:
                logger.warning("Removing %s: its promotion did not happen", transaction_id)
                working.remove(record)

    def _apply_modifications(
        self,
        working: _WorkingSet,
        mapper: TransactionMapper,
        modified: list[UpstreamTransaction],
        result: ReconcileResult,
    ) -> None:
        for txn in modified:
            match = working.resolver.resolve(txn, promote=False)
            if not isinstance(match, Found):
                error = UnresolvedReferenceError(txn.transaction_id)
                logger.warning("Ignoring modification: %s", error)
                result.unresolved.append(error)
                continue
            self._merge(working, mapper, txn, match.record, "modified", result)

    def _apply_additions(
        self,
        working: _WorkingSet,
        mapper: TransactionMapper,
        added: list[UpstreamTransaction],
        result: ReconcileResult,
    ) -> None:
        for txn in added:
            match = working.resolver.resolve(txn, promote=True)
            if isinstance(match, Found):
                if match.record.id != txn.transaction_id:
                    logger.info("Promoting pending %s to %s", match.record.id, txn.transaction_id)
                self._merge(working, mapper, txn, match.record, "added", result)
                continue
            try:
                record = mapper.to_record(txn)
            except DataShapeError as e:
                self._skip(result, "added", txn, e)
                continue
            working.insert(record)

    def _merge(
        self,
        working: _WorkingSet,
        mapper: TransactionMapper,
        txn: UpstreamTransaction,
        existing: TransactionRecord,
        kind: str,
        result: ReconcileResult,
    ) -> None:
        try:
            record = mapper.to_record(txn, existing)
        except DataShapeError as e:
            self._skip(result, kind, txn, e)
            return
        working.replace(existing, record)

    @staticmethod
    def _skip(result: ReconcileResult, kind: str, txn: UpstreamTransaction, error: DataShapeError) -> None:
        logger.warning("Skipping %s transaction %s: %s", kind, txn.transaction_id, error)
        result.skipped.append(RejectedEntry(kind=kind, payload=txn, reason=str(error)))
