"""Match incoming upstream transactions to stored records."""

from dataclasses import dataclass
from typing import Iterable, Union

from txn_mirror.models import TransactionRecord, UpstreamTransaction


@dataclass(frozen=True)
class Found:
    """The stored record an incoming transaction corresponds to."""

    record: TransactionRecord


@dataclass(frozen=True)
class NotFound:
    """No stored record corresponds; the incoming transaction is new."""


NOT_FOUND = NotFound()

Resolution = Union[Found, NotFound]


class IdentityResolver:
    """Two-tier identity lookup over a working set of records.

    A posted transaction replaces its pending predecessor under a new id and
    points back at it through ``pending_transaction_id``; checking that
    reference before the transaction's own id is what turns a settlement
    into an in-place promotion instead of a duplicate.

    Records are indexed by ``id`` and ``pending_id``, so lookups are O(1).
    Callers keep the index current with ``add``/``discard`` as they mutate
    the working set.
    """

    def __init__(self, records: Iterable[TransactionRecord] = ()) -> None:
        self._by_id: dict[str, TransactionRecord] = {}
        self._by_pending_id: dict[str, TransactionRecord] = {}
        for record in records:
            self.add(record)

    def __len__(self) -> int:
        return len(self._by_id)

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._by_id

    def add(self, record: TransactionRecord) -> None:
        """Index a record, replacing any previous entry with the same id."""
        previous = self._by_id.get(record.id)
        if previous is not None:
            self.discard(previous)
        self._by_id[record.id] = record
        if record.pending_id:
            self._by_pending_id[record.pending_id] = record

    def discard(self, record: TransactionRecord) -> None:
        """Drop a record from the index; unknown records are ignored."""
        if self._by_id.get(record.id) is record:
            del self._by_id[record.id]
        if record.pending_id and self._by_pending_id.get(record.pending_id) is record:
            del self._by_pending_id[record.pending_id]

    def get(self, record_id: str) -> TransactionRecord | None:
        return self._by_id.get(record_id)

    def resolve(self, incoming: UpstreamTransaction, promote: bool = True) -> Resolution:
        """Find the record ``incoming`` updates.

        Parameters
        ----------
        incoming : UpstreamTransaction
            An added or modified feed entry.
        promote : bool
            Check ``pending_transaction_id`` first (pending to posted
            promotion). Only added entries promote.

        Returns
        -------
        Found | NotFound
        """
        if promote and incoming.pending_transaction_id:
            record = self._by_id.get(incoming.pending_transaction_id)
            if record is not None:
                return Found(record)

        record = self._by_id.get(incoming.transaction_id)
        if record is not None:
            return Found(record)
        return NOT_FOUND

    def find_removed(self, transaction_id: str) -> Resolution:
        """Find the record a removed entry deletes, by ``id`` or ``pending_id``."""
        record = self._by_id.get(transaction_id) or self._by_pending_id.get(transaction_id)
        if record is not None:
            return Found(record)
        return NOT_FOUND
