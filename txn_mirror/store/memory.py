"""In-memory record store, for tests and dry runs."""

from dataclasses import dataclass, field, replace

from txn_mirror.models import TransactionRecord
from txn_mirror.store.base import RecordStore


@dataclass
class InMemoryRecordStore(RecordStore):
    """Keeps records and cursor in process memory.

    Records are copied on the way in and out so callers cannot mutate
    stored state behind the store's back.
    """

    records: list[TransactionRecord] = field(default_factory=list)
    cursor: str | None = None

    def load_all(self) -> list[TransactionRecord]:
        return [replace(r) for r in self.records]

    def replace_all(self, records: list[TransactionRecord]) -> None:
        self.records = [replace(r) for r in records]

    def load_cursor(self) -> str | None:
        return self.cursor

    def save_cursor(self, cursor: str | None) -> None:
        self.cursor = cursor
