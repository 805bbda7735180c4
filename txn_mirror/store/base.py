"""Record store interface."""

from abc import ABC, abstractmethod

from txn_mirror.models import TransactionRecord


class RecordStore(ABC):
    """Durable ordered transaction history plus the feed cursor.

    Implementations replace content wholesale on each write so a reader
    sees either the state before a sync or the state after it.
    """

    @abstractmethod
    def load_all(self) -> list[TransactionRecord]:
        """Return every record in persisted display order."""

    @abstractmethod
    def replace_all(self, records: list[TransactionRecord]) -> None:
        """Replace the stored records with ``records``, in order."""

    @abstractmethod
    def load_cursor(self) -> str | None:
        """Return the persisted cursor, ``None`` for a full resync."""

    @abstractmethod
    def save_cursor(self, cursor: str | None) -> None:
        """Persist the cursor returned by a completed fetch."""

    def close(self) -> None:
        """Release any held resources."""
