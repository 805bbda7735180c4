"""PostgreSQL record store."""

import logging
from contextlib import contextmanager
from datetime import date
from decimal import Decimal
from typing import Any, Iterator

from txn_mirror.exceptions import StoreError
from txn_mirror.models import TransactionRecord
from txn_mirror.store.base import RecordStore

logger = logging.getLogger(__name__)


class PostgresRecordStore(RecordStore):
    """Persist records and cursor in PostgreSQL, one row set per item.

    ``replace_all`` deletes and re-inserts the item's rows inside a single
    transaction, so concurrent readers see the old or the new set, never a
    mixture. Display order is kept in the ``position`` column.

    The connection runs in autocommit mode: plain reads leave no transaction
    open, so every ``conn.transaction()`` block is an outer transaction that
    commits on exit rather than a savepoint inside an uncommitted one.
    """

    COLUMNS = [
        "id",
        "date",
        "amount",
        "pending",
        "account_ref",
        "category",
        "subcategory",
        "channel",
        "name",
        "internal",
        "notes",
        "pending_id",
    ]

    DDL = [
        """
        CREATE TABLE IF NOT EXISTS mirror_transactions (
            item_key     TEXT NOT NULL,
            position     INTEGER NOT NULL,
            id           TEXT NOT NULL,
            date         DATE NOT NULL,
            amount       NUMERIC(15, 2) NOT NULL,
            pending      BOOLEAN NOT NULL,
            account_ref  TEXT NOT NULL,
            category     TEXT NOT NULL,
            subcategory  TEXT NOT NULL,
            channel      TEXT NOT NULL,
            name         TEXT NOT NULL DEFAULT '',
            internal     BOOLEAN NOT NULL DEFAULT FALSE,
            notes        TEXT NOT NULL DEFAULT '',
            pending_id   TEXT,
            PRIMARY KEY (item_key, id)
        )
        """,
        """
        CREATE TABLE IF NOT EXISTS mirror_cursors (
            item_key  TEXT PRIMARY KEY,
            cursor    TEXT
        )
        """,
    ]

    def __init__(self, conninfo: str, item_key: str = "default") -> None:
        """Initialize PostgreSQL store.

        Parameters
        ----------
        conninfo : str
            libpq connection string or URL.
        item_key : str
            Partition key separating linked items sharing the database.
        """
        try:
            import psycopg
        except ImportError:
            raise ImportError("psycopg is required for PostgresRecordStore: pip install 'psycopg[binary]'")

        self._psycopg = psycopg
        self.item_key = item_key
        try:
            self.conn = psycopg.connect(conninfo, autocommit=True)
        except psycopg.Error as e:
            raise StoreError(f"Cannot connect to PostgreSQL: {e}") from e

    def create_tables(self) -> None:
        """Create the store tables if they do not exist."""
        with self.conn.transaction():
            with self.conn.cursor() as cur:
                for statement in self.DDL:
                    cur.execute(statement)
        logger.info("Ensured mirror tables exist")

    def load_all(self) -> list[TransactionRecord]:
        query = (
            f"SELECT {', '.join(self.COLUMNS)} FROM mirror_transactions "  # noqa: S608
            "WHERE item_key = %s ORDER BY position"
        )
        with self._errors("load records"):
            with self.conn.cursor() as cur:
                cur.execute(query, (self.item_key,))
                rows = cur.fetchall()
        return [self._row_to_record(row) for row in rows]

    def replace_all(self, records: list[TransactionRecord]) -> None:
        columns = ["item_key", "position", *self.COLUMNS]
        placeholders = ", ".join(["%s"] * len(columns))
        insert = f"INSERT INTO mirror_transactions ({', '.join(columns)}) VALUES ({placeholders})"  # noqa: S608
        rows = [
            (self.item_key, position, *self._extract_row(record))
            for position, record in enumerate(records)
        ]
        with self._errors("replace records"):
            with self.conn.transaction():
                with self.conn.cursor() as cur:
                    cur.execute("DELETE FROM mirror_transactions WHERE item_key = %s", (self.item_key,))
                    if rows:
                        cur.executemany(insert, rows)
        logger.debug("Replaced %d records for item %s", len(records), self.item_key)

    def load_cursor(self) -> str | None:
        with self._errors("load cursor"):
            with self.conn.cursor() as cur:
                cur.execute("SELECT cursor FROM mirror_cursors WHERE item_key = %s", (self.item_key,))
                row = cur.fetchone()
        return row[0] if row else None

    def save_cursor(self, cursor: str | None) -> None:
        with self._errors("save cursor"):
            with self.conn.transaction():
                with self.conn.cursor() as cur:
                    cur.execute(
                        "INSERT INTO mirror_cursors (item_key, cursor) VALUES (%s, %s) "
                        "ON CONFLICT (item_key) DO UPDATE SET cursor = EXCLUDED.cursor",
                        (self.item_key, cursor),
                    )

    def close(self) -> None:
        """Close the connection."""
        self.conn.close()

    def _extract_row(self, record: TransactionRecord) -> tuple[Any, ...]:
        return tuple(getattr(record, column) for column in self.COLUMNS)

    def _row_to_record(self, row: tuple[Any, ...]) -> TransactionRecord:
        data = dict(zip(self.COLUMNS, row))
        if not isinstance(data["date"], date):
            data["date"] = date.fromisoformat(str(data["date"]))
        data["amount"] = Decimal(str(data["amount"]))
        return TransactionRecord(**data)

    @contextmanager
    def _errors(self, action: str) -> Iterator[None]:
        try:
            yield
        except self._psycopg.Error as e:
            raise StoreError(f"Cannot {action}: {e}") from e
