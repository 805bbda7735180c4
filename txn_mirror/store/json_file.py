"""JSON file record store."""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from txn_mirror.exceptions import StoreError
from txn_mirror.models import TransactionRecord
from txn_mirror.serialization import record_from_dict, record_to_dict
from txn_mirror.store.base import RecordStore

logger = logging.getLogger(__name__)


class JsonFileRecordStore(RecordStore):
    """Persist records and cursor in a single JSON document.

    Layout::

        {"cursor": "...", "transactions": [{...}, ...]}

    Every write goes to a temporary file in the same directory and is
    moved over the target with ``os.replace``, which is atomic on POSIX
    and Windows.
    """

    def __init__(self, path: str | Path, pretty: bool = True) -> None:
        """Initialize JSON file store.

        Parameters
        ----------
        path : str | Path
            Document path; parent directories are created on first write.
        pretty : bool
            Indent the JSON output.
        """
        self.path = Path(path)
        self.pretty = pretty

    def load_all(self) -> list[TransactionRecord]:
        return [record_from_dict(item) for item in self._read()["transactions"]]

    def replace_all(self, records: list[TransactionRecord]) -> None:
        document = self._read()
        document["transactions"] = [record_to_dict(r) for r in records]
        self._write(document)
        logger.debug("Wrote %d records to %s", len(records), self.path)

    def load_cursor(self) -> str | None:
        return self._read()["cursor"]

    def save_cursor(self, cursor: str | None) -> None:
        document = self._read()
        document["cursor"] = cursor
        self._write(document)

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {"cursor": None, "transactions": []}
        try:
            with open(self.path, encoding="utf-8") as f:
                document = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StoreError(f"Cannot read {self.path}: {e}") from e
        if not isinstance(document, dict) or not isinstance(document.get("transactions", []), list):
            raise StoreError(f"{self.path} is not a transaction store document")
        document.setdefault("cursor", None)
        document.setdefault("transactions", [])
        return document

    def _write(self, document: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                if self.pretty:
                    json.dump(document, f, indent=2, ensure_ascii=False)
                else:
                    json.dump(document, f, ensure_ascii=False)
            os.replace(tmp_name, self.path)
        except OSError as e:
            Path(tmp_name).unlink(missing_ok=True)
            raise StoreError(f"Cannot write {self.path}: {e}") from e
