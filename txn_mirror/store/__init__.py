"""Record stores holding the mirrored transaction history."""

from txn_mirror.config import StoreConfig
from txn_mirror.exceptions import ConfigurationError
from txn_mirror.store.base import RecordStore
from txn_mirror.store.json_file import JsonFileRecordStore
from txn_mirror.store.memory import InMemoryRecordStore


def open_store(config: StoreConfig) -> RecordStore:
    """Build the record store selected by ``config.backend``."""
    backend = config.backend.lower()
    if backend == "memory":
        return InMemoryRecordStore()
    if backend == "json":
        return JsonFileRecordStore(config.path)
    if backend == "postgres":
        from txn_mirror.store.postgres import PostgresRecordStore

        store = PostgresRecordStore(config.postgres.connection_string, item_key=config.item_key)
        store.create_tables()
        return store
    raise ConfigurationError(f"Unknown store backend {config.backend!r}")


__all__ = ["InMemoryRecordStore", "JsonFileRecordStore", "RecordStore", "open_store"]
