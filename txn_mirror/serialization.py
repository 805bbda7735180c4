"""Shared serialization utilities for record stores and CLI output."""

from dataclasses import fields, is_dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from txn_mirror.exceptions import StoreError
from txn_mirror.models.transaction import TransactionRecord


def to_dict(obj: Any) -> dict:
    """Convert a dataclass (or dict) to a JSON-ready dictionary.

    Uses ``dataclasses.fields()`` + ``getattr`` rather than ``asdict()``
    so nested dataclasses are serialized through ``serialize_value``.
    """
    if is_dataclass(obj):
        return {f.name: serialize_value(getattr(obj, f.name)) for f in fields(obj)}
    elif isinstance(obj, dict):
        return {k: serialize_value(v) for k, v in obj.items()}
    else:
        return {"value": str(obj)}


def serialize_value(value: Any) -> Any:
    """Serialize a value for JSON output."""
    if isinstance(value, Decimal):
        return str(value)
    elif isinstance(value, Enum):
        return value.value
    elif isinstance(value, datetime):
        return value.isoformat()
    elif isinstance(value, date):
        return value.isoformat()
    elif is_dataclass(value):
        return to_dict(value)
    elif isinstance(value, dict):
        return {k: serialize_value(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [serialize_value(v) for v in value]
    return value


def record_to_dict(record: TransactionRecord) -> dict[str, Any]:
    """Serialize a record for persistence."""
    return to_dict(record)


def record_from_dict(data: dict[str, Any]) -> TransactionRecord:
    """Rebuild a record written by ``record_to_dict``."""
    try:
        return TransactionRecord(
            id=data["id"],
            date=date.fromisoformat(data["date"]),
            amount=Decimal(data["amount"]),
            pending=bool(data["pending"]),
            account_ref=data["account_ref"],
            category=data["category"],
            subcategory=data["subcategory"],
            channel=data["channel"],
            name=data.get("name", ""),
            internal=bool(data.get("internal", False)),
            notes=data.get("notes", ""),
            pending_id=data.get("pending_id"),
        )
    except (KeyError, TypeError, ValueError, ArithmeticError) as e:
        raise StoreError(f"Corrupt stored record {data!r}: {e}") from e
