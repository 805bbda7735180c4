"""Payload coercion helpers shared by the upstream models."""

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any

from txn_mirror.exceptions import DataShapeError

UNKNOWN = "UNKNOWN"
UNKNOWN_ACCOUNT = "Unknown Account"


def require(payload: dict[str, Any], key: str, context: str) -> Any:
    """Return ``payload[key]``, raising DataShapeError if absent or null."""
    if not isinstance(payload, dict):
        raise DataShapeError(f"{context}: expected an object, got {type(payload).__name__}")
    value = payload.get(key)
    if value is None:
        raise DataShapeError(f"{context}: missing field {key!r}")
    return value


def to_decimal(value: Any, field_name: str) -> Decimal:
    """Convert a JSON number to Decimal without float artifacts."""
    if isinstance(value, bool):
        raise DataShapeError(f"{field_name}: expected a number, got {value!r}")
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise DataShapeError(f"{field_name}: expected a number, got {value!r}") from None


def to_optional_decimal(value: Any, field_name: str) -> Decimal | None:
    """Like ``to_decimal`` but passes ``None`` through."""
    if value is None:
        return None
    return to_decimal(value, field_name)


def to_date(value: Any, field_name: str) -> date:
    """Parse an ISO ``YYYY-MM-DD`` date."""
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        raise DataShapeError(f"{field_name}: expected an ISO date, got {value!r}") from None


def optional_str(payload: dict[str, Any], key: str, context: str) -> str | None:
    """Return ``payload[key]`` if it is a string, ``None`` if absent or null."""
    value = payload.get(key)
    if value is not None and not isinstance(value, str):
        raise DataShapeError(f"{context}: {key} must be a string, got {type(value).__name__}")
    return value
