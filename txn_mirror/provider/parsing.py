"""Parse raw change-feed responses into typed pages.

Malformed transaction entries are isolated into ``SyncPage.rejected``;
a malformed envelope (cursor, ``has_more`` or account list) is fatal
because the cycle cannot safely continue without it.
"""

import logging
from typing import Any, Callable, TypeVar

from txn_mirror.exceptions import DataShapeError, UpstreamLogicError
from txn_mirror.models import (
    AccountSnapshot,
    RejectedEntry,
    RemovedTransaction,
    SyncPage,
    UpstreamTransaction,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def raise_for_error_code(payload: dict[str, Any]) -> None:
    """Raise UpstreamLogicError when a response carries an error code."""
    error_code = payload.get("error_code")
    if error_code:
        raise UpstreamLogicError(str(error_code), payload.get("error_message"))


def parse_page(payload: Any) -> SyncPage:
    """Parse one ``transactions/sync`` response body.

    Raises
    ------
    UpstreamLogicError
        If the body carries a non-null ``error_code``.
    DataShapeError
        If the envelope fields are missing or mistyped.
    """
    if not isinstance(payload, dict):
        raise DataShapeError(f"sync page: expected an object, got {type(payload).__name__}")
    raise_for_error_code(payload)

    has_more = payload.get("has_more")
    if not isinstance(has_more, bool):
        raise DataShapeError("sync page: has_more must be a boolean")

    next_cursor = payload.get("next_cursor")
    if not isinstance(next_cursor, str) or not next_cursor:
        raise DataShapeError("sync page: next_cursor must be a non-empty string")

    # Account entries are part of the envelope: a bad one is fatal.
    accounts = [AccountSnapshot.from_payload(a) for a in _list_field(payload, "accounts")]

    rejected: list[RejectedEntry] = []
    added = _parse_entries(payload, "added", UpstreamTransaction.from_payload, rejected)
    modified = _parse_entries(payload, "modified", UpstreamTransaction.from_payload, rejected)
    removed = _parse_entries(payload, "removed", RemovedTransaction.from_payload, rejected)

    return SyncPage(
        added=added,
        modified=modified,
        removed=removed,
        accounts=accounts,
        has_more=has_more,
        next_cursor=next_cursor,
        rejected=rejected,
    )


def _list_field(payload: dict[str, Any], key: str) -> list[Any]:
    value = payload.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise DataShapeError(f"sync page: {key} must be a list")
    return value


def _parse_entries(
    payload: dict[str, Any],
    key: str,
    parse: Callable[[dict[str, Any]], T],
    rejected: list[RejectedEntry],
) -> list[T]:
    parsed: list[T] = []
    for entry in _list_field(payload, key):
        try:
            parsed.append(parse(entry))
        except DataShapeError as e:
            logger.warning("Skipping malformed %s entry: %s", key, e)
            rejected.append(RejectedEntry(kind=key, payload=entry, reason=str(e)))
    return parsed
