"""Upstream change-feed access."""

from txn_mirror.provider.parsing import parse_page
from txn_mirror.provider.plaid import PlaidFeed
from txn_mirror.provider.sync import ChangeFeed, CursorSyncClient

__all__ = ["ChangeFeed", "CursorSyncClient", "PlaidFeed", "parse_page"]
