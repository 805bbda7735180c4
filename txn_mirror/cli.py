"""Command line entry point for txn-mirror.

Usage::

    txn-mirror sync                       # sync using PLAID_* environment
    txn-mirror sync --sandbox --store local/sandbox.json
    txn-mirror totals --sandbox
    txn-mirror show --limit 20
    txn-mirror exchange-token public-sandbox-...
"""

import argparse
import sys
from pathlib import Path
from typing import Sequence

from txn_mirror.config import MirrorConfig
from txn_mirror.engine import totals_by_account
from txn_mirror.exceptions import ConfigurationError, MirrorError
from txn_mirror.logging import get_logger, setup_logging
from txn_mirror.models import AccountTotals
from txn_mirror.provider import CursorSyncClient, PlaidFeed
from txn_mirror.sandbox import SANDBOX_ACCESS_TOKEN, SandboxFeed
from txn_mirror.service import SyncService
from txn_mirror.store import open_store

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="txn-mirror",
        description="Mirror a linked account's transaction history locally.",
    )
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ... (default: $LOG_LEVEL or INFO)")
    parser.add_argument("--log-format", choices=["standard", "json"], default=None)
    parser.add_argument(
        "--store",
        default=None,
        help="JSON store path, or a postgresql:// URL (default: $STORE_PATH)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    sync = subparsers.add_parser("sync", help="Fetch and merge new upstream changes")
    sync.add_argument("--sandbox", action="store_true", help="Use the offline sandbox feed")
    sync.add_argument("--seed", type=int, default=None, help="Sandbox random seed")

    totals = subparsers.add_parser("totals", help="Print account balances")
    totals.add_argument("--sandbox", action="store_true", help="Use the offline sandbox feed")
    totals.add_argument("--seed", type=int, default=None, help="Sandbox random seed")

    show = subparsers.add_parser("show", help="Print stored transactions")
    show.add_argument("--limit", type=int, default=20, help="Rows to print (0 = all)")

    exchange = subparsers.add_parser("exchange-token", help="Exchange a public token for an access token")
    exchange.add_argument("public_token")

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CLI; returns the process exit code."""
    args = build_parser().parse_args(argv)
    config = MirrorConfig.from_env()
    setup_logging(args.log_level or config.log_level, args.log_format or config.log_format)
    _apply_store_override(config, args.store)

    try:
        if args.command == "sync":
            return _cmd_sync(config, args)
        if args.command == "totals":
            return _cmd_totals(config, args)
        if args.command == "show":
            return _cmd_show(config, args)
        return _cmd_exchange(config, args)
    except MirrorError as e:
        logger.error("%s failed: %s", args.command, e)
        print(f"error: {e}", file=sys.stderr)
        return 1


def _apply_store_override(config: MirrorConfig, store: str | None) -> None:
    if not store:
        return
    if store.startswith(("postgresql://", "postgres://")):
        from urllib.parse import urlparse

        url = urlparse(store)
        config.store.backend = "postgres"
        config.store.postgres.host = url.hostname or config.store.postgres.host
        config.store.postgres.port = url.port or config.store.postgres.port
        config.store.postgres.user = url.username or config.store.postgres.user
        config.store.postgres.password = url.password or config.store.postgres.password
        config.store.postgres.database = url.path.lstrip("/") or config.store.postgres.database
    else:
        config.store.backend = "json"
        config.store.path = Path(store)


def _access_token(config: MirrorConfig) -> str:
    if not config.provider.access_token:
        raise ConfigurationError("PLAID_ACCESS_TOKEN is not set")
    return config.provider.access_token


def _cmd_sync(config: MirrorConfig, args: argparse.Namespace) -> int:
    store = open_store(config.store)
    try:
        if args.sandbox:
            feed = SandboxFeed(seed=args.seed)
            client = CursorSyncClient(feed, config.provider.page_size, config.max_pages)
            summary = SyncService(client, store).run(SANDBOX_ACCESS_TOKEN)
        else:
            with PlaidFeed(config.provider) as feed:
                client = CursorSyncClient(feed, config.provider.page_size, config.max_pages)
                summary = SyncService(client, store).run(_access_token(config))
    finally:
        store.close()

    print(
        f"added={summary.counts.added} modified={summary.counts.modified} "
        f"removed={summary.counts.removed} records={summary.records}"
    )
    if summary.unresolved:
        print(f"ignored {len(summary.unresolved)} modification(s) for unknown transactions")
    if summary.skipped:
        print(f"skipped {len(summary.skipped)} malformed entr{'y' if len(summary.skipped) == 1 else 'ies'}")
    _print_totals(summary.totals)
    return 0


def _cmd_totals(config: MirrorConfig, args: argparse.Namespace) -> int:
    if args.sandbox:
        feed = SandboxFeed(seed=args.seed)
        delta = CursorSyncClient(feed).sync(None, SANDBOX_ACCESS_TOKEN)
        accounts = delta.accounts
    else:
        with PlaidFeed(config.provider) as feed:
            accounts = feed.accounts_get(_access_token(config))
    _print_totals(totals_by_account(accounts))
    return 0


def _cmd_show(config: MirrorConfig, args: argparse.Namespace) -> int:
    store = open_store(config.store)
    try:
        records = store.load_all()
    finally:
        store.close()
    shown = records if args.limit <= 0 else records[: args.limit]
    for r in shown:
        flag = "P" if r.pending else " "
        print(
            f"{r.date.isoformat()} {flag} {r.amount:>10} {r.account_ref[:20]:<20} "
            f"{r.category[:20]:<20} {r.name[:30]}"
        )
    print(f"{len(shown)} of {len(records)} transactions")
    return 0


def _cmd_exchange(config: MirrorConfig, args: argparse.Namespace) -> int:
    with PlaidFeed(config.provider) as feed:
        exchange = feed.exchange_public_token(args.public_token)
    print(f"access_token={exchange.access_token}")
    print(f"item_id={exchange.item_id}")
    return 0


def _print_totals(totals: dict[str, AccountTotals]) -> None:
    for name, t in totals.items():
        print(f"{name}: current={t.current} available={t.available} pending={t.pending}")


if __name__ == "__main__":
    sys.exit(main())
