"""Cursor-driven pagination over the upstream change feed."""

import logging
import time
from typing import Any, Protocol

from txn_mirror.exceptions import DataShapeError
from txn_mirror.models import SyncDelta
from txn_mirror.provider.parsing import parse_page

logger = logging.getLogger(__name__)


class ChangeFeed(Protocol):
    """Anything that serves pages of the transactions change feed."""

    def transactions_sync(
        self,
        access_token: str,
        cursor: str | None = None,
        count: int | None = None,
    ) -> dict[str, Any]: ...


class CursorSyncClient:
    """Drive the change feed from a cursor until it reports no more pages.

    The client never persists anything. ``sync`` either returns the whole
    delta with its final cursor or raises, in which case everything
    fetched so far is discarded and the caller keeps its old cursor;
    replaying the same cursor later re-fetches the same window.
    """

    def __init__(
        self,
        feed: ChangeFeed,
        page_size: int | None = None,
        max_pages: int = 1000,
    ) -> None:
        self.feed = feed
        self.page_size = page_size
        self.max_pages = max_pages

    def sync(self, cursor: str | None, access_token: str) -> SyncDelta:
        """Fetch every page after ``cursor``.

        Parameters
        ----------
        cursor : str | None
            Last persisted cursor; ``None`` resyncs from the beginning.
        access_token : str
            Item access token.

        Returns
        -------
        SyncDelta
            Concatenated added/modified/removed entries, the account list of
            the first page that had one, and the cursor to persist.

        Raises
        ------
        TransportError, UpstreamLogicError, DataShapeError
            On any page failure. No partial delta is returned.
        """
        start_time = time.time()
        delta = SyncDelta()
        page_cursor = cursor
        has_more = True

        while has_more:
            if delta.pages >= self.max_pages:
                raise DataShapeError(
                    f"Change feed still reports more data after {self.max_pages} pages"
                )
            payload = self.feed.transactions_sync(access_token, page_cursor, self.page_size)
            page = parse_page(payload)
            delta.extend(page)

            logger.debug(
                "Page %d: added=%d modified=%d removed=%d rejected=%d has_more=%s",
                delta.pages,
                len(page.added),
                len(page.modified),
                len(page.removed),
                len(page.rejected),
                page.has_more,
            )
            page_cursor = page.next_cursor
            has_more = page.has_more

        duration_ms = int((time.time() - start_time) * 1000)
        logger.info(
            "Fetched %d page(s): +%d ~%d -%d in %dms",
            delta.pages,
            len(delta.added),
            len(delta.modified),
            len(delta.removed),
            duration_ms,
        )
        return delta
