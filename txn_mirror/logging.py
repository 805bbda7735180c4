"""Log output for the sync CLI and service.

Logs go to stderr so ``txn-mirror show`` and ``sync`` summaries on stdout
can be piped. Per-cycle fields (counts, record totals) ride on
``extra={"extra": {...}}`` and surface as top-level keys in JSON mode.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

STANDARD_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
STANDARD_DATEFMT = "%Y-%m-%d %H:%M:%S"

# HTTP client, driver and generator chatter
QUIET_LOGGERS = ("httpx", "httpcore", "psycopg", "faker")


def setup_logging(
    level: str = "INFO",
    format_type: str = "standard",
) -> None:
    """Install a single stderr handler on the root logger.

    Parameters
    ----------
    level : str
        Level name; unknown names fall back to INFO.
    format_type : str
        ``"standard"`` for human-readable lines, ``"json"`` for one object
        per line.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(log_level)
    handler.setFormatter(_formatter(format_type))

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)

    logging.getLogger("txn_mirror").setLevel(log_level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def _formatter(format_type: str) -> logging.Formatter:
    if format_type == "json":
        return JsonFormatter()
    return logging.Formatter(fmt=STANDARD_FORMAT, datefmt=STANDARD_DATEFMT)


class JsonFormatter(logging.Formatter):
    """One JSON object per record; Decimal and date values are stringified."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        fields = getattr(record, "extra", None)
        if isinstance(fields, dict):
            entry.update(fields)

        return json.dumps(entry, default=str)


def get_logger(name: str) -> logging.Logger:
    """Module logger under the ``txn_mirror`` hierarchy."""
    return logging.getLogger(name)
