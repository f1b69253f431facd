"""Logging setup for the signalscore command line.

Call ``configure_logging()`` once at CLI entry, before any scoring or scanning
work. Library modules use ``logging.getLogger(__name__)`` and never configure
handlers themselves.

JSON format emits one object per line::

    {"ts": "2026-03-02T14:30:05Z", "level": "WARNING",
     "logger": "signalscore.scanner.scanner", "msg": "Skipping TSLA: ...",
     "symbol": "TSLA", "reason": "timeout"}
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

import numpy as np
from pydantic import BaseModel

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

# Attributes every LogRecord carries; anything else came from ``extra=``
_RECORD_ATTRS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", None, None).__dict__
) | {"message", "asctime"}


def _to_json(value: Any) -> Any:
    """Fallback encoder for values logged through ``extra=``."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, np.generic):
        return value.item()
    return str(value)


class _JsonFormatter(logging.Formatter):
    """Emit one JSON object per log line.

    Fields: ``ts``, ``level``, ``logger``, ``msg`` and, for records logged off
    the main thread (scanner workers), ``thread``. Keys passed through
    ``extra=``, such as the scanner's ``symbol`` and ``reason`` on skips, are
    copied to the top level; pydantic models and numpy scalars among them are
    encoded natively.
    """

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: dict[str, Any] = {
            "ts": created.strftime(LOG_DATE_FORMAT),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.threadName and record.threadName != "MainThread":
            payload["thread"] = record.threadName
        payload.update(
            (key, val)
            for key, val in vars(record).items()
            if key not in _RECORD_ATTRS and not key.startswith("_")
        )
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=_to_json)


def configure_logging(level: str = "INFO", json_format: bool = False) -> None:
    """Configure the root logger.

    :param level: Level name (DEBUG, INFO, WARNING, ...); unknown names fall
        back to INFO.
    :param json_format: Emit JSON lines instead of plain text.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    formatter: logging.Formatter
    if json_format:
        formatter = _JsonFormatter()
    else:
        formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    # stderr keeps the printed reports on stdout clean
    console = logging.StreamHandler(sys.stderr)
    console.setLevel(log_level)
    console.setFormatter(formatter)

    logging.basicConfig(level=log_level, handlers=[console], force=True)

    # Quieten noisy third-party loggers
    logging.getLogger("yfinance").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("peewee").setLevel(logging.WARNING)


__all__ = ["LOG_FORMAT", "LOG_DATE_FORMAT", "configure_logging"]
