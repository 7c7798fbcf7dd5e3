"""
Structured Logging

Library modules only ever call ``logging.getLogger(__name__)``; nothing
under ``epistemica`` installs handlers on import. An application embedding
the package calls ``setup_logging()`` once at startup to route the
``epistemica`` logger tree to stdout as JSON lines (or plain text for
local runs):

    from epistemica import setup_logging
    setup_logging()                      # EPISTEMICA_LOG_FORMAT / _LOG_LEVEL
    setup_logging(fmt="text", level="DEBUG")

Extra fields passed via ``extra={...}`` (provider, chunk index, timings)
are lifted into the JSON entry.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import IO, Optional

from epistemica.config import Settings, settings

PACKAGE_LOGGER = "epistemica"

_EXTRA_FIELDS = (
    "provider", "module_type", "chunk_index", "chunk_count",
    "word_count", "duration_ms", "record_id", "attempts",
    "confidence", "error", "error_type",
)


class JSONFormatter(logging.Formatter):
    """One JSON object per record, stamped with the record's own creation time."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(
            (key, getattr(record, key))
            for key in _EXTRA_FIELDS
            if getattr(record, key, None) is not None
        )
        if record.exc_info and record.exc_info[0]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s [%(levelname)-8s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )


def setup_logging(
    fmt: Optional[str] = None,
    level: Optional[str] = None,
    stream: Optional[IO[str]] = None,
    config: Optional[Settings] = None,
) -> logging.Logger:
    """
    Attach a single stream handler to the ``epistemica`` logger.

    fmt and level default to the settings (LOG_FORMAT, LOG_LEVEL); an
    unknown level name falls back to INFO. Calling it again replaces the
    handler instead of stacking a second one.
    """
    config = config or settings
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(getattr(logging, (level or config.LOG_LEVEL).upper(), logging.INFO))

    logger.handlers.clear()
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(
        JSONFormatter() if (fmt or config.LOG_FORMAT).lower() == "json" else TextFormatter()
    )
    logger.addHandler(handler)

    # SDK transports are chatty at INFO
    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.WARNING)

    return logger
