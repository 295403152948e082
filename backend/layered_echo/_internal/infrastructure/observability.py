"""Structured Logging — JSON lines for the service process, or plain text for humans.

Invariants:
    - Every JSON line carries timestamp (of the record, UTC), level, logger and message
    - Lifecycle and request context passed via `extra=` is surfaced only for
      keys in EXTRA_FIELDS; anything else stays out of the output
    - setup_logging is idempotent: calling it twice never duplicates output

Design Decisions:
    - Hand-written formatter on stdlib logging: one small class, no extra dependency
    - setup_logging called by main() only; embedded callers own their logging,
      and uvicorn's loggers propagate into whatever the caller configured
"""

import json
import logging
from datetime import datetime, timezone

EXTRA_FIELDS = (
    "error_code", "path", "method", "mode", "state",
    "address", "component", "abandoned",
)
TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(
            (key, getattr(record, key)) for key in EXTRA_FIELDS
            if getattr(record, key, None) is not None
        )
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


class _ServiceHandler(logging.StreamHandler):
    """Marker type so setup_logging can find the handler it installed earlier."""


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    """Install the service's stderr handler on the root logger."""
    for existing in [h for h in logging.root.handlers if isinstance(h, _ServiceHandler)]:
        logging.root.removeHandler(existing)
    handler = _ServiceHandler()
    handler.setFormatter(
        JSONFormatter() if fmt == "json" else logging.Formatter(TEXT_FORMAT),
    )
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
