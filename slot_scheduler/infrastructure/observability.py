"""Structured Logging — one JSON object per line, keyed for scheduler operations.

Invariants:
    - Every line carries the record's own creation time (UTC), level, logger, and message
    - Scheduling context (executive_id, slot_id, user_id), error codes, and sweep
      counters are promoted to top-level keys whenever a call site passes them in `extra`
    - setup_logging is idempotent: a second call replaces the handler it installed,
      so a restarted lifespan never doubles every line
    - Handlers installed by others (test capture, uvicorn) are left alone

Design Decisions:
    - Keys are flat, not nested: sweep ticks and rejected allocations are queried by
      slot_id or error_code straight from the log store
    - Text format appends the same context keys, so local runs show what production indexes
"""

import logging
import json
from datetime import datetime, timezone

CONTEXT_KEYS = (
    "executive_id", "slot_id", "user_id", "error_code", "path",
    "created_notifications", "transitioned",
)

_HANDLER_NAME = "slot_scheduler"


def _context(record: logging.LogRecord) -> dict:
    return {
        key: record.__dict__[key]
        for key in CONTEXT_KEYS
        if record.__dict__.get(key) is not None
    }


class JSONFormatter(logging.Formatter):
    """Render a record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_context(record),
        }
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


class ContextTextFormatter(logging.Formatter):
    """Plain text line followed by key=value pairs of the scheduling context."""

    def __init__(self):
        super().__init__("%(asctime)s %(levelname)s %(name)s %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        pairs = " ".join(f"{k}={v}" for k, v in _context(record).items())
        return f"{line} [{pairs}]" if pairs else line


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    """Install (or replace) the scheduler's root handler and return it."""
    root = logging.getLogger()
    for existing in [h for h in root.handlers if h.get_name() == _HANDLER_NAME]:
        root.removeHandler(existing)

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(JSONFormatter() if fmt == "json" else ContextTextFormatter())
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    return handler
