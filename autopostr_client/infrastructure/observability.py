"""Structured Logging — JSON log lines carrying request context.

Invariants:
    - Every line has timestamp, level, logger and message
    - Context passed through `extra=` (operation, attempt, request_key,
      identity, error_code, ...) becomes top-level JSON keys when present
    - setup_logging() is idempotent: calling it again replaces its own handler

Design Decisions:
    - Plain logging + a small Formatter subclass, no logging framework
    - httpx and SQLAlchemy engine loggers held at WARNING: per-request chatter
      would drown the client's own retry and session lines
"""

import json
import logging
from datetime import datetime, timezone

EXTRA_FIELDS = (
    "operation", "attempt", "max_attempts", "request_key",
    "identity", "error_code", "delay_ms", "path", "task",
)
NOISY_LOGGERS = ("httpx", "httpcore", "sqlalchemy.engine")
TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"

_handler: logging.Handler | None = None


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
            (name, record.__dict__[name])
            for name in EXTRA_FIELDS
            if record.__dict__.get(name) is not None
        )
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    """Install the root handler ("json" or "text")."""
    global _handler
    root = logging.getLogger()
    if _handler is not None:
        root.removeHandler(_handler)
    _handler = logging.StreamHandler()
    _handler.setFormatter(
        JSONFormatter() if fmt == "json" else logging.Formatter(TEXT_FORMAT),
    )
    root.addHandler(_handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
