"""Structured Logging — JSON formatter and setup for production observability.

Invariants:
    - All logs include timestamp, level, logger name, and message
    - Extra fields (swap_id, actor_id, error_code, attempt) surfaced when present
    - JSON format in production, human-readable in development

Design Decisions:
    - JSONFormatter over third-party libs: zero dependencies, full control
    - setup_logging called once on startup via lifespan
"""

import logging
import json
from datetime import datetime, timezone

_EXTRA_FIELDS = (
    "swap_id", "actor_id", "action", "error_code", "attempt",
    "notification_type", "recipient_id", "path",
)


class JSONFormatter(logging.Formatter):
    """Format logs as JSON for structured logging in production."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _EXTRA_FIELDS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = str(val) if not isinstance(val, (int, float)) else val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False)


def setup_logging(level: str = "INFO", fmt: str = "json"):
    """Configure logging for the application."""
    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s — %(message)s",
        ))
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
