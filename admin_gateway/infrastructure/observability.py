"""Structured Logging — JSON lines for the admin gateway, text for local runs.

Invariants:
    - Every line carries timestamp, level, logger and message
    - Only allow-listed extras are emitted (subject_id, error_code, attempt,
      delay_ms, status_code, service_code, cache_key, tag, table, path, purged)
    - Credential material (tokens, passwords, hashes) never reaches a handler:
      SecretScrubFilter blanks those attributes if a caller passes them anyway
    - setup_logging is idempotent: calling it again replaces our handler

Design Decisions:
    - stdlib logging with a small JSONFormatter, configured from the lifespan
"""

import logging
import json
from datetime import datetime, timezone

LOG_FIELDS = (
    "subject_id", "error_code", "attempt", "delay_ms", "status_code",
    "service_code", "cache_key", "tag", "table", "path", "purged",
)
SECRET_FIELDS = ("token", "password", "password_hash", "cookie")
REDACTED = "[redacted]"

_HANDLER_MARK = "_admin_gateway"


class SecretScrubFilter(logging.Filter):
    """Overwrite credential-bearing record attributes before formatting."""

    def filter(self, record: logging.LogRecord) -> bool:
        for name in SECRET_FIELDS:
            if name in record.__dict__:
                setattr(record, name, REDACTED)
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per record, extras restricted to LOG_FIELDS."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(
            (field, record.__dict__[field])
            for field in LOG_FIELDS
            if record.__dict__.get(field) is not None
        )
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def _build_handler(fmt: str) -> logging.Handler:
    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s",
        ))
    handler.addFilter(SecretScrubFilter())
    setattr(handler, _HANDLER_MARK, True)
    return handler


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    """Install the gateway's root handler, replacing a previous one."""
    root = logging.getLogger()
    for existing in list(root.handlers):
        if getattr(existing, _HANDLER_MARK, False):
            root.removeHandler(existing)
    root.addHandler(_build_handler(fmt))
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
