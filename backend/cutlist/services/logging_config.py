"""
Structured logging for the cutting-list optimizer.

JSON lines in production (one object per record, with any calculation or
request context passed through ``extra=``); a plain single-line format for
local runs when LOG_FORMAT=text.
"""
import json
import logging
import sys
from datetime import datetime, timezone

# Context keys services attach through ``extra=``; anything else is dropped.
CONTEXT_FIELDS = (
    "section_id",
    "duration_ms",
    "function",
    "request_id",
    "http_method",
    "http_path",
    "http_status",
)

NOISY_LOGGERS = ("uvicorn.access", "httpcore", "httpx")


def _context(record: logging.LogRecord) -> dict:
    return {key: getattr(record, key) for key in CONTEXT_FIELDS if hasattr(record, key)}


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record):
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        entry.update(_context(record))
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable lines; context fields are appended as key=value."""

    def __init__(self):
        super().__init__("%(asctime)s [%(name)s] %(levelname)s: %(message)s")

    def format(self, record):
        line = super().format(record)
        context = _context(record)
        if context:
            line += " " + " ".join(f"{k}={v}" for k, v in context.items())
        return line


def setup_logging(level: str = "INFO", json_output: bool = True) -> None:
    """Install a single stdout handler on the root logger."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter() if json_output else TextFormatter())
    root.handlers = [handler]

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
