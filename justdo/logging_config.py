"""
Logging configuration for justdo.

Console output is plain text for local use or one JSON object per line when
logs are shipped. A rotating justdo.log is kept under the logs directory.
Tool execution logs carry `tool` and `channel` context through `extra=`;
both formatters surface it.
"""

import json
import logging
import logging.handlers
import os
import sys
from datetime import datetime, timezone

LOG_FILENAME = "justdo.log"
LOG_MAX_BYTES = 10 * 1024 * 1024
LOG_BACKUP_COUNT = 5

# Record attributes passed via `extra=` that are worth keeping in output
CONTEXT_FIELDS = ("tool", "channel", "entry_path")

NOISY_LOGGERS = ("httpx", "httpcore", "anthropic", "aiosqlite")

_TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s%(context)s"


def _context_of(record: logging.LogRecord) -> dict:
    return {
        field: getattr(record, field)
        for field in CONTEXT_FIELDS
        if getattr(record, field, None) is not None
    }


class JsonFormatter(logging.Formatter):
    """One JSON object per record, with any tool context inlined."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(_context_of(record))
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class ContextTextFormatter(logging.Formatter):
    """Text formatter that appends ` [tool=... channel=...]` when present."""

    def format(self, record: logging.LogRecord) -> str:
        context = _context_of(record)
        record.context = (
            " [" + " ".join(f"{k}={v}" for k, v in context.items()) + "]"
            if context else ""
        )
        return super().format(record)


def _console_handler(level: int, json_logs: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    if json_logs:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(ContextTextFormatter(fmt=_TEXT_FORMAT, datefmt="%H:%M:%S"))
    return handler


def _file_handler(level: int, logs_dir: str) -> logging.Handler:
    os.makedirs(logs_dir, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        os.path.join(logs_dir, LOG_FILENAME),
        maxBytes=LOG_MAX_BYTES,
        backupCount=LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(ContextTextFormatter(fmt=_TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    return handler


def setup_logging(log_level: str, logs_dir: str | None, json_logs: bool = False) -> None:
    """
    Configure the root logger. An unknown level name falls back to INFO;
    an empty logs_dir disables the file handler.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    if not isinstance(level, int):
        level = logging.INFO

    handlers = [_console_handler(level, json_logs)]
    if logs_dir:
        handlers.append(_file_handler(level, logs_dir))

    logging.basicConfig(level=level, handlers=handlers, force=True)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
