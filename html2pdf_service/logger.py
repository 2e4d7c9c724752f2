"""
Logging setup for the PDF service.

Two output formats: "simple" for terminals and "json" (one object per line)
for log aggregators. Render requests log through a RequestLogger so every
line they write carries the request id, both in the message prefix and as
a `request_id` field in JSON output.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Optional

SIMPLE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
SIMPLE_DATEFMT = "%Y-%m-%d %H:%M:%S"


class JsonFormatter(logging.Formatter):
    """Serialize each record as a single JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        request_id = getattr(record, "request_id", None)
        if request_id:
            entry["request_id"] = request_id
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


class RequestLogger(logging.LoggerAdapter):
    """
    Logger adapter bound to one HTTP request.

    Messages get a `[req:xxxxxxxx]` prefix and records get a `request_id`
    attribute that JsonFormatter emits as its own field.
    """

    def __init__(self, logger: logging.Logger, request_id: Optional[str] = None):
        super().__init__(logger, {"request_id": request_id})

    @property
    def request_id(self) -> Optional[str]:
        return self.extra["request_id"]

    def process(self, msg, kwargs):
        if not self.request_id:
            return msg, kwargs
        extra = dict(kwargs.get("extra") or {})
        extra.setdefault("request_id", self.request_id)
        kwargs["extra"] = extra
        return f"[req:{self.request_id[:8]}] {msg}", kwargs


def build_formatter(format: str = "simple") -> logging.Formatter:
    """Formatter for the given output format name."""
    if format == "json":
        return JsonFormatter()
    return logging.Formatter(SIMPLE_FORMAT, datefmt=SIMPLE_DATEFMT)


def setup_logging(level: str = "INFO", format: str = "simple") -> None:
    """
    Route all logging to a single stdout handler.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        format: Log format ("simple" or "json")
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(build_formatter(format))

    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)


def get_logger(name: str, request_id: Optional[str] = None) -> RequestLogger:
    """Logger for `name`, optionally bound to a request id."""
    return RequestLogger(logging.getLogger(name), request_id)
