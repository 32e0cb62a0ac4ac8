"""TRENDLINE — Structured JSON Logging."""

import logging
import json
import sys
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator

from app.config import settings

# Fields passed via ``extra=`` that are copied into the JSON line
EXTRA_FIELDS = ("endpoint", "family", "row_count", "duration_ms", "status_code")


class JSONFormatter(logging.Formatter):
    """One JSON object per log line."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[0] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)
        log_entry.update(
            {key: getattr(record, key) for key in EXTRA_FIELDS if hasattr(record, key)}
        )
        return json.dumps(log_entry)


def get_logger(name: str) -> logging.Logger:
    """Return ``trendline.<name>`` with the JSON handler attached once."""
    logger = logging.getLogger(f"trendline.{name}")
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JSONFormatter())
        logger.addHandler(handler)
    logger.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))
    return logger


@contextmanager
def timed(logger: logging.Logger, message: str, **fields) -> Iterator[None]:
    """Log ``message`` at INFO with ``duration_ms`` once the block finishes."""
    started = time.perf_counter()
    yield
    fields["duration_ms"] = round((time.perf_counter() - started) * 1000, 2)
    logger.info(message, extra=fields)
