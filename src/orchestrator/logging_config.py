"""
Structured Logging Configuration
================================

Logging for the analysis CLI and API:
- JSON lines for log aggregation, or a readable console format
- Any `extra={...}` fields (stage, duration, reviews, ...) kept on the line
- `business_context()` tags every record emitted during one analysis
  with the business being analyzed
- Optional rotating log file

Usage:
    from src.orchestrator.logging_config import configure_logging, business_context

    configure_logging(get_settings().logging)
    with business_context("Blue Door Cafe"):
        analyze(reviews)
"""

import json
import logging
import logging.handlers
import os
import sys
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Optional

# Attributes every LogRecord carries; anything else came from `extra=` or a filter.
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}

_LIBRARY_LEVELS = {
    "uvicorn.access": logging.WARNING,
    "httpx": logging.WARNING,
}


def record_extras(record: logging.LogRecord) -> Dict[str, Any]:
    """Fields attached to a record beyond the standard LogRecord attributes."""
    return {
        key: value for key, value in vars(record).items()
        if key not in _RECORD_ATTRS and not key.startswith("_") and value is not None
    }


class JSONFormatter(logging.Formatter):
    """
    One JSON object per line.

        {"ts": "...", "level": "INFO", "logger": "src.reviews.enhanced_analyzer",
         "msg": "Analyzed 120 reviews ...", "business": "Blue Door Cafe", "stage": "analysis", ...}
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        entry.update(record_extras(record))
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """Readable lines with extras appended as key=value pairs."""

    def __init__(self):
        super().__init__(
            "%(asctime)s [%(levelname)-8s] %(name)-36s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extras = record_extras(record)
        if extras:
            line += "  " + " ".join(f"{k}={v}" for k, v in sorted(extras.items()))
        return line


class _BusinessFilter(logging.Filter):
    def __init__(self, business: str):
        super().__init__()
        self.business = business

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "business", None) is None:
            record.business = self.business
        return True


@contextmanager
def business_context(business: Optional[str]):
    """Tag records emitted by root handlers with a business name while active."""
    if not business:
        yield
        return

    business_filter = _BusinessFilter(business)
    handlers = list(logging.getLogger().handlers)
    for handler in handlers:
        handler.addFilter(business_filter)
    try:
        yield
    finally:
        for handler in handlers:
            handler.removeFilter(business_filter)


def setup_logging(
    level: str = "INFO",
    json_output: bool = False,
    log_file: Optional[str] = None,
    max_bytes: int = 10 * 1024 * 1024,  # 10 MB
    backup_count: int = 5,
):
    """
    Configure root logging.

    Console output goes to stderr; stdout is reserved for CLI reports and
    JSON results.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()

    formatter = JSONFormatter() if json_output else ConsoleFormatter()

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(formatter)
    root.addHandler(console)

    if log_file:
        os.makedirs(os.path.dirname(log_file) or ".", exist_ok=True)
        rotating = logging.handlers.RotatingFileHandler(
            log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8",
        )
        rotating.setFormatter(formatter)
        root.addHandler(rotating)

    for name, lib_level in _LIBRARY_LEVELS.items():
        logging.getLogger(name).setLevel(lib_level)

    root.debug(f"Logging configured: level={level} json={json_output} file={log_file or 'none'}")


def configure_logging(config, verbose: bool = False):
    """setup_logging() from a LoggingConfig (src.data.config)."""
    setup_logging(
        level="DEBUG" if verbose else config.level,
        json_output=config.json_logs,
        log_file=config.log_file,
    )
