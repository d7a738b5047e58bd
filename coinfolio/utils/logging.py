# coinfolio/utils/logging.py
"""
Logging configuration for coinfolio.

Every module logs through `logging.getLogger(__name__)`, so all engine
records live under the "coinfolio" logger. The engine is a library: it
never configures logging on import. A host application that wants the
engine's own output format calls setup_logging() once at startup.

Usage:
    from coinfolio.utils import setup_logging

    setup_logging()                              # from LOG_LEVEL / LOG_FORMAT
    setup_logging(level="DEBUG", log_format="json")

Log Levels:
    DEBUG   - Per-computation detail (open lots, day ranges, fill policy, unpriced symbols)
    INFO    - One line per service call (asset valued, portfolio valued, history built)
    WARNING - Degraded results (asset isolated, foreign-currency fee left out)

Environment Configuration:
    LOG_LEVEL=DEBUG       # See everything
    LOG_FORMAT=json       # One JSON object per line
    LOG_FORMAT=text       # timestamp | level | logger | message (default)
"""

import json
import logging
import sys
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, TextIO

from coinfolio.config import settings

PACKAGE_LOGGER = "coinfolio"

TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
TEXT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# Attributes every LogRecord carries; anything else came in via `extra=`
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


def _json_default(value: Any) -> str:
    """Serialize the engine's value types without losing precision."""
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


class JsonFormatter(logging.Formatter):
    """
    One JSON object per record.

    {
        "timestamp": "2024-01-15T10:30:00.123456+00:00",
        "level": "WARNING",
        "logger": "coinfolio.services.valuation.calculators",
        "message": "Excluding BTC from portfolio totals: ...",
        "extra": {"portfolio_id": "main"}
    }

    Decimals in `extra` are written as strings.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        extra = {
            key: value for key, value in vars(record).items()
            if key not in _RECORD_ATTRS
        }
        if extra:
            entry["extra"] = extra

        return json.dumps(entry, default=_json_default)


def setup_logging(
        level: str | None = None,
        log_format: str | None = None,
        stream: TextIO | None = None,
) -> logging.Logger:
    """
    Attach a single handler to the "coinfolio" logger.

    Calling it again replaces the previous handler rather than adding a
    second one. Records stop at the package logger so they are not
    printed twice by a root handler the host configured.

    Args:
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL (default: settings.log_level)
        log_format: "text" or "json" (default: settings.log_format)
        stream: Where to write (default: stdout)

    Returns:
        The configured package logger

    Raises:
        ValueError: If level is not a known level name
    """
    level_name = level or settings.log_level
    format_name = (log_format or settings.log_format).lower()

    if format_name == "json":
        formatter: logging.Formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(fmt=TEXT_FORMAT, datefmt=TEXT_DATE_FORMAT)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(formatter)

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(_get_log_level(level_name))
    package_logger.handlers.clear()
    package_logger.addHandler(handler)
    package_logger.propagate = False

    package_logger.debug(
        f"Logging configured: level={level_name}, format={format_name}",
        extra={"config": {"level": level_name, "format": format_name}},
    )
    return package_logger


def _get_log_level(level_name: str) -> int:
    """
    Map a level name to its logging constant.

    Raises:
        ValueError: If level_name is not a known level
    """
    key = level_name.strip().upper()
    if key not in _LEVELS:
        raise ValueError(
            f"Invalid log level: '{level_name}'. "
            f"Valid levels are: {', '.join(_LEVELS)}"
        )
    return _LEVELS[key]


def get_logger(name: str) -> logging.Logger:
    """Logger for `name`; pass __name__ so it nests under "coinfolio"."""
    return logging.getLogger(name)
