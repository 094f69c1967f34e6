"""Structured logging configuration for moto-finance."""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, TextIO

from moto_finance.exceptions import ConfigurationError

# Attributes every LogRecord carries; anything else came in through ``extra=``.
_RESERVED_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}

# Third-party loggers that are too chatty below WARNING
_QUIET_LOGGERS = ("faker",)

STANDARD_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def setup_logging(
    level: str = "INFO",
    format_type: str = "standard",
    stream: TextIO | None = None,
) -> None:
    """Configure the root logger for scripts and the financing service.

    Parameters
    ----------
    level : str
        Log level name; unknown names fall back to INFO.
    format_type : str
        "standard" (pipe-separated text) or "json" (one document per line).
    stream : TextIO | None
        Destination of log lines (default: stdout).

    Raises
    ------
    ConfigurationError
        If ``format_type`` is not recognised.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(build_formatter(format_type))

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)

    logging.getLogger("moto_finance").setLevel(log_level)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def build_formatter(format_type: str) -> logging.Formatter:
    """Formatter for the given ``MOTOFIN_LOG_FORMAT`` value."""
    if format_type == "json":
        return JsonFormatter()
    if format_type == "standard":
        return logging.Formatter(fmt=STANDARD_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    raise ConfigurationError(f"Unknown log format {format_type!r} (expected 'standard' or 'json')")


class JsonFormatter(logging.Formatter):
    """One JSON document per record.

    Values passed through ``extra=`` (``contract_id``, ``installment_number``)
    become top-level keys so refresh and payment logs can be filtered by
    contract.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                log_data[key] = value

        return json.dumps(log_data, default=str, ensure_ascii=False)


def get_logger(name: str) -> logging.Logger:
    """Module logger; scripts call this after ``setup_logging``."""
    return logging.getLogger(name)
