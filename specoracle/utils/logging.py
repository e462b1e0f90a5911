"""
Logging utilities for spec-oracle.

Console output goes through rich on stderr so that stdout stays free for
``--json-output``. File logs are one JSON object per line; a classification
event carries its verdict as top-level fields so log files can be filtered
by operation and behavior without parsing the full call report.
"""

import logging
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Dict, Any

from rich.console import Console
from rich.logging import RichHandler


# Global logger instances
_loggers: Dict[str, logging.Logger] = {}

VERDICT_FIELDS = ("operation", "behavior", "checker", "deferred")


class StructuredFormatter(logging.Formatter):
    """Formatter that outputs structured JSON logs."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        verdict = getattr(record, "verdict", None)
        if verdict:
            log_entry.update({k: verdict[k] for k in VERDICT_FIELDS if k in verdict})

        if hasattr(record, 'extra_data'):
            log_entry["data"] = record.extra_data

        return json.dumps(log_entry, default=str)


def setup_logger(
    name: str = "spec_oracle",
    level: str = "INFO",
    log_file: Optional[str] = None,
    structured: bool = False
) -> logging.Logger:
    """
    Set up and configure a logger.

    Args:
        name: Logger name
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path for JSON logs
        structured: Write JSON to the console as well

    Returns:
        Configured logger instance
    """
    levelno = getattr(logging, level.upper())
    logger = logging.getLogger(name)
    logger.setLevel(levelno)
    logger.handlers = []

    if structured:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(StructuredFormatter())
    else:
        console_handler = RichHandler(
            console=Console(stderr=True),
            show_path=False,
            markup=False,
            rich_tracebacks=True,
        )
        console_handler.setFormatter(logging.Formatter('%(name)s | %(message)s'))
    console_handler.setLevel(levelno)
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(levelno)
        file_handler.setFormatter(StructuredFormatter())
        logger.addHandler(file_handler)

    _loggers[name] = logger
    return logger


def get_logger(name: str = "spec_oracle") -> logging.Logger:
    """Get an existing logger or create one with default settings."""
    if name not in _loggers:
        return setup_logger(name)
    return _loggers[name]


def log_with_data(
    logger: logging.Logger,
    level: str,
    message: str,
    data: Dict[str, Any],
    verdict: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Log a message with additional structured data.

    Args:
        logger: Logger instance
        level: Log level
        message: Log message
        data: Additional data, written under ``data`` in JSON logs
        verdict: Classification fields promoted to the top level of JSON logs
    """
    levelno = getattr(logging, level.upper())
    if not logger.isEnabledFor(levelno):
        return
    record = logger.makeRecord(logger.name, levelno, "", 0, message, (), None)
    record.extra_data = data
    if verdict:
        record.verdict = verdict
    logger.handle(record)


def log_classification(logger: logging.Logger, report: Any, level: str = "DEBUG") -> None:
    """
    Log one classified call.

    ``report`` is a ``CallReport``; its operation and classification become
    the verdict fields and the full report goes under ``data``.
    """
    classification = report.classification
    verdict = {
        "operation": report.operation,
        "behavior": classification.behavior.value,
        "checker": classification.checker,
        "deferred": classification.deferred,
    }
    log_with_data(
        logger,
        level,
        f"{report.operation}: {classification}",
        report.to_dict(),
        verdict=verdict,
    )
