"""
Structured Logging Configuration Module

Ledger events (postings, rule definitions, interest postings, rejected
commands) are logged with structured fields naming the account, the
action and the affected resource. Output is one JSON object per line, or
plain text with the structured fields appended.
"""

import logging
import json
from datetime import datetime, timezone
from typing import Optional

# Record attributes set by log_action, in output order
STRUCTURED_FIELDS = ("account_id", "action", "resource", "correlation_id", "extra")

TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _structured(record: logging.LogRecord) -> dict:
    fields = {}
    for name in STRUCTURED_FIELDS:
        value = getattr(record, name, None)
        if value is not None:
            fields[name] = value
    return fields


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging"""

    def format(self, record):
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log_entry.update(_structured(record))

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


class TextFormatter(logging.Formatter):
    """Plain text lines with structured fields appended as key=value"""

    def __init__(self):
        super().__init__(TEXT_FORMAT)

    def format(self, record):
        line = super().format(record)
        fields = _structured(record)
        if fields:
            line += " [" + " ".join(f"{k}={v}" for k, v in fields.items()) + "]"
        return line


def setup_logging(level: str = "INFO", logger_name: str = "gic_ledger",
                  fmt: str = "json", log_file: Optional[str] = None) -> logging.Logger:
    """
    Setup structured logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        logger_name: Name of the root application logger
        fmt: "json" for structured output, "text" for human-readable lines
        log_file: Path to log file; logs to stderr when None

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(logger_name)

    # Remove existing handlers to avoid duplicates
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    handler = logging.FileHandler(log_file) if log_file else logging.StreamHandler()
    handler.setFormatter(TextFormatter() if fmt == "text" else JSONFormatter())

    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper()))
    logger.propagate = False

    return logger


def get_logger(name: str = "gic_ledger") -> logging.Logger:
    """Get logger instance"""
    return logging.getLogger(name)


def log_action(logger: logging.Logger, level: str, message: str,
               account_id: Optional[str] = None, action: Optional[str] = None,
               resource: Optional[str] = None, correlation_id: Optional[str] = None,
               extra: Optional[dict] = None):
    """
    Log a ledger event with structured data.

    Args:
        logger: Logger instance
        level: Log level (info, warning, error, etc.)
        message: Log message
        account_id: Account the event applies to
        action: Event name, e.g. "post" or "define_rule"
        resource: Affected resource, e.g. "posting:20230601-01"
        correlation_id: Correlation ID for request tracing
        extra: Additional structured data
    """
    fields = {
        "account_id": account_id,
        "action": action,
        "resource": resource,
        "correlation_id": correlation_id,
        "extra": extra or None,
    }
    logger.log(
        getattr(logging, level.upper()), message,
        extra={k: v for k, v in fields.items() if v is not None},
        stacklevel=2
    )
