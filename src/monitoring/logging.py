"""
Structured logging for the revenue share engine.

Provides JSON-formatted logging for log aggregation and a colored
console format for development.

Features:
- JSON output format for easy parsing
- Calculation context (product, model, request_id, ...)
- Partial redaction of buyer identifiers that are e-mail addresses
- Configurable log level and format from EngineConfig
"""

import json
import logging
import re
import sys
import threading
from datetime import UTC, datetime
from typing import Any

# Buyers are frequently identified by e-mail; keep the domain, hide the rest
EMAIL_PATTERN = re.compile(r"([a-zA-Z0-9._%+-])[a-zA-Z0-9._%+-]*@([a-zA-Z0-9.-]+\.[a-zA-Z]{2,})")

# LogRecord attributes that are not user-supplied extras
_RESERVED_ATTRS = frozenset({
    "name",
    "msg",
    "args",
    "created",
    "filename",
    "funcName",
    "levelname",
    "levelno",
    "lineno",
    "module",
    "msecs",
    "pathname",
    "process",
    "processName",
    "relativeCreated",
    "stack_info",
    "exc_info",
    "exc_text",
    "thread",
    "threadName",
    "message",
    "taskName",
})


def redact_buyer_ids(data: Any, depth: int = 0, max_depth: int = 10) -> Any:
    """
    Recursively redact e-mail shaped buyer identifiers.

    Args:
        data: The data to redact (dict, list, string or other)
        depth: Current recursion depth
        max_depth: Maximum recursion depth

    Returns:
        Data with e-mail local parts reduced to their first character
    """
    if depth > max_depth:
        return "[MAX_DEPTH_EXCEEDED]"

    if isinstance(data, dict):
        return {
            redact_buyer_ids(key, depth + 1, max_depth): redact_buyer_ids(value, depth + 1, max_depth)
            for key, value in data.items()
        }
    if isinstance(data, list):
        return [redact_buyer_ids(item, depth + 1, max_depth) for item in data]
    if isinstance(data, str):
        return EMAIL_PATTERN.sub(r"\1***@\2", data)
    return data


# Thread-local storage for calculation context
_log_context = threading.local()


def set_log_context(**kwargs) -> None:
    """Set context values for the current thread."""
    if not hasattr(_log_context, "data"):
        _log_context.data = {}
    _log_context.data.update(kwargs)


def clear_log_context() -> None:
    """Clear the current thread's context."""
    _log_context.data = {}


def get_log_context() -> dict[str, Any]:
    """Get the current thread's context."""
    return getattr(_log_context, "data", {})


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {k: v for k, v in record.__dict__.items() if k not in _RESERVED_ATTRS}


class JSONFormatter(logging.Formatter):
    """
    JSON log formatter for structured logging.

    Output format:
    {
        "timestamp": "2024-01-15T10:30:00.000Z",
        "level": "INFO",
        "logger": "buy_to_earn",
        "message": "Tracked token reached payback",
        "context": {"product": "ebook"},
        "payback_point": 1534,
        ...
    }
    """

    def __init__(self, include_stack_info: bool = True, redact: bool = True):
        super().__init__()
        self.include_stack_info = include_stack_info
        self.redact = redact

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        if self.redact:
            message = redact_buyer_ids(message)

        log_entry = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": message,
        }

        if record.levelno >= logging.WARNING:
            log_entry["location"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }

        if record.exc_info and self.include_stack_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        context = get_log_context()
        if context:
            log_entry["context"] = redact_buyer_ids(context) if self.redact else context

        for key, value in _extra_fields(record).items():
            log_entry[key] = redact_buyer_ids(value) if self.redact else value

        return json.dumps(log_entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """
    Human-readable console formatter with colors.

    For development use - shows colored, readable output.
    """

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, "")
        reset = self.RESET

        timestamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]
        level = record.levelname[0]

        msg = f"{color}{timestamp} {level} [{record.name}]{reset} {record.getMessage()}"

        context = get_log_context()
        if context:
            ctx_str = " ".join(f"{k}={v}" for k, v in context.items())
            msg += f" {color}({ctx_str}){reset}"

        extras = [f"{key}={value}" for key, value in _extra_fields(record).items()]
        if extras:
            msg += f" [{', '.join(extras)}]"

        if record.exc_info:
            msg += "\n" + self.formatException(record.exc_info)

        return msg


def configure_logging(
    level: str = "INFO",
    json_output: bool = False,
    log_file: str | None = None,
) -> None:
    """
    Configure logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: Use JSON format instead of the console format
        log_file: Optional file path for log output (always JSON)
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    root_logger.handlers.clear()

    formatter = JSONFormatter() if json_output else ConsoleFormatter()

    # stderr keeps stdout clean for CLI JSON output
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(file_handler)

    logging.getLogger("werkzeug").setLevel(logging.WARNING)


def configure_from_config(config) -> None:
    """Configure logging from an EngineConfig."""
    configure_logging(level=config.log_level, json_output=config.log_format == "json")


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


class LoggingContext:
    """
    Context manager for adding temporary context to logs.

    Usage:
        with LoggingContext(product="ebook", model="buy_to_earn"):
            logger.info("Simulating")
    """

    def __init__(self, **kwargs):
        self.context = kwargs
        self.previous_context = {}

    def __enter__(self):
        self.previous_context = get_log_context().copy()
        set_log_context(**self.context)
        return self

    def __exit__(self, _exc_type, _exc_val, _exc_tb):
        clear_log_context()
        if self.previous_context:
            set_log_context(**self.previous_context)
        return False
