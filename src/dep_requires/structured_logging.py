"""
Structured logging configuration for dep-requires.

Provides consistent, machine-readable logging of resolution, probing and
check events. Records go to stderr so command output on stdout stays clean.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

# LogRecord attributes that are not event payload
_RESERVED_ATTRS = {
    "name",
    "msg",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "taskName",
    "getMessage",
    "exc_info",
    "exc_text",
    "stack_info",
    "message",
}


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "component": record.name,
            "message": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_entry[key] = value

        return json.dumps(log_entry, default=str)


class PlainFormatter(logging.Formatter):
    """Human-readable formatter that still carries the event payload."""

    def format(self, record: logging.LogRecord) -> str:
        extras = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRS
        }
        event_type = extras.pop("event_type", record.getMessage())
        fields = " ".join(f"{key}={value}" for key, value in extras.items())
        return f"{record.levelname} {record.name}: {event_type} {fields}".rstrip()


class EventLogger:
    """Structured logger for dependency check events."""

    def __init__(self, name: str):
        self.logger = logging.getLogger(f"dep_requires.{name}")
        self.logger.propagate = False
        self._setup_logger()
        self.check_context: Dict[str, Any] = {}

    def _setup_logger(self) -> None:
        """Setup logger with structured formatting."""
        if not self.logger.handlers:
            handler = logging.StreamHandler(sys.stderr)
            handler.setFormatter(StructuredFormatter())
            self.logger.addHandler(handler)
            self.logger.setLevel(logging.WARNING)

    def set_formatter(self, formatter: logging.Formatter) -> None:
        for handler in self.logger.handlers:
            handler.setFormatter(formatter)

    def set_check_context(
        self,
        check_id: Optional[str] = None,
        source_file: Optional[str] = None,
        total_dependencies: Optional[int] = None,
    ) -> None:
        """Set batch check context for logging."""
        self.check_context = {}
        if check_id:
            self.check_context["check_id"] = check_id
        if source_file:
            self.check_context["source_file"] = source_file
        if total_dependencies is not None:
            self.check_context["total_dependencies"] = total_dependencies

    def clear_check_context(self) -> None:
        """Clear batch check context."""
        self.check_context.clear()

    def _log(self, level: str, event_type: str, **kwargs) -> None:
        log_data = {"event_type": event_type, **self.check_context, **kwargs}
        getattr(self.logger, level)(event_type, extra=log_data)

    def info(self, event_type: str, **kwargs) -> None:
        """Log info level event."""
        self._log("info", event_type, **kwargs)

    def warning(self, event_type: str, **kwargs) -> None:
        """Log warning level event."""
        self._log("warning", event_type, **kwargs)

    def error(self, event_type: str, **kwargs) -> None:
        """Log error level event."""
        self._log("error", event_type, **kwargs)

    def debug(self, event_type: str, **kwargs) -> None:
        """Log debug level event."""
        self._log("debug", event_type, **kwargs)


# Global logger instances
_resolver_logger = EventLogger("resolver")
_prober_logger = EventLogger("prober")
_checker_logger = EventLogger("checker")

_ALL_LOGGERS = (_resolver_logger, _prober_logger, _checker_logger)


def get_resolver_logger() -> EventLogger:
    """Get executable resolution logger."""
    return _resolver_logger


def get_prober_logger() -> EventLogger:
    """Get version probing logger."""
    return _prober_logger


def get_checker_logger() -> EventLogger:
    """Get batch check logger."""
    return _checker_logger


def log_probe_attempt(
    path: str, argument: str, success: bool, error: Optional[str] = None
) -> None:
    """Log a single probe invocation."""
    log_data: Dict[str, Any] = {
        "path": path,
        "argument": argument,
        "matched": success,
    }
    if error:
        log_data["error"] = error
    get_prober_logger().debug("probe_attempt", **log_data)


def log_version_detected(path: str, argument: str, version: str) -> None:
    """Log the version extracted from a successful probe."""
    get_prober_logger().info(
        "version_detected", path=path, argument=argument, version=version
    )


def log_check_result(
    name: str,
    status: str,
    found_version: Optional[str] = None,
    requirement: Optional[str] = None,
) -> None:
    """Log the outcome of checking one dependency."""
    logger = get_checker_logger()

    log_data: Dict[str, Any] = {"dependency": name, "status": status}
    if found_version is not None:
        log_data["found_version"] = found_version
    if requirement is not None:
        log_data["requirement"] = requirement

    if status in ("MISSING", "ERROR", "UNSATISFIED"):
        logger.warning("dependency_check_failed", **log_data)
    else:
        logger.info("dependency_check_passed", **log_data)


def set_check_context(
    check_id: Optional[str] = None,
    source_file: Optional[str] = None,
    total_dependencies: Optional[int] = None,
) -> None:
    """Set global check context for all loggers."""
    for logger in _ALL_LOGGERS:
        logger.set_check_context(check_id, source_file, total_dependencies)


def clear_check_context() -> None:
    """Clear global check context."""
    for logger in _ALL_LOGGERS:
        logger.clear_check_context()


def configure_logging(log_level: str = "WARNING", enable_json: bool = True) -> None:
    """Configure level and output format of the dep-requires loggers."""
    level = getattr(logging, log_level.upper(), logging.WARNING)
    formatter: logging.Formatter = (
        StructuredFormatter() if enable_json else PlainFormatter()
    )

    for logger in _ALL_LOGGERS:
        logger.logger.setLevel(level)
        logger.set_formatter(formatter)
