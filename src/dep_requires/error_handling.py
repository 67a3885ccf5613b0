"""
Error handling for dep-requires.

Provides the single exception type raised by the public API, plus structured
error reporting with callbacks and statistics so callers embedding the library
can observe failures without parsing messages.

The ``dep_requires`` logger only writes to stderr once the command line
enables it. Library callers see nothing unless they configure logging.
"""

import logging
import sys
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional


class ErrorLevel(Enum):
    """Severity a failure is reported with."""

    DEBUG = "DEBUG"
    WARNING = "WARNING"
    ERROR = "ERROR"


class ErrorCategory(Enum):
    """Which stage of a check failed."""

    RESOLUTION = "RESOLUTION"
    PROBE = "PROBE"
    OPERATOR = "OPERATOR"
    VALIDATION = "VALIDATION"
    CONFIGURATION = "CONFIGURATION"
    MANIFEST = "MANIFEST"


class VersionException(Exception):
    """Raised when a dependency, its version, or a comparison cannot be evaluated."""

    def __init__(
        self, message: str, category: ErrorCategory = ErrorCategory.VALIDATION
    ):
        super().__init__(message)
        self.message = message
        self.category = category


@dataclass
class ErrorContext:
    """One reported failure, as handed to callbacks."""

    level: ErrorLevel
    category: ErrorCategory
    message: str
    module: str
    function: str
    details: Dict[str, Any] = field(default_factory=dict)
    exception: Optional[Exception] = None
    suggestions: List[str] = field(default_factory=list)


ErrorCallback = Callable[[ErrorContext], None]

# Suggestions attached to each category when the caller gives none
DEFAULT_SUGGESTIONS: Dict[ErrorCategory, List[str]] = {
    ErrorCategory.RESOLUTION: [
        "Check that the executable is installed",
        "Verify the directory containing it is on PATH",
    ],
    ErrorCategory.PROBE: [
        "Run the executable with --version manually and inspect the output",
        "The tool may not report a major.minor[.patch] version",
    ],
    ErrorCategory.OPERATOR: [
        "Combine EQUAL with at most one of LESS or GREATER",
    ],
    ErrorCategory.VALIDATION: [
        "Use a dotted numeric version such as 1.2 or 1.2.3",
    ],
}

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class ErrorHandler:
    """
    Collects failures from resolution, probing and manifest parsing.

    Each report is logged, counted under ``<CATEGORY>_<LEVEL>`` and passed to
    matching callbacks.
    """

    def __init__(
        self,
        logger_name: str = "dep_requires",
        log_level: int = logging.WARNING,
        enable_callbacks: bool = True,
        log_to_stderr: bool = False,
    ):
        """
        Initialize error handler.

        Args:
            logger_name: Name for the logger
            log_level: Logging level
            enable_callbacks: Whether to enable error callbacks
            log_to_stderr: Write reports to stderr instead of discarding them
        """
        self.logger = logging.getLogger(logger_name)
        self.logger.setLevel(log_level)
        for existing in list(self.logger.handlers):
            self.logger.removeHandler(existing)
        if log_to_stderr:
            handler: logging.Handler = logging.StreamHandler(sys.stderr)
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
        else:
            handler = logging.NullHandler()
        self.logger.addHandler(handler)
        self.enable_callbacks = enable_callbacks
        self.error_callbacks: Dict[ErrorCategory, List[ErrorCallback]] = {}
        self.global_callbacks: List[ErrorCallback] = []
        self.error_stats: Dict[str, int] = {}

    def register_callback(
        self, callback: ErrorCallback, category: Optional[ErrorCategory] = None
    ):
        """Register a callback for one category, or for every error if None."""
        if not self.enable_callbacks:
            return

        if category is None:
            self.global_callbacks.append(callback)
        else:
            self.error_callbacks.setdefault(category, []).append(callback)

    def handle_error(
        self,
        level: ErrorLevel,
        category: ErrorCategory,
        message: str,
        module: str,
        function: str,
        exception: Optional[Exception] = None,
        details: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
    ) -> ErrorContext:
        """
        Record a failure, log it and notify callbacks.

        Returns:
            ErrorContext: The created error context
        """
        context = ErrorContext(
            level=level,
            category=category,
            message=message,
            module=module,
            function=function,
            details=details or {},
            exception=exception,
            suggestions=(
                suggestions
                if suggestions is not None
                else list(DEFAULT_SUGGESTIONS.get(category, []))
            ),
        )

        stat_key = f"{category.value}_{level.value}"
        self.error_stats[stat_key] = self.error_stats.get(stat_key, 0) + 1

        self._log_context(context)

        if self.enable_callbacks:
            callbacks = self.error_callbacks.get(category, []) + self.global_callbacks
            for callback in callbacks:
                try:
                    callback(context)
                except Exception as cb_error:
                    self.logger.error(f"Error in callback: {cb_error}")

        return context

    def _log_context(self, context: ErrorContext) -> None:
        log_data = {
            "category": context.category.value,
            "module": context.module,
            "function": context.function,
            "details": context.details,
        }
        if context.exception:
            log_data["exception"] = type(context.exception).__name__
        if context.suggestions:
            log_data["suggestions"] = context.suggestions

        level = getattr(logging, context.level.value)
        # Tracebacks only at DEBUG verbosity
        exc_info = (
            context.exception
            if context.exception and self.logger.isEnabledFor(logging.DEBUG)
            else None
        )
        self.logger.log(level, f"{context.message} | {log_data}", exc_info=exc_info)

    def warning(
        self,
        category: ErrorCategory,
        message: str,
        module: str,
        function: str,
        **kwargs,
    ) -> ErrorContext:
        return self.handle_error(
            ErrorLevel.WARNING, category, message, module, function, **kwargs
        )

    def error(
        self,
        category: ErrorCategory,
        message: str,
        module: str,
        function: str,
        **kwargs,
    ) -> ErrorContext:
        return self.handle_error(
            ErrorLevel.ERROR, category, message, module, function, **kwargs
        )

    def report_exception(
        self,
        exc: VersionException,
        module: str,
        function: str,
        level: ErrorLevel = ErrorLevel.ERROR,
        **kwargs,
    ) -> ErrorContext:
        """Report a VersionException under its own category."""
        return self.handle_error(
            level, exc.category, exc.message, module, function, exception=exc, **kwargs
        )

    def get_error_stats(self) -> Dict[str, int]:
        return self.error_stats.copy()

    def reset_stats(self):
        self.error_stats.clear()


_global_error_handler: Optional[ErrorHandler] = None


def get_error_handler() -> ErrorHandler:
    """Return the shared handler, creating a silent one on first use."""
    global _global_error_handler
    if _global_error_handler is None:
        _global_error_handler = ErrorHandler()
    return _global_error_handler


def setup_error_handling(
    log_level: int = logging.WARNING,
    enable_callbacks: bool = True,
    logger_name: str = "dep_requires",
    log_to_stderr: bool = False,
) -> ErrorHandler:
    """
    Replace the shared handler.

    Args:
        log_level: Logging level
        enable_callbacks: Whether to enable callbacks
        logger_name: Logger name
        log_to_stderr: Attach a stderr handler, as the command line does

    Returns:
        ErrorHandler: Configured error handler
    """
    global _global_error_handler
    _global_error_handler = ErrorHandler(
        logger_name, log_level, enable_callbacks, log_to_stderr
    )
    return _global_error_handler
