"""
Error reporting shared by every mcmonitor subpackage.

Failures fall in two groups. Scrape-level failures (configuration, an
unreadable servers root, the process table) are logged and re-raised.
Per-server probe failures are logged and swallowed so the server keeps
its classification with one field missing.
"""

import logging
import sys
from enum import Enum
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)


class ErrorSeverity(Enum):
    """Log level an error is reported at."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


_LOG_LEVELS = {
    ErrorSeverity.DEBUG: logging.DEBUG,
    ErrorSeverity.INFO: logging.INFO,
    ErrorSeverity.WARNING: logging.WARNING,
    ErrorSeverity.ERROR: logging.ERROR,
    ErrorSeverity.CRITICAL: logging.CRITICAL,
}


class ValidationError(Exception):
    """
    A configuration value is missing, mistyped or out of range.

    Attributes:
        field_name: Dotted TOML key of the offending setting, e.g. ``exporter.port``.
        value: The rejected value as read from the file.
    """

    def __init__(self, message: str, field_name: Optional[str] = None,
                 value: Any = None, severity: ErrorSeverity = ErrorSeverity.ERROR):
        super().__init__(message)
        self.field_name = field_name
        self.value = value
        self.severity = severity


def handle_error(
    error: Exception,
    context: str,
    severity: Union[ErrorSeverity, str] = ErrorSeverity.ERROR,
    reraise: bool = True,
    logger: Optional[logging.Logger] = None
) -> None:
    """
    Log an error under a context description, then optionally re-raise it.

    Tracebacks are attached at DEBUG and CRITICAL; a WARNING logs a one-line
    message and keeps the traceback at DEBUG so routine probe failures stay
    readable.

    Args:
        error: The exception that occurred
        context: What was being attempted, e.g. "liveness of alpha (pid 42)"
        severity: ErrorSeverity or its string value
        reraise: Re-raise ``error`` after logging
        logger: Logger of the calling module (defaults to this module's)
    """
    log = logger or globals()["logger"]
    if isinstance(severity, str):
        severity = ErrorSeverity(severity.lower())

    message = f"Error in {context}: {error}"
    with_traceback = severity in (ErrorSeverity.DEBUG, ErrorSeverity.CRITICAL)
    log.log(_LOG_LEVELS[severity], message, exc_info=error if with_traceback else None)
    if severity is ErrorSeverity.WARNING:
        log.debug(f"Traceback for {context}", exc_info=error)

    if reraise:
        raise error


def handle_config_error(error: Exception, context: str, **kwargs) -> None:
    """Report a configuration failure."""
    handle_error(error, f"config {context}", **kwargs)


def handle_file_error(error: Exception, context: str, **kwargs) -> None:
    """Report a filesystem failure."""
    handle_error(error, f"file {context}", **kwargs)


def handle_probe_error(error: Exception, context: str, **kwargs) -> None:
    """Report a failed per-server probe at WARNING. Never re-raises."""
    kwargs.setdefault("severity", ErrorSeverity.WARNING)
    handle_error(error, f"probe {context}", reraise=False, **kwargs)


def handle_cli_error(error: Exception, context: str, **kwargs) -> None:
    """Report a fatal CLI failure and exit with ``exit_code`` (default 1)."""
    exit_code = kwargs.pop("exit_code", 1)
    kwargs.setdefault("severity", ErrorSeverity.ERROR)
    handle_error(error, f"CLI {context}", reraise=False, **kwargs)
    sys.exit(exit_code)
