"""
Exception taxonomy and error handling helpers.

Every failure raised by provexec derives from ProvExecError and carries a
class-level ErrorKind, so callers (most notably the retry strategies) can
select errors by kind instead of by Python type.
"""

import logging
import sys
from enum import Enum
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)


class ErrorSeverity(Enum):
    """Severity levels for error handling."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorKind(Enum):
    """Tag identifying the category of a provexec failure."""
    SPAWN = "spawn"
    EXECUTION = "execution"
    TIMEOUT = "timeout"
    ROUTE_NOT_FOUND = "route_not_found"
    THUMBPRINT_RETRIEVAL = "thumbprint_retrieval"
    PARSE = "parse"
    VALIDATION = "validation"


class ProvExecError(Exception):
    """Base class for all provexec errors."""

    kind: Optional[ErrorKind] = None


class SpawnError(ProvExecError):
    """The target executable could not be launched at all."""

    kind = ErrorKind.SPAWN

    def __init__(self, message: str, command: Optional[str] = None):
        super().__init__(message)
        self.command = command


class ExecutionError(ProvExecError):
    """
    A command that had to succeed exited with a non-zero status.

    Attributes:
        command: Printable (password-masked) command line
        result: The CommandResult of the failed run, when it was captured
        output_path: File holding the streamed output, for streaming runs
    """

    kind = ErrorKind.EXECUTION

    def __init__(self, message: str, command: Optional[str] = None,
                 result: Any = None, output_path: Any = None):
        super().__init__(message)
        self.command = command
        self.result = result
        self.output_path = output_path


class ExecTimeoutError(ProvExecError, TimeoutError):
    """An operation did not complete before its wall-clock deadline."""

    kind = ErrorKind.TIMEOUT


class RouteNotFoundError(ProvExecError):
    """No local source address could be determined for a remote host."""

    kind = ErrorKind.ROUTE_NOT_FOUND


class ThumbprintRetrievalError(ProvExecError):
    """The remote CLI probe output did not contain a certificate thumbprint."""

    kind = ErrorKind.THUMBPRINT_RETRIEVAL


class ParseError(ProvExecError):
    """Tool output could not be parsed into the expected structure."""

    kind = ErrorKind.PARSE


class ValidationError(ProvExecError):
    """
    Exception raised when configuration validation fails.
    """

    kind = ErrorKind.VALIDATION

    def __init__(self, message: str, field_name: Optional[str] = None,
                 value: Any = None, severity: ErrorSeverity = ErrorSeverity.ERROR):
        super().__init__(message)
        self.field_name = field_name
        self.value = value
        self.severity = severity


def error_kind_of(error: BaseException) -> Optional[ErrorKind]:
    """Return the ErrorKind of an exception, or None for foreign exceptions."""
    kind = getattr(error, "kind", None)
    return kind if isinstance(kind, ErrorKind) else None


def handle_error(
    error: Exception,
    context: str,
    severity: Union[ErrorSeverity, str] = ErrorSeverity.ERROR,
    reraise: bool = True,
    logger: Optional[logging.Logger] = None
) -> None:
    """
    Handle errors with consistent logging and optional re-raising.

    Args:
        error: The exception that occurred
        context: Context description of where the error occurred
        severity: Severity level for logging
        reraise: Whether to re-raise the exception after logging
        logger: Logger instance to use (defaults to module logger)
    """
    effective_logger = logger or globals()['logger']

    error_msg = f"Error in {context}: {error}"

    if isinstance(severity, str):
        severity_str = severity.lower()
    else:
        severity_str = severity.value

    if severity_str == "debug":
        effective_logger.debug(error_msg, exc_info=True)
    elif severity_str == "info":
        effective_logger.info(error_msg)
    elif severity_str == "warning":
        effective_logger.warning(error_msg)
    elif severity_str == "error":
        effective_logger.error(error_msg)
    elif severity_str == "critical":
        effective_logger.critical(error_msg, exc_info=True)

    if reraise:
        raise error


def handle_config_error(error: Exception, context: str, **kwargs) -> None:
    """Handle configuration-related errors."""
    handle_error(error, f"config {context}", **kwargs)


def handle_subprocess_error(error: Exception, command: str, **kwargs) -> None:
    """Handle subprocess-related errors."""
    handle_error(error, f"subprocess command '{command}'", **kwargs)


def handle_cli_error(error: Exception, context: str, **kwargs) -> None:
    """Log a CLI-level error and exit the process."""
    exit_code = kwargs.pop('exit_code', 1)
    include_traceback = kwargs.pop('include_traceback', False)

    severity = kwargs.pop('severity', ErrorSeverity.ERROR)
    if include_traceback:
        severity = ErrorSeverity.CRITICAL
    handle_error(error, f"CLI {context}", severity=severity, reraise=False, **kwargs)

    sys.exit(exit_code)
