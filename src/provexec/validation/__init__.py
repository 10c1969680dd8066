"""
Error taxonomy, retry strategies and validation for the provexec package.

This module provides the exception hierarchy shared by every component,
the bounded exponential backoff retry policy, and configuration validators.
"""

# Exception taxonomy and error handling
from .exceptions import (
    ErrorKind,
    ErrorSeverity,
    ExecTimeoutError,
    ExecutionError,
    ParseError,
    ProvExecError,
    RouteNotFoundError,
    SpawnError,
    ThumbprintRetrievalError,
    ValidationError,
    error_kind_of,
    handle_cli_error,
    handle_config_error,
    handle_error,
    handle_subprocess_error,
)

# Retry strategies
from .strategies import (
    RetryPolicy,
    RetryState,
    backoff_delay,
    block_and_retry_until_ready,
    matches_selector,
    with_retry,
)

# Validation functions
from .validators import (
    validate_env_var_list,
    validate_env_var_name,
    validate_executable,
    validate_positive_float,
    validate_positive_integer,
)

__all__ = [
    # Errors
    "ErrorKind",
    "ErrorSeverity",
    "ProvExecError",
    "SpawnError",
    "ExecutionError",
    "ExecTimeoutError",
    "RouteNotFoundError",
    "ThumbprintRetrievalError",
    "ParseError",
    "ValidationError",
    "error_kind_of",
    "handle_error",
    "handle_config_error",
    "handle_subprocess_error",
    "handle_cli_error",
    # Retry
    "RetryPolicy",
    "RetryState",
    "backoff_delay",
    "block_and_retry_until_ready",
    "matches_selector",
    "with_retry",
    # Validators
    "validate_positive_integer",
    "validate_positive_float",
    "validate_executable",
    "validate_env_var_name",
    "validate_env_var_list",
]
