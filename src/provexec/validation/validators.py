"""
Validation functions for configuration values.
"""

import re
from typing import Any, List, Optional

from .exceptions import ValidationError

# Environment variable names as accepted by POSIX shells.
_ENV_VAR_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def validate_positive_integer(
    value: Any,
    min_value: int = 1,
    max_value: Optional[int] = None,
    field_name: str = "value"
) -> int:
    """
    Validate that a value is a positive integer.

    Args:
        value: Value to validate
        min_value: Minimum allowed value (inclusive)
        max_value: Maximum allowed value (inclusive), None for no limit
        field_name: Name of the field being validated

    Returns:
        Validated integer value

    Raises:
        ValidationError: If validation fails
    """
    if isinstance(value, bool):
        raise ValidationError(
            f"{field_name} must be a valid integer, got {value}",
            field_name=field_name,
            value=value
        )
    try:
        int_value = int(value)
    except (ValueError, TypeError):
        raise ValidationError(
            f"{field_name} must be a valid integer, got {value}",
            field_name=field_name,
            value=value
        )
    if int_value < min_value:
        raise ValidationError(
            f"{field_name} must be >= {min_value}, got {int_value}",
            field_name=field_name,
            value=value
        )
    if max_value is not None and int_value > max_value:
        raise ValidationError(
            f"{field_name} must be <= {max_value}, got {int_value}",
            field_name=field_name,
            value=value
        )
    return int_value


def validate_positive_float(
    value: Any,
    min_value: float = 0.0,
    max_value: Optional[float] = None,
    field_name: str = "value"
) -> float:
    """
    Validate that a value is a positive float.

    Args:
        value: Value to validate
        min_value: Minimum allowed value (inclusive)
        max_value: Maximum allowed value (inclusive), None for no limit
        field_name: Name of the field being validated

    Returns:
        Validated float value

    Raises:
        ValidationError: If validation fails
    """
    if isinstance(value, bool):
        raise ValidationError(
            f"{field_name} must be a valid number, got {value}",
            field_name=field_name,
            value=value
        )
    try:
        float_value = float(value)
    except (ValueError, TypeError):
        raise ValidationError(
            f"{field_name} must be a valid number, got {value}",
            field_name=field_name,
            value=value
        )
    if float_value < min_value:
        raise ValidationError(
            f"{field_name} must be >= {min_value}, got {float_value}",
            field_name=field_name,
            value=value
        )
    if max_value is not None and float_value > max_value:
        raise ValidationError(
            f"{field_name} must be <= {max_value}, got {float_value}",
            field_name=field_name,
            value=value
        )
    return float_value


def validate_executable(value: Any, field_name: str = "executable") -> str:
    """
    Validate an executable name or path.

    The value must be a non-empty string without whitespace; it is passed
    to the OS as a single argv element, never through a shell.
    """
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(
            f"{field_name} must be a non-empty string",
            field_name=field_name,
            value=value
        )
    if any(ch.isspace() for ch in value):
        raise ValidationError(
            f"{field_name} must not contain whitespace, got '{value}'",
            field_name=field_name,
            value=value
        )
    return value


def validate_env_var_name(value: Any, field_name: str = "env_var") -> str:
    """Validate an environment variable name."""
    if not isinstance(value, str) or not _ENV_VAR_NAME.match(value):
        raise ValidationError(
            f"{field_name} must be a valid environment variable name, got {value!r}",
            field_name=field_name,
            value=value
        )
    return value


def validate_env_var_list(value: Any, field_name: str = "env_vars") -> List[str]:
    """
    Validate a list of environment variable names.

    Returns:
        The names, in order, with duplicates removed
    """
    if not isinstance(value, list):
        raise ValidationError(
            f"{field_name} must be a list of strings",
            field_name=field_name,
            value=value
        )

    names: List[str] = []
    for i, item in enumerate(value):
        name = validate_env_var_name(item, field_name=f"{field_name}[{i}]")
        if name not in names:
            names.append(name)
    return names
