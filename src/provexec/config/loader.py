"""
Configuration file loading utilities.

This module handles the low-level loading and parsing of the TOML
configuration file and turns it into a validated ExecConfig.
"""

import logging
import tomllib
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ..models.config import ExecConfig
from ..validation import handle_config_error, ErrorSeverity
from .validators import validate_exec_config

logger = logging.getLogger(__name__)


def load_toml_file(file_path: Path, description: str = "configuration file") -> Dict[str, Any]:
    """
    Load and parse a TOML file with error handling.

    Args:
        file_path: Path to the TOML file to load
        description: Human-readable description for error messages

    Returns:
        Parsed TOML data as a dictionary

    Raises:
        FileNotFoundError: If the file doesn't exist
        tomllib.TOMLDecodeError: If the file is malformed
    """
    logger.info(f"Loading {description} from: {file_path}")

    if not file_path.exists():
        logger.error(f"{description} not found: {file_path}")
        raise FileNotFoundError(f"{description} not found: {file_path}")

    try:
        with open(file_path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        handle_config_error(
            error=e,
            context=f"parsing {description}",
            severity=ErrorSeverity.CRITICAL,
            reraise=True,
            logger=logger
        )
        raise


def load_config(config_path: Optional[Union[str, Path]] = None) -> ExecConfig:
    """
    Load and validate the execution configuration.

    Args:
        config_path: Path to a provexec TOML file, or None for the defaults

    Returns:
        Validated ExecConfig instance

    Raises:
        FileNotFoundError: If the configuration file is missing
        ValidationError: If a configured value is invalid
        tomllib.TOMLDecodeError: If the file is malformed
    """
    if config_path is None:
        logger.debug("No configuration file given, using defaults")
        return ExecConfig()

    data = load_toml_file(Path(config_path), "provexec configuration file")
    config = validate_exec_config(data)
    logger.info(f"Successfully loaded configuration from {config_path}")
    return config
