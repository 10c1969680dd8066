"""
Configuration management for the provexec package.

Configuration is loaded explicitly from a TOML file and handed to each
component as an ExecConfig value.
"""

from .loader import load_config, load_toml_file
from .validators import validate_exec_config

__all__ = [
    "load_config",
    "load_toml_file",
    "validate_exec_config",
]
