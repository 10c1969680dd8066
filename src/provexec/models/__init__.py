"""
Data models shared across the provexec package.

- CommandResult: immutable snapshot of a finished subprocess
- Endpoint: remote management CLI credentials and cached thumbprint
- ExecConfig: executable names, timeouts and environment settings
- TableRecord: one row of a parsed fixed-width table
"""

from typing import Dict

from .config import DEFAULT_CLEAN_ENV_VARS, ExecConfig
from .endpoint import Endpoint
from .results import CommandResult

# Ordered mapping of trimmed column name to trimmed cell value.
TableRecord = Dict[str, str]

__all__ = [
    "CommandResult",
    "DEFAULT_CLEAN_ENV_VARS",
    "Endpoint",
    "ExecConfig",
    "TableRecord",
]
