"""
Command-line interface for the provexec package.
"""

from .main import main_cli

__all__ = [
    "main_cli",
]
