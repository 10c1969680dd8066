"""
Task execution helpers for the provexec package.
"""

from .background import execute_async

__all__ = [
    "execute_async",
]
