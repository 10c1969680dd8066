"""
System interaction for the provexec package.

This module provides subprocess execution (buffered and streaming),
routing table queries and host-level helpers.
"""

from .commands import (
    CommandRunner,
    format_command,
    merge_environment,
    run_command,
    run_command_success,
)
from .hosts import first_host_ip, is_reachable, remove_host_entries
from .routing import RouteResolver, extract_source_address, resolve_address
from .streaming import StreamingRunner, run_command_streaming

__all__ = [
    # Command execution
    "CommandRunner",
    "format_command",
    "merge_environment",
    "run_command",
    "run_command_success",
    # Streaming
    "StreamingRunner",
    "run_command_streaming",
    # Routing
    "RouteResolver",
    "extract_source_address",
    "resolve_address",
    # Hosts
    "first_host_ip",
    "is_reachable",
    "remove_host_entries",
]
