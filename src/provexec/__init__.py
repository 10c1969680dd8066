"""
provexec: process execution and resilience for provisioning automation.

This package runs the external tools a hardware-provisioning platform relies
on (remote hypervisor CLI, playbook runners, routing table queries) and
turns their exit codes and textual output into Python values and errors.

The package is organized into specialized modules:
- config: TOML configuration loading and validation
- models: CommandResult, Endpoint, ExecConfig
- validation: Error taxonomy and the exponential backoff retry policy
- system: Buffered and streaming command execution, routes, host helpers
- parsing: Fixed-width table parsing
- remote: Remote management CLI bridge
- playbook: ansible-playbook and ansible-vault helpers
- executor: Fire-and-forget background tasks
- cli: Command-line interface

Usage:
    From command line:
        provexec route esx01.example.com

    Programmatically:
        from provexec import Endpoint, RemoteCliBridge
        bridge = RemoteCliBridge()
        portgroups = bridge.invoke(
            ["network", "vswitch", "standard", "portgroup", "list"],
            Endpoint(host="172.25.15.174", user="root", password="..."),
        )
"""

from .config import load_config
from .executor import execute_async
from .models import CommandResult, Endpoint, ExecConfig, TableRecord
from .parsing import TableParser, parse_table
from .playbook import PlaybookOptions, PlaybookRunner, parse_ansible_log, write_ansible_yaml
from .remote import RemoteCliBridge
from .system import (
    CommandRunner,
    RouteResolver,
    StreamingRunner,
    first_host_ip,
    is_reachable,
    remove_host_entries,
    run_command,
    run_command_success,
)
from .validation import (
    ErrorKind,
    ExecTimeoutError,
    ExecutionError,
    ParseError,
    ProvExecError,
    RetryPolicy,
    RouteNotFoundError,
    SpawnError,
    ThumbprintRetrievalError,
    ValidationError,
    block_and_retry_until_ready,
    with_retry,
)

__version__ = "1.0.0"

__all__ = [
    # Configuration and models
    "load_config",
    "CommandResult",
    "Endpoint",
    "ExecConfig",
    "TableRecord",
    # Runners
    "CommandRunner",
    "StreamingRunner",
    "RouteResolver",
    "RemoteCliBridge",
    "PlaybookRunner",
    "PlaybookOptions",
    "run_command",
    "run_command_success",
    # Parsing
    "TableParser",
    "parse_table",
    "parse_ansible_log",
    "write_ansible_yaml",
    # Hosts
    "first_host_ip",
    "is_reachable",
    "remove_host_entries",
    # Background tasks
    "execute_async",
    # Errors and retries
    "ErrorKind",
    "ProvExecError",
    "SpawnError",
    "ExecutionError",
    "ExecTimeoutError",
    "RouteNotFoundError",
    "ThumbprintRetrievalError",
    "ParseError",
    "ValidationError",
    "RetryPolicy",
    "block_and_retry_until_ready",
    "with_retry",
]
