"""
Command-line interface for provexec.

Exposes the runners for manual use and troubleshooting on a provisioning
host: run a command, stream a long-running command to a log file, query the
preferred route to a host, or run a remote management CLI command.

Usage:
    provexec [--config FILE] [--verbose] run PROGRAM [ARGS...]
    provexec stream --output FILE [--shell] COMMAND [ARGS...]
    provexec route HOST [--retry-timeout SECONDS]
    provexec default-route
    provexec esxcli --host HOST --user USER [--password-env VAR] [--no-parse] ARGS...

Example:
    ESXCLI_PASSWORD=secret provexec esxcli --host 172.25.15.174 --user root \\
        network vswitch standard portgroup list
"""

import argparse
import json
import logging
import os
import sys
import tomllib
from typing import List, Optional

from ..config import load_config
from ..models import Endpoint, ExecConfig
from ..remote import RemoteCliBridge
from ..system import CommandRunner, RouteResolver, StreamingRunner
from ..validation import (
    ErrorKind,
    ProvExecError,
    ValidationError,
    block_and_retry_until_ready,
    handle_cli_error,
)

# --- Logging Setup ---
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)-5.5s] %(name)s:%(filename)s:%(lineno)d\t %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)


def _exit_code(exit_status: int) -> int:
    # Children killed by a signal report -signum; mirror the shell's 128 + signum.
    return exit_status if exit_status >= 0 else 128 - exit_status


def _cmd_run(args: argparse.Namespace, config: ExecConfig) -> int:
    result = CommandRunner(config).execute(args.program, args.args)
    sys.stdout.write(result.stdout)
    sys.stderr.write(result.stderr)
    return _exit_code(result.exit_status)


def _cmd_stream(args: argparse.Namespace, config: ExecConfig) -> int:
    command = " ".join(args.command) if args.shell else args.command
    StreamingRunner(config).run(command, args.output)
    return 0


def _cmd_route(args: argparse.Namespace, config: ExecConfig) -> int:
    resolver = RouteResolver(config=config)
    if args.retry_timeout:
        address = block_and_retry_until_ready(
            args.retry_timeout,
            lambda: resolver.resolve(args.host),
            retry_on=[ErrorKind.ROUTE_NOT_FOUND],
            max_sleep=5.0,
            logger=logger,
        )
    else:
        address = resolver.resolve(args.host)
    print(address)
    return 0


def _cmd_default_route(args: argparse.Namespace, config: ExecConfig) -> int:
    print(RouteResolver(config=config).default_routed_ip())
    return 0


def _cmd_esxcli(args: argparse.Namespace, config: ExecConfig) -> int:
    password = os.environ.get(args.password_env)
    if password is None:
        raise ValidationError(
            f"Environment variable {args.password_env} holding the password is not set",
            field_name="--password-env",
            value=args.password_env,
        )

    endpoint = Endpoint(host=args.host, user=args.user, password=password)
    output = RemoteCliBridge(config=config).invoke(
        args.cli_args,
        endpoint,
        skip_parsing=args.no_parse,
        timeout=args.timeout,
    )
    if args.no_parse:
        sys.stdout.write(output)
    else:
        for record in output:
            print(json.dumps(record))
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the provexec CLI."""
    parser = argparse.ArgumentParser(
        prog="provexec",
        description="Run provisioning tools with captured output, retries and route discovery.",
    )
    parser.add_argument("--config", type=str, help="Path to a provexec TOML configuration file.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run a program and print its captured output.")
    run_parser.add_argument("program")
    run_parser.add_argument("args", nargs=argparse.REMAINDER)
    run_parser.set_defaults(handler=_cmd_run)

    stream_parser = subparsers.add_parser("stream", help="Run a command, appending its output to a file.")
    stream_parser.add_argument("-o", "--output", required=True, help="Log file to append to.")
    stream_parser.add_argument("--shell", action="store_true", help="Run the command through the shell.")
    stream_parser.add_argument("command", nargs=argparse.REMAINDER)
    stream_parser.set_defaults(handler=_cmd_stream)

    route_parser = subparsers.add_parser("route", help="Print the local address used to reach HOST.")
    route_parser.add_argument("host")
    route_parser.add_argument(
        "--retry-timeout",
        type=float,
        default=0,
        help="Keep retrying with backoff for up to this many seconds.",
    )
    route_parser.set_defaults(handler=_cmd_route)

    default_parser = subparsers.add_parser("default-route", help="Print the local address of the default route.")
    default_parser.set_defaults(handler=_cmd_default_route)

    esxcli_parser = subparsers.add_parser("esxcli", help="Run a remote management CLI command.")
    esxcli_parser.add_argument("--host", required=True)
    esxcli_parser.add_argument("--user", required=True)
    esxcli_parser.add_argument(
        "--password-env",
        default="ESXCLI_PASSWORD",
        help="Environment variable holding the password (default: ESXCLI_PASSWORD).",
    )
    esxcli_parser.add_argument("--no-parse", action="store_true", help="Print raw output instead of JSON records.")
    esxcli_parser.add_argument("--timeout", type=int, default=None, help="Timeout in seconds.")
    esxcli_parser.add_argument("cli_args", nargs=argparse.REMAINDER)
    esxcli_parser.set_defaults(handler=_cmd_esxcli)

    return parser


def main_cli(argv: Optional[List[str]] = None) -> None:
    """
    Main command-line interface for provexec.

    Raises:
        SystemExit: With the exit status of the executed command, or 1 on
            configuration errors and provexec failures.
    """
    args = build_parser().parse_args(argv)
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        config = load_config(args.config)
    except (FileNotFoundError, ValidationError, tomllib.TOMLDecodeError) as e:
        handle_cli_error(
            error=e,
            context="configuration loading",
            exit_code=1,
            logger=logger,
        )

    try:
        exit_code = args.handler(args, config)
    except ProvExecError as e:
        handle_cli_error(
            error=e,
            context=args.command,
            exit_code=1,
            logger=logger,
        )

    sys.exit(exit_code)


if __name__ == "__main__":
    main_cli()
