"""
Command execution utilities.

This module provides synchronous execution of external programs with their
standard output and standard error fully captured in memory, plus a variant
that strips the host interpreter's runtime environment before delegating to
the child tool.
"""

import logging
import os
import shlex
import subprocess
from typing import Dict, List, Optional, Sequence

from ..models.config import ExecConfig
from ..models.results import CommandResult
from ..validation import ErrorSeverity, ExecutionError, SpawnError, handle_subprocess_error

logger = logging.getLogger(__name__)


def format_command(argv: Sequence[str]) -> str:
    """Render an argument vector as a copy-pasteable shell command line."""
    return shlex.join(str(arg) for arg in argv)


def merge_environment(overrides: Optional[Dict[str, str]]) -> Optional[Dict[str, str]]:
    """
    Overlay environment overrides on the current process environment.

    Returns None when there is nothing to override, letting the child
    inherit the environment unchanged.
    """
    if not overrides:
        return None
    env = os.environ.copy()
    env.update({key: str(value) for key, value in overrides.items()})
    return env


class CommandRunner:
    """
    Runs external programs and captures their output.

    Programs are launched directly, never through a shell. Standard input is
    closed right after the spawn, so a child can never block waiting for the
    caller. A non-zero exit status is reported as data in the CommandResult;
    use execute_success when it should be an error instead.
    """

    def __init__(self, config: Optional[ExecConfig] = None):
        self.config = config or ExecConfig()

    def execute(
        self,
        program: str,
        args: Sequence[str] = (),
        env: Optional[Dict[str, str]] = None,
        stdin_text: Optional[str] = None,
    ) -> CommandResult:
        """
        Execute a program and capture its output.

        Args:
            program: Executable name or path
            args: Command-line arguments
            env: Environment variables set on top of the current environment
            stdin_text: Text written to the child's stdin before it is closed

        Returns:
            CommandResult with stdout, stderr, pid and exit status

        Raises:
            SpawnError: If the program cannot be launched
        """
        argv = [str(program)] + [str(arg) for arg in args]
        command_line = format_command(argv)
        logger.debug(f"Executing command: '{command_line}'")

        try:
            process = subprocess.Popen(
                argv,
                stdin=subprocess.PIPE if stdin_text is not None else subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                env=merge_environment(env),
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as e:
            handle_subprocess_error(e, command_line, severity=ErrorSeverity.ERROR, reraise=False, logger=logger)
            raise SpawnError(f"Failed to launch {argv[0]}: {e}", command=command_line) from e

        with process:
            # communicate() drains both pipes concurrently
            stdout, stderr = process.communicate(input=stdin_text)

        return CommandResult(
            stdout=stdout or "",
            stderr=stderr or "",
            pid=process.pid,
            exit_status=process.returncode,
        )

    def execute_success(
        self,
        program: str,
        args: Sequence[str] = (),
        env: Optional[Dict[str, str]] = None,
        stdin_text: Optional[str] = None,
    ) -> CommandResult:
        """
        Execute a program that must exit with status zero.

        Raises:
            SpawnError: If the program cannot be launched
            ExecutionError: If the program exits with a non-zero status
        """
        result = self.execute(program, args, env=env, stdin_text=stdin_text)
        if not result.succeeded:
            command_line = format_command([program, *args])
            raise ExecutionError(
                f"Command failed: {command_line}\n{result.stdout}\n{result.stderr}",
                command=command_line,
                result=result,
            )
        return result

    def clean_env_prefix(self) -> List[str]:
        """Argument vector prefix that runs a program without host runtime variables."""
        prefix = [self.config.env_executable]
        prefix.extend(f"--unset={name}" for name in self.config.clean_env_vars)
        return prefix

    def execute_with_clean_env(
        self,
        program: str,
        args: Sequence[str] = (),
        env: Optional[Dict[str, str]] = None,
        fail_on_error: bool = False,
        stdin_text: Optional[str] = None,
    ) -> CommandResult:
        """
        Execute a program with the host interpreter's variables removed.

        The program is run through the env executable with one --unset option
        per configured variable, so tools written for another runtime do not
        pick up this process's PYTHONPATH, virtualenv and similar settings.

        Args:
            program: Executable name or path
            args: Command-line arguments
            env: Environment variables to set for the child
            fail_on_error: Raise ExecutionError on a non-zero exit status
            stdin_text: Text written to the child's stdin before it is closed
        """
        prefix = self.clean_env_prefix()
        argv = prefix[1:] + [str(program)] + [str(arg) for arg in args]
        if fail_on_error:
            return self.execute_success(prefix[0], argv, env=env, stdin_text=stdin_text)
        return self.execute(prefix[0], argv, env=env, stdin_text=stdin_text)


def run_command(program: str, *args: str, env: Optional[Dict[str, str]] = None) -> CommandResult:
    """
    Execute a program with arguments using a default CommandRunner.

    Example:
        >>> run_command("echo", "hello", "my", "friend")
        CommandResult(stdout='hello my friend\\n', stderr='', pid=9762, exit_status=0)
    """
    return CommandRunner().execute(program, args, env=env)


def run_command_success(program: str, *args: str, env: Optional[Dict[str, str]] = None) -> CommandResult:
    """Like run_command, but raise ExecutionError on a non-zero exit status."""
    return CommandRunner().execute_success(program, args, env=env)
