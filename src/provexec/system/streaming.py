"""
Streaming execution of long-running commands.

Long-lived tools such as playbook runs can produce more output than should be
held in memory, so their stdout and stderr are copied to a log file line by
line as they arrive.
"""

import logging
import os
import selectors
import subprocess
from pathlib import Path
from typing import IO, Dict, Optional, Sequence, Union

from ..models.config import ExecConfig
from ..validation import ErrorSeverity, ExecutionError, SpawnError, handle_subprocess_error
from .commands import format_command, merge_environment

logger = logging.getLogger(__name__)

# Bytes requested from a ready pipe per read.
READ_CHUNK_SIZE = 65536


class StreamingRunner:
    """
    Runs a command and appends its interleaved stdout and stderr to a file.

    Both pipes are watched with a readiness selector. Whenever a pipe is
    ready, whatever it holds is read with a single os.read and every complete
    line is written out at once; a trailing partial line waits in a per-pipe
    buffer for its newline. Reading one stream to the end before touching the
    other would deadlock as soon as the child filled the OS buffer of the
    unread pipe.
    """

    def __init__(self, config: Optional[ExecConfig] = None):
        self.config = config or ExecConfig()

    def run(
        self,
        command: Union[str, Sequence[str]],
        output_path: Union[str, Path],
        env: Optional[Dict[str, str]] = None,
        stderr_path: Optional[Union[str, Path]] = None,
    ) -> None:
        """
        Run a command, streaming its output to output_path.

        Args:
            command: A shell command string, or an argument vector run directly
            output_path: Log file, opened in append mode
            env: Environment variables set on top of the current environment
            stderr_path: Separate log file for standard error, opened in
                append mode (defaults to output_path)

        Raises:
            SpawnError: If the command cannot be launched
            ExecutionError: If the command exits with a non-zero status
        """
        output_path = Path(output_path)
        use_shell = isinstance(command, str)
        printable = command if use_shell else format_command(command)
        logger.info(f"Running '{printable}', output in {output_path}")

        with open(output_path, "ab") as log_file:
            err_file = open(stderr_path, "ab") if stderr_path is not None else log_file
            try:
                try:
                    process = subprocess.Popen(
                        command if use_shell else [str(arg) for arg in command],
                        shell=use_shell,
                        stdin=subprocess.DEVNULL,
                        stdout=subprocess.PIPE,
                        stderr=subprocess.PIPE,
                        env=merge_environment(env),
                    )
                except OSError as e:
                    handle_subprocess_error(e, printable, severity=ErrorSeverity.ERROR, reraise=False, logger=logger)
                    raise SpawnError(f"Failed to launch {printable}: {e}", command=printable) from e

                with process:
                    self._pump(process, {"stdout": log_file, "stderr": err_file})
                    exit_status = process.wait()
            finally:
                if err_file is not log_file:
                    err_file.close()

        logger.debug(f"'{printable}' exited with status {exit_status}")
        if exit_status != 0:
            raise ExecutionError(
                f"{printable} failed; output in {output_path}",
                command=printable,
                output_path=output_path,
            )

    def _pump(self, process: subprocess.Popen, sinks: Dict[str, IO[bytes]]) -> None:
        """Copy lines from the child's pipes to their sinks until both are drained."""
        pending: Dict[str, bytes] = {"stdout": b"", "stderr": b""}

        with selectors.DefaultSelector() as selector:
            selector.register(process.stdout, selectors.EVENT_READ, "stdout")
            selector.register(process.stderr, selectors.EVENT_READ, "stderr")

            while selector.get_map():
                for key, _ in selector.select():
                    name = key.data
                    sink = sinks[name]
                    try:
                        chunk = os.read(key.fileobj.fileno(), READ_CHUNK_SIZE)
                    except (OSError, ValueError) as e:
                        # Stop watching only the failing pipe; keep draining the other.
                        logger.warning(f"Error reading child {name}, dropping it: {e}")
                        selector.unregister(key.fileobj)
                        self._write(sink, pending.pop(name))
                        continue

                    if not chunk:
                        selector.unregister(key.fileobj)
                        self._write(sink, pending.pop(name))
                        continue

                    complete, newline, partial = (pending[name] + chunk).rpartition(b"\n")
                    pending[name] = partial
                    self._write(sink, complete + newline)

    @staticmethod
    def _write(sink: IO[bytes], data: bytes) -> None:
        if data:
            sink.write(data)
            sink.flush()


def run_command_streaming(
    command: Union[str, Sequence[str]],
    output_path: Union[str, Path],
    env: Optional[Dict[str, str]] = None,
) -> None:
    """Run a command with a default StreamingRunner."""
    StreamingRunner().run(command, output_path, env=env)
