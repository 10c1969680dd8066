"""
Command execution result model.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class CommandResult:
    """
    Snapshot of a finished subprocess.

    Produced only after the process has been waited on, so exit_status is
    always the exit code reported by the OS (negative when the child was
    killed by a signal). stdout and stderr are always strings, possibly empty.
    """

    # Everything the child wrote to standard output.
    stdout: str
    # Everything the child wrote to standard error.
    stderr: str
    # Process ID the child ran under.
    pid: int
    # Exit status returned by wait().
    exit_status: int

    @property
    def succeeded(self) -> bool:
        """True when the process exited with status zero."""
        return self.exit_status == 0
