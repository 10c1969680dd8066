"""
Bridge to the remote hypervisor management CLI (esxcli).

Every call is wrapped by the external `timeout` executable and authenticates
with the endpoint's user name; the password travels in an environment
variable so it never shows up in the process list. Before the first real
command for an endpoint, a bare probe run discovers the host certificate
thumbprint, which is then cached on the Endpoint and passed with `-d` to
every later call.

Example:

    $ VI_PASSWORD=... esxcli -s 172.25.15.174 -u root network vswitch standard portgroup list
    Name                    Virtual Switch  Active Clients  VLAN ID
    ----------------------  --------------  --------------  -------
    Management Network      vSwitch0                     1        0
    vMotion                 vSwitch1                     1       23
"""

import logging
import re
from typing import List, Optional, Sequence, Union

from ..models import Endpoint, ExecConfig, TableRecord
from ..models.results import CommandResult
from ..parsing import TableParser
from ..system.commands import CommandRunner, format_command
from ..validation import ExecutionError, ThumbprintRetrievalError

logger = logging.getLogger(__name__)

PASSWORD_MASK = "******"

_THUMBPRINT_PATTERN = re.compile(r"(?<=thumbprint: )(.*)(?= \(not)")
_FCOE_ADAPTER_PATTERN = re.compile(r"^(vmnic\d+)\s+", re.MULTILINE)


def extract_thumbprint(output: str) -> Optional[str]:
    """Return the certificate thumbprint announced in probe output, if any."""
    match = _THUMBPRINT_PATTERN.search(output)
    return match.group(0) if match else None


class RemoteCliBridge:
    """
    Runs remote management CLI commands and structures their output.
    """

    def __init__(
        self,
        runner: Optional[CommandRunner] = None,
        parser: Optional[TableParser] = None,
        config: Optional[ExecConfig] = None,
    ):
        self.config = config or (runner.config if runner else ExecConfig())
        self.runner = runner or CommandRunner(self.config)
        self.parser = parser or TableParser()

    def invoke(
        self,
        command_args: Sequence[str],
        endpoint: Endpoint,
        skip_parsing: bool = False,
        timeout: Optional[int] = None,
    ) -> Union[str, List[TableRecord]]:
        """
        Execute a CLI command against an endpoint.

        Args:
            command_args: CLI namespace, command and options, e.g.
                ["network", "vswitch", "standard", "list"]
            endpoint: Host and credentials; its thumbprint is probed and
                cached on first use
            skip_parsing: Return raw stdout instead of parsed table records
            timeout: Wall-clock limit in seconds enforced by the timeout
                executable (defaults to the configured remote CLI timeout)

        Returns:
            Raw stdout when skip_parsing, otherwise the parsed table records

        Raises:
            ThumbprintRetrievalError: If the probe output has no thumbprint
            ExecutionError: If the command exits with a non-zero status
        """
        timeout = timeout or self.config.remote_cli_timeout
        command_args = [str(arg) for arg in command_args]

        if command_args and endpoint.thumbprint is None:
            self._probe_thumbprint(endpoint, timeout)

        result, masked_command = self._run(command_args, endpoint, timeout)

        if not result.succeeded and command_args:
            msg = (
                f"Failed to execute {self.config.remote_cli_executable} command on host "
                f"{endpoint.host}: {masked_command}: {result}"
            )
            logger.error(msg)
            raise ExecutionError(msg, command=masked_command, result=result)

        if skip_parsing:
            return result.stdout
        return self.parser.parse(result.stdout)

    def _run(self, command_args: List[str], endpoint: Endpoint, timeout: int):
        cli = self.config.remote_cli_executable
        password_env = self.config.remote_cli_password_env

        cli_args = ["-s", endpoint.host, "-u", endpoint.user]
        if endpoint.thumbprint:
            cli_args += ["-d", endpoint.thumbprint]
        cli_args += command_args

        masked_command = f"{password_env}={PASSWORD_MASK} {format_command([cli, *cli_args])}"
        logger.debug(f"Executing {masked_command}")

        result: CommandResult = self.runner.execute(
            self.config.timeout_executable,
            [str(timeout), cli, *cli_args],
            env={password_env: endpoint.password},
        )
        return result, masked_command

    def _probe_thumbprint(self, endpoint: Endpoint, timeout: int) -> str:
        """Run the bare CLI against the endpoint and cache the announced thumbprint."""
        result, _ = self._run([], endpoint, timeout)
        thumbprint = extract_thumbprint(result.stdout) or extract_thumbprint(result.stderr)
        if not thumbprint:
            raise ThumbprintRetrievalError(
                f"Thumbprint retrieval failed for host {endpoint.host}: {result.stdout}{result.stderr}"
            )
        logger.debug(f"Retrieved thumbprint {thumbprint} for host {endpoint.host}")
        return endpoint.remember_thumbprint(thumbprint)

    def rescan_storage(self, endpoint: Endpoint) -> str:
        """Rescan all storage adapters of an ESXi host."""
        return self.invoke(
            ["storage", "core", "adapter", "rescan", "--all"],
            endpoint,
            skip_parsing=True,
            timeout=1200,
        )

    def fcoe_adapters(self, endpoint: Endpoint) -> List[str]:
        """Return the names of the host NICs that are FCoE capable."""
        output = self.invoke(["fcoe", "nic", "list"], endpoint, skip_parsing=True)
        return _FCOE_ADAPTER_PATTERN.findall(output or "")
