"""
Ansible playbook execution and vault helpers.

Playbook runs can take a long time and produce a lot of output, so they go
through the StreamingRunner into an output file, which parse_ansible_log
reads back once the run has finished. Standard error goes to a sibling
".err" file so warnings never land inside the JSON document.
"""

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from ..models.config import ExecConfig
from ..system.commands import CommandRunner
from ..system.streaming import StreamingRunner
from ..validation import ExecutionError, ParseError

logger = logging.getLogger(__name__)

SSH_ARGS = "-o UserKnownHostsFile=/dev/null -o StrictHostKeyChecking=no"

# Lines ansible prints about .retry files when a run fails; they are not JSON.
_RETRY_NOISE = re.compile(r"to retry(.*)retry")
_JSON_START = re.compile(r"^\{", re.MULTILINE)
# A literal block whose first line is a vault tag, e.g. "password: |\n    !vault |".
_VAULT_LITERAL = re.compile(r": \|[-+]?\n\s+!vault")


@dataclass
class PlaybookOptions:
    """Options for a single ansible-playbook run."""

    verbose: bool = False
    host_key_check: bool = False
    # Must stay "json" for parse_ansible_log to understand the output.
    stdout_callback: str = "json"
    # Seconds; None means the configured playbook timeout.
    timeout: Optional[int] = None
    # Credential id handed to the vault password script via $VAULT.
    vault_password_id: Optional[str] = None
    # Script that prints the vault password.
    vault_password_file: Optional[str] = None


class PlaybookRunner:
    """
    Runs ansible-playbook and ansible-vault with the host runtime stripped
    from their environment.
    """

    def __init__(
        self,
        config: Optional[ExecConfig] = None,
        runner: Optional[CommandRunner] = None,
        streamer: Optional[StreamingRunner] = None,
    ):
        self.config = config or ExecConfig()
        self.runner = runner or CommandRunner(self.config)
        self.streamer = streamer or StreamingRunner(self.config)

    def run(
        self,
        playbook_file: Union[str, Path],
        inventory_file: Union[str, Path],
        output_file: Union[str, Path],
        options: Optional[PlaybookOptions] = None,
    ) -> None:
        """
        Run a playbook against an inventory, writing its output to output_file.

        Args:
            playbook_file: Path to the ansible playbook
            inventory_file: Path to the ansible inventory
            output_file: Path to the output file; truncated before the run.
                Standard error is written next to it, with ".err" appended.
            options: Run options

        Raises:
            ValueError: If a path is missing or a vault id has no password file
            ExecutionError: If ansible-playbook exits with a non-zero status
        """
        options = options or PlaybookOptions()
        if not playbook_file:
            raise ValueError("No playbook file provided")
        if not inventory_file:
            raise ValueError("No inventory file provided")
        if not output_file:
            raise ValueError("No output file provided")
        if options.vault_password_id and not options.vault_password_file:
            raise ValueError("Vault password id requires vault password file")

        env: Dict[str, str] = {
            "ANSIBLE_STDOUT_CALLBACK": options.stdout_callback,
            "ANSIBLE_SSH_ARGS": SSH_ARGS,
        }
        if options.vault_password_id:
            env["VAULT"] = options.vault_password_id
        if not options.host_key_check:
            env["ANSIBLE_HOST_KEY_CHECKING"] = "False"

        timeout = options.timeout or self.config.playbook_timeout
        argv = self.runner.clean_env_prefix()
        argv += [self.config.timeout_executable, str(timeout), self.config.playbook_executable]
        if options.verbose:
            argv.append("-v")
        argv += ["-i", str(inventory_file), str(playbook_file)]
        if options.vault_password_file:
            argv += ["--vault-password-file", str(options.vault_password_file)]

        output_path = Path(output_file)
        output_path.write_text("", encoding="utf-8")
        stderr_path = output_path.with_name(output_path.name + ".err")
        stderr_path.write_text("", encoding="utf-8")

        try:
            self.streamer.run(argv, output_path, env=env, stderr_path=stderr_path)
        except ExecutionError as e:
            raise ExecutionError(
                f"Ansible run failed; output in {output_path}, errors in {stderr_path}",
                command=e.command,
                output_path=output_path,
            ) from e

    def encrypt_string(self, vault_password_id: str, value: str, vault_password_file: str) -> str:
        """
        Encrypt a string with ansible-vault.

        Returns:
            The "!vault |" tagged block printed by ansible-vault

        Raises:
            ValueError: If an argument is missing
            ExecutionError: If ansible-vault fails
        """
        if not vault_password_id:
            raise ValueError("Error vault password id required")
        if not vault_password_file:
            raise ValueError("Error vault password file required")
        if value is None:
            raise ValueError("Error no value to encrypt provided")

        result = self.runner.execute_with_clean_env(
            self.config.vault_executable,
            ["encrypt_string", "--vault-password-file", vault_password_file],
            env={"VAULT": vault_password_id},
            stdin_text=value,
        )
        if not result.succeeded:
            raise ExecutionError(f"Error getting vault value: {result.stderr}", result=result)
        return result.stdout


class _AnsibleDumper(yaml.SafeDumper):
    pass


def _represent_str(dumper: yaml.SafeDumper, data: str) -> yaml.ScalarNode:
    if "\n" in data:
        return dumper.represent_scalar("tag:yaml.org,2002:str", data, style="|")
    return dumper.represent_str(data)


_AnsibleDumper.add_representer(str, _represent_str)


def write_ansible_yaml(data: Dict[str, Any], yaml_file_path: Union[str, Path]) -> None:
    """
    Write an inventory or variables file that ansible can read.

    Multi-line strings are emitted as literal blocks. Values produced by
    ansible-vault encrypt_string start with a "!vault |" line, and are
    rewritten so the tag sits on the key line, where ansible expects it.
    """
    text = yaml.dump(data, Dumper=_AnsibleDumper, default_flow_style=False, sort_keys=False)
    Path(yaml_file_path).write_text(_VAULT_LITERAL.sub(": !vault", text), encoding="utf-8")


def parse_ansible_log(ansible_out: Union[str, Path]) -> Any:
    """
    Parse the JSON document of a playbook output file.

    Raises:
        ParseError: If the file holds no decodable JSON document
    """
    with open(ansible_out, encoding="utf-8", errors="replace") as f:
        text = "".join(line for line in f if not _RETRY_NOISE.search(line))

    match = _JSON_START.search(text)
    if not match:
        raise ParseError(f"No JSON document found in {ansible_out}")
    try:
        document, _ = json.JSONDecoder().raw_decode(text, match.start())
    except json.JSONDecodeError as e:
        raise ParseError(f"Malformed ansible output in {ansible_out}: {e}") from e
    return document
