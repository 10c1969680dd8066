"""
Configuration data models.

ExecConfig gathers every executable name, environment setting and tunable
the runners need. It is passed explicitly to each component; a default
instance reproduces the stock behaviour without any configuration file.
"""

from dataclasses import dataclass, field
from typing import List

DEFAULT_CLEAN_ENV_VARS = [
    "PYTHONPATH",
    "PYTHONHOME",
    "PYTHONSTARTUP",
    "PYTHONUSERBASE",
    "VIRTUAL_ENV",
]


@dataclass
class ExecConfig:
    """
    Execution settings, loaded from `provexec.toml` or built from defaults.
    """

    # [execution]
    env_executable: str = "/bin/env"
    timeout_executable: str = "timeout"
    # Variables of the host interpreter stripped before delegating to tools.
    clean_env_vars: List[str] = field(default_factory=lambda: list(DEFAULT_CLEAN_ENV_VARS))

    # [tools]
    ip_executable: str = "ip"
    ping_executable: str = "ping"
    ssh_keygen_executable: str = "ssh-keygen"

    # [routing]
    route_max_tries: int = 10
    route_poll_interval: float = 1.0

    # [remote_cli]
    remote_cli_executable: str = "esxcli"
    remote_cli_password_env: str = "VI_PASSWORD"
    remote_cli_timeout: int = 600

    # [playbook]
    playbook_executable: str = "ansible-playbook"
    vault_executable: str = "ansible-vault"
    playbook_timeout: int = 1800
