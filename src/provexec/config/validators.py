"""
Configuration validation utilities.

Turns the raw dictionary parsed from TOML into a validated ExecConfig.
Missing sections and keys fall back to the ExecConfig defaults.
"""

import logging
from typing import Any, Dict

from ..models.config import ExecConfig
from ..validation import (
    ValidationError,
    validate_env_var_list,
    validate_env_var_name,
    validate_executable,
    validate_positive_float,
    validate_positive_integer,
)

logger = logging.getLogger(__name__)

KNOWN_SECTIONS = ("execution", "tools", "routing", "remote_cli", "playbook")


def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = data.get(name, {})
    if not isinstance(section, dict):
        raise ValidationError(f"[{name}] must be a table", field_name=name, value=section)
    return section


def validate_exec_config(data: Dict[str, Any]) -> ExecConfig:
    """
    Validate and create an ExecConfig from raw configuration data.

    Args:
        data: Raw configuration from TOML

    Returns:
        Validated ExecConfig instance

    Raises:
        ValidationError: If validation fails
    """
    defaults = ExecConfig()

    for name in data:
        if name not in KNOWN_SECTIONS:
            logger.warning(f"Ignoring unknown configuration section [{name}]")

    execution = _section(data, "execution")
    tools = _section(data, "tools")
    routing = _section(data, "routing")
    remote_cli = _section(data, "remote_cli")
    playbook = _section(data, "playbook")

    return ExecConfig(
        env_executable=validate_executable(
            execution.get("env_executable", defaults.env_executable),
            field_name="execution.env_executable",
        ),
        timeout_executable=validate_executable(
            execution.get("timeout_executable", defaults.timeout_executable),
            field_name="execution.timeout_executable",
        ),
        clean_env_vars=validate_env_var_list(
            execution.get("clean_env_vars", defaults.clean_env_vars),
            field_name="execution.clean_env_vars",
        ),
        ip_executable=validate_executable(
            tools.get("ip", defaults.ip_executable),
            field_name="tools.ip",
        ),
        ping_executable=validate_executable(
            tools.get("ping", defaults.ping_executable),
            field_name="tools.ping",
        ),
        ssh_keygen_executable=validate_executable(
            tools.get("ssh_keygen", defaults.ssh_keygen_executable),
            field_name="tools.ssh_keygen",
        ),
        route_max_tries=validate_positive_integer(
            routing.get("max_tries", defaults.route_max_tries),
            min_value=1,
            max_value=1000,
            field_name="routing.max_tries",
        ),
        route_poll_interval=validate_positive_float(
            routing.get("poll_interval", defaults.route_poll_interval),
            min_value=0.0,
            max_value=60.0,
            field_name="routing.poll_interval",
        ),
        remote_cli_executable=validate_executable(
            remote_cli.get("executable", defaults.remote_cli_executable),
            field_name="remote_cli.executable",
        ),
        remote_cli_password_env=validate_env_var_name(
            remote_cli.get("password_env", defaults.remote_cli_password_env),
            field_name="remote_cli.password_env",
        ),
        remote_cli_timeout=validate_positive_integer(
            remote_cli.get("default_timeout", defaults.remote_cli_timeout),
            min_value=1,
            field_name="remote_cli.default_timeout",
        ),
        playbook_executable=validate_executable(
            playbook.get("executable", defaults.playbook_executable),
            field_name="playbook.executable",
        ),
        vault_executable=validate_executable(
            playbook.get("vault_executable", defaults.vault_executable),
            field_name="playbook.vault_executable",
        ),
        playbook_timeout=validate_positive_integer(
            playbook.get("default_timeout", defaults.playbook_timeout),
            min_value=1,
            field_name="playbook.default_timeout",
        ),
    )
