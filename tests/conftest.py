"""
Pytest configuration and shared fixtures for the provexec test suite.

This module provides common fixtures, test utilities, and configuration
for all test modules in the provexec project.
"""

import shutil
import sys
import tempfile
from pathlib import Path
from typing import Any, Dict
from unittest.mock import Mock

import pytest

# Add src to Python path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from provexec.models import CommandResult, Endpoint, ExecConfig  # noqa: E402
from provexec.system.commands import CommandRunner  # noqa: E402


# ============================================================================
# Test Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")


# ============================================================================
# Core Fixtures
# ============================================================================


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def exec_config():
    """Default execution configuration."""
    return ExecConfig()


@pytest.fixture
def make_result():
    """Factory for CommandResult instances."""

    def _make(stdout: str = "", stderr: str = "", exit_status: int = 0, pid: int = 4242) -> CommandResult:
        return CommandResult(stdout=stdout, stderr=stderr, pid=pid, exit_status=exit_status)

    return _make


@pytest.fixture
def mock_runner(exec_config):
    """A CommandRunner mock carrying the default configuration."""
    runner = Mock(spec=CommandRunner)
    runner.config = exec_config
    return runner


@pytest.fixture
def endpoint():
    """An ESXi endpoint without a cached thumbprint."""
    return Endpoint(host="172.25.15.174", user="root", password="s3cr3t-pw")


# ============================================================================
# Sample Data Fixtures
# ============================================================================


@pytest.fixture
def portgroup_table():
    """esxcli 'network vswitch standard portgroup list' output."""
    header = "Name".ljust(24) + "Virtual Switch".ljust(16) + "Active Clients".ljust(16) + "VLAN ID"
    separator = "  ".join(["-" * 22, "-" * 14, "-" * 14, "-" * 7])
    rows = [
        "Management Network".ljust(24) + "vSwitch0".ljust(16) + "1".rjust(14) + "  " + "0".rjust(7),
        "vMotion".ljust(24) + "vSwitch1".ljust(16) + "1".rjust(14) + "  " + "23".rjust(7),
    ]
    return "\n".join([header, separator, *rows]) + "\n"


@pytest.fixture
def sample_config_data() -> Dict[str, Any]:
    """Sample configuration data for testing."""
    return {
        "execution": {
            "env_executable": "env",
            "timeout_executable": "timeout",
            "clean_env_vars": ["PYTHONPATH", "VIRTUAL_ENV"],
        },
        "tools": {
            "ip": "/sbin/ip",
        },
        "routing": {
            "max_tries": 3,
            "poll_interval": 0.5,
        },
        "remote_cli": {
            "executable": "/usr/bin/esxcli",
            "password_env": "VI_PASSWORD",
            "default_timeout": 300,
        },
        "playbook": {
            "default_timeout": 900,
        },
    }


@pytest.fixture
def config_file(temp_dir, sample_config_data):
    """Write the sample configuration to a TOML file."""
    import toml

    path = temp_dir / "provexec.toml"
    with open(path, "w") as f:
        toml.dump(sample_config_data, f)
    return path
