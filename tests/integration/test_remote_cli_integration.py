"""
Integration tests running the remote CLI bridge and playbook runner against
stand-in executables, through real child processes and the external
`timeout` and `env` tools.
"""

import shutil
import stat

import pytest

from provexec.models import Endpoint, ExecConfig
from provexec.playbook import PlaybookRunner, parse_ansible_log
from provexec.remote import RemoteCliBridge
from provexec.validation import ErrorKind, ExecutionError, RetryPolicy

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(
        shutil.which("timeout") is None or shutil.which("env") is None,
        reason="coreutils timeout and env are required",
    ),
]

FAKE_ESXCLI = """#!/bin/sh
# -s HOST -u USER [-d THUMBPRINT] COMMAND...
if [ "$#" -eq 4 ]; then
    echo "Connect to $2 failed. Server SHA-1 thumbprint: 11:22:33 (not trusted)."
    exit 1
fi
if [ "$5" != "-d" ] || [ "$6" != "11:22:33" ]; then
    echo "missing thumbprint" >&2
    exit 2
fi
if [ "$VI_PASSWORD" != "pw" ]; then
    echo "bad password" >&2
    exit 3
fi
if [ "$7" = "fail" ]; then
    echo "Error: Unknown command or namespace fail" >&2
    exit 1
fi
printf 'Name  Value\\n----  -----\\nfoo   bar\\n'
"""

FAKE_PLAYBOOK = """#!/bin/sh
# Fails when the host interpreter's variables leak through.
if [ -n "$PYTHONPATH" ]; then
    echo "PYTHONPATH leaked" >&2
    exit 5
fi
echo "[WARNING]: running against a stand-in inventory" >&2
printf '{"stats": {"localhost": {"failures": 0}}, "callback": "%s"}\\n' "$ANSIBLE_STDOUT_CALLBACK"
"""


def _script(directory, name, body):
    path = directory / name
    path.write_text(body)
    path.chmod(path.stat().st_mode | stat.S_IXUSR)
    return str(path)


@pytest.fixture
def integration_config(temp_dir):
    return ExecConfig(
        env_executable=shutil.which("env"),
        timeout_executable=shutil.which("timeout"),
        remote_cli_executable=_script(temp_dir, "esxcli", FAKE_ESXCLI),
        playbook_executable=_script(temp_dir, "ansible-playbook", FAKE_PLAYBOOK),
    )


@pytest.mark.integration
class TestRemoteCliIntegration:
    """End-to-end tests of RemoteCliBridge with a stand-in CLI."""

    def test_probe_then_parse(self, integration_config):
        endpoint = Endpoint(host="10.0.0.9", user="root", password="pw")

        records = RemoteCliBridge(config=integration_config).invoke(["system", "settings", "list"], endpoint)

        assert records == [{"Name": "foo", "Value": "bar"}]
        assert endpoint.thumbprint == "11:22:33"

    def test_failing_command(self, integration_config):
        endpoint = Endpoint(host="10.0.0.9", user="root", password="pw")

        with pytest.raises(ExecutionError) as exc_info:
            RemoteCliBridge(config=integration_config).invoke(["fail"], endpoint)

        assert "VI_PASSWORD=******" in str(exc_info.value)
        assert "Unknown command" in exc_info.value.result.stderr

    def test_wrong_password_retried_then_reported(self, integration_config, monkeypatch):
        monkeypatch.setattr("provexec.validation.strategies.time.sleep", lambda seconds: None)
        endpoint = Endpoint(host="10.0.0.9", user="root", password="wrong", thumbprint="11:22:33")
        bridge = RemoteCliBridge(config=integration_config)
        attempts = []

        def invoke():
            attempts.append(1)
            return bridge.invoke(["system", "settings", "list"], endpoint)

        with pytest.raises(ExecutionError):
            RetryPolicy(60, retry_on=[ErrorKind.PARSE]).execute(invoke)
        assert len(attempts) == 1


@pytest.mark.integration
class TestPlaybookIntegration:
    """End-to-end tests of PlaybookRunner with a stand-in ansible-playbook."""

    def test_run_and_parse(self, integration_config, temp_dir, monkeypatch):
        monkeypatch.setenv("PYTHONPATH", "/should/not/leak")
        output = temp_dir / "ansible.out"

        PlaybookRunner(config=integration_config).run(temp_dir / "site.yml", temp_dir / "inventory.yml", output)

        assert parse_ansible_log(output) == {"stats": {"localhost": {"failures": 0}}, "callback": "json"}
        assert "[WARNING]" not in output.read_text()
        assert "[WARNING]: running against a stand-in inventory" in (temp_dir / "ansible.out.err").read_text()
