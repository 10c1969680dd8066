"""
Unit tests for ansible-playbook and ansible-vault helpers.
"""

import json
from unittest.mock import Mock

import pytest
import yaml

from provexec.playbook import PlaybookOptions, PlaybookRunner, parse_ansible_log, write_ansible_yaml
from provexec.playbook.ansible import SSH_ARGS
from provexec.system.streaming import StreamingRunner
from provexec.validation import ExecutionError, ParseError

VAULT_VALUE = (
    "!vault |\n"
    "          $ANSIBLE_VAULT;1.2;AES256;provision\n"
    "          6162636465666768696a6b6c6d6e6f70\n"
)


@pytest.fixture
def playbook_runner(mock_runner):
    mock_runner.clean_env_prefix.side_effect = lambda: ["/bin/env", "--unset=PYTHONPATH"]
    streamer = Mock(spec=StreamingRunner)
    return PlaybookRunner(config=mock_runner.config, runner=mock_runner, streamer=streamer)


@pytest.mark.unit
class TestPlaybookRun:
    """Test cases for PlaybookRunner.run."""

    def test_command_line_and_environment(self, playbook_runner, temp_dir):
        output = temp_dir / "ansible.out"

        playbook_runner.run("site.yml", "inventory.yml", output)

        argv, path = playbook_runner.streamer.run.call_args.args
        env = playbook_runner.streamer.run.call_args.kwargs["env"]
        assert argv == [
            "/bin/env", "--unset=PYTHONPATH",
            "timeout", "1800", "ansible-playbook",
            "-i", "inventory.yml", "site.yml",
        ]
        assert path == output
        assert env == {
            "ANSIBLE_STDOUT_CALLBACK": "json",
            "ANSIBLE_SSH_ARGS": SSH_ARGS,
            "ANSIBLE_HOST_KEY_CHECKING": "False",
        }

    def test_options(self, playbook_runner, temp_dir):
        options = PlaybookOptions(
            verbose=True,
            host_key_check=True,
            timeout=60,
            vault_password_id="provision",
            vault_password_file="/opt/vault-pass.sh",
        )

        playbook_runner.run("site.yml", "inventory.yml", temp_dir / "out", options)

        argv = playbook_runner.streamer.run.call_args.args[0]
        env = playbook_runner.streamer.run.call_args.kwargs["env"]
        assert argv[2:] == [
            "timeout", "60", "ansible-playbook", "-v",
            "-i", "inventory.yml", "site.yml",
            "--vault-password-file", "/opt/vault-pass.sh",
        ]
        assert env["VAULT"] == "provision"
        assert "ANSIBLE_HOST_KEY_CHECKING" not in env

    def test_output_file_truncated(self, playbook_runner, temp_dir):
        output = temp_dir / "ansible.out"
        output.write_text("stale output from a previous run\n")

        playbook_runner.run("site.yml", "inventory.yml", output)

        assert output.read_text() == ""

    def test_stderr_goes_to_sibling_file(self, playbook_runner, temp_dir):
        output = temp_dir / "ansible.out"
        errors = temp_dir / "ansible.out.err"
        errors.write_text("[WARNING]: stale warning\n")

        playbook_runner.run("site.yml", "inventory.yml", output)

        assert playbook_runner.streamer.run.call_args.kwargs["stderr_path"] == errors
        assert errors.read_text() == ""

    @pytest.mark.parametrize("playbook,inventory,output", [
        (None, "inv", "out"),
        ("site.yml", "", "out"),
        ("site.yml", "inv", None),
    ])
    def test_missing_paths(self, playbook_runner, playbook, inventory, output):
        with pytest.raises(ValueError):
            playbook_runner.run(playbook, inventory, output)
        playbook_runner.streamer.run.assert_not_called()

    def test_vault_id_requires_password_file(self, playbook_runner, temp_dir):
        with pytest.raises(ValueError, match="Vault password id requires vault password file"):
            playbook_runner.run("site.yml", "inv", temp_dir / "out", PlaybookOptions(vault_password_id="x"))

    def test_failure_names_output_file(self, playbook_runner, temp_dir):
        output = temp_dir / "ansible.out"
        playbook_runner.streamer.run.side_effect = ExecutionError("exit 2", command="ansible-playbook")

        with pytest.raises(ExecutionError) as exc_info:
            playbook_runner.run("site.yml", "inventory.yml", output)

        assert str(exc_info.value) == f"Ansible run failed; output in {output}, errors in {output}.err"
        assert exc_info.value.output_path == output


@pytest.mark.unit
class TestEncryptString:
    """Test cases for PlaybookRunner.encrypt_string."""

    def test_encrypts_via_stdin(self, playbook_runner, make_result):
        playbook_runner.runner.execute_with_clean_env.return_value = make_result(stdout=VAULT_VALUE)

        value = playbook_runner.encrypt_string("provision", "hunter2", "/opt/vault-pass.sh")

        assert value == VAULT_VALUE
        playbook_runner.runner.execute_with_clean_env.assert_called_once_with(
            "ansible-vault",
            ["encrypt_string", "--vault-password-file", "/opt/vault-pass.sh"],
            env={"VAULT": "provision"},
            stdin_text="hunter2",
        )

    def test_failure(self, playbook_runner, make_result):
        playbook_runner.runner.execute_with_clean_env.return_value = make_result(
            stderr="ERROR! Decryption failed", exit_status=1
        )

        with pytest.raises(ExecutionError, match="Error getting vault value: ERROR! Decryption failed"):
            playbook_runner.encrypt_string("provision", "hunter2", "/opt/vault-pass.sh")

    @pytest.mark.parametrize("vault_id,value,vault_file", [
        ("", "v", "f"),
        ("id", "v", ""),
        ("id", None, "f"),
    ])
    def test_missing_arguments(self, playbook_runner, vault_id, value, vault_file):
        with pytest.raises(ValueError):
            playbook_runner.encrypt_string(vault_id, value, vault_file)


@pytest.mark.unit
class TestAnsibleYaml:
    """Test cases for inventory and variable file writing."""

    def test_vault_values_are_tagged_on_the_key_line(self, temp_dir):
        path = temp_dir / "vars.yml"

        write_ansible_yaml({"user": "root", "password": VAULT_VALUE}, path)

        text = path.read_text()
        assert "password: !vault |" in text
        assert "password: |" not in text
        assert "$ANSIBLE_VAULT;1.2;AES256;provision" in text

    def test_key_order_preserved(self, temp_dir):
        path = temp_dir / "inventory.yml"
        data = {"all": {"hosts": {"esx02": {"ansible_host": "10.0.0.2"}, "esx01": {"ansible_host": "10.0.0.1"}}}}

        write_ansible_yaml(data, path)

        assert yaml.safe_load(path.read_text()) == data
        assert path.read_text().index("esx02") < path.read_text().index("esx01")

    def test_multiline_strings_use_literal_blocks(self, temp_dir):
        path = temp_dir / "vars.yml"

        write_ansible_yaml({"motd": "line one\nline two\n"}, path)

        assert path.read_text().startswith("motd: |")
        assert yaml.safe_load(path.read_text()) == {"motd": "line one\nline two\n"}


@pytest.mark.unit
class TestParseAnsibleLog:
    """Test cases for reading back json callback output."""

    def test_parses_document(self, temp_dir):
        document = {"plays": [{"play": {"name": "provision"}}], "stats": {"esx01": {"failures": 0}}}
        path = temp_dir / "ansible.out"
        path.write_text(json.dumps(document, indent=4) + "\n")

        assert parse_ansible_log(path) == document

    def test_skips_preamble_and_retry_noise(self, temp_dir):
        path = temp_dir / "ansible.out"
        path.write_text(
            "[WARNING]: provided hosts list is empty\n"
            '{\n    "stats": {"esx01": {"failures": 1}}\n}\n'
            "\tto retry, use: --limit @/opt/site.retry\n"
        )

        assert parse_ansible_log(path) == {"stats": {"esx01": {"failures": 1}}}

    def test_no_document(self, temp_dir):
        path = temp_dir / "ansible.out"
        path.write_text("ERROR! the playbook: site.yml could not be found\n")

        with pytest.raises(ParseError, match="No JSON document"):
            parse_ansible_log(path)

    def test_truncated_document(self, temp_dir):
        path = temp_dir / "ansible.out"
        path.write_text('{\n    "stats": {\n')

        with pytest.raises(ParseError, match="Malformed ansible output"):
            parse_ansible_log(path)
