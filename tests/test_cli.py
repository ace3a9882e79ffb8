"""
Unit tests for the CLI interface.
"""

import json
import logging
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from totp_codes import secrets
from totp_codes.cli import cli, exit_code_for
from totp_codes.errors import ConfigReadError, InvalidParameter, NoCredentialsConfigured

SECRET = "GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ"
ACME = f"otpauth://totp/ACME:alice?secret={SECRET}&issuer=ACME&digits=8"
HOTP = f"otpauth://hotp/Other?secret={SECRET}&counter=0"


@pytest.fixture(autouse=True)
def restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class TestShowCommand:
    """Test cases for the show command."""

    def setup_method(self) -> None:
        self.runner = CliRunner()

    def test_cli_help(self) -> None:
        result = self.runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "Print one-time codes" in result.output

    def test_show_prints_codes_in_order(self, write_config) -> None:
        path = write_config(f"tokens:\n  - {ACME}\n  - {HOTP}\n")

        result = self.runner.invoke(cli, ["show", path, "--at", "59"])

        assert result.exit_code == 0
        lines = result.output.strip().splitlines()
        assert lines == ["ACME => 94287082", "unknown => 755224"]

    def test_show_zero_pads(self, write_config) -> None:
        path = write_config(f"tokens:\n  - {ACME}\n")
        result = self.runner.invoke(cli, ["show", path, "--at", "1111111109"])
        assert result.exit_code == 0
        assert "ACME => 07081804" in result.output

    def test_show_json(self, write_config) -> None:
        path = write_config(f"tokens:\n  - {ACME}\n")
        result = self.runner.invoke(cli, ["show", path, "--at", "59", "--json"])
        assert result.exit_code == 0
        payload = json.loads(result.output)
        assert payload == [
            {"label": "ACME", "digits": 8, "value": 94287082, "remaining_seconds": 1, "code": "94287082"}
        ]

    def test_config_path_from_env(self, write_config) -> None:
        path = write_config(f"tokens:\n  - {HOTP}\n")
        result = self.runner.invoke(cli, ["show"], env={"TOTP_CODES_CONFIG_PATH": path})
        assert result.exit_code == 0
        assert "unknown => 755224" in result.output

    def test_no_tokens_exit_code(self, write_config) -> None:
        result = self.runner.invoke(cli, ["show", write_config("other: 1\n")])
        assert result.exit_code == 25
        assert "no tokens provided in config" in result.output

    def test_empty_config_exit_code(self, write_config) -> None:
        result = self.runner.invoke(cli, ["show", write_config("")])
        assert result.exit_code == 26
        assert "invalid configuration file" in result.output

    def test_yaml_error_exit_code(self, write_config) -> None:
        result = self.runner.invoke(cli, ["show", write_config("tokens: [oops\n")])
        assert result.exit_code == 27
        assert "YAML: couldn't parse" in result.output

    def test_missing_file_exit_code(self, tmp_path) -> None:
        result = self.runner.invoke(cli, ["show", str(tmp_path / "missing.yaml")])
        assert result.exit_code == 2

    def test_fail_fast_names_failing_token(self, write_config) -> None:
        path = write_config(f"tokens:\n  - {ACME}\n  - otpauth://totp/Bad?issuer=Bad\n  - {HOTP}\n")

        result = self.runner.invoke(cli, ["show", path, "--at", "59"])

        assert result.exit_code == 1
        assert "token #2 (Bad)" in result.output
        assert "ACME => " not in result.output

    def test_keep_going_prints_the_rest(self, write_config) -> None:
        path = write_config(f"tokens:\n  - {ACME}\n  - otpauth://totp/Bad?issuer=Bad\n  - {HOTP}\n")

        result = self.runner.invoke(cli, ["show", path, "--at", "59", "--keep-going"])

        assert result.exit_code == 1
        assert "ACME => 94287082" in result.output
        assert "unknown => 755224" in result.output
        assert "token #2 (Bad)" in result.output

    def test_keep_going_json(self, write_config) -> None:
        path = write_config(f"tokens:\n  - otpauth://totp/Bad?issuer=Bad\n  - {HOTP}\n")

        result = self.runner.invoke(cli, ["show", path, "--keep-going", "--json"])

        assert result.exit_code == 1
        start = result.output.index("[")
        payload = json.loads(result.output[start:])
        assert payload[0]["error"]["kind"] == "missing_secret"
        assert payload[1]["code"] == "755224"

    def test_time_step_overflow_exit_code(self, write_config) -> None:
        path = write_config(f"tokens:\n  - otpauth://totp/Fast?secret={SECRET}&period=1\n")

        result = self.runner.invoke(cli, ["show", path, "--at", "1e20"])

        assert result.exit_code == 1
        assert "64-bit time step range" in result.output
        assert not isinstance(result.exception, ValueError)

    def test_invalid_setting_exit_code(self, write_config) -> None:
        path = write_config(f"tokens:\n  - {HOTP}\n")

        result = self.runner.invoke(cli, ["show", path], env={"TOTP_CODES_MAX_WORKERS": "abc"})

        assert result.exit_code == 26
        assert "TOTP_CODES_MAX_WORKERS" in result.output

    @patch("boto3.client")
    def test_show_from_secret(self, mock_client: MagicMock) -> None:
        secrets._get_secrets_client.cache_clear()
        mock = MagicMock()
        mock.get_secret_value.return_value = {"SecretString": json.dumps({"tokens": [ACME]})}
        mock_client.return_value = mock

        result = self.runner.invoke(cli, ["show", "--secret-name", "team/tokens", "--at", "59"])

        assert result.exit_code == 0
        assert "ACME => 94287082" in result.output
        mock.get_secret_value.assert_called_once_with(SecretId="team/tokens")
        secrets._get_secrets_client.cache_clear()


class TestInspectCommand:
    """Test cases for the inspect command."""

    def setup_method(self) -> None:
        self.runner = CliRunner()

    def test_inspect_totp(self) -> None:
        result = self.runner.invoke(cli, ["inspect", ACME])
        assert result.exit_code == 0
        assert "label:     ACME" in result.output
        assert "account:   alice" in result.output
        assert "digits:    8" in result.output
        assert "period:    30s" in result.output
        assert SECRET not in result.output

    def test_inspect_hotp(self) -> None:
        result = self.runner.invoke(cli, ["inspect", HOTP])
        assert result.exit_code == 0
        assert "counter:   0" in result.output

    def test_inspect_invalid(self) -> None:
        result = self.runner.invoke(cli, ["inspect", "https://example.com"])
        assert result.exit_code == 1
        assert "unsupported scheme" in result.output


def test_exit_code_mapping():
    assert exit_code_for(NoCredentialsConfigured()) == 25
    assert exit_code_for(ConfigReadError("boom", errno=13)) == 13
    assert exit_code_for(ConfigReadError("boom")) == 1
    assert exit_code_for(InvalidParameter("digits")) == 1
