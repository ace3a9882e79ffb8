import errno
import logging
import os

import pytest

from totp_codes.config import Settings, TokenConfig, load_settings, load_token_config, parse_token_document
from totp_codes.errors import ConfigReadError, ConfigSyntaxError, InsecureConfig, InvalidConfig

URL = "otpauth://totp/Example:alice?secret=JBSWY3DPEHPK3PXP&issuer=Example"


def test_load_tokens(write_config):
    path = write_config(f"tokens:\n  - {URL}\n  - otpauth://hotp/x?secret=GEZA\n")
    config = load_token_config(path)
    assert config == TokenConfig(tokens=[URL, "otpauth://hotp/x?secret=GEZA"])


def test_missing_tokens_key_is_absent_not_empty(write_config):
    path = write_config("other: 1\n")
    assert load_token_config(path).tokens is None


def test_null_tokens_is_absent(write_config):
    assert load_token_config(write_config("tokens:\n")).tokens is None


def test_empty_tokens_list(write_config):
    assert load_token_config(write_config("tokens: []\n")).tokens == []


def test_bare_list_document():
    assert parse_token_document(f"- {URL}\n").tokens == [URL]


def test_json_document():
    assert parse_token_document(f'{{"tokens": ["{URL}"]}}').tokens == [URL]


@pytest.mark.parametrize("content", ["", "   \n", "# only a comment\n"])
def test_empty_document_is_invalid(write_config, content):
    with pytest.raises(InvalidConfig, match="invalid configuration file"):
        load_token_config(write_config(content))


@pytest.mark.parametrize("content", ["tokens: [unclosed\n", "key: value: other\n"])
def test_yaml_syntax_error(write_config, content):
    with pytest.raises(ConfigSyntaxError, match="YAML: couldn't parse"):
        load_token_config(write_config(content))


def test_scalar_document_is_syntax_error(write_config):
    with pytest.raises(ConfigSyntaxError):
        load_token_config(write_config("just a string\n"))


@pytest.mark.parametrize("content", ["tokens: 5\n", "tokens:\n  - 1\n  - 2\n", "tokens: {a: b}\n"])
def test_tokens_wrong_shape(write_config, content):
    with pytest.raises(InvalidConfig):
        load_token_config(write_config(content))


def test_missing_file(tmp_path):
    with pytest.raises(ConfigReadError) as exc_info:
        load_token_config(tmp_path / "nope.yaml")
    assert exc_info.value.errno == errno.ENOENT


@pytest.mark.skipif(os.name != "posix", reason="POSIX permissions only")
def test_open_permissions_warn(write_config, caplog):
    path = write_config(f"tokens:\n  - {URL}\n")
    os.chmod(path, 0o644)
    with caplog.at_level(logging.WARNING, logger="totp_codes.config"):
        config = load_token_config(path)
    assert config.tokens == [URL]
    assert "chmod 600" in caplog.text


@pytest.mark.skipif(os.name != "posix", reason="POSIX permissions only")
def test_open_permissions_strict(write_config):
    path = write_config(f"tokens:\n  - {URL}\n")
    os.chmod(path, 0o640)
    with pytest.raises(InsecureConfig):
        load_token_config(path, strict_permissions=True)


@pytest.mark.skipif(os.name != "posix", reason="POSIX permissions only")
def test_private_file_no_warning(write_config, caplog):
    path = write_config(f"tokens:\n  - {URL}\n")
    with caplog.at_level(logging.WARNING, logger="totp_codes.config"):
        load_token_config(path, strict_permissions=True)
    assert "chmod 600" not in caplog.text


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("TOTP_CODES_CONFIG_PATH", "/tmp/tokens.yaml")
    monkeypatch.setenv("TOTP_CODES_KEEP_GOING", "true")
    monkeypatch.setenv("TOTP_CODES_LOG_LEVEL", "DEBUG")
    settings = Settings()
    assert settings.config_path == "/tmp/tokens.yaml"
    assert settings.keep_going is True
    assert settings.log_level == "DEBUG"
    assert settings.strict_permissions is False


def test_load_settings_invalid_env(monkeypatch):
    monkeypatch.setenv("TOTP_CODES_MAX_WORKERS", "abc")
    with pytest.raises(InvalidConfig, match="TOTP_CODES_MAX_WORKERS"):
        load_settings()


def test_load_settings_valid_env(monkeypatch):
    monkeypatch.setenv("TOTP_CODES_MAX_WORKERS", "4")
    assert load_settings().max_workers == 4
