"""Token file loading and runtime settings.

The token file is YAML::

    tokens:
      - otpauth://totp/Example:alice@example.com?secret=JBSWY3DPEHPK3PXP&issuer=Example
      - otpauth://hotp/Other?secret=GEZDGNBVGY3TQOJQ&counter=3

Environment (prefix ``TOTP_CODES_``, also read from ``.env``):
- CONFIG_PATH: default token file for the CLI
- LOG_LEVEL: logging level name
- KEEP_GOING: compute every token even if some fail
- STRICT_PERMISSIONS: refuse token files readable by group/other
- SECRETS_REGION: AWS region for Secrets Manager token lists
"""

from __future__ import annotations

import logging
import os
import stat
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigReadError, ConfigSyntaxError, InsecureConfig, InvalidConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "~/.config/totp-codes/tokens.yaml"


class Settings(BaseSettings):
    """Runtime settings for the CLI and MCP server."""

    config_path: str = DEFAULT_CONFIG_PATH
    log_level: str = "WARNING"
    keep_going: bool = False
    strict_permissions: bool = False
    max_workers: int | None = None
    secrets_region: str | None = None

    model_config = SettingsConfigDict(
        env_prefix="TOTP_CODES_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


def load_settings() -> Settings:
    """Build ``Settings`` from the environment and ``.env``.

    Raises:
        InvalidConfig: a ``TOTP_CODES_*`` value has the wrong type.
    """
    try:
        return Settings()
    except ValidationError as e:
        fields = ", ".join(
            f"TOTP_CODES_{str(err['loc'][0]).upper()}" for err in e.errors() if err.get("loc")
        )
        raise InvalidConfig(f"invalid setting(s): {fields or e}") from e


class TokenConfig(BaseModel):
    """Parsed token file.

    ``tokens`` is ``None`` when the file has no ``tokens`` entry, which is
    reported differently from an empty list.
    """

    tokens: list[str] | None = None


def parse_token_document(raw: str, source: str = "<string>") -> TokenConfig:
    """Parse YAML (or JSON) text into a ``TokenConfig``.

    Raises:
        InvalidConfig: the document is empty or has the wrong shape.
        ConfigSyntaxError: the text is not valid YAML or not a mapping.
    """
    try:
        data: Any = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        logger.debug("YAML error in %s: %s", source, e)
        raise ConfigSyntaxError(f"YAML: couldn't parse {source}") from e

    if data is None:
        raise InvalidConfig("invalid configuration file")
    if isinstance(data, list):
        data = {"tokens": data}
    if not isinstance(data, dict):
        raise ConfigSyntaxError(f"YAML: couldn't parse {source}: expected a mapping")

    try:
        return TokenConfig.model_validate({"tokens": data.get("tokens")})
    except ValidationError as e:
        logger.debug("Invalid token list in %s: %s", source, e)
        raise InvalidConfig("invalid configuration file: 'tokens' must be a list of URL strings") from e


def check_permissions(path: Path, strict: bool = False) -> None:
    """Warn (or fail when ``strict``) if ``path`` is readable by group/other."""
    if os.name != "posix":
        return
    mode = path.stat().st_mode
    if mode & (stat.S_IRWXG | stat.S_IRWXO):
        message = f"{path} is accessible by group/other (mode {stat.filemode(mode)}); consider chmod 600"
        if strict:
            raise InsecureConfig(message)
        logger.warning(message)


def load_token_config(path: str | os.PathLike, strict_permissions: bool = False) -> TokenConfig:
    """Read and parse the token file at ``path``.

    Raises:
        ConfigReadError: the file cannot be read (``errno`` is set).
        InsecureConfig: ``strict_permissions`` and the file is too open.
        InvalidConfig, ConfigSyntaxError: see ``parse_token_document``.
    """
    file_path = Path(path).expanduser()
    try:
        raw = file_path.read_text(encoding="utf-8")
        check_permissions(file_path, strict=strict_permissions)
    except OSError as e:
        raise ConfigReadError(f"couldn't read {file_path}: {e.strerror or e}", errno=e.errno) from e
    except UnicodeDecodeError as e:
        raise ConfigSyntaxError(f"YAML: couldn't parse {file_path}: not UTF-8 text") from e

    config = parse_token_document(raw, source=str(file_path))
    logger.info("Loaded %s token(s) from %s", len(config.tokens or []), file_path)
    return config
