"""Secrets Manager source for token lists.

The secret value holds the same document as a token file, either YAML or
JSON: ``{"tokens": ["otpauth://...", ...]}`` or a bare list of URLs.
"""

from __future__ import annotations

import base64
import logging
import os
from functools import lru_cache
from typing import Any, Optional

import boto3

from .config import TokenConfig, parse_token_document

logger = logging.getLogger(__name__)


@lru_cache(maxsize=16)
def _get_secrets_client(region: Optional[str] = None) -> Any:
    """Return a cached boto3 Secrets Manager client.

    Falls back to AWS_REGION / AWS_DEFAULT_REGION when ``region`` is unset.
    """
    region = region or os.environ.get("AWS_REGION") or os.environ.get("AWS_DEFAULT_REGION") or "us-east-1"
    return boto3.client("secretsmanager", region_name=region)


def get_secret_string(secret_name: str, region: Optional[str] = None) -> str:
    """Fetch a secret string by name.

    Binary secrets are decoded as UTF-8 text.
    """
    client = _get_secrets_client(region)
    response = client.get_secret_value(SecretId=secret_name)
    if response.get("SecretString"):
        return str(response["SecretString"])
    binary = response.get("SecretBinary", b"")
    if isinstance(binary, str):
        binary = base64.b64decode(binary)
    return binary.decode("utf-8")


def load_token_config_from_secret(secret_name: str, region: Optional[str] = None) -> TokenConfig:
    """Read a token list stored in Secrets Manager.

    Raises:
        InvalidConfig, ConfigSyntaxError: the secret has the wrong shape.
    """
    raw = get_secret_string(secret_name, region)
    config = parse_token_document(raw, source=f"secret {secret_name}")
    logger.info("Loaded %s token(s) from secret %s", len(config.tokens or []), secret_name)
    return config
