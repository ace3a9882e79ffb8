"""TOTP Codes MCP server.

Exposes code generation for provisioning URLs as MCP tools. Every tool keeps
going past failing URLs and reports them per item.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional

from fastmcp import FastMCP
from pydantic import BaseModel, Field

from .batch import run_items
from .config import load_settings
from .errors import OtpError
from .formatting import item_to_dict
from .secrets import load_token_config_from_secret

logger = logging.getLogger(__name__)

mcp = FastMCP("TOTP Codes MCP Server")


class GenerateCodesRequest(BaseModel):
    """Request to compute codes for a list of provisioning URLs.

    Attributes:
        urls: ``otpauth://`` URLs, in the order results should be returned.
        at: Optional unix timestamp override; defaults to the current time.
    """

    urls: List[str] = Field(..., min_length=1)
    at: Optional[float] = Field(default=None, ge=0)


class GenerateCodesFromSecretRequest(BaseModel):
    """Request to compute codes for a token list kept in Secrets Manager.

    Attributes:
        secret_name: Secret holding ``{"tokens": [...]}`` as YAML or JSON.
        secret_region: Optional AWS region, else TOTP_CODES_SECRETS_REGION,
            AWS_REGION or the default chain.
        at: Optional unix timestamp override.
    """

    secret_name: str = Field(..., min_length=1)
    secret_region: Optional[str] = Field(default=None)
    at: Optional[float] = Field(default=None, ge=0)


def _generate(urls: Optional[List[str]], at: Optional[float]) -> Dict[str, Any]:
    now = at if at is not None else time.time()
    items = run_items(urls, now)
    failed = sum(1 for item in items if not item.ok)
    if failed:
        logger.warning("%s of %s token(s) failed", failed, len(items))
    return {"codes": [item_to_dict(item) for item in items], "failed": failed}


def _generate_from_secret(secret_name: str, region: Optional[str], at: Optional[float]) -> Dict[str, Any]:
    try:
        config = load_token_config_from_secret(secret_name, region or load_settings().secrets_region)
        return _generate(config.tokens, at)
    except OtpError as e:
        logger.error("Cannot generate codes from secret %s: %s", secret_name, e)
        return {"codes": [], "failed": 0, "error": {"kind": e.kind.value, "message": str(e)}}


@mcp.tool(
    name="generate_codes",
    description="Compute the current HOTP/TOTP code for each otpauth:// URL.",
)
def generate_codes(request: GenerateCodesRequest) -> Dict[str, Any]:
    """Return the current code for every URL in the request."""
    return _generate(request.urls, request.at)


@mcp.tool(
    name="generate_codes_from_secret",
    description="Fetch a token list from AWS Secrets Manager and compute the current codes.",
)
def generate_codes_from_secret(request: GenerateCodesFromSecretRequest) -> Dict[str, Any]:
    """Return the current code for every token stored in the secret."""
    return _generate_from_secret(request.secret_name, request.secret_region, request.at)


if __name__ == "__main__":
    mcp.run(transport="stdio")
