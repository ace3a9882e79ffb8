"""totp-codes package.

Parses ``otpauth://`` provisioning URLs and computes their current HOTP/TOTP
codes, from a CLI, an MCP server or as a library.
"""

from .base32 import decode as decode_base32
from .batch import run_batch, run_items
from .engine import generate
from .models import Algorithm, Credential, GeneratedCode, OtpMode
from .url_parser import parse_credential_url

__all__ = [
    "Algorithm",
    "Credential",
    "GeneratedCode",
    "OtpMode",
    "decode_base32",
    "generate",
    "parse_credential_url",
    "run_batch",
    "run_items",
]
