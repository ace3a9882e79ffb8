"""RFC 4648 base32 helpers for shared secrets.

Secrets are usually handed out unpadded, lower-cased or split in groups of
four for readability, so decoding normalizes first and restores the padding
``base64.b32decode`` expects.
"""

from __future__ import annotations

import base64
import binascii
import re

from .errors import InvalidEncoding

_ALPHABET_RE = re.compile(r"^[A-Z2-7]*$")
# Unpadded symbol counts (mod 8) that map to a whole number of bytes
_VALID_REMAINDERS = frozenset({0, 2, 4, 5, 7})


def normalize(text: str) -> str:
    """Return ``text`` upper-cased without whitespace or ``=`` padding."""
    return re.sub(r"\s+", "", text).rstrip("=").upper()


def decode(text: str) -> bytes:
    """Decode base32 ``text`` into raw bytes.

    Accepts padded and unpadded input, any letter case and embedded
    whitespace.

    Raises:
        InvalidEncoding: if a symbol is outside ``A-Z2-7`` or the symbol
            count cannot be packed into whole bytes, or the unused
            trailing bits of the last symbol are not zero.
    """
    value = normalize(text)
    if "=" in value or not _ALPHABET_RE.match(value):
        raise InvalidEncoding("secret contains characters outside the base32 alphabet")
    if len(value) % 8 not in _VALID_REMAINDERS:
        raise InvalidEncoding(f"base32 secret has an invalid length ({len(value)} symbols)")
    try:
        data = base64.b32decode(value + "=" * ((-len(value)) % 8))
    except binascii.Error as e:
        raise InvalidEncoding(f"invalid base32 secret: {e}") from e
    if encode(data) != value:
        raise InvalidEncoding("base32 secret has non-zero trailing bits")
    return data


def encode(data: bytes) -> str:
    """Encode ``data`` as upper-case, unpadded base32."""
    return base64.b32encode(data).decode("ascii").rstrip("=")
