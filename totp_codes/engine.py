"""HOTP (RFC 4226) and TOTP (RFC 6238) code generation.

All functions are pure: the clock reading is always supplied by the caller.
"""

from __future__ import annotations

import hashlib
import hmac
import math
import struct
from datetime import datetime
from typing import Callable, Union

from .errors import ClockError, InvalidParameter, UnsupportedAlgorithm
from .models import MAX_COUNTER, Algorithm, Credential, GeneratedCode, OtpMode

Instant = Union[datetime, int, float]

_DIGESTS: dict[Algorithm, Callable] = {
    Algorithm.SHA1: hashlib.sha1,
    Algorithm.SHA256: hashlib.sha256,
    Algorithm.SHA512: hashlib.sha512,
}


def _digest_for(algorithm: Algorithm) -> Callable:
    try:
        return _DIGESTS[Algorithm(algorithm)]
    except (KeyError, ValueError) as e:
        raise UnsupportedAlgorithm(f"unsupported HMAC algorithm {algorithm!r}") from e


def dynamic_truncate(digest: bytes) -> int:
    """Select 4 bytes of ``digest`` at the offset given by its last nibble.

    Returns the 31-bit big-endian integer with the sign bit cleared.
    """
    offset = digest[-1] & 0x0F
    chunk = digest[offset:offset + 4]
    return int.from_bytes(chunk, "big") & 0x7FFFFFFF


def hotp_value(secret: bytes, counter: int, digits: int, algorithm: Algorithm = Algorithm.SHA1) -> int:
    """Compute the numeric HOTP value for ``counter``.

    Args:
        secret: Raw shared secret bytes.
        counter: Moving factor, packed as 8 big-endian bytes.
        digits: Number of decimal digits to keep.
        algorithm: HMAC hash function.
    """
    if not 0 <= counter <= MAX_COUNTER:
        raise InvalidParameter("counter", f"out of the 8-byte range: {counter}")
    message = struct.pack(">Q", counter)
    digest = hmac.new(secret, message, _digest_for(algorithm)).digest()
    return dynamic_truncate(digest) % (10**digits)


def unix_seconds(now: Instant) -> int:
    """Whole Unix seconds of ``now``.

    Raises:
        ClockError: for naive datetimes, non-finite numbers and instants
            before the epoch.
    """
    if isinstance(now, datetime):
        if now.tzinfo is None or now.utcoffset() is None:
            raise ClockError("naive datetime, a timezone-aware instant is required")
        seconds = now.timestamp()
    elif isinstance(now, (int, float)) and not isinstance(now, bool):
        seconds = now
    else:
        raise ClockError(f"unsupported clock reading {now!r}")
    if isinstance(seconds, float) and not math.isfinite(seconds):
        raise ClockError(f"clock reading is not finite: {seconds}")
    if seconds < 0:
        raise ClockError(f"clock reading is before the Unix epoch: {seconds}")
    return int(math.floor(seconds))


def totp_counter(now: Instant, period: int) -> int:
    """RFC 6238 time step index: ``floor(unix_seconds / period)``."""
    return unix_seconds(now) // period


def generate(credential: Credential, now: Instant | None = None) -> GeneratedCode:
    """Compute the current code of ``credential``.

    TOTP credentials use ``floor(now / period)`` as counter and require
    ``now``. HOTP credentials use ``credential.counter`` as-is and ignore
    ``now``; advancing the counter is up to the caller.

    Raises:
        ClockError: ``now`` is missing (TOTP), naive, before the epoch, or
            its time step does not fit in 8 bytes.
        UnsupportedAlgorithm: the HMAC algorithm is not available.
    """
    remaining = None
    if credential.mode is OtpMode.TOTP:
        if now is None:
            raise ClockError("a clock reading is required for TOTP credentials")
        seconds = unix_seconds(now)
        counter = seconds // credential.period
        if counter > MAX_COUNTER:
            raise ClockError("clock reading is beyond the 64-bit time step range")
        remaining = credential.period - seconds % credential.period
    else:
        counter = credential.counter

    value = hotp_value(credential.secret_bytes, counter, credential.digits, credential.algorithm)
    return GeneratedCode(
        label=credential.label,
        digits=credential.digits,
        value=value,
        remaining_seconds=remaining,
    )
