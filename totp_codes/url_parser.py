"""Parse ``otpauth://`` provisioning URLs into ``Credential`` objects.

Format::

    otpauth://{hotp|totp}/{label}?secret=BASE32&issuer=STR
        &algorithm={SHA1|SHA256|SHA512}&digits=N&period=SECONDS&counter=N

Only ``secret`` is required. The path label is informational; the
``issuer`` query parameter names the credential.
"""

from __future__ import annotations

import re
from typing import Any
from urllib.parse import parse_qsl, unquote, urlsplit

from . import base32
from .errors import (
    InvalidParameter,
    MalformedUrl,
    MissingSecret,
    UnsupportedMode,
    UnsupportedScheme,
)
from .models import (
    DEFAULT_COUNTER,
    DEFAULT_DIGITS,
    DEFAULT_LABEL,
    DEFAULT_PERIOD,
    MAX_COUNTER,
    MAX_DIGITS,
    MIN_DIGITS,
    Algorithm,
    Credential,
    OtpMode,
)

SCHEME = "otpauth"

_INTEGER_RE = re.compile(r"[0-9]+")


def _split(url: Any) -> tuple[str, list[str], dict[str, str]]:
    """Return ``(scheme, path segments, query parameters)`` of ``url``.

    The authority part counts as the first segment, so ``otpauth://totp/x``
    yields ``["totp", "x"]``. Repeated query keys keep the last value.
    """
    if not isinstance(url, str):
        raise MalformedUrl(f"expected a URL string, got {type(url).__name__}")
    text = url.strip()
    try:
        parts = urlsplit(text)
    except ValueError as e:
        raise MalformedUrl(f"not a valid URL: {e}") from e
    if not parts.scheme:
        raise MalformedUrl("not a valid URL: missing scheme")
    if not parts.netloc and not text.lower().startswith(f"{parts.scheme}://"):
        raise MalformedUrl("not a valid URL: missing '://' after the scheme")
    segments = [parts.netloc, *parts.path.split("/")]
    params = dict(parse_qsl(parts.query, keep_blank_values=True))
    return parts.scheme.lower(), segments, params


def _parse_int(params: dict[str, str], key: str, default: int) -> int:
    raw = params.get(key)
    if raw is None:
        return default
    value = raw.strip()
    if not _INTEGER_RE.fullmatch(value):
        raise InvalidParameter(key, f"expected a non-negative integer, got {raw!r}")
    return int(value)


def _parse_algorithm(params: dict[str, str]) -> Algorithm:
    raw = params.get("algorithm")
    if raw is None:
        return Algorithm.SHA1
    try:
        return Algorithm(raw.strip().upper())
    except ValueError as e:
        raise InvalidParameter("algorithm", f"unsupported algorithm {raw!r}") from e


def path_label(url: str) -> str | None:
    """Return the decoded path label of ``url`` (``Issuer:account``), if any.

    Never raises; used to name batch entries in diagnostics.
    """
    try:
        _, segments, _ = _split(url)
    except MalformedUrl:
        return None
    rest = [s for s in segments if s][1:]
    return unquote("/".join(rest)) or None


def parse_credential_url(url: str) -> Credential:
    """Parse a provisioning URL.

    Args:
        url: An ``otpauth://totp/...`` or ``otpauth://hotp/...`` URL.

    Returns:
        Credential: The decoded credential.

    Raises:
        MalformedUrl: ``url`` is not a syntactically valid URL.
        UnsupportedScheme: the scheme is not ``otpauth``.
        UnsupportedMode: the mode is neither ``totp`` nor ``hotp``.
        MissingSecret: there is no (or an empty) ``secret`` parameter.
        InvalidEncoding: the secret is not valid base32.
        InvalidParameter: ``digits``, ``period``, ``counter`` or
            ``algorithm`` has an unusable value.
    """
    scheme, segments, params = _split(url)
    if scheme != SCHEME:
        raise UnsupportedScheme(f"unsupported scheme {scheme!r}, expected {SCHEME!r}")

    non_empty = [s for s in segments if s]
    if not non_empty:
        raise UnsupportedMode("missing mode, expected 'totp' or 'hotp'")
    try:
        mode = OtpMode(non_empty[0].lower())
    except ValueError as e:
        raise UnsupportedMode(f"unsupported mode {non_empty[0]!r}, expected 'totp' or 'hotp'") from e

    label = unquote("/".join(non_empty[1:]))
    account = label.split(":", 1)[1].strip() if ":" in label else label.strip()

    secret = params.get("secret", "").strip()
    if not secret:
        raise MissingSecret("missing 'secret' parameter")
    secret_bytes = base32.decode(secret)
    if not secret_bytes:
        raise MissingSecret("'secret' parameter decodes to an empty key")

    algorithm = _parse_algorithm(params)

    digits = _parse_int(params, "digits", DEFAULT_DIGITS)
    if not MIN_DIGITS <= digits <= MAX_DIGITS:
        raise InvalidParameter("digits", f"must be between {MIN_DIGITS} and {MAX_DIGITS}, got {digits}")

    period = DEFAULT_PERIOD
    counter = DEFAULT_COUNTER
    if mode is OtpMode.TOTP:
        period = _parse_int(params, "period", DEFAULT_PERIOD)
        if period <= 0:
            raise InvalidParameter("period", "must be greater than zero")
    else:
        counter = _parse_int(params, "counter", DEFAULT_COUNTER)
        if counter > MAX_COUNTER:
            raise InvalidParameter("counter", "does not fit in 8 bytes")

    issuer = params.get("issuer", "").strip()

    return Credential(
        label=issuer or DEFAULT_LABEL,
        secret_bytes=secret_bytes,
        algorithm=algorithm,
        digits=digits,
        mode=mode,
        period=period,
        counter=counter,
        account=account,
    )
