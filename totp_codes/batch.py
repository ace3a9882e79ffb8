"""Generate codes for a list of provisioning URLs.

Two entry points, one per partial failure policy:

- ``run_batch`` (default): stop at the first URL that fails and
  raise ``BatchItemError`` naming its position and label.
- ``run_items``: compute every URL and report failures per item.

Output order always follows input order.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Sequence
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from .engine import Instant, generate
from .errors import BatchItemError, NoCredentialsConfigured, OtpError
from .models import BatchItem, GeneratedCode
from .url_parser import parse_credential_url, path_label


def redact_url(url: str) -> str:
    """Return ``url`` with its ``secret`` parameter masked."""
    try:
        parts = urlsplit(str(url))
        params = [
            (k, "***" if k == "secret" else v)
            for k, v in parse_qsl(parts.query, keep_blank_values=True)
        ]
        return urlunsplit(parts._replace(query=urlencode(params, safe="*:@")))
    except ValueError:
        return "<unparseable url>"


def describe(url: str) -> str:
    """Human-readable name for a batch entry: its path label or redacted URL."""
    return path_label(url) or redact_url(url)


def _process(index: int, url: str, now: Instant) -> BatchItem:
    try:
        code = generate(parse_credential_url(url), now)
    except OtpError as e:
        return BatchItem(index=index, label=describe(url), error=e)
    return BatchItem(index=index, label=code.label, code=code)


def run_items(
    urls: Sequence[str] | None,
    now: Instant,
    max_workers: int | None = None,
) -> list[BatchItem]:
    """Compute every URL, returning one ``BatchItem`` per input in order.

    Raises:
        NoCredentialsConfigured: ``urls`` is ``None``.
    """
    if urls is None:
        raise NoCredentialsConfigured()
    if max_workers and max_workers > 1 and len(urls) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            # map() yields results in submission order
            return list(pool.map(_process, range(len(urls)), urls, [now] * len(urls)))
    return [_process(i, url, now) for i, url in enumerate(urls)]


def run_batch(
    urls: Sequence[str] | None,
    now: Instant,
    max_workers: int | None = None,
) -> list[GeneratedCode]:
    """Parse and generate a code for each URL, stopping at the first failure.

    Args:
        urls: Provisioning URLs in enrollment order; ``None`` when the
            configuration has no token list at all.
        now: Clock reading used for every TOTP credential.
        max_workers: Optional thread count for computing items concurrently.

    Raises:
        NoCredentialsConfigured: ``urls`` is ``None``.
        BatchItemError: a URL failed; the earliest failing one is reported.
    """
    if urls is None:
        raise NoCredentialsConfigured()
    if max_workers and max_workers > 1:
        items = run_items(urls, now, max_workers=max_workers)
    else:
        items = []
        for index, url in enumerate(urls):
            item = _process(index, url, now)
            items.append(item)
            if not item.ok:
                break

    codes: list[GeneratedCode] = []
    for item in items:
        if item.error is not None:
            raise BatchItemError(item.index, item.label, item.error) from item.error
        codes.append(item.code)
    return codes
