"""Render generated codes for terminal or JSON output."""

from __future__ import annotations

import json
from typing import Iterable

from .models import BatchItem, GeneratedCode


def format_code(code: GeneratedCode) -> str:
    """``label => 000042`` line for one code."""
    return f"{code.label} => {code.rendered}"


def format_codes(codes: Iterable[GeneratedCode]) -> str:
    return "\n".join(format_code(c) for c in codes)


def format_failure(item: BatchItem) -> str:
    return f"token #{item.index + 1} ({item.label}): {item.error}"


def code_to_dict(code: GeneratedCode) -> dict:
    payload = code.model_dump()
    payload["code"] = code.rendered
    return payload


def item_to_dict(item: BatchItem) -> dict:
    """JSON-friendly view of a batch item; errors become ``kind``/``message``."""
    payload: dict = {"index": item.index, "label": item.label}
    if item.code is not None:
        payload.update(code_to_dict(item.code))
    if item.error is not None:
        payload["error"] = {"kind": item.error.kind.value, "message": str(item.error)}
    return payload


def items_to_json(items: Iterable[BatchItem]) -> str:
    return json.dumps([item_to_dict(i) for i in items], indent=2)


def codes_to_json(codes: Iterable[GeneratedCode]) -> str:
    return json.dumps([code_to_dict(c) for c in codes], indent=2)
