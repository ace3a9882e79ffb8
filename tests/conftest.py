from __future__ import annotations

import os
import sys

import pytest


PROJECT_ROOT = os.path.dirname(os.path.dirname(__file__))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

# Keep tests independent of the developer's shell and AWS setup
os.environ.setdefault("AWS_REGION", "us-east-1")
for _name in list(os.environ):
    if _name.startswith("TOTP_CODES_"):
        del os.environ[_name]


@pytest.fixture
def write_config(tmp_path):
    """Write a private token file and return its path."""

    def _write(content: str, name: str = "tokens.yaml") -> str:
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        path.chmod(0o600)
        return str(path)

    return _write
