"""Data models for credentials and generated codes."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .errors import OtpError

DEFAULT_LABEL = "unknown"
DEFAULT_DIGITS = 6
DEFAULT_PERIOD = 30
DEFAULT_COUNTER = 0
MIN_DIGITS = 1
MAX_DIGITS = 10
MAX_COUNTER = 2**64 - 1


class Algorithm(str, Enum):
    """HMAC hash functions allowed in provisioning URLs."""

    SHA1 = "SHA1"
    SHA256 = "SHA256"
    SHA512 = "SHA512"


class OtpMode(str, Enum):
    """Counter source for a credential."""

    HOTP = "hotp"
    TOTP = "totp"


class Credential(BaseModel):
    """A decoded provisioning URL.

    Attributes:
        label: Issuer name, ``"unknown"`` when the URL has no ``issuer``.
        secret_bytes: Decoded shared secret; never empty.
        algorithm: HMAC hash function.
        digits: Rendered code length, 1-10.
        mode: HOTP or TOTP.
        period: TOTP time step in seconds.
        counter: HOTP counter value.
        account: Account part of the path label, informational only.
    """

    model_config = ConfigDict(frozen=True)

    label: str = DEFAULT_LABEL
    secret_bytes: bytes = Field(..., repr=False)
    algorithm: Algorithm = Algorithm.SHA1
    digits: int = Field(default=DEFAULT_DIGITS, ge=MIN_DIGITS, le=MAX_DIGITS)
    mode: OtpMode = OtpMode.TOTP
    period: int = Field(default=DEFAULT_PERIOD, gt=0)
    counter: int = Field(default=DEFAULT_COUNTER, ge=0, le=MAX_COUNTER)
    account: str = ""

    @field_validator("secret_bytes")
    @classmethod
    def _secret_not_empty(cls, value: bytes) -> bytes:
        if not value:
            raise ValueError("secret must not be empty")
        return value


class GeneratedCode(BaseModel):
    """One computed code, ready for display.

    ``value`` is numeric; use ``rendered`` for the zero-padded form.
    """

    model_config = ConfigDict(frozen=True)

    label: str
    digits: int = Field(..., ge=MIN_DIGITS, le=MAX_DIGITS)
    value: int = Field(..., ge=0)
    remaining_seconds: int | None = None

    @model_validator(mode="after")
    def _value_fits_digits(self) -> "GeneratedCode":
        if self.value >= 10**self.digits:
            raise ValueError(f"value does not fit in {self.digits} digits")
        return self

    @property
    def rendered(self) -> str:
        """Zero-padded code, e.g. ``42`` with 6 digits renders ``"000042"``."""
        return str(self.value).zfill(self.digits)


class BatchItem(BaseModel):
    """Per-URL outcome when a batch keeps going past failures."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    index: int
    label: str
    code: GeneratedCode | None = None
    error: OtpError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
