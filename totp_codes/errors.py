"""Error taxonomy for credential parsing, code generation and batches.

Every failure raised by this package is an ``OtpError`` carrying an
``ErrorKind``. Presentation (exit codes, messages) is decided by callers
such as the CLI; nothing here terminates the process.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Closed set of failure kinds."""

    INVALID_ENCODING = "invalid_encoding"
    MALFORMED_URL = "malformed_url"
    UNSUPPORTED_SCHEME = "unsupported_scheme"
    UNSUPPORTED_MODE = "unsupported_mode"
    MISSING_SECRET = "missing_secret"
    INVALID_PARAMETER = "invalid_parameter"
    UNSUPPORTED_ALGORITHM = "unsupported_algorithm"
    CLOCK_ERROR = "clock_error"
    NO_CREDENTIALS_CONFIGURED = "no_credentials_configured"
    BATCH_ITEM_FAILED = "batch_item_failed"
    CONFIG_READ_ERROR = "config_read_error"
    INVALID_CONFIG = "invalid_config"
    CONFIG_SYNTAX_ERROR = "config_syntax_error"
    INSECURE_CONFIG = "insecure_config"


class OtpError(Exception):
    """Base class for all errors raised by totp_codes."""

    kind: ErrorKind


class InvalidEncoding(OtpError):
    kind = ErrorKind.INVALID_ENCODING


class MalformedUrl(OtpError):
    kind = ErrorKind.MALFORMED_URL


class UnsupportedScheme(OtpError):
    kind = ErrorKind.UNSUPPORTED_SCHEME


class UnsupportedMode(OtpError):
    kind = ErrorKind.UNSUPPORTED_MODE


class MissingSecret(OtpError):
    kind = ErrorKind.MISSING_SECRET


class InvalidParameter(OtpError):
    """A query parameter could not be interpreted.

    Attributes:
        key: Name of the offending query parameter.
    """

    kind = ErrorKind.INVALID_PARAMETER

    def __init__(self, key: str, detail: str = "") -> None:
        self.key = key
        message = f"invalid parameter {key!r}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class UnsupportedAlgorithm(OtpError):
    kind = ErrorKind.UNSUPPORTED_ALGORITHM


class ClockError(OtpError):
    kind = ErrorKind.CLOCK_ERROR


class NoCredentialsConfigured(OtpError):
    kind = ErrorKind.NO_CREDENTIALS_CONFIGURED

    def __init__(self, message: str = "no tokens provided in config") -> None:
        super().__init__(message)


class BatchItemError(OtpError):
    """A single URL of a batch failed.

    Attributes:
        index: 0-based position of the URL in the batch.
        label: Path label of the URL, or a redacted form of it.
        cause: The underlying error.
    """

    kind = ErrorKind.BATCH_ITEM_FAILED

    def __init__(self, index: int, label: str, cause: OtpError) -> None:
        self.index = index
        self.label = label
        self.cause = cause
        super().__init__(f"token #{index + 1} ({label}): {cause}")


class ConfigError(OtpError):
    """Base class for configuration file problems."""


class ConfigReadError(ConfigError):
    """The configuration file could not be read.

    Attributes:
        errno: OS error number, when known.
    """

    kind = ErrorKind.CONFIG_READ_ERROR

    def __init__(self, message: str, errno: int | None = None) -> None:
        self.errno = errno
        super().__init__(message)


class InvalidConfig(ConfigError):
    kind = ErrorKind.INVALID_CONFIG


class ConfigSyntaxError(ConfigError):
    kind = ErrorKind.CONFIG_SYNTAX_ERROR


class InsecureConfig(ConfigError):
    kind = ErrorKind.INSECURE_CONFIG
