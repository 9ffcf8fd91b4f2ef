"""Error taxonomy for vmgateway.

Every error the gateway can surface to a client belongs to one of a
small, closed set of kinds. The API layer maps each kind to an HTTP
status code and renders ``{"error": message}``.
"""

from __future__ import annotations

import enum


class ErrorKind(str, enum.Enum):
    """Closed set of error kinds the gateway distinguishes."""

    CONFIGURATION = "configuration"
    INVOCATION = "invocation"
    IO = "io"
    UNRECOVERABLE = "unrecoverable"

    @property
    def status_code(self) -> int:
        return _STATUS_CODES[self]


_STATUS_CODES = {
    ErrorKind.CONFIGURATION: 500,
    ErrorKind.INVOCATION: 400,
    ErrorKind.IO: 500,
    ErrorKind.UNRECOVERABLE: 500,
}


class GatewayError(Exception):
    """Base class for errors raised by gateway components."""

    kind: ErrorKind = ErrorKind.UNRECOVERABLE

    def __init__(self, message: str, kind: ErrorKind | None = None) -> None:
        super().__init__(message)
        if kind is not None:
            self.kind = kind


class ConfigurationError(GatewayError):
    """Raised when the configuration file is missing or unusable."""

    kind = ErrorKind.CONFIGURATION


class InvocationFailure(GatewayError):
    """Raised when the external command exits with a non-zero status.

    Carries the captured diagnostic text and the exit code. The message
    has the form ``"<output> (<exit_code>)"``.
    """

    kind = ErrorKind.INVOCATION

    def __init__(self, output: str, exit_code: int) -> None:
        super().__init__(f"{output} ({exit_code})")
        self.output = output
        self.exit_code = exit_code


class StreamEmitError(GatewayError):
    """Raised when a streamed record cannot be serialized or sent."""

    kind = ErrorKind.IO
