"""Exception hierarchy for dynapi.

All exceptions inherit from :class:`DynapiError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`dynapi.exit_codes`.
The CLI entry point catches ``DynapiError`` and exits with that code; library
callers catch :class:`ClientError` around every route invocation.

Only transport-level failures are raised.  A non-2xx HTTP status is *not* an
exception: it comes back as an :class:`~dynapi.models.APIResponse` with
``success=False``.

Subclass hierarchy::

    DynapiError (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- ConfigError         (exit 3)
    +-- ClientError         (exit 6 for network/timeout, 7 for abort, 1 for parse)
"""

from __future__ import annotations

import enum
from typing import Optional

from dynapi.exit_codes import (
    EXIT_ABORTED,
    EXIT_CONFIG_ERROR,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
)


class DynapiError(Exception):
    """Base exception for all dynapi errors.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(DynapiError):
    """Raised for unroutable explicit paths or invalid CLI arguments."""

    exit_code = EXIT_INVALID_USAGE


class ConfigError(DynapiError):
    """Raised when the project config file or environment overrides are invalid."""

    exit_code = EXIT_CONFIG_ERROR


class ErrorType(str, enum.Enum):
    """Classification of a failed transport attempt.

    The classification drives the retry policy in
    :mod:`dynapi.client.retry`: ``NETWORK`` and ``TIMEOUT`` are retried,
    ``ABORT`` and ``PARSE`` are not.
    """

    NETWORK = "network"
    TIMEOUT = "timeout"
    ABORT = "abort"
    PARSE = "parse"


_EXIT_CODES = {
    ErrorType.NETWORK: EXIT_CONNECTION_ERROR,
    ErrorType.TIMEOUT: EXIT_CONNECTION_ERROR,
    ErrorType.ABORT: EXIT_ABORTED,
    ErrorType.PARSE: EXIT_GENERIC_FAILURE,
}


class ClientError(DynapiError):
    """A classified transport failure raised by the execution pipeline.

    Attributes:
        message: Human-readable description.
        type: The :class:`ErrorType` classification.
        original_error: The exception that caused this error, if any.  The
            same exception is also chained as ``__cause__`` when raised by
            the pipeline.
    """

    def __init__(
        self,
        message: str,
        type: ErrorType = ErrorType.NETWORK,
        original_error: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message, exit_code=_EXIT_CODES[ErrorType(type)])
        self.message = message
        self.type = ErrorType(type)
        self.original_error = original_error

    def __repr__(self) -> str:
        return f"ClientError(message={self.message!r}, type={self.type.value!r})"


class AbortError(ClientError):
    """Raised when a caller-supplied cancellation signal fires mid-request."""

    def __init__(
        self,
        message: str = "Request was aborted",
        original_error: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message, ErrorType.ABORT, original_error)
