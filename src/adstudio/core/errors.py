"""Error taxonomy for the AdStudio relay.

Every failure that reaches the HTTP boundary is one of three kinds:

- :class:`ValidationError` - the client sent missing or invalid input (400).
- :class:`UpstreamError` - the image API failed or answered with an error;
  its status code and message are propagated when available.
- :class:`UnexpectedError` - anything else, such as a failed disk write
  (500, generic message).

The message of each error is intended to be shown to the end user as-is.
"""

from __future__ import annotations

from enum import Enum

GENERIC_FAILURE_MESSAGE = "Server error while generating ad images"


class ErrorKind(str, Enum):
    """Tag identifying which branch of the taxonomy a failure belongs to."""

    VALIDATION = "validation"
    UPSTREAM = "upstream"
    UNEXPECTED = "unexpected"


class AdStudioError(Exception):
    """Base class for user-facing AdStudio failures.

    Attributes:
        message: Human-readable description suitable for display.
        status_code: HTTP status the relay responds with.
    """

    kind: ErrorKind = ErrorKind.UNEXPECTED
    default_status: int = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code if status_code is not None else self.default_status


class ValidationError(AdStudioError):
    """User input failed validation.

    Raised by the relay for bad submissions and by the wizard for gate
    failures.  The message names the missing or invalid field.
    """

    kind = ErrorKind.VALIDATION
    default_status = 400


class UpstreamError(AdStudioError):
    """The external image API call failed."""

    kind = ErrorKind.UPSTREAM
    default_status = 500


class UnexpectedError(AdStudioError):
    """Any other failure while serving a request."""

    kind = ErrorKind.UNEXPECTED
    default_status = 500

    def __init__(self, message: str = GENERIC_FAILURE_MESSAGE) -> None:
        super().__init__(message, 500)
