"""Error taxonomy for request handling.

Every failure surfaced to a caller is a single RequestError. The first one
raised anywhere while handling a request aborts the request; nothing is
aggregated and no partial result is returned alongside it.
"""

from enum import Enum
from typing import Any


class ErrorKind(Enum):
    """Classification of a request failure."""

    INVALID_ARGUMENT = "invalid-argument"
    UNKNOWN_REFERENCE = "unknown-reference"
    FORBIDDEN = "forbidden"
    UNAUTHENTICATED = "unauthenticated"
    NOT_FOUND = "not-found"
    UNAVAILABLE = "unavailable"


HTTP_STATUS = {
    ErrorKind.INVALID_ARGUMENT: 400,
    ErrorKind.UNKNOWN_REFERENCE: 400,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.UNAUTHENTICATED: 401,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.UNAVAILABLE: 503,
}


class RequestError(Exception):
    """Base class for all errors reported to API callers.

    Attributes:
        kind: The ErrorKind of this failure
        message: Human-readable reason
        field: Offending request field, or None when not tied to one
    """

    kind: ErrorKind = ErrorKind.INVALID_ARGUMENT

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.message = message
        self.field = field

    @property
    def status_code(self) -> int:
        return HTTP_STATUS[self.kind]

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": {
                "kind": self.kind.value,
                "field": self.field,
                "message": self.message,
            }
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, field={self.field!r})"


class InvalidArgumentError(RequestError):
    """A value is malformed, out of range, not allowed, or unsafe."""

    kind = ErrorKind.INVALID_ARGUMENT


class UnknownReferenceError(RequestError):
    """A well-formed identifier does not resolve to a stored entity."""

    kind = ErrorKind.UNKNOWN_REFERENCE


class ForbiddenError(RequestError):
    """The caller lacks the role the endpoint requires."""

    kind = ErrorKind.FORBIDDEN


class UnauthenticatedError(RequestError):
    """The endpoint requires an identifiable caller and there is none."""

    kind = ErrorKind.UNAUTHENTICATED


class NotFoundError(RequestError):
    """A detail lookup found nothing for the requested identifier."""

    kind = ErrorKind.NOT_FOUND


class UnavailableError(RequestError):
    """The store cannot be reached."""

    kind = ErrorKind.UNAVAILABLE
