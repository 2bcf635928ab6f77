"""
Error taxonomy for the Zoho CRM client.

Every API call either returns a typed value or raises exactly one of the
CRMError subclasses defined here. The set is closed: callers can branch on
``err.kind`` (an ErrorKind) and know they have covered every case.
"""

from enum import Enum
from typing import Any


class ErrorKind(Enum):
    """Discriminator for the closed set of client errors."""
    AUTHENTICATION_FAILED = "authentication_failed"
    INVALID_REQUEST = "invalid_request"
    RESOURCE_NOT_FOUND = "resource_not_found"
    RATE_LIMITED = "rate_limited"
    REMOTE_SERVER_ERROR = "remote_server_error"
    TRANSPORT_FAILURE = "transport_failure"
    DECODE_FAILURE = "decode_failure"


class CRMError(Exception):
    """
    Base class for all errors raised by API calls.

    Attributes:
        kind: Which variant of the taxonomy this is
        message: Human readable description
        code: Zoho error code from the error envelope, if any
        status_code: HTTP status of the response, if one was received
    """

    kind: ErrorKind

    def __init__(
        self,
        message: str,
        code: str | None = None,
        status_code: int | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        if cls.__module__ != __name__:
            raise TypeError(
                f"{cls.__name__} cannot extend CRMError; the error set is closed"
            )


class AuthenticationFailed(CRMError):
    """Raised when credentials are rejected or a token cannot be refreshed."""

    kind = ErrorKind.AUTHENTICATION_FAILED


class InvalidRequest(CRMError):
    """
    Raised when a request is malformed, either locally or per the API.

    Attributes:
        field: Offending field or parameter name (None when not known)
        reason: Why the value was rejected
    """

    kind = ErrorKind.INVALID_REQUEST

    def __init__(
        self,
        reason: str,
        field: str | None = None,
        code: str | None = None,
        status_code: int | None = None,
    ):
        message = f"Invalid request: {reason}" if field is None else f"Invalid '{field}': {reason}"
        super().__init__(message, code=code, status_code=status_code)
        self.field = field
        self.reason = reason


class ResourceNotFound(CRMError):
    """Raised when the addressed record, module or endpoint does not exist."""

    kind = ErrorKind.RESOURCE_NOT_FOUND


class RateLimited(CRMError):
    """
    Raised on HTTP 429.

    Attributes:
        retry_after: Seconds the caller should wait before trying again
    """

    kind = ErrorKind.RATE_LIMITED

    def __init__(self, retry_after: int, code: str | None = None):
        super().__init__(
            f"Rate limit exceeded. Retry in {retry_after} seconds.",
            code=code,
            status_code=429,
        )
        self.retry_after = retry_after


class RemoteServerError(CRMError):
    """Raised on 5xx and on any response the client cannot classify."""

    kind = ErrorKind.REMOTE_SERVER_ERROR

    def __init__(self, status: int, message: str, code: str | None = None):
        super().__init__(f"Server error {status}: {message}", code=code, status_code=status)
        self.status = status
        self.message = message


class TransportFailure(CRMError):
    """
    Raised when no complete response was received (DNS, reset, timeout).

    Attributes:
        cause: The underlying exception
    """

    kind = ErrorKind.TRANSPORT_FAILURE

    def __init__(self, cause: BaseException):
        super().__init__(f"Request failed: {cause}")
        self.cause = cause


class DecodeFailure(CRMError):
    """Raised when a successful response body does not have the expected shape."""

    kind = ErrorKind.DECODE_FAILURE

    def __init__(self, cause: Any, status_code: int | None = None):
        super().__init__(f"Could not decode response: {cause}", status_code=status_code)
        self.cause = cause


class ConfigError(Exception):
    """Raised when client configuration is missing, invalid or unreadable."""
    pass
