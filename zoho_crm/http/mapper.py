"""
Response mapping.

Classifies a RawResponse as a typed success value or exactly one CRMError.
Zoho's error envelope looks like::

    {"code": "INVALID_DATA", "message": "invalid data",
     "details": {"api_name": "Email"}, "status": "error"}

and may also appear as the first entry of a ``data`` array for bulk calls.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Callable, TypeVar

from ..core.errors import (
    AuthenticationFailed,
    CRMError,
    DecodeFailure,
    InvalidRequest,
    RateLimited,
    RemoteServerError,
    ResourceNotFound,
)
from ..core.models import RawResponse

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_RETRY_AFTER = 60

AUTH_ERROR_CODES = {
    "INVALID_TOKEN",
    "AUTHENTICATION_FAILURE",
    "OAUTH_SCOPE_MISMATCH",
    "INVALID_OAUTHTOKEN",
}
REQUEST_ERROR_CODES = {
    "INVALID_URL_PATTERN",
    "INVALID_MODULE",
    "INVALID_DATA",
    "MANDATORY_NOT_FOUND",
    "DUPLICATE_DATA",
    "INVALID_REQUEST_METHOD",
    "LIMIT_EXCEEDED",
    "REQUIRED_PARAM_MISSING",
    "NOT_SUPPORTED",
}
NOT_FOUND_CODES = {"RECORD_NOT_FOUND", "INVALID_ID"}

_FIELD_KEYS = ("api_name", "param_name", "param", "field")


@dataclass
class ErrorEnvelope:
    """Parsed form of the service's JSON error body."""
    code: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def field_name(self) -> str | None:
        for key in _FIELD_KEYS:
            value = self.details.get(key)
            if isinstance(value, str) and value:
                return value
        return None

    @classmethod
    def parse(cls, payload: Any) -> "ErrorEnvelope | None":
        """
        Extract an envelope from a decoded body, or None if it has none.

        Accepts the envelope at top level or as the first item of ``data``.
        """
        if isinstance(payload, dict) and "code" not in payload:
            items = payload.get("data")
            if isinstance(items, list) and items and isinstance(items[0], dict):
                payload = items[0]
        if not isinstance(payload, dict):
            return None

        code = payload.get("code")
        message = payload.get("message", "")
        details = payload.get("details") or {}
        if not isinstance(code, str) or not isinstance(message, str) or not isinstance(details, dict):
            return None
        return cls(code=code, message=message, details=details)


def _parse_json(body: bytes) -> Any:
    """Decode a JSON body; an empty body decodes to None."""
    if not body.strip():
        return None
    return json.loads(body)


def parse_retry_after(value: str | None, now: datetime | None = None) -> int:
    """
    Interpret a Retry-After header (delta seconds or HTTP date).

    Falls back to DEFAULT_RETRY_AFTER when absent or unreadable.
    """
    if not value:
        return DEFAULT_RETRY_AFTER
    value = value.strip()
    if value.isdigit():
        return int(value)
    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return DEFAULT_RETRY_AFTER
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    return max(0, int((when - now).total_seconds()))


class ResponseMapper:
    """Maps raw responses to typed results or typed errors. Never retries."""

    def map(self, raw: RawResponse, decode: Callable[[Any], T]) -> T:
        """
        Classify a response.

        Args:
            raw: Response as received from the transport
            decode: Turns the parsed JSON body (None when empty) into the
                expected success type; may raise KeyError, TypeError or
                ValueError when the shape is wrong

        Returns:
            Whatever decode returns

        Raises:
            CRMError: The single error variant matching the response
        """
        status = raw.status_code

        if 200 <= status < 300:
            return self._map_success(raw, decode)
        raise self.error_for(raw)

    def _map_success(self, raw: RawResponse, decode: Callable[[Any], T]) -> T:
        try:
            payload = _parse_json(raw.body)
        except ValueError as e:
            raise DecodeFailure(e, status_code=raw.status_code) from e

        # Zoho sometimes reports errors with a 2xx status
        if isinstance(payload, dict) and payload.get("status") == "error" and "data" not in payload:
            envelope = ErrorEnvelope.parse(payload)
            if envelope is not None:
                raise self._error_from_code(raw.status_code, envelope)

        try:
            return decode(payload)
        except (KeyError, TypeError, ValueError, AttributeError, IndexError) as e:
            logger.debug(f"Response body did not match the expected shape: {e!r}")
            raise DecodeFailure(e, status_code=raw.status_code) from e

    def error_for(self, raw: RawResponse) -> CRMError:
        """Build the error for a non-2xx response."""
        status = raw.status_code
        envelope = self._envelope(raw)

        if status == 401:
            code = envelope.code if envelope else None
            message = envelope.message if envelope and envelope.message else "Authentication failed"
            return AuthenticationFailed(message, code=code, status_code=401)

        if status == 404:
            message = envelope.message if envelope and envelope.message else "Resource not found"
            return ResourceNotFound(message, code=envelope.code if envelope else None, status_code=404)

        if status == 429:
            return RateLimited(
                parse_retry_after(raw.header("Retry-After")),
                code=envelope.code if envelope else None,
            )

        if status in (400, 422) and envelope is not None:
            return InvalidRequest(
                envelope.message or envelope.code,
                field=envelope.field_name,
                code=envelope.code,
                status_code=status,
            )

        if envelope is not None:
            return RemoteServerError(status, envelope.message or envelope.code, code=envelope.code)

        return RemoteServerError(status, self._best_effort_message(raw))

    def _error_from_code(self, status: int, envelope: ErrorEnvelope) -> CRMError:
        if envelope.code in AUTH_ERROR_CODES:
            return AuthenticationFailed(envelope.message, code=envelope.code, status_code=status)
        if envelope.code in NOT_FOUND_CODES:
            return ResourceNotFound(envelope.message, code=envelope.code, status_code=status)
        if envelope.code in REQUEST_ERROR_CODES:
            return InvalidRequest(
                envelope.message or envelope.code,
                field=envelope.field_name,
                code=envelope.code,
                status_code=status,
            )
        return RemoteServerError(status, envelope.message or envelope.code, code=envelope.code)

    @staticmethod
    def _envelope(raw: RawResponse) -> ErrorEnvelope | None:
        try:
            return ErrorEnvelope.parse(_parse_json(raw.body))
        except ValueError:
            return None

    @staticmethod
    def _best_effort_message(raw: RawResponse) -> str:
        text = raw.text.strip()
        if not text:
            return f"HTTP {raw.status_code}"
        return text[:200]
