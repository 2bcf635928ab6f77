"""
Request construction.

OperationBuilder assembles an OperationDescriptor and refuses to build one
without a method and a resource path. RequestBuilder turns a descriptor plus
an access token into a fully addressed BuiltRequest. All percent-encoding
happens here; nothing is left to the transport.
"""

import json
import re
from typing import Any, Iterable, Mapping
from urllib.parse import quote, unquote

from ..core.errors import InvalidRequest
from ..core.models import BuiltRequest, HttpMethod, OperationDescriptor
from .params import encode_params, format_param_value

API_VERSION = "v2"
AUTH_SCHEME = "Zoho-oauthtoken"

# Characters allowed unescaped in an already-encoded path (RFC 3986 pchar + "/")
_ENCODED_PATH = re.compile(r"^(?:[A-Za-z0-9\-._~!$&'()*+,;=:@/]|%[0-9A-Fa-f]{2})+$")
_DOT_SEGMENTS = {".", ".."}


def encode_segment(segment: Any) -> str:
    """Percent-encode a single path segment, including any "/"."""
    text = str(segment)
    if not text:
        raise InvalidRequest("path segments must not be empty", field="resource_path")
    if text in _DOT_SEGMENTS:
        raise InvalidRequest(f"'{text}' is not a valid path segment", field="resource_path")
    return quote(text, safe="")


class OperationBuilder:
    """
    Fluent builder for OperationDescriptor.

    Example:
        >>> op = (OperationBuilder()
        ...       .method(HttpMethod.GET)
        ...       .path("Leads", "4150868000000224005")
        ...       .param("fields", ["Last_Name", "Email"])
        ...       .build())
    """

    def __init__(self):
        self._method: HttpMethod | None = None
        self._path: str | None = None
        self._params: list[tuple[str, str]] = []
        self._headers: list[tuple[str, str]] = []
        self._body: Any = None
        self._timeout: float | None = None

    def method(self, method: HttpMethod | str) -> "OperationBuilder":
        if isinstance(method, str):
            try:
                method = HttpMethod(method.upper())
            except ValueError as e:
                raise InvalidRequest(f"unsupported HTTP method '{method}'", field="method") from e
        self._method = method
        return self

    def path(self, *segments: Any) -> "OperationBuilder":
        """Set the resource path from raw segments, encoding each one."""
        self._path = "/".join(encode_segment(s) for s in segments)
        return self

    def raw_path(self, path: str) -> "OperationBuilder":
        """Set an already percent-encoded path (validated at request build time)."""
        self._path = path.strip("/")
        return self

    def param(self, name: str, value: Any) -> "OperationBuilder":
        if value is not None:
            self._params.append((name, format_param_value(value)))
        return self

    def params(self, params: Mapping[str, Any] | Iterable[tuple[str, Any]] | None) -> "OperationBuilder":
        if params is None:
            return self
        items = params.items() if isinstance(params, Mapping) else params
        for name, value in items:
            self.param(name, value)
        return self

    def header(self, name: str, value: str) -> "OperationBuilder":
        self._headers.append((name, value))
        return self

    def body(self, body: Any) -> "OperationBuilder":
        self._body = body
        return self

    def timeout(self, seconds: float | None) -> "OperationBuilder":
        if seconds is not None and seconds <= 0:
            raise InvalidRequest("must be positive", field="timeout")
        self._timeout = seconds
        return self

    def build(self) -> OperationDescriptor:
        """
        Raises:
            InvalidRequest: If method or resource path has not been set, or a
                body was given for a bodyless method
        """
        if self._method is None:
            raise InvalidRequest("is required", field="method")
        if not self._path:
            raise InvalidRequest("is required", field="resource_path")
        if self._body is not None and not self._method.has_body:
            raise InvalidRequest(f"{self._method.value} requests cannot carry a body", field="body")

        return OperationDescriptor(
            method=self._method,
            resource_path=self._path,
            query_params=tuple(self._params),
            body=self._body,
            headers=tuple(self._headers),
            timeout=self._timeout,
        )


class RequestBuilder:
    """Turns OperationDescriptors into BuiltRequests against one API domain."""

    def __init__(self, api_domain: str, api_version: str = API_VERSION):
        self.api_domain = api_domain.rstrip("/")
        self.api_version = api_version

    def build_url(self, operation: OperationDescriptor) -> str:
        path = operation.resource_path
        if not path:
            raise InvalidRequest("must not be empty", field="resource_path")
        if not _ENCODED_PATH.match(path):
            raise InvalidRequest(
                f"'{path}' contains characters that must be percent-encoded",
                field="resource_path",
            )
        if any(unquote(segment) in _DOT_SEGMENTS for segment in path.strip("/").split("/")):
            raise InvalidRequest(f"'{path}' contains dot segments", field="resource_path")

        url = f"{self.api_domain}/crm/{self.api_version}/{path.strip('/')}"
        if operation.query_params:
            url = f"{url}?{encode_params(operation.query_params)}"
        return url

    def build(self, operation: OperationDescriptor, token: str) -> BuiltRequest:
        """
        Build the wire-level request for an operation.

        Args:
            operation: What to call
            token: Current access token

        Returns:
            BuiltRequest with URL, headers and serialized body

        Raises:
            InvalidRequest: If the path is empty or not properly encoded, or
                the body cannot be serialized to JSON
        """
        url = self.build_url(operation)

        headers = {
            "Authorization": f"{AUTH_SCHEME} {token}",
            "Accept": "application/json",
        }
        headers.update(operation.headers)

        body = None
        if operation.body is not None and operation.method.has_body:
            try:
                body = json.dumps(operation.body, separators=(",", ":")).encode("utf-8")
            except (TypeError, ValueError) as e:
                raise InvalidRequest(f"body is not JSON serializable: {e}", field="body") from e
            headers["Content-Type"] = "application/json"

        return BuiltRequest(
            method=operation.method,
            url=url,
            headers=headers,
            body=body,
            timeout=operation.timeout,
        )
