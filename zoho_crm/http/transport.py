"""Transport adapter: sends a BuiltRequest over HTTPS with httpx."""

import logging

import httpx

from ..core.config import DEFAULT_TIMEOUT
from ..core.errors import TransportFailure
from ..core.models import BuiltRequest, RawResponse

logger = logging.getLogger(__name__)


class Transport:
    """
    Thin wrapper around httpx.Client.

    Does not retry. Any network-level failure surfaces as TransportFailure,
    and a RawResponse is only returned once the whole body has been read.
    """

    def __init__(
        self,
        http_client: httpx.Client | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT,
    ):
        """
        Args:
            http_client: Optional httpx client (created if None)
            timeout_seconds: Default timeout when a request does not set one
        """
        self.timeout_seconds = timeout_seconds

        # Track if we own the HTTP client (for cleanup)
        self._owns_client = http_client is None

        if http_client is None:
            self.http_client = httpx.Client(timeout=timeout_seconds)
        else:
            self.http_client = http_client

    def close(self) -> None:
        """Close the HTTP client if we created it."""
        if self._owns_client and self.http_client:
            self.http_client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def send(self, request: BuiltRequest) -> RawResponse:
        """
        Send a request and return the complete response.

        Raises:
            TransportFailure: On DNS, connection, protocol or timeout errors
        """
        timeout = request.timeout if request.timeout is not None else self.timeout_seconds
        logger.debug(f"{request.method.value} {request.url}")

        try:
            response = self.http_client.request(
                method=request.method.value,
                url=request.url,
                headers=request.headers,
                content=request.body,
                timeout=timeout,
            )
            body = response.content
        except httpx.HTTPError as e:
            logger.debug(f"{request.method.value} {request.url} failed: {e!r}")
            raise TransportFailure(e) from e

        logger.debug(f"{request.method.value} {request.url} -> {response.status_code}")
        return RawResponse(
            status_code=response.status_code,
            headers=dict(response.headers),
            body=body or b"",
        )
