"""Base class for resource operations."""

import logging
from typing import Any, Callable, TypeVar

from ..auth.credentials import CredentialStore
from ..core.errors import AuthenticationFailed
from ..core.models import OperationDescriptor
from ..http.builder import RequestBuilder
from ..http.mapper import ResponseMapper
from ..http.transport import Transport

logger = logging.getLogger(__name__)

T = TypeVar("T")


def identity(payload: Any) -> Any:
    return payload


class Resource:
    """
    Shared request pipeline for every resource façade.

    Each call runs token -> build -> send -> map in order. If the API
    answers AuthenticationFailed, the token is force-refreshed once and the
    whole call is retried once; a second failure goes to the caller.
    """

    def __init__(
        self,
        credentials: CredentialStore,
        transport: Transport,
        mapper: ResponseMapper | None = None,
    ):
        self.credentials = credentials
        self.transport = transport
        self.mapper = mapper or ResponseMapper()

    def _send_once(self, operation: OperationDescriptor, token: str, decode: Callable[[Any], T]) -> T:
        request = RequestBuilder(self.credentials.api_domain).build(operation, token)
        raw = self.transport.send(request)
        return self.mapper.map(raw, decode)

    def _execute(self, operation: OperationDescriptor, decode: Callable[[Any], T] = identity) -> T:
        """
        Run one logical API call.

        Raises:
            CRMError: Exactly one error variant if the call does not succeed
        """
        token = self.credentials.get_token()
        try:
            return self._send_once(operation, token, decode)
        except AuthenticationFailed:
            logger.warning(
                f"{operation.method.value} {operation.resource_path} rejected the access token; "
                f"refreshing and retrying once"
            )

        token = self.credentials.force_refresh(token)
        return self._send_once(operation, token, decode)
