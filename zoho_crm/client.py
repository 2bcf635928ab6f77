"""
Zoho CRM client.

Ties the credential store, transport and resource façades together behind
one object.
"""

import logging
import time
from typing import Callable

import httpx

from .auth.credentials import CredentialStore
from .core.config import ClientConfig
from .core.errors import ConfigError
from .core.models import Credential
from .http.mapper import ResponseMapper
from .http.transport import Transport
from .resources import FieldsResource, ModulesResource, RecordsResource

logger = logging.getLogger(__name__)


class ZohoCRMClient:
    """
    Client for v2 of the Zoho CRM API.

    Tokens are fetched on first use and refreshed automatically before they
    expire, so a client only needs the OAuth client ID, secret and a refresh
    token. An access token obtained elsewhere (e.g. kept in a database) can
    be passed in to skip the first refresh.

    Example:
        >>> with ZohoCRMClient(client_id="...", client_secret="...",
        ...                    refresh_token="...") as crm:
        ...     account = crm.records.get("Accounts", "4150868000000224005")
        ...     for page in crm.records.pages("Leads"):
        ...         print(len(page.records))
    """

    def __init__(
        self,
        client_id: str | None = None,
        client_secret: str | None = None,
        refresh_token: str | None = None,
        *,
        config: ClientConfig | None = None,
        http_client: httpx.Client | None = None,
        clock: Callable[[], float] = time.time,
        **options,
    ):
        """
        Initialize the client.

        Args:
            client_id: OAuth client ID
            client_secret: OAuth client secret
            refresh_token: Long-lived refresh token
            config: Full configuration; used instead of the keyword arguments
            http_client: Optional httpx client (created if None)
            clock: Time source in epoch seconds, for tests
            **options: Any other ClientConfig field (access_token,
                data_center, oauth_domain, api_domain, sandbox, timeout, ...)

        Raises:
            ConfigError: If credentials are missing or an option is unknown or invalid
        """
        if config is None:
            try:
                config = ClientConfig(
                    client_id=client_id,
                    client_secret=client_secret,
                    refresh_token=refresh_token,
                    **options,
                )
            except TypeError as e:
                raise ConfigError(f"Invalid client configuration: {e}") from e
        self.config = config

        self.transport = Transport(http_client=http_client, timeout_seconds=config.timeout)
        self.credentials = CredentialStore(
            transport=self.transport,
            accounts_url=config.accounts_url,
            credential=Credential(
                access_token=config.access_token,
                refresh_token=config.refresh_token,
                client_id=config.client_id,
                client_secret=config.client_secret,
                expires_at=config.access_token_expires_at,
            ),
            api_domain=config.api_url,
            pin_api_domain=config.sandbox,
            refresh_margin=config.refresh_margin,
            timeout_seconds=config.timeout,
            clock=clock,
        )

        mapper = ResponseMapper()
        self.records = RecordsResource(self.credentials, self.transport, mapper)
        self.modules = ModulesResource(self.credentials, self.transport, mapper)
        self.fields = FieldsResource(self.credentials, self.transport, mapper)

        logger.debug(
            f"Zoho CRM client ready (data center {config.data_center}, "
            f"API {self.api_domain}, sandbox={config.sandbox})"
        )

    @classmethod
    def from_config(cls, config: ClientConfig, **kwargs) -> "ZohoCRMClient":
        """Create a client from a ClientConfig (see load_config)."""
        return cls(config=config, **kwargs)

    @property
    def sandbox(self) -> bool:
        return self.config.sandbox

    @property
    def timeout(self) -> float:
        """Default timeout for API requests, in seconds."""
        return self.config.timeout

    @property
    def api_domain(self) -> str:
        """API domain currently in use (may change after a token refresh)."""
        return self.credentials.api_domain

    def abbreviated_access_token(self) -> str | None:
        """
        Abbreviated access token, a (slightly) safer version to print.

        Returns None until a token has been set or fetched.
        """
        return self.credentials.abbreviated_token()

    def close(self) -> None:
        """Close the HTTP client if we created it."""
        self.transport.close()

    def __enter__(self):
        """Context manager support."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager cleanup."""
        self.close()
        return False
