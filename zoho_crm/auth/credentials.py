"""
OAuth2 credential store.

Holds the current Credential and hands out valid access tokens. Reads of a
still-valid token take no lock; refreshes are single-flight: while one
refresh is running, every other caller that needs a token waits for it and
receives the same token or the same error.
"""

import json
import logging
import threading
import time
from dataclasses import replace
from typing import Any, Callable
from urllib.parse import urlencode

from ..core.config import DEFAULT_REFRESH_MARGIN, DEFAULT_TIMEOUT
from ..core.errors import AuthenticationFailed, TransportFailure
from ..core.models import BuiltRequest, Credential, HttpMethod
from ..http.transport import Transport

logger = logging.getLogger(__name__)

TOKEN_PATH = "/oauth/v2/token"


def abbreviate_token(token: str | None) -> str | None:
    """
    Shorten a token so it can be logged, e.g. "1000.ad8f..9df3".
    """
    if not token:
        return None
    if len(token) <= 13:
        return token[:2] + ".." if len(token) > 2 else ".."
    return f"{token[:9]}..{token[-4:]}"


class _Flight:
    """Outcome of one in-progress refresh, shared by everyone waiting on it."""

    def __init__(self):
        self.done = threading.Event()
        self.token: str | None = None
        self.error: BaseException | None = None


class CredentialStore:
    """
    Owns the Credential and refreshes it against the accounts server.

    Args:
        transport: Transport used for the token endpoint
        accounts_url: Base URL of the Zoho accounts server
        credential: Initial credential (access_token may be None)
        api_domain: API domain to use until a refresh reports another one
        pin_api_domain: Ignore api_domain from token responses (sandbox)
        refresh_margin: Refresh this many seconds before expiry
        timeout_seconds: Timeout for token requests
        clock: Returns the current time in epoch seconds
    """

    def __init__(
        self,
        transport: Transport,
        accounts_url: str,
        credential: Credential,
        api_domain: str,
        pin_api_domain: bool = False,
        refresh_margin: float = DEFAULT_REFRESH_MARGIN,
        timeout_seconds: float = DEFAULT_TIMEOUT,
        clock: Callable[[], float] = time.time,
    ):
        self.transport = transport
        self.accounts_url = accounts_url.rstrip("/")
        self.refresh_margin = refresh_margin
        self.timeout_seconds = timeout_seconds
        self._clock = clock
        self._pin_api_domain = pin_api_domain
        if pin_api_domain or not credential.api_domain:
            credential = replace(credential, api_domain=api_domain)
        self._credential = replace(credential, api_domain=credential.api_domain.rstrip("/"))

        self._lock = threading.Lock()
        self._flight: _Flight | None = None
        self.refresh_count = 0

    @property
    def api_domain(self) -> str:
        """API domain requests should be sent to."""
        return self._credential.api_domain

    def abbreviated_token(self) -> str | None:
        """Abbreviated form of the current access token, safe to print."""
        return abbreviate_token(self._credential.access_token)

    def get_token(self) -> str:
        """
        Return a usable access token, refreshing first if needed.

        Raises:
            AuthenticationFailed: If a refresh was needed and failed
        """
        credential = self._credential
        if credential.is_usable(self._clock(), self.refresh_margin):
            return credential.access_token
        return self._refresh(stale_token=credential.access_token)

    def force_refresh(self, stale_token: str | None = None) -> str:
        """
        Refresh after the API rejected ``stale_token``.

        If the stored token has already changed since ``stale_token`` was
        handed out, the newer token is returned without another refresh.

        Raises:
            AuthenticationFailed: If the refresh fails
        """
        return self._refresh(stale_token=stale_token, force=True)

    def _refresh(self, stale_token: str | None, force: bool = False) -> str:
        with self._lock:
            current = self._credential
            usable = current.is_usable(self._clock(), self.refresh_margin)
            # A forced refresh is skipped only if someone already replaced the rejected token
            if usable and (not force or current.access_token != stale_token):
                return current.access_token

            flight = self._flight
            leader = flight is None
            if leader:
                flight = self._flight = _Flight()

        if not leader:
            flight.done.wait()
            if flight.error is not None:
                raise flight.error
            return flight.token

        try:
            credential = self._request_credential(current)
        except BaseException as e:
            flight.error = e
            raise
        else:
            # Single reference swap; token and API domain always change together
            self._credential = credential
            flight.token = credential.access_token
            return credential.access_token
        finally:
            with self._lock:
                self._flight = None
            flight.done.set()

    def _request_credential(self, current: Credential) -> Credential:
        """Call the token endpoint with the refresh-token grant."""
        self.refresh_count += 1
        logger.info(f"Refreshing access token for client {current.client_id[:8]}...")

        form = urlencode({
            "grant_type": "refresh_token",
            "client_id": current.client_id,
            "client_secret": current.client_secret,
            "refresh_token": current.refresh_token,
        })
        request = BuiltRequest(
            method=HttpMethod.POST,
            url=f"{self.accounts_url}{TOKEN_PATH}",
            headers={
                "Content-Type": "application/x-www-form-urlencoded",
                "Accept": "application/json",
            },
            body=form.encode("ascii"),
            timeout=self.timeout_seconds,
        )

        try:
            raw = self.transport.send(request)
        except TransportFailure as e:
            logger.error(f"Token refresh failed: {e}")
            raise AuthenticationFailed(f"Token refresh failed: {e.cause}") from e

        payload = self._decode_token_body(raw.status_code, raw.body)
        credential = self._credential_from(payload, current)
        logger.info(f"Access token refreshed: {abbreviate_token(credential.access_token)}")
        return credential

    @staticmethod
    def _decode_token_body(status: int, body: bytes) -> dict[str, Any]:
        try:
            payload = json.loads(body) if body.strip() else None
        except ValueError:
            payload = None

        if isinstance(payload, dict) and payload.get("error"):
            logger.error(f"Token refresh rejected: {payload['error']}")
            raise AuthenticationFailed(
                f"Token refresh rejected: {payload['error']}",
                code=str(payload["error"]),
                status_code=status,
            )
        if not 200 <= status < 300:
            logger.error(f"Token refresh failed with HTTP {status}")
            raise AuthenticationFailed(f"Token endpoint returned HTTP {status}", status_code=status)
        if not isinstance(payload, dict):
            raise AuthenticationFailed("Token endpoint returned an unreadable body", status_code=status)
        return payload

    def _api_domain_from(self, payload: dict[str, Any], current: Credential) -> str:
        domain = payload.get("api_domain")
        if self._pin_api_domain or not isinstance(domain, str) or not domain:
            return current.api_domain
        return domain.rstrip("/")

    def _credential_from(self, payload: dict[str, Any], current: Credential) -> Credential:
        access_token = payload.get("access_token")
        if not isinstance(access_token, str) or not access_token:
            raise AuthenticationFailed("No token received")

        expires_in = payload.get("expires_in_sec", payload.get("expires_in"))
        try:
            expires_at = self._clock() + float(expires_in) if expires_in is not None else None
        except (TypeError, ValueError):
            expires_at = None

        return Credential(
            access_token=access_token,
            refresh_token=current.refresh_token,
            client_id=current.client_id,
            client_secret=current.client_secret,
            expires_at=expires_at,
            api_domain=self._api_domain_from(payload, current),
        )
