"""Tests for the transport adapter."""

from unittest.mock import Mock

import httpx
import pytest

from zoho_crm.core.errors import TransportFailure
from zoho_crm.core.models import BuiltRequest, HttpMethod
from zoho_crm.http.transport import Transport


@pytest.fixture
def mock_http_client():
    """Create a mock HTTP client."""
    return Mock(spec=httpx.Client)


@pytest.fixture
def transport(mock_http_client):
    """Transport over the mock client with a 10 second default timeout."""
    return Transport(http_client=mock_http_client, timeout_seconds=10.0)


@pytest.fixture
def get_request():
    return BuiltRequest(
        method=HttpMethod.GET,
        url="https://www.zohoapis.com/crm/v2/Leads",
        headers={"Authorization": "Zoho-oauthtoken tok"},
    )


def test_transport_creates_own_client():
    """Test that transport creates and owns a client when none is given."""
    transport = Transport()
    try:
        assert isinstance(transport.http_client, httpx.Client)
        assert transport._owns_client is True
    finally:
        transport.close()


def test_transport_close_only_owned_client(mock_http_client):
    """Test that close() leaves a caller's client open."""
    transport = Transport(http_client=mock_http_client)
    transport.close()
    mock_http_client.close.assert_not_called()


def test_transport_close_owned_client():
    """Test that close() closes an owned client."""
    transport = Transport()
    transport.http_client = Mock()
    transport.close()
    transport.http_client.close.assert_called_once()


def test_transport_context_manager():
    """Test context manager support."""
    with Transport() as transport:
        assert transport is not None


def test_send_returns_raw_response(transport, mock_http_client, get_request):
    """Test a successful send returns status, headers and body."""
    mock_http_client.request.return_value = httpx.Response(
        200, content=b'{"data": []}', headers={"X-Request-Id": "abc"}
    )

    raw = transport.send(get_request)

    assert raw.status_code == 200
    assert raw.body == b'{"data": []}'
    assert raw.header("x-request-id") == "abc"


def test_send_passes_request_fields(transport, mock_http_client, get_request):
    """Test method, URL, headers and body are handed to httpx."""
    mock_http_client.request.return_value = httpx.Response(204)

    transport.send(get_request)

    call_kwargs = mock_http_client.request.call_args[1]
    assert call_kwargs["method"] == "GET"
    assert call_kwargs["url"] == "https://www.zohoapis.com/crm/v2/Leads"
    assert call_kwargs["headers"] == {"Authorization": "Zoho-oauthtoken tok"}
    assert call_kwargs["content"] is None
    assert call_kwargs["timeout"] == 10.0


def test_send_uses_per_request_timeout(transport, mock_http_client):
    """Test a request timeout overrides the default."""
    mock_http_client.request.return_value = httpx.Response(200, content=b"{}")
    request = BuiltRequest(
        method=HttpMethod.POST,
        url="https://www.zohoapis.com/crm/v2/Leads",
        headers={},
        body=b'{"data":[]}',
        timeout=2.5,
    )

    transport.send(request)

    call_kwargs = mock_http_client.request.call_args[1]
    assert call_kwargs["timeout"] == 2.5
    assert call_kwargs["content"] == b'{"data":[]}'


def test_send_empty_body(transport, mock_http_client, get_request):
    """Test an empty response body becomes b''."""
    mock_http_client.request.return_value = httpx.Response(204)

    raw = transport.send(get_request)

    assert raw.status_code == 204
    assert raw.body == b""


@pytest.mark.parametrize("error", [
    httpx.ConnectError("Name or service not known"),
    httpx.ReadTimeout("timed out"),
    httpx.RemoteProtocolError("peer closed connection"),
])
def test_send_maps_network_errors(transport, mock_http_client, get_request, error):
    """Test network-level failures become TransportFailure."""
    mock_http_client.request.side_effect = error

    with pytest.raises(TransportFailure) as exc_info:
        transport.send(get_request)

    assert exc_info.value.cause is error
    # Should not retry
    assert mock_http_client.request.call_count == 1
