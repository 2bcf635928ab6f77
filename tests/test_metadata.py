"""Tests for module and field metadata operations."""

import json
from unittest.mock import Mock
from urllib.parse import parse_qsl, urlsplit

import pytest

from zoho_crm.auth.credentials import CredentialStore
from zoho_crm.core.errors import ResourceNotFound
from zoho_crm.core.models import Credential, RawResponse
from zoho_crm.http.transport import Transport
from zoho_crm.resources import FieldsResource, ModulesResource

MODULES_BODY = {
    "modules": [
        {"api_name": "Leads", "module_name": "Leads", "singular_label": "Lead",
         "plural_label": "Leads", "api_supported": True, "id": "4150868000000002175"},
        {"api_name": "Visits", "module_name": "Visits", "singular_label": "Visit",
         "plural_label": "Visits", "api_supported": False},
    ]
}

FIELDS_BODY = {
    "fields": [
        {"api_name": "Last_Name", "field_label": "Last Name", "data_type": "text",
         "read_only": False, "system_mandatory": True},
        {"api_name": "Created_Time", "field_label": "Created Time", "data_type": "datetime",
         "read_only": True},
    ]
}


@pytest.fixture
def mock_transport():
    return Mock(spec=Transport)


@pytest.fixture
def store(mock_transport):
    """Store holding a preset token, so no refresh is made."""
    return CredentialStore(
        transport=mock_transport,
        accounts_url="https://accounts.zoho.eu",
        credential=Credential("1000.preset", "refresh", "client_id", "client_secret"),
        api_domain="https://www.zohoapis.eu",
    )


def reply(mock_transport, status, body=None):
    payload = json.dumps(body).encode() if body is not None else b""
    mock_transport.send.return_value = RawResponse(status, {}, payload)


def sent_url(mock_transport):
    return mock_transport.send.call_args[0][0].url


# ===== Modules Tests =====

def test_list_modules(store, mock_transport):
    """Test module metadata is parsed in order."""
    reply(mock_transport, 200, MODULES_BODY)

    modules = ModulesResource(store, mock_transport).list()

    assert sent_url(mock_transport) == "https://www.zohoapis.eu/crm/v2/settings/modules"
    assert [m.api_name for m in modules] == ["Leads", "Visits"]
    assert modules[0].singular_label == "Lead"
    assert modules[0].raw["id"] == "4150868000000002175"
    assert modules[1].api_supported is False


def test_get_module(store, mock_transport):
    """Test fetching one module by API name."""
    reply(mock_transport, 200, {"modules": MODULES_BODY["modules"][:1]})

    module = ModulesResource(store, mock_transport).get("Leads")

    assert sent_url(mock_transport) == "https://www.zohoapis.eu/crm/v2/settings/modules/Leads"
    assert module.plural_label == "Leads"


@pytest.mark.parametrize("status,body", [(204, None), (200, {"modules": []})])
def test_get_module_missing(store, mock_transport, status, body):
    """Test an unknown module raises ResourceNotFound."""
    reply(mock_transport, status, body)

    with pytest.raises(ResourceNotFound):
        ModulesResource(store, mock_transport).get("Nope")


# ===== Fields Tests =====

def test_list_fields(store, mock_transport):
    """Test field metadata is requested per module and parsed."""
    reply(mock_transport, 200, FIELDS_BODY)

    fields = FieldsResource(store, mock_transport).list("Leads")

    url = urlsplit(sent_url(mock_transport))
    assert url.path == "/crm/v2/settings/fields"
    assert parse_qsl(url.query) == [("module", "Leads")]
    assert [f.api_name for f in fields] == ["Last_Name", "Created_Time"]
    assert fields[0].required is True
    assert fields[1].read_only is True
    assert fields[1].data_type == "datetime"


def test_list_fields_no_content(store, mock_transport):
    """Test 204 gives no fields."""
    reply(mock_transport, 204)

    assert FieldsResource(store, mock_transport).list("Leads") == []
