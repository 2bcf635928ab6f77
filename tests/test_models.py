"""Tests for core data models."""

import pytest

from zoho_crm.core.models import (
    ActionResult,
    Credential,
    DataCenter,
    FieldInfo,
    HttpMethod,
    ModuleInfo,
    Page,
    PageInfo,
    RawResponse,
    SortOrder,
)


def test_http_method_enum():
    """Test HttpMethod enum values."""
    assert HttpMethod.GET.value == "GET"
    assert HttpMethod("PATCH") == HttpMethod.PATCH
    assert {m.value for m in HttpMethod} == {"GET", "POST", "PUT", "PATCH", "DELETE"}


def test_http_method_has_body():
    """Test that only POST, PUT and PATCH carry bodies."""
    assert HttpMethod.POST.has_body
    assert HttpMethod.PUT.has_body
    assert HttpMethod.PATCH.has_body
    assert not HttpMethod.GET.has_body
    assert not HttpMethod.DELETE.has_body


def test_sort_order_enum():
    """Test SortOrder enum values."""
    assert SortOrder.ASC.value == "asc"
    assert SortOrder("desc") == SortOrder.DESC


def test_data_center_to_and_from_dict():
    """Test DataCenter dictionary conversion."""
    dc = DataCenter("eu", "https://accounts.zoho.eu", "https://www.zohoapis.eu")
    data = dc.to_dict()

    assert data["name"] == "eu"
    assert data["sandbox_api_url"] is None
    assert DataCenter.from_dict(data) == dc


# ===== Credential Tests =====

def _credential(**overrides):
    values = dict(
        access_token="1000.token",
        refresh_token="1000.refresh",
        client_id="client",
        client_secret="secret",
        expires_at=1000.0,
    )
    values.update(overrides)
    return Credential(**values)


def test_credential_usable_before_expiry():
    """Test a token is usable while expires_at is in the future."""
    credential = _credential()
    assert credential.is_usable(now=900.0)
    assert not credential.is_usable(now=1000.0)
    assert not credential.is_usable(now=1001.0)


def test_credential_usable_respects_margin():
    """Test the safety margin is subtracted from expires_at."""
    credential = _credential()
    assert credential.is_usable(now=939.0, margin=60.0)
    assert not credential.is_usable(now=940.0, margin=60.0)


def test_credential_without_token_is_not_usable():
    """Test a missing access token always needs a refresh."""
    assert not _credential(access_token=None).is_usable(now=0.0)
    assert not _credential(access_token="").is_usable(now=0.0)


def test_credential_without_expiry_is_usable():
    """Test a preset token with unknown lifetime is used until rejected."""
    assert _credential(expires_at=None).is_usable(now=10 ** 12)


def test_credential_repr_hides_secrets():
    """Test that secrets do not leak through repr."""
    text = repr(_credential())
    assert "secret" not in text
    assert "1000.refresh" not in text
    assert "client" in text


# ===== Response Model Tests =====

def test_raw_response_header_lookup_is_case_insensitive():
    """Test header lookup ignores case."""
    raw = RawResponse(status_code=429, headers={"retry-after": "30"})
    assert raw.header("Retry-After") == "30"
    assert raw.header("RETRY-AFTER") == "30"
    assert raw.header("X-Missing") is None


def test_raw_response_text():
    """Test body decoding to text."""
    assert RawResponse(200, body=b"ok").text == "ok"
    assert RawResponse(200).text == ""


def test_page_info_from_dict():
    """Test PageInfo parses the info block."""
    info = PageInfo.from_dict({"per_page": 200, "count": 3, "page": 1, "more_records": True})
    assert info == PageInfo(page=1, per_page=200, count=3, more_records=True)


def test_page_info_requires_more_records():
    """Test PageInfo rejects an info block without more_records."""
    with pytest.raises(KeyError):
        PageInfo.from_dict({"per_page": 200, "page": 1})


def test_page_more_records():
    """Test Page exposes more_records from its info."""
    page = Page(records=[{"id": "1"}], info=PageInfo(page=1, per_page=1, count=1, more_records=True))
    assert page.more_records


def test_action_result_success():
    """Test ActionResult for a successful insert."""
    result = ActionResult.from_dict({
        "code": "SUCCESS",
        "details": {"id": 40000000123456789, "Created_Time": "2019-05-02T11:17:33+05:30"},
        "message": "record added",
        "status": "success",
    })

    assert result.is_success
    assert result.record_id == "40000000123456789"
    assert result.message == "record added"
    assert result.action is None


def test_action_result_error():
    """Test ActionResult for a record-level failure."""
    result = ActionResult.from_dict({
        "code": "MANDATORY_NOT_FOUND",
        "details": {"api_name": "Last_Name"},
        "message": "required field not found",
        "status": "error",
    })

    assert not result.is_success
    assert result.record_id is None
    assert result.details["api_name"] == "Last_Name"


def test_module_info_from_dict():
    """Test ModuleInfo keeps the raw payload and fills defaults."""
    data = {"api_name": "Leads", "module_name": "Leads", "plural_label": "Leads", "api_supported": True}
    module = ModuleInfo.from_dict(data)

    assert module.api_name == "Leads"
    assert module.singular_label is None
    assert module.api_supported
    assert module.raw == data


def test_field_info_from_dict():
    """Test FieldInfo maps system_mandatory to required."""
    field = FieldInfo.from_dict({
        "api_name": "Last_Name",
        "field_label": "Last Name",
        "data_type": "text",
        "system_mandatory": True,
    })

    assert field.required
    assert not field.read_only
    assert field.data_type == "text"
