"""Tests for per-call option builders and query encoding."""

from datetime import datetime, timedelta, timezone

import pytest

from zoho_crm.core.errors import InvalidRequest
from zoho_crm.core.models import SortOrder
from zoho_crm.http.params import (
    ListOptions,
    SearchOptions,
    UpsertOptions,
    encode_params,
    format_param_value,
)


# ===== encode_params Tests =====

def test_encode_params_keeps_insertion_order():
    """Test that parameters are encoded in the order given."""
    assert encode_params({"cvid": "00000", "page": "2"}) == "cvid=00000&page=2"
    assert encode_params({"page": "2", "cvid": "00000"}) == "page=2&cvid=00000"


def test_encode_params_accepts_pairs_and_skips_none():
    """Test pair sequences are accepted and None values dropped."""
    assert encode_params([("a", 1), ("b", None), ("c", True)]) == "a=1&c=true"


def test_encode_params_percent_encodes():
    """Test spaces and reserved characters are percent-encoded."""
    assert encode_params({"word": "New York/NY"}) == "word=New%20York%2FNY"


def test_format_param_value():
    """Test rendering of parameter values."""
    assert format_param_value(True) == "true"
    assert format_param_value(False) == "false"
    assert format_param_value(SortOrder.DESC) == "desc"
    assert format_param_value(["a", "b"]) == "a,b"
    assert format_param_value(42) == "42"


# ===== ListOptions Tests =====

def test_list_options_builder():
    """Test building list options fluently."""
    options = (
        ListOptions.builder()
        .fields("Last_Name", "Email")
        .sort_by("Created_Time", SortOrder.DESC)
        .page(2)
        .per_page(50)
        .build()
    )

    assert options.fields == ("Last_Name", "Email")
    assert options.sort_order is SortOrder.DESC
    assert encode_params(options.to_params()) == (
        "fields=Last_Name%2CEmail&sort_by=Created_Time&sort_order=desc&page=2&per_page=50"
    )


def test_list_options_empty_has_no_params():
    """Test default options add nothing to the query."""
    assert encode_params(ListOptions().to_params()) == ""
    assert ListOptions().to_headers() == []


def test_list_options_sort_order_requires_sort_by():
    """Test sort_order without sort_by is not representable."""
    with pytest.raises(InvalidRequest) as exc_info:
        ListOptions.builder().sort_order(SortOrder.ASC).build()

    assert exc_info.value.field == "sort_order"


@pytest.mark.parametrize("per_page", [0, 201, -5])
def test_list_options_per_page_bounds(per_page):
    """Test per_page must be between 1 and 200."""
    with pytest.raises(InvalidRequest) as exc_info:
        ListOptions(per_page=per_page)

    assert exc_info.value.field == "per_page"


def test_list_options_page_must_be_positive():
    """Test page numbers start at 1."""
    with pytest.raises(InvalidRequest):
        ListOptions.builder().page(0).build()


def test_list_options_ids_exclude_custom_view():
    """Test ids and cvid cannot be combined."""
    with pytest.raises(InvalidRequest):
        ListOptions.builder().ids("1", "2").custom_view("99").build()


def test_list_options_with_page_returns_copy():
    """Test with_page leaves the original untouched."""
    options = ListOptions(per_page=10)
    second = options.with_page(2)

    assert second.page == 2
    assert second.per_page == 10
    assert options.page is None


def test_list_options_modified_since_header():
    """Test modified_since becomes an If-Modified-Since header."""
    when = datetime(2019, 7, 25, 15, 26, 49, tzinfo=timezone(timedelta(hours=5, minutes=30)))
    options = ListOptions.builder().modified_since(when).build()

    assert options.to_headers() == [("If-Modified-Since", "2019-07-25T15:26:49+05:30")]


def test_list_options_flags():
    """Test converted/approved flags render as booleans."""
    options = ListOptions.builder().converted().approved(False).build()
    assert encode_params(options.to_params()) == "converted=true&approved=false"


# ===== SearchOptions Tests =====

def test_search_options_requires_a_term():
    """Test a search needs criteria, email, phone or word."""
    with pytest.raises(InvalidRequest):
        SearchOptions()


def test_search_options_allows_only_one_term():
    """Test two search terms are rejected."""
    with pytest.raises(InvalidRequest) as exc_info:
        SearchOptions.builder().email("a@b.com").word("burns").build()

    assert exc_info.value.field == "word"


def test_search_options_params():
    """Test search options become query params."""
    options = SearchOptions.builder().criteria("(Last_Name:equals:Burns)").per_page(10).build()
    assert options.to_params()[0] == ("criteria", "(Last_Name:equals:Burns)")
    assert encode_params(options.with_page(3).to_params()).endswith("page=3&per_page=10")


# ===== UpsertOptions Tests =====

def test_upsert_options_apply():
    """Test upsert options are added to the body."""
    body = UpsertOptions(duplicate_check_fields=("Email",), trigger=()).apply({"data": []})
    assert body == {"data": [], "duplicate_check_fields": ["Email"], "trigger": []}


def test_upsert_options_default_adds_nothing():
    """Test default upsert options leave the body as is."""
    assert UpsertOptions().apply({"data": []}) == {"data": []}


def test_upsert_options_reject_unknown_trigger():
    """Test unknown triggers are rejected."""
    with pytest.raises(InvalidRequest):
        UpsertOptions(trigger=("cron",))
