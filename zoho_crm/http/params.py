"""
Per-call options for record operations.

Each options class validates itself on construction, so an instance can
never describe an illegal request. The fluent builders accumulate optional
fields and raise InvalidRequest from build() when the combination is wrong.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Any, Iterable, Mapping
from urllib.parse import quote, urlencode

from ..core.errors import InvalidRequest
from ..core.models import SortOrder

MAX_PER_PAGE = 200
MAX_RECORDS_PER_CALL = 100

TRIGGERS = ("workflow", "approval", "blueprint")


def format_param_value(value: Any) -> str:
    """Render a query parameter value the way the CRM API expects it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (list, tuple, set, frozenset)):
        return ",".join(format_param_value(item) for item in value)
    return str(value)


def encode_params(params: Mapping[str, Any] | Iterable[tuple[str, Any]]) -> str:
    """
    Encode query parameters as a URL query string.

    Order follows the mapping's insertion order and None values are skipped.

    Example:
        >>> encode_params({"cvid": "00000", "page": 2})
        'cvid=00000&page=2'
    """
    items = params.items() if isinstance(params, Mapping) else params
    pairs = [(key, format_param_value(value)) for key, value in items if value is not None]
    return urlencode(pairs, quote_via=quote)


def _check_paging(page: int | None, per_page: int | None) -> None:
    if page is not None and page < 1:
        raise InvalidRequest("must be 1 or greater", field="page")
    if per_page is not None and not 1 <= per_page <= MAX_PER_PAGE:
        raise InvalidRequest(f"must be between 1 and {MAX_PER_PAGE}", field="per_page")


@dataclass(frozen=True)
class ListOptions:
    """Optional parameters for listing records of a module."""
    fields: tuple[str, ...] = ()
    sort_by: str | None = None
    sort_order: SortOrder | None = None
    page: int | None = None
    per_page: int | None = None
    cvid: str | None = None
    converted: bool | None = None
    approved: bool | None = None
    ids: tuple[str, ...] = ()
    modified_since: datetime | None = None

    def __post_init__(self):
        _check_paging(self.page, self.per_page)
        if self.sort_order is not None and self.sort_by is None:
            raise InvalidRequest("sort_order requires sort_by", field="sort_order")
        if self.ids and self.cvid:
            raise InvalidRequest("cannot be combined with ids", field="cvid")

    @classmethod
    def builder(cls) -> "ListOptionsBuilder":
        return ListOptionsBuilder()

    def with_page(self, page: int) -> "ListOptions":
        return replace(self, page=page)

    def to_params(self) -> list[tuple[str, Any]]:
        return [
            ("fields", self.fields or None),
            ("sort_by", self.sort_by),
            ("sort_order", self.sort_order),
            ("page", self.page),
            ("per_page", self.per_page),
            ("cvid", self.cvid),
            ("converted", self.converted),
            ("approved", self.approved),
            ("ids", self.ids or None),
        ]

    def to_headers(self) -> list[tuple[str, str]]:
        if self.modified_since is None:
            return []
        return [("If-Modified-Since", self.modified_since.isoformat())]


class ListOptionsBuilder:
    """Fluent builder for ListOptions."""

    def __init__(self):
        self._values: dict[str, Any] = {}

    def fields(self, *names: str) -> "ListOptionsBuilder":
        self._values["fields"] = tuple(names)
        return self

    def sort_by(self, field_name: str, order: SortOrder | None = None) -> "ListOptionsBuilder":
        self._values["sort_by"] = field_name
        if order is not None:
            self._values["sort_order"] = order
        return self

    def sort_order(self, order: SortOrder) -> "ListOptionsBuilder":
        self._values["sort_order"] = order
        return self

    def page(self, page: int) -> "ListOptionsBuilder":
        self._values["page"] = page
        return self

    def per_page(self, per_page: int) -> "ListOptionsBuilder":
        self._values["per_page"] = per_page
        return self

    def custom_view(self, cvid: str) -> "ListOptionsBuilder":
        self._values["cvid"] = cvid
        return self

    def converted(self, converted: bool = True) -> "ListOptionsBuilder":
        self._values["converted"] = converted
        return self

    def approved(self, approved: bool = True) -> "ListOptionsBuilder":
        self._values["approved"] = approved
        return self

    def ids(self, *ids: str) -> "ListOptionsBuilder":
        self._values["ids"] = tuple(str(i) for i in ids)
        return self

    def modified_since(self, when: datetime) -> "ListOptionsBuilder":
        self._values["modified_since"] = when
        return self

    def build(self) -> ListOptions:
        """
        Raises:
            InvalidRequest: If the accumulated options are inconsistent
        """
        return ListOptions(**self._values)


@dataclass(frozen=True)
class SearchOptions:
    """
    Parameters for a record search. Exactly one of criteria, email, phone
    or word must be given.
    """
    criteria: str | None = None
    email: str | None = None
    phone: str | None = None
    word: str | None = None
    page: int | None = None
    per_page: int | None = None

    def __post_init__(self):
        given = [name for name in ("criteria", "email", "phone", "word") if getattr(self, name)]
        if not given:
            raise InvalidRequest("one of criteria, email, phone or word is required", field="criteria")
        if len(given) > 1:
            raise InvalidRequest(f"only one search term allowed, got {', '.join(given)}", field=given[1])
        _check_paging(self.page, self.per_page)

    @classmethod
    def builder(cls) -> "SearchOptionsBuilder":
        return SearchOptionsBuilder()

    def with_page(self, page: int) -> "SearchOptions":
        return replace(self, page=page)

    def to_params(self) -> list[tuple[str, Any]]:
        return [
            ("criteria", self.criteria),
            ("email", self.email),
            ("phone", self.phone),
            ("word", self.word),
            ("page", self.page),
            ("per_page", self.per_page),
        ]


class SearchOptionsBuilder:
    """Fluent builder for SearchOptions."""

    def __init__(self):
        self._values: dict[str, Any] = {}

    def criteria(self, criteria: str) -> "SearchOptionsBuilder":
        self._values["criteria"] = criteria
        return self

    def email(self, email: str) -> "SearchOptionsBuilder":
        self._values["email"] = email
        return self

    def phone(self, phone: str) -> "SearchOptionsBuilder":
        self._values["phone"] = phone
        return self

    def word(self, word: str) -> "SearchOptionsBuilder":
        self._values["word"] = word
        return self

    def page(self, page: int) -> "SearchOptionsBuilder":
        self._values["page"] = page
        return self

    def per_page(self, per_page: int) -> "SearchOptionsBuilder":
        self._values["per_page"] = per_page
        return self

    def build(self) -> SearchOptions:
        return SearchOptions(**self._values)


@dataclass(frozen=True)
class UpsertOptions:
    """Options for upserting records."""
    duplicate_check_fields: tuple[str, ...] = ()
    trigger: tuple[str, ...] | None = None

    def __post_init__(self):
        if self.trigger is not None:
            unknown = [t for t in self.trigger if t not in TRIGGERS]
            if unknown:
                raise InvalidRequest(f"unknown trigger(s): {', '.join(unknown)}", field="trigger")

    def apply(self, body: dict[str, Any]) -> dict[str, Any]:
        """Add these options to an upsert request body."""
        if self.duplicate_check_fields:
            body["duplicate_check_fields"] = list(self.duplicate_check_fields)
        if self.trigger is not None:
            body["trigger"] = list(self.trigger)
        return body
