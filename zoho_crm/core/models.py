"""Core data models for the Zoho CRM client."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class HttpMethod(Enum):
    """HTTP verbs used by the CRM API."""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"

    @property
    def has_body(self) -> bool:
        """Whether requests with this verb may carry a JSON body."""
        return self not in (HttpMethod.GET, HttpMethod.DELETE)


class SortOrder(Enum):
    """Sort direction for record listings."""
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class DataCenter:
    """Zoho data center: where to authenticate and where the API lives."""
    name: str
    accounts_url: str
    api_url: str
    sandbox_api_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert DataCenter to a dictionary."""
        return {
            "name": self.name,
            "accounts_url": self.accounts_url,
            "api_url": self.api_url,
            "sandbox_api_url": self.sandbox_api_url,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DataCenter":
        """Create DataCenter from a dictionary."""
        return cls(
            name=data["name"],
            accounts_url=data["accounts_url"],
            api_url=data["api_url"],
            sandbox_api_url=data.get("sandbox_api_url"),
        )


@dataclass(frozen=True)
class Credential:
    """
    OAuth2 credential held by the CredentialStore.

    expires_at is in epoch seconds. None means the token was supplied by the
    caller without a known lifetime.
    """
    access_token: str | None
    refresh_token: str = field(repr=False)
    client_id: str
    client_secret: str = field(repr=False)
    expires_at: float | None = None
    api_domain: str | None = None

    def is_usable(self, now: float, margin: float = 0.0) -> bool:
        """True if the access token can be sent without refreshing first."""
        if not self.access_token:
            return False
        if self.expires_at is None:
            return True
        return self.expires_at - margin > now


@dataclass(frozen=True)
class OperationDescriptor:
    """
    One API call before it is turned into a wire-level request.

    Build instances with OperationBuilder, which enforces required fields.
    resource_path is relative to /crm/v2 and already percent-encoded.
    """
    method: HttpMethod
    resource_path: str
    query_params: tuple[tuple[str, str], ...] = ()
    body: Any = None
    headers: tuple[tuple[str, str], ...] = ()
    timeout: float | None = None


@dataclass(frozen=True)
class BuiltRequest:
    """Fully addressed request ready for the transport."""
    method: HttpMethod
    url: str
    headers: dict[str, str]
    body: bytes | None = None
    timeout: float | None = None


@dataclass
class RawResponse:
    """Status, headers and complete body as received from the transport."""
    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    def header(self, name: str) -> str | None:
        """Case-insensitive header lookup."""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


@dataclass(frozen=True)
class PageInfo:
    """Pagination metadata from the ``info`` block of a list response."""
    page: int
    per_page: int
    count: int = 0
    more_records: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PageInfo":
        """Create PageInfo from a response ``info`` object."""
        return cls(
            page=int(data["page"]),
            per_page=int(data["per_page"]),
            count=int(data.get("count", 0)),
            more_records=bool(data["more_records"]),
        )


@dataclass
class Page(Generic[T]):
    """One page of records plus its pagination metadata."""
    records: list[T]
    info: PageInfo

    @property
    def more_records(self) -> bool:
        return self.info.more_records


@dataclass
class ActionResult:
    """
    Per-record outcome of a write (insert, update, upsert, delete).

    Zoho reports record-level failures inside an otherwise successful
    response, so each item must be checked by the caller.
    """
    code: str
    status: str
    message: str = ""
    details: dict[str, Any] = field(default_factory=dict)
    action: str | None = None

    @property
    def is_success(self) -> bool:
        return self.status == "success"

    @property
    def record_id(self) -> str | None:
        """ID of the affected record, when the API reported one."""
        value = self.details.get("id")
        return str(value) if value is not None else None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ActionResult":
        """Create ActionResult from one entry of a response ``data`` array."""
        return cls(
            code=data["code"],
            status=data["status"],
            message=data.get("message", ""),
            details=data.get("details") or {},
            action=data.get("action"),
        )


@dataclass
class ModuleInfo:
    """Metadata for a CRM module (e.g. Leads, Accounts)."""
    api_name: str
    module_name: str
    singular_label: str | None = None
    plural_label: str | None = None
    api_supported: bool = True
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ModuleInfo":
        """Create ModuleInfo from a ``modules`` array entry."""
        return cls(
            api_name=data["api_name"],
            module_name=data.get("module_name", data["api_name"]),
            singular_label=data.get("singular_label"),
            plural_label=data.get("plural_label"),
            api_supported=bool(data.get("api_supported", True)),
            raw=data,
        )


@dataclass
class FieldInfo:
    """Metadata for one field of a module."""
    api_name: str
    field_label: str
    data_type: str
    read_only: bool = False
    required: bool = False
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FieldInfo":
        """Create FieldInfo from a ``fields`` array entry."""
        return cls(
            api_name=data["api_name"],
            field_label=data.get("field_label", data["api_name"]),
            data_type=data["data_type"],
            read_only=bool(data.get("read_only", False)),
            required=bool(data.get("system_mandatory", False)),
            raw=data,
        )
