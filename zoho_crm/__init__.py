"""
Zoho CRM client

Typed client for v2 of the Zoho CRM API: OAuth2 token handling, request
construction, and mapping of responses to typed results and errors.
"""

from .client import ZohoCRMClient
from .core import (
    ActionResult,
    AuthenticationFailed,
    ClientConfig,
    ConfigError,
    CRMError,
    DecodeFailure,
    ErrorKind,
    FieldInfo,
    HttpMethod,
    InvalidRequest,
    ModuleInfo,
    Page,
    PageInfo,
    RateLimited,
    RemoteServerError,
    ResourceNotFound,
    SortOrder,
    TransportFailure,
    load_config,
    save_config,
)
from .http import ListOptions, SearchOptions, UpsertOptions, encode_params

__all__ = [
    "ZohoCRMClient",
    "ActionResult",
    "AuthenticationFailed",
    "ClientConfig",
    "ConfigError",
    "CRMError",
    "DecodeFailure",
    "ErrorKind",
    "FieldInfo",
    "HttpMethod",
    "InvalidRequest",
    "ModuleInfo",
    "Page",
    "PageInfo",
    "RateLimited",
    "RemoteServerError",
    "ResourceNotFound",
    "SortOrder",
    "TransportFailure",
    "load_config",
    "save_config",
    "ListOptions",
    "SearchOptions",
    "UpsertOptions",
    "encode_params",
]
