"""Core components for the Zoho CRM client."""

from .models import (
    HttpMethod,
    SortOrder,
    DataCenter,
    Credential,
    OperationDescriptor,
    BuiltRequest,
    RawResponse,
    PageInfo,
    Page,
    ActionResult,
    ModuleInfo,
    FieldInfo,
)
from .errors import (
    ErrorKind,
    CRMError,
    AuthenticationFailed,
    InvalidRequest,
    ResourceNotFound,
    RateLimited,
    RemoteServerError,
    TransportFailure,
    DecodeFailure,
    ConfigError,
)
from .registry import (
    register_data_center,
    get_data_center,
    list_data_centers,
    reset_registry,
)
from .config import ClientConfig, load_config, save_config

__all__ = [
    "HttpMethod",
    "SortOrder",
    "DataCenter",
    "Credential",
    "OperationDescriptor",
    "BuiltRequest",
    "RawResponse",
    "PageInfo",
    "Page",
    "ActionResult",
    "ModuleInfo",
    "FieldInfo",
    "ErrorKind",
    "CRMError",
    "AuthenticationFailed",
    "InvalidRequest",
    "ResourceNotFound",
    "RateLimited",
    "RemoteServerError",
    "TransportFailure",
    "DecodeFailure",
    "ConfigError",
    "register_data_center",
    "get_data_center",
    "list_data_centers",
    "reset_registry",
    "ClientConfig",
    "load_config",
    "save_config",
]
