"""HTTP pipeline: building requests, sending them and mapping responses."""

from .builder import OperationBuilder, RequestBuilder, encode_segment
from .mapper import ErrorEnvelope, ResponseMapper, parse_retry_after
from .params import (
    ListOptions,
    ListOptionsBuilder,
    SearchOptions,
    SearchOptionsBuilder,
    UpsertOptions,
    encode_params,
)
from .transport import Transport

__all__ = [
    "OperationBuilder",
    "RequestBuilder",
    "encode_segment",
    "ErrorEnvelope",
    "ResponseMapper",
    "parse_retry_after",
    "ListOptions",
    "ListOptionsBuilder",
    "SearchOptions",
    "SearchOptionsBuilder",
    "UpsertOptions",
    "encode_params",
    "Transport",
]
