"""Query string and header helpers."""

from .content_negotiation import is_jsonapi_response, jsonapi_headers, parse_jsonapi_media_type
from .query_params import build_query_params, stringify_query_params

__all__ = [
    "build_query_params",
    "is_jsonapi_response",
    "jsonapi_headers",
    "parse_jsonapi_media_type",
    "stringify_query_params",
]
