"""JSON:API payload engine and async client."""

from .config import ConnectionConfig, PayloadConfig
from .core.errors import (
    InvalidDocumentError,
    JSONAPIError,
    NotSupportedEntity,
    TransportError,
    UnknownEntryError,
    UnsupportedOperationError,
)
from .entities import EntityCollection, JSONAPIEntityMixin
from .pagination import Paging
from .payload import Payload
from .query import Query
from .resources import ResourceSchema
from .transport import JSONAPIConnection

__all__ = [
    "ConnectionConfig",
    "EntityCollection",
    "InvalidDocumentError",
    "JSONAPIConnection",
    "JSONAPIEntityMixin",
    "JSONAPIError",
    "NotSupportedEntity",
    "Paging",
    "Payload",
    "PayloadConfig",
    "Query",
    "ResourceSchema",
    "TransportError",
    "UnknownEntryError",
    "UnsupportedOperationError",
]
