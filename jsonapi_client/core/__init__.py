"""Core JSON:API document and error helpers."""

from .document import JSONAPIDocumentBuilder
from .errors import (
    InvalidDocumentError,
    JSONAPIError,
    JSONAPIErrorBuilder,
    NotSupportedEntity,
    TransportError,
    UnknownEntryError,
    UnsupportedOperationError,
)

__all__ = [
    "InvalidDocumentError",
    "JSONAPIDocumentBuilder",
    "JSONAPIError",
    "JSONAPIErrorBuilder",
    "NotSupportedEntity",
    "TransportError",
    "UnknownEntryError",
    "UnsupportedOperationError",
]
