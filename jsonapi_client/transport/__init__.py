"""HTTP transport for JSON:API backends."""

from .connection import JSONAPIConnection

__all__ = ["JSONAPIConnection"]
