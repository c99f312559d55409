"""JSON:API payload engine."""

from .base import Payload
from .store import StoreIndex

__all__ = ["Payload", "StoreIndex"]
