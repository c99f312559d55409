"""Query builder for JSON:API resource endpoints."""

from .base import RETURN_MODES, Query

__all__ = ["Query", "RETURN_MODES"]
