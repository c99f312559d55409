"""Resource schemas persisting entities through a JSON:API backend."""

from .base import ResourceSchema

__all__ = ["ResourceSchema"]
