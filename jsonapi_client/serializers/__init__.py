"""Entity flattening into JSON:API resource objects."""

from .base import JSONAPISerializer, embed_tree

__all__ = ["JSONAPISerializer", "embed_tree"]
