"""Entity capability interfaces and their SQLAlchemy implementation."""

from .base import Entity, EntityCollection, RelationKind
from .sqlalchemy import (
    JSONAPIEntityMixin,
    SQLAlchemyEntity,
    as_entity,
    hydrate,
    hydrate_many,
    source_name,
)

__all__ = [
    "Entity",
    "EntityCollection",
    "JSONAPIEntityMixin",
    "RelationKind",
    "SQLAlchemyEntity",
    "as_entity",
    "hydrate",
    "hydrate_many",
    "source_name",
]
