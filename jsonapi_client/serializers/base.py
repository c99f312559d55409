"""Flatten entity graphs into JSON:API resource objects."""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Union

from jsonapi_client.config import PayloadConfig
from jsonapi_client.core.errors import NotSupportedEntity
from jsonapi_client.entities.base import Entity
from jsonapi_client.entities.sqlalchemy import as_entity
from jsonapi_client.schemas.resource import (
    JSONAPIRelationship,
    JSONAPIResource,
    JSONAPIResourceIdentifier,
)

logger = logging.getLogger(__name__)

Embed = Union[bool, str, Iterable[str], dict]


def embed_tree(embed: Embed | None) -> Union[bool, dict]:
    """Normalize an ``embed`` option into ``True`` or a nested dict of relation names."""
    if embed is True:
        return True
    if isinstance(embed, dict):
        return embed
    if not embed:
        return {}
    if isinstance(embed, str):
        embed = [embed]
    tree: dict = {}
    for path in embed:
        node = tree
        for part in (part for part in path.split(".") if part):
            node = node.setdefault(part, {})
    return tree


class JSONAPISerializer:
    """Serialize entities into JSON:API resource objects.

    Related entities that already exist are flattened recursively, handed to
    ``store`` (the payload's included side-table) and replaced by a pointer.
    Entities that do not exist yet are exported inline under ``attributes``.
    """

    def __init__(
        self,
        store: Any,
        config: PayloadConfig | None = None,
        *,
        entity_adapter: Callable[[Any], Entity | None] = as_entity,
    ) -> None:
        self.store = store
        self.config = config or PayloadConfig()
        self.entity_adapter = entity_adapter
        self._pending: set[tuple[str, Any]] = set()

    def get_entity(self, value: Any) -> Entity:
        """Return the entity view of ``value`` or raise ``NotSupportedEntity``."""
        entity = self.entity_adapter(value)
        if entity is None:
            raise NotSupportedEntity(value)
        return entity

    def export(self, entity: Entity) -> dict[str, Any]:
        exporter = self.config.exporter
        if exporter is None:
            return dict(entity.export_attributes())
        return dict(exporter(entity))

    def get_attributes(self, entity: Entity) -> dict[str, Any]:
        """Return the entity attributes without its primary key."""
        attributes = self.export(entity)
        attributes.pop(entity.key_name(), None)
        return attributes

    def export_inline(self, entity: Entity) -> dict[str, Any]:
        """Return the nested form of an entity that does not exist yet."""
        data = self.get_attributes(entity)
        entity_id = entity.id()
        if entity_id is not None:
            data[entity.key_name()] = entity_id
        return data

    def to_identifier(self, value: Any) -> JSONAPIResource:
        """Return the minimal resource object used by delete payloads."""
        entity = self.get_entity(value)
        resource = JSONAPIResource(type=entity.source_name())
        entity_id = entity.id()
        if entity_id is not None:
            resource.id = entity_id
        resource.exists = entity.exists()
        return resource

    def to_resource(
        self,
        value: Any,
        *,
        as_related: bool = False,
        embed: Embed | None = True,
    ) -> Union[JSONAPIResource, JSONAPIResourceIdentifier]:
        """Serialize an entity into a resource object.

        With ``as_related`` the resource is stored and only its pointer is returned.
        """
        entity = self.get_entity(value)
        resource_type = entity.source_name()
        entity_id = entity.id()
        exists = entity.exists()
        key = (resource_type, entity_id)

        if as_related and (key in self._pending or key in self.store):
            return self._pointer(resource_type, entity_id, exists)

        attributes = self.get_attributes(entity)
        relationships: dict[str, dict[str, Any]] = {}
        links: dict[str, Any] = {}
        if self.config.link is not None and exists:
            links["self"] = self.config.link(resource_type, {"id": entity_id})

        tree = embed_tree(embed)
        if tree:
            guarded = entity_id is not None
            if guarded:
                self._pending.add(key)
            try:
                self.populate_relationships(entity, attributes, relationships, tree)
            finally:
                if guarded:
                    self._pending.discard(key)

        resource = JSONAPIResource(type=resource_type)
        if entity_id is not None:
            resource.id = entity_id
        resource.exists = exists
        resource.attributes = attributes
        if relationships:
            resource.relationships = {
                name: JSONAPIRelationship(**relationship)
                for name, relationship in relationships.items()
            }
        if links:
            resource.links = links

        if as_related:
            self.store.add(resource)
            return resource.identifier()
        return resource

    def populate_relationships(
        self,
        entity: Entity,
        attributes: dict[str, Any],
        relationships: dict[str, dict[str, Any]],
        tree: Union[bool, dict],
    ) -> None:
        """Populate every declared relation selected by ``tree``.

        A pivot relation is skipped when the through relation built on it
        has a value, only the far-side entities surface.
        """
        names = [
            name for name in entity.declared_relations() if tree is True or name in tree
        ]
        pivots = set()
        for name in names:
            kind = entity.relation_kind(name)
            if kind.is_through_pivot and kind.through and entity.relation_value(name) is not None:
                pivots.add(kind.through)
        for name in names:
            if name in pivots:
                attributes.pop(name, None)
                continue
            child_tree = True if tree is True else tree[name]
            self.populate_relationship(entity, name, attributes, relationships, child_tree)

    def populate_relationship(
        self,
        entity: Entity,
        name: str,
        attributes: dict[str, Any],
        relationships: dict[str, dict[str, Any]],
        tree: Union[bool, dict],
    ) -> None:
        """Populate one relation as pointers, inline data, or both."""
        value = entity.relation_value(name)
        if value is None:
            return
        kind = entity.relation_kind(name)

        relationship: dict[str, Any] = {}
        if self.config.link is not None:
            relationship["links"] = {
                "related": self.config.link(
                    kind.target or name,
                    {"relation": kind.counterpart_name, "rid": entity.id()},
                )
            }

        single = self.entity_adapter(value)
        if single is not None:
            if single.exists():
                relationship["data"] = self.to_resource(single, as_related=True, embed=tree)
            else:
                attributes[name] = self.export_inline(single)
        else:
            for item in value:
                child = self.get_entity(item)
                if child.exists():
                    relationship.setdefault("data", []).append(
                        self.to_resource(child, as_related=True, embed=tree)
                    )
                else:
                    attributes.setdefault(name, []).append(self.export_inline(child))

        if relationship:
            relationships[name] = relationship
        logger.debug("Populated relation %s of %s", name, entity.source_name())

    def reset(self) -> None:
        self._pending.clear()

    @staticmethod
    def _pointer(resource_type: str, entity_id: Any, exists: bool) -> JSONAPIResourceIdentifier:
        pointer = JSONAPIResourceIdentifier(type=resource_type)
        if entity_id is not None:
            pointer.id = entity_id
        pointer.exists = exists
        return pointer

