"""Index of resource objects by type & id, used to resolve relationship pointers."""

from __future__ import annotations

import logging
from typing import Any, Iterator, Optional, Tuple, Union

from jsonapi_client.config import PayloadConfig
from jsonapi_client.schemas.resource import (
    JSONAPIRelationship,
    JSONAPIResource,
    JSONAPIResourceIdentifier,
)

logger = logging.getLogger(__name__)

StoreKey = Tuple[Optional[str], Any]
PointerData = Union[JSONAPIResourceIdentifier, list, None]


class StoreIndex:
    """Resources indexed by ``(type, id)``.

    Each stored resource keeps its attributes merged with its id (under the
    configured key name) and its relationship pointers for later resolution.
    Stored resources are also the payload's ``included`` side-table, in
    insertion order and without duplicates.
    """

    def __init__(self, config: PayloadConfig | None = None) -> None:
        self.config = config or PayloadConfig()
        self._attributes: dict[StoreKey, dict[str, Any]] = {}
        self._relationships: dict[StoreKey, dict[str, JSONAPIRelationship]] = {}
        self._included: list[JSONAPIResource] = []

    def add(self, resource: JSONAPIResource) -> bool:
        """Index ``resource``; return ``False`` when it has no id or is already stored."""
        if resource.id is None:
            return False
        key = resource.key()
        if key in self._attributes:
            logger.debug("Skipping duplicate included resource %s/%s", *key)
            return False
        attributes = dict(resource.attributes or {})
        attributes[self.config.key_for(resource.type)] = resource.id
        self._attributes[key] = attributes
        if resource.relationships:
            self._relationships[key] = dict(resource.relationships)
        self._included.append(resource)
        return True

    def get(self, key: StoreKey) -> dict[str, Any] | None:
        """Return a copy of the stored attributes (id included) for ``key``."""
        attributes = self._attributes.get(key)
        return None if attributes is None else dict(attributes)

    def relationships(self, key: StoreKey) -> dict[str, JSONAPIRelationship]:
        return self._relationships.get(key, {})

    def included(self) -> list[JSONAPIResource]:
        return list(self._included)

    def resolve(self, data: PointerData, visited: set[StoreKey]) -> Any:
        """Resolve pointer(s) into nested plain dicts, recursively.

        A pointer whose target is already in ``visited`` or missing from the
        index is skipped. A single pointer resolves to a dict (or ``None``),
        a list of pointers to a list.
        """
        if data is None:
            return None
        many = isinstance(data, list)
        values = []
        for pointer in data if many else [data]:
            key = pointer.key()
            if key in visited:
                continue
            visited.add(key)
            result = self.get(key)
            if result is None:
                continue
            for name, relationship in self.relationships(key).items():
                item = self.resolve(relationship.data, visited)
                if item is not None:
                    result[name] = item
            values.append(result)
        if many:
            return values
        return values[0] if values else None

    def paths(self, relationships: dict[str, JSONAPIRelationship], ancestors: frozenset) -> Iterator[str]:
        """Yield every dotted relationship path reachable from ``relationships``.

        A relationship whose pointers all lead back to ``ancestors`` is not a path.
        """
        for name, relationship in relationships.items():
            pointers = relationship.pointers()
            targets = [pointer.key() for pointer in pointers if pointer.key() not in ancestors]
            if pointers and not targets:
                continue
            yield name
            for key in targets:
                nested = self.relationships(key)
                for path in self.paths(nested, ancestors | {key}):
                    yield f"{name}.{path}"

    def reset(self) -> None:
        self._attributes.clear()
        self._relationships.clear()
        self._included.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._attributes

    def __len__(self) -> int:
        return len(self._included)
