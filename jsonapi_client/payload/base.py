"""JSON:API payload: entities in, wire document out, and back."""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Iterable, Mapping

from pydantic import ValidationError

from jsonapi_client.config import PayloadConfig
from jsonapi_client.core.document import JSONAPIDocumentBuilder
from jsonapi_client.core.errors import (
    InvalidDocumentError,
    JSONAPIErrorBuilder,
    NotSupportedEntity,
    UnknownEntryError,
)
from jsonapi_client.entities.base import Entity, EntityCollection
from jsonapi_client.entities.sqlalchemy import as_entity
from jsonapi_client.schemas.resource import JSONAPIDocument, JSONAPIResource
from jsonapi_client.serializers.base import Embed, JSONAPISerializer

from .store import StoreIndex

logger = logging.getLogger(__name__)


class Payload:
    """One JSON:API document being built from entities or parsed from the wire.

    A payload is filled by a single ``set()``/``delete()`` pass (or by
    ``parse()``), then read through ``data()``, ``included()``, ``errors()``,
    ``export()`` and ``serialize()``. ``reset()`` brings it back to its
    construction-time state.
    """

    serializer_class: type = JSONAPISerializer
    store_class: type = StoreIndex
    document_builder_class: type = JSONAPIDocumentBuilder
    error_builder_class: type = JSONAPIErrorBuilder

    def __init__(
        self,
        config: PayloadConfig | None = None,
        *,
        entity_adapter: Callable[[Any], Entity | None] = as_entity,
    ) -> None:
        self.config = config or PayloadConfig()
        self.entity_adapter = entity_adapter
        self.document_builder = self.document_builder_class()
        self.error_builder = self.error_builder_class()
        self.store = self.store_class(self.config)
        self.serializer = self.serializer_class(
            self.store, self.config, entity_adapter=entity_adapter
        )
        self.reset()

    def reset(self) -> "Payload":
        """Clear indices, caches, data, errors and included resources."""
        self._indexed: dict[Any, int] = {}
        self._jsonapi: dict[str, Any] = {}
        self._meta: dict[str, Any] = {}
        self._links: dict[str, Any] = {}
        self._data: list[JSONAPIResource] = []
        self._errors: list[dict[str, Any]] = []
        self._validation_errors: list[Mapping[str, Any] | None] = []
        self.store.reset()
        self.serializer.reset()
        return self

    def is_collection(self) -> bool:
        return len(self._data) != 1

    def set(self, resource: Any, *, embed: Embed | None = True) -> "Payload":
        """Set an entity or a collection of entities as the payload data."""
        self._validation_errors = []
        if isinstance(resource, EntityCollection):
            self.meta(resource.meta())
        if isinstance(resource, (EntityCollection, list, tuple)):
            for entity in resource:
                self.push(entity, embed=embed)
            return self
        return self.push(resource, embed=embed)

    def push(self, value: Any, *, embed: Embed | None = True) -> "Payload":
        """Flatten one entity and append it to the primary data."""
        try:
            entity = self.serializer.get_entity(value)
        except NotSupportedEntity:
            logger.warning("Rejected non-entity value of type %s", type(value).__name__)
            self._errors.append(self.error_builder.unsupported_entity())
            return self
        resource = self.serializer.to_resource(entity, embed=embed)
        self._data.append(resource)
        self.store.add(resource)
        errors = entity.validation_errors()
        self._validation_errors.append(dict(errors) if errors else None)
        if entity.exists():
            self._indexed[entity.id()] = len(self._data) - 1
        return self

    def delete(self, resource: Any) -> "Payload":
        """Set an entity or a collection of entities as a delete-by-identity payload."""
        if isinstance(resource, EntityCollection):
            self.meta(resource.meta())
        entities = resource if isinstance(resource, (EntityCollection, list, tuple)) else [resource]
        for value in entities:
            try:
                self._data.append(self.serializer.to_identifier(value))
            except NotSupportedEntity:
                logger.warning("Rejected non-entity value of type %s", type(value).__name__)
                self._errors.append(self.error_builder.unsupported_entity())
        return self

    def keys(self) -> list[Any]:
        """Return the ids of the indexed primary data."""
        return list(self._indexed)

    def export(self, id: Any = None) -> list[dict[str, Any]]:
        """Rebuild nested plain dicts from the primary data and the included resources."""
        if id is None:
            collection = list(self._data)
        else:
            if id not in self._indexed:
                raise UnknownEntryError(id)
            collection = [self._data[self._indexed[id]]]

        values = []
        for resource in collection:
            result = dict(resource.attributes or {})
            visited: set = set()
            if resource.id is not None:
                result[self.config.key_for(resource.type)] = resource.id
                visited.add(resource.key())
            for name, relationship in (resource.relationships or {}).items():
                item = self.store.resolve(relationship.data, visited)
                if item is not None:
                    result[name] = item
            values.append(result)
        return values

    def embedded(self) -> list[str]:
        """Return the dotted relationship paths of the document (deepest paths only)."""
        paths: list[str] = []
        for resource in self._data:
            ancestors = frozenset([resource.key()]) if resource.id is not None else frozenset()
            for path in self.store.paths(resource.relationships or {}, ancestors):
                if path not in paths:
                    paths.append(path)
        return [
            path
            for path in paths
            if not any(other.startswith(path + ".") for other in paths)
        ]

    def jsonapi(self, jsonapi: Mapping[str, Any] | None = None) -> Any:
        """Get the ``jsonapi`` member, or set it when an argument is given."""
        if jsonapi is None:
            return self._jsonapi
        self._jsonapi = dict(jsonapi)
        return self

    def meta(self, meta: Mapping[str, Any] | None = None) -> Any:
        """Get the ``meta`` member, or set it when an argument is given."""
        if meta is None:
            return self._meta
        self._meta = dict(meta)
        return self

    def links(self, links: Mapping[str, Any] | None = None) -> Any:
        """Get the ``links`` member, or set it when an argument is given."""
        if links is None:
            return self._links
        self._links = dict(links)
        return self

    def data(self, data: Any = None) -> Any:
        """Get the primary data (single object when exactly one), or set it."""
        if data is None:
            items = [resource.to_dict() for resource in self._data]
            return items[0] if len(items) == 1 else items
        if not isinstance(data, list):
            data = [data]
        self._data = [
            item if isinstance(item, JSONAPIResource) else JSONAPIResource.model_validate(item)
            for item in data
        ]
        self._indexed = {}
        for index, resource in enumerate(self._data):
            if resource.id is not None:
                self._indexed[resource.id] = index
        return self

    def errors(self, errors: Iterable[Mapping[str, Any]] | None = None) -> Any:
        """Get the errors (aggregated validation error included), or set them."""
        if errors is not None:
            self._errors = [dict(error) for error in errors]
            return self
        result = list(self._errors)
        if any(self._validation_errors):
            result.append(self.error_builder.validation_error(self._validation_errors))
        return result

    def included(self) -> list[dict[str, Any]]:
        """Return the included resources that are not part of the primary data.

        Primary resources are indexed in the store as pointer targets, they
        never show up here.
        """
        primary = {resource.key() for resource in self._data if resource.id is not None}
        return [
            resource.to_dict()
            for resource in self.store.included()
            if resource.key() not in primary
        ]

    def serialize(self) -> dict[str, Any]:
        """Return the wire document."""
        return self.document_builder.build(
            self.data(),
            included=self.included(),
            errors=self.errors(),
            jsonapi=self.jsonapi(),
            links=self.links(),
            meta=self.meta(),
        )

    def _load(self, document: JSONAPIDocument) -> "Payload":
        self.jsonapi(document.jsonapi)
        self.meta(document.meta)
        self.links(document.links)
        self.data(document.resources())
        self.errors(document.errors)
        for resource in self._data:
            self.store.add(resource)
        for resource in document.included:
            self.store.add(resource)
        return self

    @classmethod
    def parse(
        cls,
        raw: Any,
        key: str | None = None,
        keys: Mapping[str, str] | None = None,
        *,
        config: PayloadConfig | None = None,
    ) -> "Payload":
        """Build a payload from a JSON text or an already decoded document."""
        if not raw:
            decoded: Any = {}
        elif isinstance(raw, (str, bytes, bytearray)):
            try:
                decoded = json.loads(raw)
            except json.JSONDecodeError as exc:
                raise InvalidDocumentError(f"Invalid JSON-API document: {exc}") from exc
        else:
            decoded = raw
        if not isinstance(decoded, Mapping):
            raise InvalidDocumentError("A JSON-API document must be an object.")
        try:
            document = JSONAPIDocument.model_validate(dict(decoded))
        except ValidationError as exc:
            raise InvalidDocumentError(f"Invalid JSON-API document: {exc}") from exc
        if config is None:
            config = PayloadConfig(key=key or "id", keys=dict(keys or {}))
        return cls(config)._load(document)
