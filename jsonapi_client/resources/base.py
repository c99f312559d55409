"""Resource schema binding a mapped model to a JSON:API endpoint."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from sqlalchemy import inspect

from jsonapi_client.config import PayloadConfig
from jsonapi_client.core.errors import JSONAPIError, TransportError, UnsupportedOperationError
from jsonapi_client.entities.sqlalchemy import source_name
from jsonapi_client.payload.base import Payload
from jsonapi_client.query.base import Query
from jsonapi_client.transport.connection import JSONAPIConnection

logger = logging.getLogger(__name__)

_ATTRIBUTE_POINTER = "/data/attributes/"


def _field_errors(error: Any) -> dict[str, Any]:
    """Return the field errors carried by one server error object."""
    if not isinstance(error, Mapping):
        return {}
    meta = error.get("meta")
    if isinstance(meta, Mapping):
        return dict(meta)
    pointer = (error.get("source") or {}).get("pointer") or ""
    message = error.get("detail") or error.get("title") or error.get("message")
    if pointer.startswith(_ATTRIBUTE_POINTER) and message:
        return {pointer[len(_ATTRIBUTE_POINTER):]: [message]}
    return {}


def _errors_by_index(errors: list[Any]) -> list[dict[str, Any]]:
    """Return one field errors mapping per submitted entity, in submission order."""
    # An aggregated validation error carries the per-entity maps in its meta.
    if len(errors) == 1 and isinstance(errors[0], Mapping) and isinstance(errors[0].get("meta"), list):
        return [dict(entry) if isinstance(entry, Mapping) else {} for entry in errors[0]["meta"]]
    return [_field_errors(error) for error in errors]


class ResourceSchema:
    """Persist and query one resource type through a ``JSONAPIConnection``."""

    query_class: type = Query
    payload_class: type = Payload

    def __init__(
        self,
        *,
        model: Any = None,
        source: str | None = None,
        key: str | None = None,
        connection: JSONAPIConnection | None = None,
        config: PayloadConfig | None = None,
    ) -> None:
        self.model = model
        self.source = source or (source_name(model) if model is not None else None)
        if key is None and model is not None:
            key = inspect(model).primary_key[0].key
        self.key = key or "id"
        self.connection = connection or JSONAPIConnection()
        self.config = config or PayloadConfig(key=self.key)

    @property
    def path(self) -> str:
        return f"/{self.source}"

    def query(self, **options: Any) -> Query:
        """Return a query on this resource endpoint."""
        if self.model is None:
            raise JSONAPIError("Missing model for this schema, can't create a query.")
        options.setdefault("path", self.path)
        return self.query_class(self, **options)

    def create(self, *args: Any, **kwargs: Any) -> bool:
        raise UnsupportedOperationError("Creating schemas are not supported by JSON API.")

    def drop(self, *args: Any, **kwargs: Any) -> bool:
        raise UnsupportedOperationError("Dropping schemas are not supported by JSON API.")

    async def bulk_insert(self, entities: Iterable[Any]) -> bool:
        """POST the entities as one payload and reconcile them with the response.

        On a server error the returned error objects are mapped by position
        onto the entities with ``invalidate()`` and the error is re-raised.
        """
        entities = list(entities)
        if not entities:
            return True
        payload = self.payload_class(self.config)
        payload.set(entities)
        try:
            response = await self.connection.post(self.path, payload.serialize())
        except TransportError as exc:
            for index, errors in enumerate(_errors_by_index(exc.errors)):
                if index >= len(entities):
                    break
                if errors and hasattr(entities[index], "invalidate"):
                    entities[index].invalidate(errors)
            logger.warning("Bulk insert of %d %s failed: %s", len(entities), self.source, exc)
            raise

        if response:
            records = Payload.parse(response, config=self.config).export()
            for entity, record in zip(entities, records):
                if hasattr(entity, "amend"):
                    entity.amend(record)
        return True

    async def bulk_update(self, entities: Iterable[Any]) -> bool:
        """PATCH the entities as one payload."""
        entities = list(entities)
        if not entities:
            return True
        payload = self.payload_class(self.config)
        payload.set(entities)
        await self.connection.patch(self.path, payload.serialize())
        return True

    async def delete(self, instance: Any) -> bool:
        """Send a delete payload; return ``False`` when the backend refuses it."""
        payload = self.payload_class(self.config)
        payload.delete(instance)
        try:
            await self.connection.delete(self.path, payload.serialize())
        except TransportError as exc:
            logger.warning("Delete on %s failed: %s", self.source, exc)
            return False
        return True

    def last_insert_id(self) -> Any:
        data = self.connection.last_insert()
        return data.get("id") if data else None
