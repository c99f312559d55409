"""Chainable query over a JSON:API resource endpoint."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Any, Mapping

from jsonapi_client.core.errors import JSONAPIError, UnsupportedOperationError
from jsonapi_client.entities.sqlalchemy import hydrate_many
from jsonapi_client.payload.base import Payload
from jsonapi_client.utils.query_params import build_query_params

if TYPE_CHECKING:
    from jsonapi_client.resources.base import ResourceSchema

logger = logging.getLogger(__name__)

_ORDER_RE = re.compile(r"^(.*?)\s+((?:a|de)sc)$", re.IGNORECASE)

RETURN_MODES = ("entity", "array", "object")


class Query:
    """Collect fields, conditions, ordering, paging and includes, then fetch.

    ``query`` maps option names to values and replays them through the
    chainable methods, e.g. ``Query(schema, query={"page": 2, "limit": 5})``.
    """

    def __init__(
        self,
        schema: "ResourceSchema",
        *,
        path: str = "/",
        query: Mapping[str, Any] | None = None,
    ) -> None:
        self.schema = schema
        self._path = path
        self._fields: dict[str, list[str]] = {}
        self._conditions: list[dict[str, Any]] = []
        self._order: dict[str, str] = {}
        self._embed: list[str] = []
        self._has: list[Any] = []
        self._page: dict[str, int] = {}
        self._meta: dict[str, Any] = {}
        for name, value in (query or {}).items():
            getattr(self, name)(value)

    @property
    def model(self) -> Any:
        return self.schema.model

    def path(self) -> str:
        """Return the endpoint path, with ``/<id>`` when a condition targets the key."""
        key = self.schema.key
        suffix = ""
        for conditions in self._conditions:
            if conditions.get(key) is not None:
                suffix = f"/{conditions[key]}"
        return self._path + suffix

    def fields(self, *fields: Any) -> Any:
        """Add sparse fieldsets, or return them when called without arguments.

        Plain names apply to the schema's own type; a mapping gives names per type.
        """
        if not fields:
            return self._fields
        for value in fields:
            if isinstance(value, Mapping):
                for resource_type, names in value.items():
                    names = [names] if isinstance(names, str) else list(names)
                    self._fields.setdefault(resource_type, []).extend(names)
            elif isinstance(value, (list, tuple)):
                self._fields.setdefault(self.schema.source, []).extend(value)
            else:
                self._fields.setdefault(self.schema.source, []).append(value)
        return self

    def where(self, conditions: Mapping[str, Any] | None = None) -> Any:
        """Add a conditions mapping, or return them when called without arguments."""
        if conditions is None:
            return self._conditions
        self._conditions.append(dict(conditions))
        return self

    def conditions(self, conditions: Mapping[str, Any] | None = None) -> Any:
        return self.where(conditions)

    def order(self, *fields: Any) -> "Query":
        """Add sort fields: ``"name"``, ``"name desc"`` or ``{"name": "desc"}``."""
        for value in fields:
            if not value:
                continue
            if isinstance(value, (list, tuple)):
                self.order(*value)
            elif isinstance(value, Mapping):
                for column, direction in value.items():
                    self._order[column] = str(direction).upper()
            else:
                match = _ORDER_RE.match(value)
                if match:
                    self._order[match.group(1)] = match.group(2).upper()
                else:
                    self._order[value] = "ASC"
        return self

    def page(self, page: Any) -> "Query":
        self._page["page"] = int(page)
        return self

    def offset(self, offset: Any) -> "Query":
        self._page["offset"] = int(offset)
        return self

    def limit(self, limit: Any) -> "Query":
        """Set the page size; ``0`` means no paging."""
        self._page["limit"] = int(limit)
        return self

    def embed(self, *relations: Any) -> Any:
        """Add relation paths to include, or return them when called without arguments."""
        if not relations:
            return self._embed
        for value in relations:
            values = list(value) if isinstance(value, (list, tuple)) else [value]
            for relation in values:
                if relation not in self._embed:
                    self._embed.append(relation)
        return self

    def has(self, *relations: Any) -> Any:
        """Add conditions over relations, or return them when called without arguments."""
        if not relations:
            return self._has
        for value in relations:
            self._has.extend(value if isinstance(value, (list, tuple)) else [value])
        return self

    def meta(self) -> dict[str, Any]:
        """Return the ``meta`` member of the last fetched document."""
        return self._meta

    def query_string(self) -> dict[str, Any]:
        """Return the nested query parameters for the current state."""
        page = None
        limit = self._page.get("limit")
        if limit:
            if self._page.get("page"):
                offset = (self._page["page"] - 1) * limit
            else:
                offset = self._page.get("offset") or 0
            page = {"offset": offset, "limit": limit}

        key = self.schema.key
        filters: dict[str, Any] = {}
        for conditions in self._conditions:
            for field, value in conditions.items():
                if field != key:
                    filters[field] = value

        return build_query_params(
            include=self._embed,
            fields=self._fields,
            sort=[
                {"field": field, "direction": direction.lower()}
                for field, direction in self._order.items()
            ],
            page=page,
            filter=filters,
        )

    async def get(self, return_: str = "entity") -> Any:
        """Fetch the endpoint and return hydrated entities or plain dicts.

        ``return_`` is ``"entity"`` for an ``EntityCollection`` of model
        instances, ``"array"`` or ``"object"`` for the exported dicts.
        """
        if return_ not in RETURN_MODES:
            raise ValueError(f"Invalid `{return_}` mode as `return_` value")
        if return_ == "entity" and self.model is None:
            raise JSONAPIError(
                "Missing model for this query, set `return_` to `'object'` to get row data."
            )

        document = await self.schema.connection.get(self.path(), self.query_string())
        payload = Payload.parse(document, config=self.schema.config)
        self._meta = payload.meta()
        data = payload.export()
        logger.debug("Fetched %d %s record(s)", len(data), self.schema.source)

        if return_ == "entity":
            return hydrate_many(self.model, data, meta=payload.meta(), exists=True)
        return data

    async def all(self, return_: str = "entity") -> Any:
        return await self.get(return_)

    async def first(self, return_: str = "entity") -> Any:
        """Return the first fetched record, or ``None`` when there is none."""
        result = await self.get(return_)
        return result[0] if len(result) else None

    async def count(self) -> int:
        raise UnsupportedOperationError("Unsupported count operation for this adapter.")
