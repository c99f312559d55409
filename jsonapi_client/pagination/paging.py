"""Page-by-page browsing of a resource endpoint."""

from __future__ import annotations

import logging
import math
from typing import Any, Mapping, Optional

from jsonapi_client.entities.base import EntityCollection

from .base import PaginationBase

logger = logging.getLogger(__name__)


def _as_page(value: Any) -> int:
    try:
        page = int(value)
    except (TypeError, ValueError):
        return 1
    return page or 1


class Paging(PaginationBase):
    """Fetch one page of a resource at a time.

    ``resource`` is a ``ResourceSchema``; ``query`` holds the query options
    replayed on every fetch (``page`` and ``limit`` included).
    """

    limit = 10

    def __init__(self, resource: Any, query: Optional[Mapping[str, Any]] = None) -> None:
        if resource is None:
            raise ValueError("Paging requires a valid resource as first constructor parameter.")
        self.resource = resource
        query = dict(query or {})
        query["limit"] = int(query.get("limit") or self.limit)
        query["page"] = _as_page(query.get("page"))
        self._query = query
        self.count: Optional[int] = None
        self._last_index: Optional[int] = None
        self.items: Any = EntityCollection()
        self.is_loading = False

    def query(self, query: Optional[Mapping[str, Any]] = None) -> Any:
        """Get the current query options, or replace them."""
        if query is None:
            return dict(self._query)
        query = dict(query)
        query["limit"] = int(query.get("limit") or self.limit)
        query["page"] = _as_page(query.get("page"))
        self._query = query
        return self

    def current_index(self) -> int:
        return self._query["page"]

    def last_index(self) -> Optional[int]:
        return self._last_index

    def set_limit(self, limit: int) -> "Paging":
        """Change the page size and go back to the first page."""
        self._query["limit"] = int(limit)
        self._query["page"] = 1
        return self

    async def page(self, page: int) -> "Paging":
        """Fetch ``page`` when it is in range, otherwise keep the current page."""
        if self.has_index(page):
            self._query["page"] = page
            await self.fetch()
        return self

    async def fetch(self, return_: str = "entity") -> "Paging":
        """Fetch the current page and refresh ``count``, ``last_index`` and ``items``."""
        query = self.resource.query(query=self.query())
        self.is_loading = True
        try:
            items = await query.get(return_)
        finally:
            self.is_loading = False
        meta = query.meta()
        self.count = meta.get("count")
        if self.count is None:
            logger.debug("No `count` in the meta of %s, paging cannot be computed", self.resource.source)
            self._last_index = None
        else:
            self._last_index = math.ceil(self.count / self._query["limit"])
        self.items = items
        return self
