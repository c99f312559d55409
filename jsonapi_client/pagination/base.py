"""Pagination base class for JSON:API page navigation."""

from typing import Optional


class PaginationBase:
    """Define page navigation over 1-based page indexes."""

    def current_index(self) -> int:
        """Return the current page index."""
        raise NotImplementedError

    def last_index(self) -> Optional[int]:
        """Return the last page index, or None before the first fetch."""
        raise NotImplementedError

    def first_index(self) -> int:
        return 1

    def previous_index(self) -> int:
        page = self.current_index()
        return page - 1 if page > 1 else page

    def next_index(self) -> int:
        page = self.current_index()
        return page + 1 if page < (self.last_index() or 0) else page

    def has_index(self, page: int) -> bool:
        """Return True when ``page`` is between the first and the last index."""
        return self.first_index() <= page <= (self.last_index() or 0)
