"""Page navigation over JSON:API resources."""

from .base import PaginationBase
from .paging import Paging

__all__ = ["PaginationBase", "Paging"]
