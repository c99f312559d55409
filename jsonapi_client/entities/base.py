"""Capability interfaces consumed from the entity model framework."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Mapping, Protocol, Sequence, runtime_checkable


@dataclass(frozen=True)
class RelationKind:
    """How a declared relation is realized."""

    is_through_pivot: bool = False
    target: str | None = None
    through: str | None = None
    counterpart_name: str | None = None


@runtime_checkable
class Entity(Protocol):
    """One domain entity as seen by the payload engine."""

    def exists(self) -> bool: ...

    def id(self) -> Any: ...

    def key_name(self) -> str: ...

    def source_name(self) -> str: ...

    def export_attributes(self) -> Mapping[str, Any]: ...

    def declared_relations(self) -> Sequence[str]: ...

    def relation_value(self, name: str) -> Any: ...

    def relation_kind(self, name: str) -> RelationKind: ...

    def validation_errors(self) -> Mapping[str, Any]: ...


class EntityCollection:
    """Ordered sequence of entities carrying collection-level ``meta``."""

    def __init__(self, items: Iterable[Any] = (), *, meta: Mapping[str, Any] | None = None) -> None:
        self._items = list(items)
        self._meta = dict(meta or {})

    def meta(self, meta: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Return the collection meta, replacing it first when given."""
        if meta is not None:
            self._meta = dict(meta)
        return self._meta

    def append(self, item: Any) -> None:
        self._items.append(item)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, index: int) -> Any:
        return self._items[index]

    def __repr__(self) -> str:
        return f"EntityCollection({self._items!r}, meta={self._meta!r})"
