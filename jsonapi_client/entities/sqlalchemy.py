"""SQLAlchemy implementation of the entity capability interface."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from sqlalchemy import inspect
from sqlalchemy.orm import InstanceState, make_transient_to_detached
from sqlalchemy.orm.attributes import NO_VALUE

from .base import EntityCollection, RelationKind

logger = logging.getLogger(__name__)


def source_name(cls: type) -> str:
    """Return the JSON:API type of a mapped class."""
    return getattr(cls, "__jsonapi_type__", None) or getattr(
        cls, "__tablename__", cls.__name__.lower()
    )


class SQLAlchemyEntity:
    """Expose a mapped instance through the ``Entity`` protocol.

    Only state already present on the instance is read: unloaded columns
    and relationships are never lazy-loaded.
    """

    def __init__(self, instance: Any) -> None:
        self.instance = instance
        self._state: InstanceState = inspect(instance)
        self._mapper = self._state.mapper

    def exists(self) -> bool:
        return bool(self._state.has_identity)

    def key_name(self) -> str:
        column = self._mapper.primary_key[0]
        return self._mapper.get_property_by_column(column).key

    def id(self) -> Any:
        identity = self._state.identity
        if identity:
            return identity[0]
        return self._state.dict.get(self.key_name())

    def source_name(self) -> str:
        return source_name(self._mapper.class_)

    def export_attributes(self) -> dict[str, Any]:
        key = self.key_name()
        exists = self.exists()
        attributes: dict[str, Any] = {}
        for prop in self._mapper.column_attrs:
            if prop.key == key:
                continue
            value = self._state.attrs[prop.key].loaded_value
            if value is NO_VALUE:
                if exists:
                    continue
                value = None
            attributes[prop.key] = value
        return attributes

    def declared_relations(self) -> list[str]:
        return [relationship.key for relationship in self._mapper.relationships]

    def relation_value(self, name: str) -> Any:
        value = self._state.attrs[name].loaded_value
        if value is NO_VALUE:
            return None
        return value

    def relation_kind(self, name: str) -> RelationKind:
        prop = self._mapper.relationships[name]
        through = prop.info.get("through")
        if through is None and prop.secondary is not None:
            through = self._pivot_relation(prop.secondary)
        counterpart = prop.back_populates
        if not counterpart and prop.backref:
            counterpart = prop.backref if isinstance(prop.backref, str) else prop.backref[0]
        return RelationKind(
            target=source_name(prop.mapper.class_),
            is_through_pivot=through is not None or prop.secondary is not None,
            through=through,
            counterpart_name=counterpart or None,
        )

    def _pivot_relation(self, table: Any) -> str | None:
        for relationship in self._mapper.relationships:
            if relationship.secondary is None and relationship.mapper.local_table is table:
                return relationship.key
        return None

    def validation_errors(self) -> Mapping[str, Any]:
        return getattr(self.instance, "jsonapi_errors", None) or {}

    def __repr__(self) -> str:
        return f"SQLAlchemyEntity({self.instance!r})"


def as_entity(value: Any) -> SQLAlchemyEntity | None:
    """Return the entity view of ``value`` or ``None`` when it is not a mapped instance."""
    if isinstance(value, SQLAlchemyEntity):
        return value
    if isinstance(value, (dict, list, tuple, str, bytes, int, float, bool)) or value is None:
        return None
    state = inspect(value, raiseerr=False)
    if not isinstance(state, InstanceState):
        return None
    return SQLAlchemyEntity(value)


class JSONAPIEntityMixin:
    """Client-side bookkeeping for mapped classes exchanged over JSON:API."""

    @property
    def jsonapi_errors(self) -> dict[str, Any]:
        return self.__dict__.setdefault("_jsonapi_errors", {})

    def invalidate(self, errors: Mapping[str, Any]) -> None:
        """Record field errors, typically the ones returned by the backend."""
        for field, messages in errors.items():
            if isinstance(messages, (list, tuple)):
                self.jsonapi_errors.setdefault(field, []).extend(messages)
            else:
                self.jsonapi_errors.setdefault(field, []).append(messages)

    def amend(self, data: Mapping[str, Any] | None = None, *, exists: bool = True) -> None:
        """Reconcile server-side column values onto the instance.

        With ``exists`` the instance becomes detached with an identity, i.e. persisted.
        """
        mapper = inspect(self.__class__)
        columns = {prop.key for prop in mapper.column_attrs}
        for key, value in (data or {}).items():
            if key in columns:
                setattr(self, key, value)
        self.jsonapi_errors.clear()
        if exists:
            _mark_persisted(self)


def _mark_persisted(instance: Any) -> None:
    state = inspect(instance)
    if not state.transient:
        return
    entity = SQLAlchemyEntity(instance)
    if entity.id() is None:
        logger.debug("Cannot mark %r as persisted without a primary key", instance)
        return
    make_transient_to_detached(instance)


def hydrate(model: type, data: Mapping[str, Any], *, exists: bool = True) -> Any:
    """Build a mapped instance (and its nested related instances) from exported data."""
    mapper = inspect(model)
    columns = {prop.key for prop in mapper.column_attrs}
    instance = model()
    for key, value in data.items():
        if key in mapper.relationships:
            relationship = mapper.relationships[key]
            target = relationship.mapper.class_
            if relationship.uselist:
                value = [hydrate(target, item, exists=exists) for item in value or []]
            elif value is not None:
                value = hydrate(target, value, exists=exists)
            setattr(instance, key, value)
        elif key in columns:
            setattr(instance, key, value)
    if exists:
        _mark_persisted(instance)
    return instance


def hydrate_many(
    model: type,
    records: list[Mapping[str, Any]],
    *,
    meta: Mapping[str, Any] | None = None,
    exists: bool = True,
) -> EntityCollection:
    """Hydrate every record into an ``EntityCollection`` carrying ``meta``."""
    return EntityCollection(
        (hydrate(model, record, exists=exists) for record in records), meta=meta
    )
