"""Pydantic models for the JSON:API wire shapes handled by the payload engine."""

from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class JSONAPIResourceIdentifier(BaseModel):
    """Resource pointer: type + id (+ exists) and nothing else."""

    model_config = ConfigDict(extra="allow")

    type: Optional[str] = None
    id: Optional[Any] = None
    exists: Optional[bool] = None

    def key(self) -> Tuple[Optional[str], Any]:
        return (self.type, self.id)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class JSONAPIRelationship(BaseModel):
    """Relationship object: a pointer, a list of pointers, and optional links."""

    model_config = ConfigDict(extra="allow")

    data: Union[JSONAPIResourceIdentifier, List[JSONAPIResourceIdentifier], None] = None
    links: Optional[Dict[str, Any]] = None

    def pointers(self) -> List[JSONAPIResourceIdentifier]:
        """Return the relationship data as a list, whatever its arity."""
        if self.data is None:
            return []
        if isinstance(self.data, list):
            return list(self.data)
        return [self.data]


class JSONAPIResource(BaseModel):
    """Resource object with attributes and relationships."""

    model_config = ConfigDict(extra="allow")

    type: Optional[str] = None
    id: Optional[Any] = None
    exists: Optional[bool] = None
    attributes: Optional[Dict[str, Any]] = None
    relationships: Optional[Dict[str, JSONAPIRelationship]] = None
    links: Optional[Dict[str, Any]] = None

    def key(self) -> Tuple[Optional[str], Any]:
        return (self.type, self.id)

    def identifier(self) -> JSONAPIResourceIdentifier:
        """Return the bare pointer to this resource."""
        pointer = JSONAPIResourceIdentifier(type=self.type)
        if self.id is not None:
            pointer.id = self.id
        if self.exists is not None:
            pointer.exists = self.exists
        return pointer

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class JSONAPIDocument(BaseModel):
    """Top-level JSON:API document, with missing members defaulting to empty."""

    model_config = ConfigDict(extra="allow")

    jsonapi: Dict[str, Any] = Field(default_factory=dict)
    meta: Dict[str, Any] = Field(default_factory=dict)
    links: Dict[str, Any] = Field(default_factory=dict)
    data: Union[JSONAPIResource, List[JSONAPIResource]] = Field(default_factory=list)
    errors: List[Dict[str, Any]] = Field(default_factory=list)
    included: List[JSONAPIResource] = Field(default_factory=list)

    @field_validator("jsonapi", "meta", "links", mode="before")
    @classmethod
    def _default_mapping(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else {}

    @field_validator("errors", "included", mode="before")
    @classmethod
    def _default_sequence(cls, value: Any) -> Any:
        return value if isinstance(value, list) else []

    @field_validator("data", mode="before")
    @classmethod
    def _default_data(cls, value: Any) -> Any:
        return [] if value is None else value

    def resources(self) -> List[JSONAPIResource]:
        """Return the primary data as a list, whatever its arity."""
        if isinstance(self.data, list):
            return list(self.data)
        return [self.data]
