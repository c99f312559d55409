"""Configuration models for payloads and backend connections."""

from __future__ import annotations

import os
from typing import Any, Callable, Dict, Mapping, Optional

from pydantic import BaseModel, Field

LinkBuilder = Callable[[str, Dict[str, Any]], str]
AttributeExporter = Callable[[Any], Mapping[str, Any]]

JSONAPI_MEDIA_TYPE = "application/vnd.api+json"


class PayloadConfig(BaseModel):
    """Settings shared by the flattener and the store of one payload.

    ``key`` is the default primary key name injected by ``export()``;
    ``keys`` overrides it per resource type (e.g. ``{"posts": "uid"}``).
    """

    key: str = "id"
    keys: Dict[str, str] = Field(default_factory=dict)
    link: Optional[LinkBuilder] = None
    exporter: Optional[AttributeExporter] = None

    def key_for(self, resource_type: Optional[str]) -> str:
        return self.keys.get(resource_type or "", self.key)


class ConnectionConfig(BaseModel):
    """Where and how to reach the JSON:API backend."""

    scheme: str = "http"
    host: str = "localhost"
    port: Optional[int] = None
    base_path: str = "/"
    headers: Dict[str, str] = Field(default_factory=dict)
    timeout: float = 30.0

    @property
    def base_url(self) -> str:
        netloc = self.host if self.port is None else f"{self.host}:{self.port}"
        return f"{self.scheme}://{netloc}/{self.base_path.strip('/')}".rstrip("/")

    @classmethod
    def from_env(cls) -> "ConnectionConfig":
        """Load the connection settings from ``JSONAPI_*`` environment variables."""
        port = os.getenv("JSONAPI_PORT")
        return cls(
            scheme=os.getenv("JSONAPI_SCHEME", "http"),
            host=os.getenv("JSONAPI_HOST", "localhost"),
            port=int(port) if port else None,
            base_path=os.getenv("JSONAPI_BASE_PATH", "/"),
            timeout=float(os.getenv("JSONAPI_TIMEOUT", "30")),
        )
