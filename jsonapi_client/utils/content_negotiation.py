"""Helpers for JSON:API content negotiation."""

from __future__ import annotations

from typing import Any

from jsonapi_client.config import JSONAPI_MEDIA_TYPE


def _split_parameters(value: str) -> list[str]:
    return [part.strip() for part in value.split(";") if part.strip()]


def _parse_param_value(value: str) -> list[str]:
    if value.startswith('"') and value.endswith('"'):
        value = value[1:-1]
    if not value:
        return []
    return value.split(" ")


def parse_jsonapi_media_type(content_type: str) -> dict[str, Any]:
    """Parse a Content-Type header into its media type and ext/profile parameters."""
    parts = _split_parameters(content_type or "")
    params: dict[str, Any] = {
        "media_type": parts[0].lower() if parts else "",
        "ext": [],
        "profile": [],
    }
    for param in parts[1:]:
        name, sep, raw_value = param.partition("=")
        if not sep:
            continue
        name = name.strip().lower()
        if name in {"ext", "profile"}:
            params[name] = _parse_param_value(raw_value.strip())
        else:
            params.setdefault("other_params", {})[name] = raw_value.strip()
    return params


def jsonapi_headers(headers: dict[str, str] | None = None) -> dict[str, str]:
    """Return ``headers`` with the JSON:API Accept and Content-Type set."""
    merged = dict(headers or {})
    merged["Accept"] = JSONAPI_MEDIA_TYPE
    merged["Content-Type"] = JSONAPI_MEDIA_TYPE
    return merged


def is_jsonapi_response(content_type: str) -> bool:
    """Return True when a response Content-Type is the JSON:API media type."""
    return parse_jsonapi_media_type(content_type)["media_type"] == JSONAPI_MEDIA_TYPE
