"""Helpers for building JSON:API query strings."""

from __future__ import annotations

from typing import Any, Mapping, Sequence


def _join_csv(values: Sequence[Any]) -> str:
    return ",".join(str(value) for value in values if value not in (None, ""))


def stringify_query_params(data: Mapping[str, Any], prefix: str | None = None) -> list[tuple[str, str]]:
    """Flatten nested mappings into bracketed query pairs, e.g. ``page[offset]=0``."""
    pairs: list[tuple[str, str]] = []
    for name, value in data.items():
        key = f"{prefix}[{name}]" if prefix else str(name)
        if isinstance(value, Mapping):
            pairs.extend(stringify_query_params(value, key))
        elif isinstance(value, (list, tuple)):
            pairs.append((key, _join_csv(value)))
        elif isinstance(value, bool):
            pairs.append((key, "1" if value else "0"))
        elif value is not None:
            pairs.append((key, str(value)))
    return pairs


def build_query_params(
    *,
    include: Sequence[str] | None = None,
    fields: Mapping[str, Sequence[str]] | None = None,
    sort: Sequence[Mapping[str, str]] | None = None,
    page: Mapping[str, Any] | None = None,
    filter: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Assemble the JSON:API query parameter families into one nested mapping.

    ``sort`` entries are ``{"field": ..., "direction": "asc" | "desc"}``;
    descending fields are prefixed with ``-``.
    """
    params: dict[str, Any] = {}
    if filter:
        params["filter"] = dict(filter)
    if include:
        params["include"] = _join_csv(include)
    if fields:
        params["fields"] = {
            resource_type: _join_csv(names) for resource_type, names in fields.items() if names
        }
    if sort:
        params["sort"] = _join_csv(
            [
                ("-" if entry.get("direction", "asc").lower() == "desc" else "") + entry["field"]
                for entry in sort
            ]
        )
    if page:
        params["page"] = dict(page)
    return params
