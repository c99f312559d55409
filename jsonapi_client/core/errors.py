"""JSON:API error objects and client-side exceptions."""

from __future__ import annotations

from typing import Any

UNSUPPORTED_ENTITY_MESSAGE = "The JSON-API serializer only supports Chaos entities."


class JSONAPIError(Exception):
    """Base class for every error raised by the payload engine and its collaborators."""


class NotSupportedEntity(JSONAPIError, TypeError):
    """Raised when a pushed value is not a recognized domain entity."""

    def __init__(self, value: Any) -> None:
        super().__init__(UNSUPPORTED_ENTITY_MESSAGE)
        self.value = value


class UnknownEntryError(JSONAPIError, KeyError):
    """Raised by ``Payload.export(id)`` when no primary entry has that id."""

    def __init__(self, entry_id: Any) -> None:
        super().__init__(entry_id)
        self.entry_id = entry_id

    def __str__(self) -> str:
        return f"Unexisting data entry for id `{self.entry_id}` in the JSON-API payload."


class InvalidDocumentError(JSONAPIError, ValueError):
    """Raised when a raw document cannot be decoded into a payload."""


class UnsupportedOperationError(JSONAPIError, NotImplementedError):
    """Raised for operations a JSON:API backend cannot provide."""


class TransportError(JSONAPIError):
    """A non-2xx response returned by the JSON:API backend."""

    def __init__(
        self,
        status: int,
        *,
        reason: str = "",
        body: str = "",
        data: Any = None,
    ) -> None:
        self.status = status
        self.reason = reason
        self.body = body
        self.data = data if isinstance(data, dict) else {}
        self.errors: list[dict[str, Any]] = list(self.data.get("errors") or [])
        super().__init__(self._message())

    def _message(self) -> str:
        error = self.data.get("error")
        if error:
            if isinstance(error, dict):
                return str(error.get("title") or self.data.get("message") or error)
            return str(error)
        if len(self.errors) == 1:
            first = self.errors[0]
            if isinstance(first, dict):
                return str(first.get("title") or first.get("message") or first)
            return str(first)
        if self.errors:
            return f"Multiple server errors has occurred ({self.status})."
        return f"A server error has occurred ({self.status})."


class JSONAPIErrorBuilder:
    """Build the error objects a payload records."""

    def error_object(
        self,
        *,
        status: int | str | None = None,
        code: int | str | None = None,
        title: str | None = None,
        detail: str | None = None,
        message: str | None = None,
        source: dict[str, Any] | None = None,
        meta: Any = None,
    ) -> dict[str, Any]:
        members = {
            "status": status,
            "code": code,
            "title": title,
            "detail": detail,
            "message": message,
            "source": source,
            "meta": meta,
        }
        error = {name: value for name, value in members.items() if value is not None}
        if not error:
            raise ValueError("An error object needs at least one member.")
        return error

    def unsupported_entity(self) -> dict[str, Any]:
        """Return the error recorded when a non-entity value is pushed."""
        return self.error_object(status=500, code=500, message=UNSUPPORTED_ENTITY_MESSAGE)

    def validation_error(self, entries: list[dict[str, Any] | None]) -> dict[str, Any]:
        """Return the aggregated validation error, one slot per pushed entity."""
        return self.error_object(
            status=422, code=422, title="Validation Error", meta=list(entries)
        )

