"""Assembly of top-level JSON:API documents."""

from typing import Any, Iterable, Mapping

ENVELOPE_MEMBERS = ("jsonapi", "meta", "links")


class JSONAPIDocumentBuilder:
    """Build the wire document of a payload.

    ``errors`` and primary data are mutually exclusive: a non-empty errors
    list replaces ``data`` and ``included``. Envelope members are only
    emitted when they carry something.
    """

    def build(
        self,
        data: Any,
        *,
        included: Iterable[Mapping[str, Any]] | None = None,
        errors: Iterable[Mapping[str, Any]] | None = None,
        jsonapi: Mapping[str, Any] | None = None,
        links: Mapping[str, Any] | None = None,
        meta: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        envelope = dict(zip(ENVELOPE_MEMBERS, (jsonapi, meta, links)))
        document: dict[str, Any] = {
            name: dict(value) for name, value in envelope.items() if value
        }
        errors = list(errors or [])
        if errors:
            document.update(self.build_error(errors))
        else:
            document.update(self.build_data(data, included=included))
        return document

    def build_data(
        self,
        data: Any,
        *,
        included: Iterable[Mapping[str, Any]] | None = None,
    ) -> dict[str, Any]:
        """Return the ``data`` member (object or array) and a non-empty ``included``."""
        if isinstance(data, list):
            document: dict[str, Any] = {"data": [dict(item) for item in data]}
        else:
            document = {"data": dict(data)}
        side_table = [dict(item) for item in included or []]
        if side_table:
            document["included"] = side_table
        return document

    def build_error(self, errors: Iterable[Mapping[str, Any]]) -> dict[str, Any]:
        return {"errors": [dict(error) for error in errors]}

