"""Async HTTP connection to a JSON:API backend."""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from jsonapi_client.config import ConnectionConfig
from jsonapi_client.core.errors import TransportError
from jsonapi_client.utils.content_negotiation import is_jsonapi_response, jsonapi_headers
from jsonapi_client.utils.query_params import stringify_query_params

logger = logging.getLogger(__name__)


class JSONAPIConnection:
    """Send JSON:API documents over HTTP and decode the responses.

    One ``httpx.AsyncClient`` is opened per request. Passing ``transport``
    lets the connection talk to an in-process ASGI app instead of the network.
    """

    def __init__(
        self,
        config: ConnectionConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or ConnectionConfig()
        self.transport = transport
        self.headers: dict[str, str] = dict(self.config.headers)
        self._last_insert: dict[str, Any] | None = None
        self._last_request: dict[str, Any] | None = None
        self._last_response: dict[str, Any] | None = None

    def bearer(self, token: str) -> None:
        """Send ``Authorization: Bearer <token>`` with every request."""
        self.headers["Authorization"] = f"Bearer {token}"

    def clear_auth(self) -> None:
        self.headers.pop("Authorization", None)

    def url(self, path: str) -> str:
        return f"{self.config.base_url.rstrip('/')}/{path.lstrip('/')}"

    async def send(self, method: str, path: str, data: Any = None) -> Any:
        """Send a request and return the decoded response body.

        For GET ``data`` is the query string, for other verbs it is the JSON body.
        Raises ``TransportError`` on non-2xx responses.
        """
        method = method.upper()
        headers = jsonapi_headers(self.headers)
        params = None
        body = None
        if method == "GET":
            params = stringify_query_params(data or {})
        elif data is not None:
            body = json.dumps(data)

        url = self.url(path)
        logger.debug("%s %s", method, url)
        async with httpx.AsyncClient(
            timeout=self.config.timeout, transport=self.transport
        ) as client:
            response = await client.request(
                method, url, params=params, content=body, headers=headers
            )

        self._last_request = {
            "method": method,
            "url": str(response.request.url),
            "headers": headers,
            "data": data,
            "body": body,
        }
        text = response.text
        try:
            decoded = response.json() if text else {}
        except ValueError:
            decoded = {"error": text}
        self._last_response = {
            "status": response.status_code,
            "reason": response.reason_phrase,
            "data": decoded,
            "body": text,
        }
        if text and not is_jsonapi_response(response.headers.get("content-type", "")):
            logger.debug("Response to %s %s is not a JSON:API document", method, url)

        if not response.is_success:
            logger.warning("%s %s failed with status %s", method, url, response.status_code)
            raise TransportError(
                response.status_code,
                reason=response.reason_phrase,
                body=text,
                data=decoded,
            )
        if method == "POST" and isinstance(decoded, dict) and isinstance(decoded.get("data"), dict):
            self._last_insert = decoded["data"]
        return decoded

    async def get(self, path: str, data: Any = None) -> Any:
        return await self.send("GET", path, data)

    async def post(self, path: str, data: Any = None) -> Any:
        return await self.send("POST", path, data)

    async def patch(self, path: str, data: Any = None) -> Any:
        return await self.send("PATCH", path, data)

    async def delete(self, path: str, data: Any = None) -> Any:
        return await self.send("DELETE", path, data)

    def last_insert(self) -> dict[str, Any] | None:
        """Return the resource object of the last POST response, when singular."""
        return self._last_insert

    def last_request(self) -> dict[str, Any] | None:
        return self._last_request

    def last_response(self) -> dict[str, Any] | None:
        return self._last_response
