import asyncio

import pytest

from jsonapi_client.config import ConnectionConfig
from jsonapi_client.core.errors import TransportError
from jsonapi_client.transport import JSONAPIConnection


def test_url_joins_base_path():
    connection = JSONAPIConnection(ConnectionConfig(host="api.example.com", base_path="/v1"))

    assert connection.url("/galleries") == "http://api.example.com/v1/galleries"
    assert connection.url("galleries/1") == "http://api.example.com/v1/galleries/1"


def test_get_sends_bracketed_query_string(connection, backend):
    document = asyncio.run(
        connection.get("/galleries", {"page": {"offset": 2, "limit": 3}, "filter": {}})
    )

    assert [item["id"] for item in document["data"]] == [3, 4, 5]
    assert document["meta"] == {"count": 13}

    request = backend.state.requests[-1]
    assert request["params"] == {"page[offset]": "2", "page[limit]": "3"}
    assert request["headers"]["accept"] == "application/vnd.api+json"
    assert connection.last_request()["method"] == "GET"
    assert connection.last_response()["status"] == 200


def test_post_sends_json_body_and_records_last_insert(connection, backend):
    body = {"data": {"type": "Gallery", "attributes": {"name": "New"}}}

    document = asyncio.run(connection.post("/galleries", body))

    assert backend.state.requests[-1]["json"] == body
    assert backend.state.requests[-1]["headers"]["content-type"] == "application/vnd.api+json"
    assert document["data"]["id"] == 100
    assert connection.last_insert() == document["data"]


def test_post_collection_does_not_record_last_insert(connection):
    body = {"data": [{"type": "Gallery", "attributes": {"name": "New"}}]}

    asyncio.run(connection.post("/galleries", body))

    assert connection.last_insert() is None


def test_error_response_raises_transport_error(connection):
    with pytest.raises(TransportError) as exc_info:
        asyncio.run(connection.get("/galleries/99"))

    error = exc_info.value
    assert error.status == 404
    assert str(error) == "Gallery `99` not found"
    assert error.errors == [{"status": "404", "title": "Gallery `99` not found"}]
    assert connection.last_response()["status"] == 404


def test_multiple_server_errors(connection):
    with pytest.raises(TransportError, match=r"Multiple server errors has occurred \(500\)\."):
        asyncio.run(connection.get("/broken"))


def test_bearer_and_clear_auth(connection):
    connection.bearer("secret")
    assert asyncio.run(connection.get("/whoami")) == {"authorization": "Bearer secret"}

    connection.clear_auth()
    assert asyncio.run(connection.get("/whoami")) == {"authorization": None}


def test_empty_response_body(connection):
    asyncio.run(connection.delete("/galleries", {"data": [{"type": "Gallery", "id": 1}]}))

    assert connection.last_response()["status"] == 204
    assert connection.last_response()["data"] == {}
