"""Tests for the Starlette HTTP adapter."""

from __future__ import annotations

from starlette.testclient import TestClient

from batchrpc.server.dispatcher import Server
from batchrpc.server.http import create_app


def _client(path: str = "/") -> TestClient:
    server = Server()
    server.handle_func("add", lambda p: p[0] + p[1], params_type=tuple[int, int])
    return TestClient(create_app(server, path=path))


class TestHttpAdapter:
    def test_post_dispatches(self) -> None:
        response = _client().post("/", content=b'{"jsonrpc":"2.0","id":1,"method":"add","params":[2,3]}')
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/json"
        assert response.json() == {"jsonrpc": "2.0", "id": 1, "result": 5}

    def test_batch(self) -> None:
        response = _client().post(
            "/",
            content=b'[{"jsonrpc":"2.0","id":1,"method":"add","params":[1,1]},'
            b'{"jsonrpc":"2.0","id":2,"method":"add","params":[2,2]}]',
        )
        assert [r["result"] for r in response.json()] == [2, 4]

    def test_notification_has_empty_body(self) -> None:
        response = _client().post("/", content=b'{"jsonrpc":"2.0","method":"add","params":[1,1]}')
        assert response.status_code == 200
        assert response.content == b""

    def test_errors_use_http_200(self) -> None:
        response = _client().post("/", content=b"not json")
        assert response.status_code == 200
        assert response.json()["error"]["code"] == -32700

    def test_get_is_empty_200(self) -> None:
        response = _client().get("/")
        assert response.status_code == 200
        assert response.content == b""

    def test_custom_path(self) -> None:
        client = _client("/rpc")
        assert client.post("/rpc", content=b'{"jsonrpc":"2.0","id":1,"method":"add","params":[0,1]}').json()["result"] == 1
        assert client.post("/", content=b"{}").status_code == 404
