"""Tests for ``batchrpc send`` CLI command."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

from click.testing import CliRunner

from batchrpc.cli import main
from batchrpc.protocol.models import ErrorObject, Request, Response


def _mock_client(mock_client_cls: MagicMock, result: object) -> MagicMock:
    instance = mock_client_cls.http.return_value
    instance.__aenter__ = AsyncMock(return_value=instance)
    instance.__aexit__ = AsyncMock(return_value=False)
    instance.raw_request = AsyncMock(return_value=result)
    return instance


class TestSend:
    def test_send_batch_prints_table(self) -> None:
        responses = [
            Response(id=1, result=3),
            Response(id=2, error=ErrorObject(code=-32601, message="Method not found")),
        ]
        batch = b'[{"jsonrpc":"2.0","id":1,"method":"add","params":[1,2]},{"jsonrpc":"2.0","id":2,"method":"x"}]'

        with patch("batchrpc.client.client.Client") as mock_client_cls:
            instance = _mock_client(mock_client_cls, responses)

            result = CliRunner().invoke(main, ["send", "http://rpc.test/"], input=batch)

            assert result.exit_code == 0
            assert "Responses" in result.output
            assert "error -32601" in result.output
            sent = instance.raw_request.await_args.args[0]
            assert isinstance(sent, list)
            assert [r.id for r in sent] == [1, 2]

    def test_send_single_as_json(self) -> None:
        with patch("batchrpc.client.client.Client") as mock_client_cls:
            instance = _mock_client(mock_client_cls, Response(id=1, result="pong"))

            result = CliRunner().invoke(
                main,
                ["send", "http://rpc.test/", "--json"],
                input=b'{"jsonrpc":"2.0","id":1,"method":"ping"}',
            )

            assert result.exit_code == 0
            assert json.loads(result.output) == {"jsonrpc": "2.0", "id": 1, "result": "pong"}
            assert isinstance(instance.raw_request.await_args.args[0], Request)

    def test_send_from_file(self, tmp_path: Path) -> None:
        f = tmp_path / "req.json"
        f.write_bytes(b'[{"jsonrpc":"2.0","method":"log"}]')

        with patch("batchrpc.client.client.Client") as mock_client_cls:
            _mock_client(mock_client_cls, [])

            result = CliRunner().invoke(main, ["send", "http://rpc.test/", str(f)])

            assert result.exit_code == 0
            assert "No responses" in result.output

    def test_invalid_request(self) -> None:
        result = CliRunner().invoke(main, ["send", "http://rpc.test/"], input=b'{"id":1}')
        assert result.exit_code == 1
        assert "Invalid request" in result.output
