"""Tests for RPC error types."""

import pytest

from batchrpc.protocol.errors import (
    BatchRpcError,
    InternalError,
    InvalidParamsError,
    InvalidRequestError,
    MethodNotFoundError,
    ParseError,
    ResultDecodeError,
    RpcError,
    ServerError,
)
from batchrpc.protocol.models import ErrorObject


class TestRpcError:
    def test_default_message_from_code(self) -> None:
        err = MethodNotFoundError()
        assert err.code == -32601
        assert err.message == "Method not found"
        assert err.data is None

    def test_str_format(self) -> None:
        err = InvalidParamsError(data="bad")
        assert str(err) == 'code: -32602; message: "Invalid params"'

    def test_custom_code(self) -> None:
        err = RpcError("Insufficient funds", {"balance": 3}, code=-32050)
        assert err.code == -32050
        assert err.message == "Insufficient funds"

    def test_custom_code_does_not_leak_to_class(self) -> None:
        RpcError("x", code=-1)
        assert RpcError.code == -32603

    def test_hierarchy(self) -> None:
        for cls in (ParseError, InvalidRequestError, MethodNotFoundError, InvalidParamsError, InternalError, ServerError):
            assert issubclass(cls, RpcError)
        assert issubclass(RpcError, BatchRpcError)
        assert not issubclass(ResultDecodeError, RpcError)

    def test_to_object(self) -> None:
        obj = ParseError(data="Empty request").to_object()
        assert obj == ErrorObject(code=-32700, message="Parse error", data="Empty request")


class TestFromObject:
    @pytest.mark.parametrize(
        ("code", "cls"),
        [
            (-32700, ParseError),
            (-32600, InvalidRequestError),
            (-32601, MethodNotFoundError),
            (-32602, InvalidParamsError),
            (-32603, InternalError),
            (-32000, ServerError),
        ],
    )
    def test_reserved_codes_map_to_subclasses(self, code: int, cls: type[RpcError]) -> None:
        err = RpcError.from_object(ErrorObject(code=code, message="m"))
        assert type(err) is cls
        assert err.code == code

    def test_application_code_keeps_message_and_data(self) -> None:
        err = RpcError.from_object(ErrorObject(code=42, message="custom", data=[1]))
        assert type(err) is RpcError
        assert err.code == 42
        assert err.message == "custom"
        assert err.data == [1]


class TestResultDecodeError:
    def test_message(self) -> None:
        err = ResultDecodeError("add", "not an int")
        assert err.method == "add"
        assert "Cannot decode result of add" in str(err)
        assert "not an int" in str(err)
