"""Error codes and exception types shared by the client and the server."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from batchrpc.protocol.models import ErrorObject

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603
SERVER_ERROR = -32000

ERROR_MESSAGES: dict[int, str] = {
    PARSE_ERROR: "Parse error",
    INVALID_REQUEST: "Invalid Request",
    METHOD_NOT_FOUND: "Method not found",
    INVALID_PARAMS: "Invalid params",
    INTERNAL_ERROR: "Internal error",
    SERVER_ERROR: "Server error",
}


class BatchRpcError(Exception):
    """Base error for everything raised by batchrpc."""


class RpcError(BatchRpcError):
    """A JSON-RPC error object, raised by handlers and surfaced to callers.

    Only :attr:`code` is contractual; :attr:`data` is free-form detail.
    Handlers may raise this directly with any application-defined code.
    """

    code: int = INTERNAL_ERROR

    def __init__(
        self,
        message: str | None = None,
        data: Any = None,
        *,
        code: int | None = None,
    ) -> None:
        if code is not None:
            self.code = code
        self.message = message if message is not None else ERROR_MESSAGES.get(self.code, "")
        self.data = data
        super().__init__(f'code: {self.code}; message: "{self.message}"')

    def to_object(self) -> ErrorObject:
        """Convert to the wire model."""
        from batchrpc.protocol.models import ErrorObject

        return ErrorObject(code=self.code, message=self.message, data=self.data)

    @classmethod
    def from_object(cls, error: ErrorObject) -> RpcError:
        """Build the most specific error class for a wire error object."""
        error_cls = _BY_CODE.get(error.code, RpcError)
        return error_cls(error.message, error.data, code=error.code)


class ParseError(RpcError):
    """Invalid JSON was received."""

    code = PARSE_ERROR


class InvalidRequestError(RpcError):
    """The payload is JSON but not a valid Request object."""

    code = INVALID_REQUEST


class MethodNotFoundError(RpcError):
    """No handler is registered for the method."""

    code = METHOD_NOT_FOUND


class InvalidParamsError(RpcError):
    """The params could not be decoded into the handler's declared type."""

    code = INVALID_PARAMS


class InternalError(RpcError):
    """Internal JSON-RPC error."""

    code = INTERNAL_ERROR


class ServerError(RpcError):
    """The transport failed to reach the remote peer."""

    code = SERVER_ERROR


_BY_CODE: dict[int, type[RpcError]] = {
    cls.code: cls
    for cls in (
        ParseError,
        InvalidRequestError,
        MethodNotFoundError,
        InvalidParamsError,
        InternalError,
        ServerError,
    )
}


class ResultDecodeError(BatchRpcError):
    """A successful result could not be decoded into the caller's type.

    This is a local fault and never an :class:`RpcError`.
    """

    def __init__(self, method: str, detail: str = "") -> None:
        self.method = method
        self.detail = detail
        msg = f"Cannot decode result of {method}"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class ConfigError(BatchRpcError):
    """Raised when a configuration file fails reading, parsing or validation."""
