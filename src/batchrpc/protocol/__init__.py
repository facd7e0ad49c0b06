"""Message model — JSON-RPC 2.0 envelopes, error codes and error types."""

from batchrpc.protocol.errors import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    SERVER_ERROR,
    BatchRpcError,
    ConfigError,
    InternalError,
    InvalidParamsError,
    InvalidRequestError,
    MethodNotFoundError,
    ParseError,
    ResultDecodeError,
    RpcError,
    ServerError,
)
from batchrpc.protocol.models import JSONRPC_VERSION, ErrorObject, Request, Response

__all__ = [
    "INTERNAL_ERROR",
    "INVALID_PARAMS",
    "INVALID_REQUEST",
    "JSONRPC_VERSION",
    "METHOD_NOT_FOUND",
    "PARSE_ERROR",
    "SERVER_ERROR",
    "BatchRpcError",
    "ConfigError",
    "ErrorObject",
    "InternalError",
    "InvalidParamsError",
    "InvalidRequestError",
    "MethodNotFoundError",
    "ParseError",
    "Request",
    "Response",
    "ResultDecodeError",
    "RpcError",
    "ServerError",
]
