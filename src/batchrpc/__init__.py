"""batchrpc — JSON-RPC 2.0 client and server with request batching."""

from __future__ import annotations

from typing import TYPE_CHECKING

__version__ = "0.1.0"

if TYPE_CHECKING:
    from batchrpc.client.client import Client as Client
    from batchrpc.protocol.errors import RpcError as RpcError
    from batchrpc.protocol.models import Request as Request
    from batchrpc.protocol.models import Response as Response
    from batchrpc.server.dispatcher import Server as Server

_EXPORTS = {
    "Client": "batchrpc.client.client",
    "Server": "batchrpc.server.dispatcher",
    "Request": "batchrpc.protocol.models",
    "Response": "batchrpc.protocol.models",
    "RpcError": "batchrpc.protocol.errors",
}


def __getattr__(name: str) -> object:
    module_path = _EXPORTS.get(name)
    if module_path is not None:
        import importlib

        mod = importlib.import_module(module_path)
        return getattr(mod, name)
    raise AttributeError(f"module 'batchrpc' has no attribute {name!r}")
