"""Server side — method registry, dispatch engine and HTTP adapter."""

from batchrpc.server.dispatcher import Server
from batchrpc.server.registry import MethodHandler, MethodRegistry

__all__ = [
    "MethodHandler",
    "MethodRegistry",
    "Server",
]
