"""Client side — batching client and its transports."""

from batchrpc.client.client import Client
from batchrpc.client.transport import ClientTransport, HttpTransport, LoopbackTransport, create_transport

__all__ = [
    "Client",
    "ClientTransport",
    "HttpTransport",
    "LoopbackTransport",
    "create_transport",
]
