"""Client transports — byte-in/byte-out channels to a JSON-RPC server.

Each transport satisfies the :class:`ClientTransport` protocol. Transport
faults are never raised: they come back as a synthesized JSON-RPC error
response so callers see them through the same channel as a remote error.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

import httpx

from batchrpc.protocol.errors import INTERNAL_ERROR, INVALID_REQUEST, SERVER_ERROR
from batchrpc.protocol.models import error_response, is_valid_json

if TYPE_CHECKING:
    from batchrpc.server.dispatcher import Server

logger = logging.getLogger(__name__)

DEFAULT_HTTP_TIMEOUT = 30.0


@runtime_checkable
class ClientTransport(Protocol):
    """Abstract transport for JSON-RPC payloads.

    ``execute`` must be safe to await concurrently from several tasks.
    """

    async def execute(self, payload: bytes) -> bytes: ...
    async def close(self) -> None: ...


def _synthesize(code: int, detail: str) -> bytes:
    return error_response(code, data=detail).model_dump_json().encode()


class HttpTransport:
    """POSTs payloads to an HTTP endpoint with ``httpx``.

    Failures are classified by the stage that failed:

    * the outbound payload is not valid JSON → ``-32600 Invalid Request``
      (nothing is sent);
    * the request could not be delivered, or the server answered with an
      HTTP error and no JSON body → ``-32000 Server error``;
    * the response body is not valid JSON → ``-32603 Internal error``.

    An empty response body is returned as ``b""``: the server sends nothing
    back for notifications.
    """

    def __init__(
        self,
        endpoint: str,
        *,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        headers: dict[str, str] | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._endpoint = endpoint
        self._timeout = timeout
        self._headers = {"Content-Type": "application/json", **(headers or {})}
        self._client = client
        self._owns_client = client is None

    @property
    def endpoint(self) -> str:
        return self._endpoint

    async def __aenter__(self) -> HttpTransport:
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.close()

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def execute(self, payload: bytes) -> bytes:
        """POST *payload* and return the raw response body."""
        if not is_valid_json(payload):
            logger.warning("Refusing to send malformed payload to %s", self._endpoint)
            return _synthesize(INVALID_REQUEST, payload.decode(errors="replace"))

        try:
            response = await self._http().post(
                self._endpoint,
                content=payload,
                headers=self._headers,
            )
        except httpx.HTTPError as exc:
            logger.warning("POST %s failed: %s", self._endpoint, exc)
            return _synthesize(SERVER_ERROR, str(exc) or exc.__class__.__name__)

        body = response.content
        if not body.strip():
            if response.is_error:
                return _synthesize(SERVER_ERROR, f"HTTP {response.status_code}")
            return b""

        if not is_valid_json(body):
            if response.is_error:
                return _synthesize(SERVER_ERROR, f"HTTP {response.status_code}")
            logger.warning("Unparseable response body from %s", self._endpoint)
            return _synthesize(INTERNAL_ERROR, body.decode(errors="replace"))

        return body

    async def close(self) -> None:
        """Close the underlying HTTP client if this transport created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None


class LoopbackTransport:
    """Feeds payloads straight into an in-process :class:`Server`."""

    def __init__(self, server: Server) -> None:
        self._server = server

    async def execute(self, payload: bytes) -> bytes:
        return await self._server.handle(payload)

    async def close(self) -> None:
        return None


def create_transport(endpoint: str, **kwargs: Any) -> ClientTransport:
    """Build the transport for *endpoint* (only ``http(s)://`` is supported)."""
    if endpoint.startswith(("http://", "https://")):
        return HttpTransport(endpoint, **kwargs)
    msg = f"Unsupported endpoint scheme: {endpoint}"
    raise ValueError(msg)
