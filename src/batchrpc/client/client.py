"""Client — issues JSON-RPC calls and notifications, coalescing them into batches.

Calls made with a positive ``timeout_ms`` join a *batch window*: the first
such call opens the window and starts a single background task; every call
that arrives before the window closes rides along in the same outbound
batch. When the window closes the task sends the batch, then hands each
response to the caller waiting on its id.
"""

from __future__ import annotations

import asyncio
import functools
import itertools
import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, overload

from pydantic import TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError, to_jsonable_python

from batchrpc.client.transport import DEFAULT_HTTP_TIMEOUT, ClientTransport, HttpTransport
from batchrpc.protocol.errors import INTERNAL_ERROR, BatchRpcError, ConfigError, ResultDecodeError, RpcError
from batchrpc.protocol.models import (
    RESPONSE_LIST,
    Request,
    RequestId,
    Response,
    encode_requests,
    error_response,
)
from batchrpc.utils.telemetry import (
    ATTR_BATCH,
    ATTR_BATCH_SIZE,
    ATTR_BATCH_WINDOW_MS,
    ATTR_PAYLOAD_BYTES,
    get_tracer,
    set_rpc_attributes,
)

if TYPE_CHECKING:
    from batchrpc.config import ClientSettings

logger = logging.getLogger(__name__)

_tracer = get_tracer(__name__)


@functools.lru_cache(maxsize=256)
def _adapter(result_type: Any) -> TypeAdapter[Any]:
    return TypeAdapter(result_type)


class Client:
    """Async JSON-RPC 2.0 client over a :class:`ClientTransport`.

    Usage::

        async with Client.http("http://localhost:8000/", batch_window_ms=20) as client:
            total = await client.call("add", [2, 3], result_type=int)
            await client.notify("log", {"line": "hello"})

    ``batch_window_ms`` is the default coalescing window for calls that do
    not pass ``timeout_ms``; ``0`` sends every call on its own.
    """

    def __init__(self, transport: ClientTransport, *, batch_window_ms: int = 0) -> None:
        if batch_window_ms < 0:
            msg = "batch_window_ms must be >= 0"
            raise ValueError(msg)
        self._transport = transport
        self._batch_window_ms = batch_window_ms
        self._ids = itertools.count(1)

        self._batch_lock = asyncio.Lock()
        self._pending: list[Request] = []
        self._waiters: dict[RequestId, asyncio.Future[Response]] = {}
        self._batch_task: asyncio.Task[None] | None = None

    @classmethod
    def http(
        cls,
        endpoint: str,
        *,
        batch_window_ms: int = 0,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        headers: dict[str, str] | None = None,
    ) -> Client:
        """Build a client that POSTs to *endpoint*."""
        transport = HttpTransport(endpoint, timeout=timeout, headers=headers)
        return cls(transport, batch_window_ms=batch_window_ms)

    @classmethod
    def from_settings(cls, settings: ClientSettings) -> Client:
        """Build an HTTP client from :class:`~batchrpc.config.ClientSettings`."""
        if not settings.endpoint:
            msg = "client settings must specify 'endpoint'"
            raise ConfigError(msg)
        return cls.http(
            settings.endpoint,
            batch_window_ms=settings.batch_window_ms,
            timeout=settings.http_timeout,
            headers=dict(settings.headers),
        )

    async def __aenter__(self) -> Client:
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.close()

    @property
    def transport(self) -> ClientTransport:
        return self._transport

    @property
    def batch_in_flight(self) -> bool:
        """``True`` while a batch window is open or being flushed."""
        return self._batch_task is not None

    async def close(self) -> None:
        """Let any open batch window drain, then close the transport."""
        task = self._batch_task
        if task is not None:
            await task
        await self._transport.close()

    # ------------------------------------------------------------------
    # Raw exchange
    # ------------------------------------------------------------------

    @overload
    async def raw_request(self, request: Request) -> Response: ...
    @overload
    async def raw_request(self, request: Sequence[Request]) -> list[Response]: ...

    async def raw_request(self, request: Request | Sequence[Request]) -> Response | list[Response]:
        """Send one request or a batch and decode the matching shape.

        Never raises for transport or decode faults: a failed batch yields
        one error response per request that carries an id, a failed single
        request yields one error response. Input that is neither a Request
        nor a sequence of Requests is not sent; it is answered the same way.
        """
        is_batch = not isinstance(request, Request)
        if not is_batch:
            requests = [request]
        elif isinstance(request, Sequence) and not isinstance(request, (str, bytes)):
            requests = list(request)
        else:
            return self._reject_unknown(request, [])

        unknown = [r for r in requests if not isinstance(r, Request)]
        if unknown:
            return self._reject_unknown(unknown[0], requests)

        with _tracer.start_as_current_span("rpc.client.raw_request") as span:
            set_rpc_attributes(
                span,
                method=None if is_batch else requests[0].method,
                request_id=None if is_batch else requests[0].id,
                **{ATTR_BATCH: is_batch, ATTR_BATCH_SIZE: len(requests)},
            )
            try:
                payload = encode_requests(requests if is_batch else requests[0])
                span.set_attribute(ATTR_PAYLOAD_BYTES, len(payload))
                raw = await self._transport.execute(payload)
                if is_batch:
                    return self._decode_batch(raw, requests)
                return Response.model_validate_json(raw)
            except Exception as exc:
                logger.warning("JSON-RPC exchange failed: %s", exc)
                if is_batch:
                    return [
                        error_response(INTERNAL_ERROR, data=str(exc), request_id=r.id)
                        for r in requests
                        if r.id is not None
                    ]
                return error_response(INTERNAL_ERROR, data=str(exc), request_id=requests[0].id)

    @staticmethod
    def _reject_unknown(item: object, requests: list[Any]) -> Response | list[Response]:
        detail = f"Unknown request type: {type(item).__name__}"
        logger.warning("Not sending JSON-RPC payload: %s", detail)
        if not requests:
            return error_response(INTERNAL_ERROR, data=detail)
        return [
            error_response(INTERNAL_ERROR, data=detail, request_id=r.id)
            for r in requests
            if isinstance(r, Request) and r.id is not None
        ]

    @staticmethod
    def _decode_batch(raw: bytes, requests: list[Request]) -> list[Response]:
        if not raw.strip() and all(r.is_notification for r in requests):
            return []
        try:
            return RESPONSE_LIST.validate_json(raw)
        except ValidationError:
            # A single error object (e.g. a transport fault) answers the whole batch.
            single = Response.model_validate_json(raw)
            if single.error is None:
                raise
            return [
                Response(id=r.id, error=single.error)
                for r in requests
                if r.id is not None
            ]

    # ------------------------------------------------------------------
    # Calls and notifications
    # ------------------------------------------------------------------

    async def request(
        self,
        method: str,
        params: Any = None,
        *,
        result_type: Any = None,
        notification: bool = False,
        timeout_ms: int | None = None,
    ) -> Any:
        """Issue a call (or a notification) and return its decoded result.

        Args:
            method: Remote method name.
            params: JSON-serialisable params (pydantic models are accepted).
            result_type: Type the result is validated into; ``None`` returns
                the plain JSON value.
            notification: Send without an id and do not wait for an answer.
            timeout_ms: Batch window; ``0`` sends immediately, ``None`` uses
                the client's default.

        Raises:
            RpcError: The response carried an error object.
            ResultDecodeError: The result does not fit *result_type*.
        """
        window_ms = self._batch_window_ms if timeout_ms is None else timeout_ms
        if window_ms < 0:
            msg = "timeout_ms must be >= 0"
            raise ValueError(msg)

        try:
            wire_params = to_jsonable_python(params)
        except PydanticSerializationError as exc:
            raise BatchRpcError(f"Cannot encode params for {method}: {exc}") from exc

        if notification:
            request = Request.notification(method, wire_params)
        else:
            request = Request.call(method, wire_params, request_id=next(self._ids))

        if window_ms > 0:
            response = await self._enqueue(request, window_ms)
        elif notification:
            await self._send_notification(request)
            response = None
        else:
            response = await self.raw_request(request)

        if response is None:
            return None

        if response.error is not None:
            raise RpcError.from_object(response.error)

        if result_type is None:
            return response.result
        try:
            return _adapter(result_type).validate_python(response.result)
        except ValidationError as exc:
            raise ResultDecodeError(method, str(exc)) from exc

    async def call(
        self,
        method: str,
        params: Any = None,
        *,
        result_type: Any = None,
        timeout_ms: int | None = None,
    ) -> Any:
        """Issue a call and wait for its result."""
        return await self.request(method, params, result_type=result_type, timeout_ms=timeout_ms)

    async def notify(self, method: str, params: Any = None, *, timeout_ms: int | None = None) -> None:
        """Send a notification (no id, no response)."""
        await self.request(method, params, notification=True, timeout_ms=timeout_ms)

    async def _send_notification(self, request: Request) -> None:
        try:
            raw = await self._transport.execute(encode_requests(request))
        except Exception as exc:
            logger.warning("Notification %s was not delivered: %s", request.method, exc)
            return
        if raw.strip():
            logger.debug("Ignoring reply to notification %s: %.200s", request.method, raw)

    # ------------------------------------------------------------------
    # Batch window
    # ------------------------------------------------------------------

    async def _enqueue(self, request: Request, window_ms: int) -> Response | None:
        waiter: asyncio.Future[Response] | None = None
        async with self._batch_lock:
            self._pending.append(request)
            if request.id is not None:
                waiter = asyncio.get_running_loop().create_future()
                self._waiters[request.id] = waiter
            if self._batch_task is None:
                logger.debug("Opening %d ms batch window", window_ms)
                self._batch_task = asyncio.create_task(self._run_window(window_ms))

        if waiter is None:
            return None
        try:
            return await waiter
        finally:
            self._waiters.pop(request.id, None)  # type: ignore[arg-type]

    async def _run_window(self, window_ms: int) -> None:
        await asyncio.sleep(window_ms / 1000)
        async with self._batch_lock:
            try:
                with _tracer.start_as_current_span("rpc.client.flush") as span:
                    set_rpc_attributes(
                        span,
                        **{ATTR_BATCH_WINDOW_MS: window_ms, ATTR_BATCH_SIZE: len(self._pending)},
                    )
                    await self._flush(self._pending)
            finally:
                self._pending = []
                self._batch_task = None

    async def _flush(self, pending: list[Request]) -> None:
        logger.debug("Flushing batch of %d request(s)", len(pending))
        window_ids = {r.id for r in pending if r.id is not None}

        result = await self.raw_request(pending)
        if isinstance(result, list):
            responses = result
        else:
            responses = [
                error_response(INTERNAL_ERROR, request_id=r.id) for r in pending if r.id is not None
            ]

        for response in responses:
            if response.id is None:
                continue
            waiter = self._waiters.get(response.id)
            if response.id not in window_ids or waiter is None or waiter.done():
                logger.warning("Dropping uncorrelated response for id %r", response.id)
                continue
            waiter.set_result(response)

        for request in pending:
            if request.id is None:
                continue
            waiter = self._waiters.get(request.id)
            if waiter is not None and not waiter.done():
                waiter.set_result(
                    error_response(
                        INTERNAL_ERROR,
                        data=f"No response for request id {request.id!r}",
                        request_id=request.id,
                    )
                )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(transport={self._transport!r}, batch_window_ms={self._batch_window_ms})"
