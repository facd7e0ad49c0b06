"""Server — dispatches JSON-RPC payloads to registered handlers.

Every payload goes through parse → validate → resolve → decode params →
invoke → encode. A failure at any step becomes an error response (or, for
a notification, nothing at all); :meth:`Server.handle` never raises.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable
from typing import Any

from opentelemetry import trace
from pydantic import ValidationError
from pydantic_core import PydanticSerializationError

from batchrpc.protocol.errors import (
    InternalError,
    InvalidParamsError,
    InvalidRequestError,
    MethodNotFoundError,
    ParseError,
    RpcError,
)
from batchrpc.protocol.models import (
    JSONRPC_VERSION,
    Request,
    RequestId,
    Response,
    encode_responses,
    is_batch_payload,
)
from batchrpc.server.registry import HandlerFunction, MethodRegistry
from batchrpc.utils.telemetry import (
    ATTR_BATCH,
    ATTR_BATCH_SIZE,
    ATTR_PAYLOAD_BYTES,
    get_tracer,
    set_rpc_attributes,
)

logger = logging.getLogger(__name__)

_tracer = get_tracer(__name__)


class Server:
    """Maintains a method registry and answers JSON-RPC payloads.

    Usage::

        server = Server()
        server.handle_func("add", lambda p: p[0] + p[1], params_type=tuple[int, int])

        @server.method("greet", params_type=Greeting)
        async def greet(params: Greeting) -> str:
            return f"hello {params.name}"

        body = await server.handle(b'{"jsonrpc":"2.0","id":1,"method":"add","params":[2,3]}')
    """

    def __init__(self, registry: MethodRegistry | None = None) -> None:
        self._registry = registry if registry is not None else MethodRegistry()

    @property
    def registry(self) -> MethodRegistry:
        return self._registry

    def handle_func(
        self,
        method: str,
        function: HandlerFunction,
        params_type: Any = None,
        result_type: Any = None,
    ) -> None:
        """Register *function* under *method*, replacing any previous handler.

        With a *params_type* the function receives the decoded params as its
        single argument; without one it is called with no arguments.
        """
        self._registry.register(method, function, params_type, result_type)
        logger.debug("Registered method %s", method)

    def method(
        self,
        name: str | None = None,
        *,
        params_type: Any = None,
        result_type: Any = None,
    ) -> Callable[[HandlerFunction], HandlerFunction]:
        """Decorator form of :meth:`handle_func`; *name* defaults to the function name."""

        def decorator(function: HandlerFunction) -> HandlerFunction:
            self.handle_func(name or function.__name__, function, params_type, result_type)
            return function

        return decorator

    def methods(self) -> list[str]:
        """Return the registered method names."""
        return self._registry.names()

    # ------------------------------------------------------------------
    # Single request
    # ------------------------------------------------------------------

    async def call(self, request: Request) -> Response | None:
        """Dispatch one request.

        Returns ``None`` for notifications, except when the envelope itself
        has the wrong version: that always produces a response.
        """
        if request.jsonrpc != JSONRPC_VERSION:
            return Response.failure(request.id, InvalidRequestError(data="Invalid JSON-RPC version"))

        with _tracer.start_as_current_span("rpc.server.call") as span:
            set_rpc_attributes(span, method=request.method, request_id=request.id)

            try:
                result = await self._invoke(request)
            except RpcError as exc:
                set_rpc_attributes(span, error_code=exc.code)
                if request.is_notification:
                    logger.debug("Notification %s failed: %s", request.method, exc)
                    return None
                return Response.failure(request.id, exc)

        if request.is_notification:
            return None
        return Response.success(request.id, result)

    async def _invoke(self, request: Request) -> Any:
        handler = self._registry.get(request.method)
        if handler is None:
            raise MethodNotFoundError(data=request.method)

        value = None
        if handler.takes_params:
            try:
                value = handler.decode(request.params)
            except ValidationError as exc:
                raise InvalidParamsError(data=str(exc)) from exc

        try:
            result = await handler.invoke(value)
        except RpcError:
            raise
        except Exception as exc:
            logger.exception("Handler for %s raised", request.method)
            raise InternalError(data=str(exc)) from exc

        try:
            return handler.encode(result)
        except (PydanticSerializationError, TypeError, ValueError) as exc:
            raise InternalError(data=str(exc)) from exc

    # ------------------------------------------------------------------
    # Raw payloads
    # ------------------------------------------------------------------

    async def handle(self, payload: bytes) -> bytes:
        """Answer a raw single or batch payload.

        Returns ``b""`` when there is nothing to send back (a notification,
        or a batch made only of notifications).
        """
        with _tracer.start_as_current_span("rpc.server.handle") as span:
            set_rpc_attributes(span, **{ATTR_PAYLOAD_BYTES: len(payload)})
            try:
                output = await self._handle(payload)
            except RpcError as exc:
                set_rpc_attributes(span, error_code=exc.code)
                output = Response.failure(None, exc)
            except Exception as exc:
                logger.exception("Unexpected failure while dispatching payload")
                output = Response.failure(None, InternalError(data=str(exc)))

            if output is None:
                return b""
            try:
                return encode_responses(output)
            except (PydanticSerializationError, TypeError, ValueError) as exc:
                logger.exception("Cannot encode response")
                return encode_responses(Response.failure(None, InternalError(data=str(exc))))

    async def _handle(self, payload: bytes) -> Response | list[Response] | None:
        if not payload.strip():
            raise ParseError(data="Empty request")

        span = trace.get_current_span()
        if is_batch_payload(payload):
            entries = self._decode_batch(payload)
            span.set_attribute(ATTR_BATCH, True)
            span.set_attribute(ATTR_BATCH_SIZE, len(entries))
            responses = await asyncio.gather(*(self._dispatch(e) for e in entries))
            collected = [r for r in responses if r is not None]
            return collected or None

        span.set_attribute(ATTR_BATCH, False)
        return await self._dispatch(_decode_entry(_parse_json(payload)))

    async def _dispatch(self, entry: Request | Response) -> Response | None:
        # A Response here is the rejection of an entry that failed to decode.
        if isinstance(entry, Response):
            return entry
        return await self.call(entry)

    @staticmethod
    def _decode_batch(payload: bytes) -> list[Request | Response]:
        data = _parse_json(payload)
        if not isinstance(data, list) or not data:
            raise InvalidRequestError(data="Empty request")
        return [_decode_entry(item) for item in data]


def _parse_json(payload: bytes) -> Any:
    try:
        return json.loads(payload)
    except ValueError as exc:
        raise ParseError(data=str(exc)) from exc


def _decode_entry(item: Any) -> Request | Response:
    """Decode one request object, or build its -32600 answer.

    The id is echoed when the object carries a usable one, so a single bad
    entry never costs the rest of a batch their correlation.
    """
    try:
        return Request.model_validate(item)
    except ValidationError as exc:
        return Response.failure(_salvage_id(item), InvalidRequestError(data=str(exc)))


def _salvage_id(item: Any) -> RequestId | None:
    if not isinstance(item, dict):
        return None
    candidate = item.get("id")
    if isinstance(candidate, (int, str)) and not isinstance(candidate, bool):
        return candidate
    return None
