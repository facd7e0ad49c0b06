"""JSON-RPC 2.0 envelope models and their wire encoding.

``params`` and ``result`` are kept as plain decoded JSON values so the
engines can route messages without knowing handler-specific shapes.
Typed decoding happens at dispatch time (server) or at the caller
(client), never here.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

from pydantic import BaseModel, Field, SerializerFunctionWrapHandler, TypeAdapter, model_serializer

from batchrpc.protocol.errors import ERROR_MESSAGES, RpcError

JSONRPC_VERSION = "2.0"

RequestId = int | str

# ---------------------------------------------------------------------------
# Envelope
# ---------------------------------------------------------------------------


class ErrorObject(BaseModel):
    """A JSON-RPC 2.0 error object."""

    code: int = Field(ge=-(2**31), le=2**31 - 1)
    message: str
    data: Any = None

    @model_serializer(mode="wrap")
    def _drop_empty_data(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        out: dict[str, Any] = handler(self)
        if self.data is None:
            out.pop("data", None)
        return out


class Request(BaseModel):
    """A JSON-RPC 2.0 request; ``id is None`` marks a notification.

    ``jsonrpc`` accepts any decoded value, including a missing one, so a bad
    version is rejected per request at dispatch time (with the id echoed)
    instead of failing the whole payload while decoding.
    """

    jsonrpc: Any = None
    id: RequestId | None = None
    method: str
    params: Any = None

    @model_serializer(mode="wrap")
    def _drop_absent(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        out: dict[str, Any] = handler(self)
        if self.id is None:
            out.pop("id", None)
        if self.params is None:
            out.pop("params", None)
        return out

    @property
    def is_notification(self) -> bool:
        return self.id is None

    @classmethod
    def call(cls, method: str, params: Any = None, *, request_id: RequestId) -> Request:
        """Build a request that expects a response."""
        return cls(jsonrpc=JSONRPC_VERSION, id=request_id, method=method, params=params)

    @classmethod
    def notification(cls, method: str, params: Any = None) -> Request:
        """Build a fire-and-forget request (no id)."""
        return cls(jsonrpc=JSONRPC_VERSION, method=method, params=params)


class Response(BaseModel):
    """A JSON-RPC 2.0 response.

    Exactly one of ``result`` / ``error`` is written on the wire: ``error``
    when set, otherwise ``result`` (which may be ``null``).
    """

    jsonrpc: str = JSONRPC_VERSION
    id: RequestId | None = None
    result: Any = None
    error: ErrorObject | None = None

    @model_serializer(mode="wrap")
    def _one_of_result_error(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        out: dict[str, Any] = handler(self)
        if self.error is None:
            out.pop("error", None)
        else:
            out.pop("result", None)
        return out

    @classmethod
    def success(cls, request_id: RequestId | None, result: Any) -> Response:
        return cls(id=request_id, result=result)

    @classmethod
    def failure(cls, request_id: RequestId | None, error: RpcError) -> Response:
        return cls(id=request_id, error=error.to_object())


def error_response(
    code: int,
    data: Any = None,
    request_id: RequestId | None = None,
) -> Response:
    """Synthesize an error response for one of the reserved codes."""
    return Response(
        id=request_id,
        error=ErrorObject(code=code, message=ERROR_MESSAGES.get(code, ""), data=data),
    )


# ---------------------------------------------------------------------------
# Wire helpers
# ---------------------------------------------------------------------------

REQUEST_LIST: TypeAdapter[list[Request]] = TypeAdapter(list[Request])
RESPONSE_LIST: TypeAdapter[list[Response]] = TypeAdapter(list[Response])


def encode_requests(requests: Request | Sequence[Request]) -> bytes:
    """Serialise a single request or a batch."""
    if isinstance(requests, Request):
        return requests.model_dump_json().encode()
    return REQUEST_LIST.dump_json(list(requests))


def encode_responses(responses: Response | Sequence[Response]) -> bytes:
    """Serialise a single response or a batch."""
    if isinstance(responses, Response):
        return responses.model_dump_json().encode()
    return RESPONSE_LIST.dump_json(list(responses))


def is_batch_payload(payload: bytes) -> bool:
    """A payload is a batch when its first non-whitespace byte is ``[``."""
    return payload.lstrip()[:1] == b"["


def is_valid_json(payload: bytes) -> bool:
    """Return ``True`` if *payload* is syntactically valid JSON."""
    try:
        json.loads(payload)
    except ValueError:
        return False
    return True
