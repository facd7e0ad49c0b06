"""OpenTelemetry tracing for the client and server.

Only the OpenTelemetry *API* is a hard dependency. Until
:func:`configure_telemetry` installs an SDK provider, every tracer handed
out by :func:`get_tracer` is a no-op and spans cost next to nothing.

Usage::

    from batchrpc.utils.telemetry import get_tracer, set_rpc_attributes

    _tracer = get_tracer(__name__)

    with _tracer.start_as_current_span("rpc.server.call") as span:
        set_rpc_attributes(span, method="add", request_id=1)

Installing the SDK and exporters needs the ``otel`` extra
(``pip install batchrpc[otel]``).
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING, Any

from opentelemetry import trace

if TYPE_CHECKING:
    from batchrpc.config import TelemetrySettings

# Span attribute keys. The ``rpc.*`` keys follow the OpenTelemetry RPC
# semantic conventions, the rest are batchrpc specific.
ATTR_RPC_SYSTEM = "rpc.system"
ATTR_RPC_METHOD = "rpc.method"
ATTR_RPC_REQUEST_ID = "rpc.jsonrpc.request_id"
ATTR_RPC_ERROR_CODE = "rpc.jsonrpc.error_code"
ATTR_BATCH = "batchrpc.batch"
ATTR_BATCH_SIZE = "batchrpc.batch.size"
ATTR_BATCH_WINDOW_MS = "batchrpc.batch.window_ms"
ATTR_PAYLOAD_BYTES = "batchrpc.payload.bytes"

RPC_SYSTEM = "jsonrpc"

_INSTRUMENTATION_NAME = "batchrpc"


def get_tracer(name: str | None = None) -> trace.Tracer:
    """Return the tracer for *name* (no-op until telemetry is configured)."""
    return trace.get_tracer(name or _INSTRUMENTATION_NAME)


def set_rpc_attributes(
    span: trace.Span,
    *,
    method: str | None = None,
    request_id: int | str | None = None,
    error_code: int | None = None,
    **extra: Any,
) -> None:
    """Tag *span* as a JSON-RPC span; ``None`` values are skipped."""
    span.set_attribute(ATTR_RPC_SYSTEM, RPC_SYSTEM)
    if method is not None:
        span.set_attribute(ATTR_RPC_METHOD, method)
    if request_id is not None:
        span.set_attribute(ATTR_RPC_REQUEST_ID, str(request_id))
    if error_code is not None:
        span.set_attribute(ATTR_RPC_ERROR_CODE, error_code)
    for key, value in extra.items():
        if value is not None:
            span.set_attribute(key, value)


def configure_telemetry(settings: TelemetrySettings) -> None:
    """Install an SDK tracer provider with the exporters *settings* ask for.

    Raises:
        ImportError: ``opentelemetry-sdk`` (or, for OTLP export,
            ``opentelemetry-exporter-otlp``) is not installed.
    """
    try:
        from opentelemetry.sdk.resources import Resource  # pyright: ignore[reportMissingImports]
        from opentelemetry.sdk.trace import TracerProvider  # pyright: ignore[reportMissingImports]
    except ImportError as exc:
        msg = (
            "opentelemetry-sdk is required for configure_telemetry(). "
            "Install it with: pip install batchrpc[otel]"
        )
        raise ImportError(msg) from exc

    provider = TracerProvider(resource=Resource.create({"service.name": settings.service_name}))
    for processor in _span_processors(settings):
        provider.add_span_processor(processor)
    trace.set_tracer_provider(provider)


def _span_processors(settings: TelemetrySettings) -> Iterator[Any]:
    from opentelemetry.sdk.trace.export import (  # pyright: ignore[reportMissingImports]
        BatchSpanProcessor,
        ConsoleSpanExporter,
        SimpleSpanProcessor,
    )

    if settings.export_to_console:
        yield SimpleSpanProcessor(ConsoleSpanExporter())

    if settings.otlp_endpoint:
        try:
            from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (  # pyright: ignore[reportMissingImports]
                OTLPSpanExporter,
            )
        except ImportError as exc:
            msg = (
                "opentelemetry-exporter-otlp is required for OTLP export. "
                "Install it with: pip install batchrpc[otel]"
            )
            raise ImportError(msg) from exc
        yield BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.otlp_endpoint))
