"""Tests for OpenTelemetry tracing helpers."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from opentelemetry import trace

from batchrpc.config import TelemetrySettings
from batchrpc.utils.telemetry import (
    _INSTRUMENTATION_NAME,
    ATTR_BATCH_SIZE,
    ATTR_RPC_ERROR_CODE,
    ATTR_RPC_METHOD,
    ATTR_RPC_REQUEST_ID,
    ATTR_RPC_SYSTEM,
    configure_telemetry,
    get_tracer,
    set_rpc_attributes,
)


class TestGetTracer:
    def test_returns_tracer(self) -> None:
        tracer = get_tracer("test.module")
        assert isinstance(tracer, trace.Tracer)

    def test_default_name(self) -> None:
        assert isinstance(get_tracer(), trace.Tracer)

    def test_noop_span(self) -> None:
        """Without the SDK configured, spans accept attributes and do nothing."""
        tracer = get_tracer("test.noop")
        with tracer.start_as_current_span("rpc.server.call") as span:
            set_rpc_attributes(span, method="add", request_id=1)


class TestSetRpcAttributes:
    def test_sets_known_keys(self) -> None:
        span = MagicMock()
        set_rpc_attributes(span, method="add", request_id=7, error_code=-32601)
        attrs = {c.args[0]: c.args[1] for c in span.set_attribute.call_args_list}
        assert attrs == {
            ATTR_RPC_SYSTEM: "jsonrpc",
            ATTR_RPC_METHOD: "add",
            ATTR_RPC_REQUEST_ID: "7",
            ATTR_RPC_ERROR_CODE: -32601,
        }

    def test_skips_none_and_accepts_extra(self) -> None:
        span = MagicMock()
        set_rpc_attributes(span, request_id=None, **{ATTR_BATCH_SIZE: 3, "skip.me": None})
        attrs = {c.args[0]: c.args[1] for c in span.set_attribute.call_args_list}
        assert attrs == {ATTR_RPC_SYSTEM: "jsonrpc", ATTR_BATCH_SIZE: 3}


class TestConfigureTelemetry:
    def test_raises_without_sdk(self) -> None:
        with patch.dict("sys.modules", {"opentelemetry.sdk.resources": None}):
            with pytest.raises(ImportError, match="opentelemetry-sdk"):
                configure_telemetry(TelemetrySettings(enabled=True))

    def test_configures_with_console(self) -> None:
        try:
            from opentelemetry.sdk.trace import TracerProvider
        except ImportError:
            pytest.skip("opentelemetry-sdk not installed")

        original = trace.get_tracer_provider()
        try:
            configure_telemetry(TelemetrySettings(service_name="test-svc", export_to_console=True))
            provider = trace.get_tracer_provider()
            assert provider is not original or isinstance(provider, TracerProvider)
        finally:
            trace.set_tracer_provider(original)

    def test_otlp_raises_without_exporter(self) -> None:
        try:
            import opentelemetry.sdk.trace  # noqa: F401
        except ImportError:
            pytest.skip("opentelemetry-sdk not installed")

        with patch.dict(
            "sys.modules",
            {"opentelemetry.exporter.otlp.proto.grpc.trace_exporter": None},
        ):
            with pytest.raises(ImportError, match="opentelemetry-exporter-otlp"):
                configure_telemetry(TelemetrySettings(otlp_endpoint="http://localhost:4317"))


class TestAttributeConstants:
    def test_batch_attributes_are_namespaced(self) -> None:
        assert ATTR_BATCH_SIZE.startswith("batchrpc.")
        assert ATTR_RPC_METHOD == "rpc.method"

    def test_instrumentation_name(self) -> None:
        assert _INSTRUMENTATION_NAME == "batchrpc"
