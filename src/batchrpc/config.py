"""Configuration — pydantic settings models and the YAML loader.

Example ``batchrpc.yaml``::

    log_level: INFO
    client:
      endpoint: http://localhost:8000/
      batch_window_ms: 20
      headers:
        X-Api-Key: ${RPC_API_KEY}
    server:
      host: 0.0.0.0
      port: 8000
    telemetry:
      enabled: true
      otlp_endpoint: http://localhost:4317
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from batchrpc.client.transport import DEFAULT_HTTP_TIMEOUT
from batchrpc.protocol.errors import ConfigError


class ClientSettings(BaseModel):
    """Client-side settings."""

    endpoint: str | None = None
    batch_window_ms: int = Field(default=0, ge=0)
    http_timeout: float = Field(default=DEFAULT_HTTP_TIMEOUT, gt=0)
    headers: dict[str, str] = Field(default_factory=lambda: dict[str, str]())


class ServerSettings(BaseModel):
    """HTTP serving settings."""

    host: str = "127.0.0.1"
    port: int = Field(default=8000, ge=0, le=65535)
    path: str = "/"
    log_level: str = "info"


class TelemetrySettings(BaseModel):
    """Optional telemetry configuration."""

    enabled: bool = False
    service_name: str = "batchrpc"
    export_to_console: bool = False
    otlp_endpoint: str | None = None


class RpcConfig(BaseModel):
    """Top-level configuration file."""

    log_level: str = "WARNING"
    client: ClientSettings = Field(default_factory=ClientSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)
    telemetry: TelemetrySettings = Field(default_factory=TelemetrySettings)


class ConfigLoader:
    """Load and validate a YAML configuration file into an :class:`RpcConfig`."""

    def __init__(self, path: Path) -> None:
        self._path = path

    def load(self) -> RpcConfig:
        """Read YAML, interpolate env vars, and validate.

        Environment variables in the form ``${VAR}`` or ``$VAR`` are expanded
        using :func:`os.path.expandvars` before YAML parsing. An empty file
        yields the defaults.

        Raises:
            ConfigError: On read errors, YAML parse errors or schema validation failures.
        """
        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Cannot read {self._path}: {exc}") from exc

        expanded = os.path.expandvars(raw)

        try:
            data: Any = yaml.safe_load(expanded)
        except yaml.YAMLError as exc:
            raise ConfigError(f"YAML parse error: {exc}") from exc

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError("Configuration YAML must be a mapping")

        try:
            return RpcConfig.model_validate(data)
        except ValidationError as exc:
            raise ConfigError(str(exc)) from exc


def load_config(path: str | Path | None) -> RpcConfig:
    """Load *path*, or return the defaults when no path is given."""
    if path is None:
        return RpcConfig()
    return ConfigLoader(Path(path)).load()
