"""Shared CLI output formatters."""

from __future__ import annotations

import json
import logging
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from batchrpc.protocol.errors import RpcError  # noqa: TC001
from batchrpc.protocol.models import Response  # noqa: TC001
from batchrpc.server.registry import MethodHandler  # noqa: TC001

console = Console()


def setup_logging(level: str) -> None:
    """Route library logging through rich on stderr."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def print_json_value(value: Any) -> None:
    console.print_json(json.dumps(value, default=str))


def print_rpc_error(error: RpcError) -> None:
    """Print an error object's code, message and data."""
    console.print(f"[red]RPC error {error.code}:[/red] {escape(error.message)}")
    if error.data is not None:
        console.print(f"  data: {escape(_truncate(str(error.data), 400))}")


def print_responses_table(responses: list[Response]) -> None:
    """Pretty-print responses as a table, one row per id."""
    table = Table(title="Responses")
    table.add_column("Id", style="cyan")
    table.add_column("Outcome")
    table.add_column("Value")

    for response in responses:
        if response.error is not None:
            outcome = f"[red]error {response.error.code}[/red]"
            value = response.error.message
        else:
            outcome = "[green]ok[/green]"
            value = json.dumps(response.result, default=str)
        table.add_row(
            "null" if response.id is None else str(response.id),
            outcome,
            escape(_truncate(value)),
        )

    console.print(table)


def print_methods_table(handlers: list[MethodHandler]) -> None:
    """Pretty-print registered methods with their declared types."""
    table = Table(title="Registered Methods")
    table.add_column("Method", style="cyan")
    table.add_column("Params")
    table.add_column("Result")

    for handler in handlers:
        table.add_row(
            handler.name,
            _type_name(handler.params_type),
            _type_name(handler.result_type),
        )

    console.print(table)


def _type_name(tp: Any) -> str:
    if tp is None:
        return "-"
    return escape(tp.__name__ if isinstance(tp, type) else repr(tp))


def _truncate(text: str, max_len: int = 80) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."
