"""``batchrpc call`` — invoke a remote method over HTTP."""

from __future__ import annotations

import asyncio
import json
import sys
from typing import Any

import click

from batchrpc.cli_commands._output import console, print_json_value, print_rpc_error
from batchrpc.config import RpcConfig
from batchrpc.protocol.errors import BatchRpcError, RpcError


@click.command()
@click.argument("url")
@click.argument("method")
@click.argument("params", required=False)
@click.option("--notify", is_flag=True, help="Send as a notification (no id, no result).")
@click.pass_obj
def call(config: RpcConfig, url: str, method: str, params: str | None, notify: bool) -> None:
    """Call METHOD on the JSON-RPC server at URL.

    PARAMS, if given, is a JSON array or object.
    """
    from batchrpc.client.client import Client

    try:
        parsed: Any = json.loads(params) if params is not None else None
    except json.JSONDecodeError as exc:
        raise click.BadParameter(f"must be JSON ({exc})", param_hint="PARAMS") from exc

    async def _call() -> Any:
        async with Client.http(
            url,
            timeout=config.client.http_timeout,
            headers=dict(config.client.headers),
        ) as client:
            if notify:
                await client.notify(method, parsed, timeout_ms=0)
                return None
            return await client.call(method, parsed, timeout_ms=0)

    try:
        result = asyncio.run(_call())
    except RpcError as exc:
        print_rpc_error(exc)
        sys.exit(1)
    except BatchRpcError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        sys.exit(1)

    if notify:
        console.print("[green]Notification sent.[/green]")
        return

    print_json_value(result)
