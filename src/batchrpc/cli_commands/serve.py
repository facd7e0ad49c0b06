"""``batchrpc serve`` — expose a Server over HTTP."""

from __future__ import annotations

import asyncio

import click

from batchrpc.cli_commands._output import console
from batchrpc.cli_commands._target import load_server
from batchrpc.config import RpcConfig


@click.command()
@click.argument("target")
@click.option("--host", default=None, help="Bind address (overrides config).")
@click.option("--port", type=int, default=None, help="Bind port (overrides config).")
@click.option("--path", default=None, help="URL path of the endpoint (overrides config).")
@click.pass_obj
def serve(
    config: RpcConfig,
    target: str,
    host: str | None,
    port: int | None,
    path: str | None,
) -> None:
    """Serve the Server named by TARGET (``module:attribute``)."""
    from batchrpc.server.http import create_app, run_http

    server = load_server(target)
    overrides = {"host": host, "port": port, "path": path}
    settings = config.server.model_copy(
        update={k: v for k, v in overrides.items() if v is not None}
    )

    console.print(
        f"Serving {len(server.methods())} method(s) on "
        f"http://{settings.host}:{settings.port}{settings.path}"
    )
    app = create_app(server, path=settings.path)
    try:
        asyncio.run(
            run_http(app, host=settings.host, port=settings.port, log_level=settings.log_level)
        )
    except KeyboardInterrupt:
        console.print("[yellow]Stopped.[/yellow]")
