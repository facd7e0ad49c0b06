"""``batchrpc methods`` — list the methods a Server registers."""

from __future__ import annotations

import click

from batchrpc.cli_commands._output import console, print_methods_table
from batchrpc.cli_commands._target import load_server


@click.command()
@click.argument("target")
def methods(target: str) -> None:
    """List methods registered on TARGET (``module:attribute``)."""
    server = load_server(target)
    names = server.methods()
    if not names:
        console.print("[yellow]No methods registered.[/yellow]")
        return

    handlers = [server.registry.get(name) for name in names]
    print_methods_table([h for h in handlers if h is not None])
