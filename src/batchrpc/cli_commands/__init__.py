"""CLI subcommand registration."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all subcommands on the CLI group."""
    from batchrpc.cli_commands.call import call
    from batchrpc.cli_commands.methods import methods
    from batchrpc.cli_commands.send import send
    from batchrpc.cli_commands.serve import serve

    cli.add_command(call)
    cli.add_command(send)
    cli.add_command(serve)
    cli.add_command(methods)
