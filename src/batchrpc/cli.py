"""batchrpc CLI entrypoint."""

from __future__ import annotations

import click

from batchrpc import __version__
from batchrpc.cli_commands._output import setup_logging
from batchrpc.config import load_config
from batchrpc.protocol.errors import ConfigError


@click.group()
@click.version_option(version=__version__, prog_name="batchrpc")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    envvar="BATCHRPC_CONFIG",
    help="YAML configuration file.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """batchrpc — JSON-RPC 2.0 client and server."""
    try:
        config = load_config(config_path)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    setup_logging("DEBUG" if verbose else config.log_level)

    if config.telemetry.enabled:
        from batchrpc.utils.telemetry import configure_telemetry

        try:
            configure_telemetry(config.telemetry)
        except ImportError as exc:
            raise click.ClickException(str(exc)) from exc

    ctx.obj = config


# Register subcommands
from batchrpc.cli_commands import register_commands  # noqa: E402

register_commands(main)

if __name__ == "__main__":
    main()
