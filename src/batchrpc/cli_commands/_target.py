"""Resolve ``module:attribute`` targets to a :class:`Server`."""

from __future__ import annotations

import importlib

import click

from batchrpc.server.dispatcher import Server


def load_server(target: str) -> Server:
    """Import *target* (``package.module:attribute``) and return the Server it names.

    The attribute may also be a zero-argument factory returning a Server.
    """
    module_name, _, attr = target.partition(":")
    if not module_name or not attr:
        msg = f"Target must look like 'module:attribute', got {target!r}"
        raise click.BadParameter(msg, param_hint="TARGET")

    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise click.ClickException(f"Cannot import {module_name}: {exc}") from exc

    try:
        obj = getattr(module, attr)
    except AttributeError as exc:
        raise click.ClickException(f"{module_name} has no attribute {attr!r}") from exc

    if not isinstance(obj, Server) and callable(obj):
        obj = obj()
    if not isinstance(obj, Server):
        raise click.ClickException(f"{target} is not a batchrpc Server")
    return obj
