"""``batchrpc send`` — post a raw request or batch and show the responses."""

from __future__ import annotations

import asyncio
import sys
from typing import IO

import click
from pydantic import ValidationError
from rich.markup import escape

from batchrpc.cli_commands._output import console, print_json_value, print_responses_table
from batchrpc.config import RpcConfig
from batchrpc.protocol.models import (
    REQUEST_LIST,
    Request,
    Response,
    is_batch_payload,
)


@click.command()
@click.argument("url")
@click.argument("file", type=click.File("rb"), default="-")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_obj
def send(config: RpcConfig, url: str, file: IO[bytes], as_json: bool) -> None:
    """Send the request or batch in FILE (default: stdin) to URL."""
    from batchrpc.client.client import Client

    payload = file.read()
    try:
        request: Request | list[Request] = (
            REQUEST_LIST.validate_json(payload)
            if is_batch_payload(payload)
            else Request.model_validate_json(payload)
        )
    except ValidationError as exc:
        console.print(f"[red]Invalid request:[/red] {escape(str(exc))}")
        sys.exit(1)

    async def _send() -> Response | list[Response]:
        async with Client.http(
            url,
            timeout=config.client.http_timeout,
            headers=dict(config.client.headers),
        ) as client:
            return await client.raw_request(request)

    result = asyncio.run(_send())
    responses = result if isinstance(result, list) else [result]

    if as_json:
        dumped = [r.model_dump(mode="json") for r in responses]
        print_json_value(dumped if isinstance(result, list) else dumped[0])
        return

    if not responses:
        console.print("[yellow]No responses (notifications only).[/yellow]")
        return

    print_responses_table(responses)
