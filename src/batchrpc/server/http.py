"""HTTP adapter — serves a :class:`Server` as a Starlette application.

POST bodies go to :meth:`Server.handle` and its bytes are written back
verbatim. Other HTTP methods are accepted but answered with an empty body:
nothing is dispatched for them.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import uvicorn
from starlette.applications import Starlette
from starlette.requests import ClientDisconnect
from starlette.requests import Request as HttpRequest
from starlette.responses import PlainTextResponse
from starlette.responses import Response as HttpResponse
from starlette.routing import Route

if TYPE_CHECKING:
    from batchrpc.server.dispatcher import Server

__all__ = ["create_app", "run_http"]

logger = logging.getLogger(__name__)

_ANY_METHOD = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def create_app(server: Server, *, path: str = "/") -> Starlette:
    """Create the ASGI application that exposes *server* at *path*."""

    async def endpoint(request: HttpRequest) -> HttpResponse:
        if request.method != "POST":
            return HttpResponse()

        try:
            body = await request.body()
        except (ClientDisconnect, OSError):
            logger.warning("Could not read request body from %s", request.client)
            return PlainTextResponse("Server error", status_code=500)

        output = await server.handle(body)
        if not output:
            return HttpResponse()
        return HttpResponse(content=output, media_type="application/json")

    return Starlette(routes=[Route(path, endpoint, methods=_ANY_METHOD)])


async def run_http(
    app: Starlette,
    *,
    host: str = "127.0.0.1",
    port: int = 8000,
    log_level: str = "info",
) -> None:
    """Serve *app* with uvicorn until cancelled."""
    config = uvicorn.Config(
        app,
        host=host,
        port=port,
        log_level=log_level,
        access_log=False,
    )
    server = uvicorn.Server(config)

    logger.info("Starting JSON-RPC server on http://%s:%s", host, port)
    try:
        await server.serve()
    except Exception:
        logger.exception("HTTP server error")
        raise
    finally:
        logger.info("JSON-RPC server shutdown complete")
