"""Single-endpoint HTTP binding for the dispatcher.

POST <path> carries one JSON-RPC message per request. Notifications are
answered with HTTP 204 and no body.
"""

from __future__ import annotations

import asyncio
import logging

from mcp.types import PARSE_ERROR
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from table_query.core.config import DEFAULT_ENDPOINT, DEFAULT_HOST, DEFAULT_PORT
from table_query.protocol.dispatcher import JSONRPC_VERSION, Dispatcher

logger = logging.getLogger(__name__)


def _parse_error_payload(message: str = "Parse error") -> dict:
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": None,
        "error": {"code": PARSE_ERROR, "message": message},
    }


def create_app(dispatcher: Dispatcher, *, path: str = DEFAULT_ENDPOINT) -> Starlette:
    """Build the Starlette app exposing ``dispatcher`` at ``path``."""

    async def rpc_endpoint(request: Request) -> Response:
        try:
            payload = await request.json()
        except ValueError as e:
            logger.warning("Rejecting malformed JSON body: %s", e)
            return JSONResponse(_parse_error_payload(), status_code=400)

        response = await dispatcher.handle(payload)
        if response is None:
            return Response(status_code=204)
        return JSONResponse(response)

    async def health(request: Request) -> Response:
        return JSONResponse({"status": "ok"})

    return Starlette(
        routes=[
            Route(path, rpc_endpoint, methods=["POST"]),
            Route("/health", health, methods=["GET"]),
        ]
    )


# -------------------------
# MARK: Transport
# -------------------------


async def _run_http(dispatcher: Dispatcher, host: str, port: int, path: str) -> None:
    """Start HTTP server with explicit uvicorn configuration."""
    import uvicorn

    config = uvicorn.Config(
        create_app(dispatcher, path=path),
        host=host,
        port=int(port),
        log_level="info",
    )
    server = uvicorn.Server(config)
    await server.serve()


def run_http(
    dispatcher: Dispatcher,
    *,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
    path: str = DEFAULT_ENDPOINT,
) -> None:
    """Serve the dispatcher over HTTP until interrupted."""
    logger.info("Starting HTTP MCP server on %s:%d%s", host, port, path)
    asyncio.run(_run_http(dispatcher, host, port, path))


__all__ = ["create_app", "run_http"]
