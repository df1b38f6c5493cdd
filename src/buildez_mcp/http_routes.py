"""
HTTP surface for listener mode.

FastMCP's SSE transport provides the event-stream endpoint and the
per-session message endpoint. This module adds the health probe, the
service descriptor, the /mcp alias and permissive CORS.
"""

import logging
from typing import List

from fastmcp import FastMCP
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from buildez_mcp import __version__

logger = logging.getLogger(__name__)

SSE_PATH = "/sse"
EVENT_STREAM_PATHS = ("/sse", "/mcp")

SERVICE_DESCRIPTOR = {
    "name": "Buildez MCP Server",
    "version": __version__,
    "endpoints": {
        "health": "/health",
        "sse": SSE_PATH,
        "mcp": "/mcp",
    },
    "documentation": "https://buildez.ai/docs/mcp",
}


async def health(request: Request) -> JSONResponse:
    """Liveness probe."""
    return JSONResponse({"status": "ok", "server": "buildez-mcp"})


async def messages_without_session(request: Request) -> Response:
    """Accept bare POST /messages; session traffic goes to /messages/?session_id=."""
    return Response(status_code=202)


async def service_descriptor(request: Request) -> Response:
    """Describe the service on every path that has no other handler."""
    if request.method == "OPTIONS":
        return Response(status_code=200)
    return JSONResponse(SERVICE_DESCRIPTOR)


class EventStreamAliasMiddleware:
    """
    Serve every event-stream path from the SSE endpoint.

    Rewrites GET and POST requests on /sse and /mcp into a GET on the SSE
    endpoint. Pure ASGI so streaming responses pass through untouched.
    """

    def __init__(self, app, sse_path: str = SSE_PATH):
        self.app = app
        self.sse_path = sse_path

    async def __call__(self, scope, receive, send):
        if (
            scope["type"] == "http"
            and scope["path"] in EVENT_STREAM_PATHS
            and scope["method"] in ("GET", "POST")
        ):
            logger.info("New SSE connection on %s", scope["path"])
            scope = dict(
                scope,
                path=self.sse_path,
                raw_path=self.sse_path.encode(),
                method="GET",
            )
        await self.app(scope, receive, send)


def register_routes(app: FastMCP) -> None:
    """Register listener-mode routes; the catch-all descriptor goes last."""
    app.custom_route("/health", methods=["GET"])(health)
    app.custom_route("/messages", methods=["POST"])(messages_without_session)
    app.custom_route("/{path:path}", methods=["GET", "POST", "OPTIONS"])(service_descriptor)


def http_middleware() -> List[Middleware]:
    """ASGI middleware for the listener app (outermost first)."""
    return [
        Middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["Content-Type"],
        ),
        Middleware(EventStreamAliasMiddleware),
    ]
