"""
FastMCP server initialization and configuration.

Main server class that owns the operation registry (the build_website tool
and the create_website prompt) and runs it over one of two transports:
stdio for local clients, or an HTTP/SSE listener for remote ones.
"""

import logging
import socket
from dataclasses import dataclass, field
from typing import Any, Dict, Literal, Optional

import uvicorn
from fastmcp import FastMCP
from fastmcp.tools import Tool
from starlette.applications import Starlette

from buildez_mcp import __version__
from buildez_mcp.adapters import API_TIMEOUT, BuildezAPI
from buildez_mcp.http_routes import SSE_PATH, http_middleware, register_routes
from buildez_mcp.tools import (
    BUILD_WEBSITE_DESCRIPTION,
    BUILD_WEBSITE_SCHEMA,
    CREATE_WEBSITE_DESCRIPTION,
    create_website,
    make_build_website_tool,
)
from buildez_mcp.tools.build_tools import DEFAULT_EDITOR_URL

logger = logging.getLogger(__name__)

SERVER_NAME = "buildez-mcp-server"


@dataclass
class MCPServer:
    """
    Buildez MCP server instance.

    Builds the FastMCP registry once at construction; both transports
    serve that same registry.

    Attributes:
        api_url: Base URL of the Buildez web app
        mode: Transport mode ("stdio" or "http")
        host: Listener bind address (http only)
        port: Listener port (http only)
        editor_url: Origin used to build editor links
        api_timeout: Timeout in seconds for build requests
        api: Buildez API client (created from api_url when not given)
    """

    api_url: str = "http://localhost:3000"
    mode: Literal["stdio", "http"] = "stdio"
    host: str = "0.0.0.0"
    port: int = 3001
    editor_url: str = DEFAULT_EDITOR_URL
    api_timeout: float = API_TIMEOUT
    api: Optional[BuildezAPI] = None
    _app: Optional[FastMCP] = field(default=None, init=False, repr=False)

    def __post_init__(self):
        """Validate configuration and build the registry."""
        if self.mode not in ("stdio", "http"):
            raise ValueError(
                f"Invalid mode '{self.mode}'. "
                "Must be 'stdio' or 'http'."
            )

        if self.api is None:
            self.api = BuildezAPI(self.api_url, timeout=self.api_timeout)

        self._app = FastMCP(SERVER_NAME, version=__version__)

        self._register_tools()
        self._register_prompts()
        register_routes(self._app)

    @property
    def app(self) -> FastMCP:
        """The FastMCP registry served by both transports."""
        return self._app

    def _check_port_available(self, host: str, port: int) -> bool:
        """
        Check if port is available for binding.

        Args:
            host: Host address to check
            port: Port number to check

        Returns:
            True if port is available, False otherwise
        """
        try:
            with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
                s.bind((host, port))
                return True
        except OSError:
            return False

    def _register_tools(self):
        """Register all MCP tools with the server."""
        self.register_tool(
            name="build_website",
            description=BUILD_WEBSITE_DESCRIPTION,
            handler=make_build_website_tool(self.api, self.editor_url),
            parameters=BUILD_WEBSITE_SCHEMA,
        )

    def _register_prompts(self):
        """Register all MCP prompts with the server."""
        self._app.prompt(
            name="create_website",
            title="Create Website",
            description=CREATE_WEBSITE_DESCRIPTION,
        )(create_website)

    def register_tool(
        self,
        name: str,
        description: str,
        handler,
        parameters: Optional[Dict[str, Any]] = None,
    ):
        """
        Register an MCP tool with the server.

        Args:
            name: Tool name (e.g., "build_website")
            description: Human-readable tool description
            handler: Callable that executes the tool operation
            parameters: JSON Schema advertised to clients instead of the
                one derived from the handler signature
        """
        if not self._app:
            raise RuntimeError("FastMCP app not initialized")

        tool = Tool.from_function(handler, name=name, description=description)
        if parameters is not None:
            tool = tool.model_copy(update={"parameters": parameters})
        self._app.add_tool(tool)

    def http_app(self) -> Starlette:
        """Build the listener-mode ASGI app (SSE transport plus extra routes)."""
        return self._app.http_app(
            path=SSE_PATH,
            transport="sse",
            middleware=http_middleware(),
        )

    def start(self):
        """
        Start the MCP server with configured transport.

        Raises:
            RuntimeError: If port unavailable (http) or the transport fails to start
        """
        if not self._app:
            raise RuntimeError("FastMCP app not initialized. This should not happen.")

        if self.mode == "stdio":
            # stdout carries protocol frames only; logs go to stderr
            logger.info("Starting in STDIO mode...")
            try:
                self._app.run()
            except Exception as e:
                raise RuntimeError(f"Failed to start MCP server with stdio transport: {e}") from e

        elif self.mode == "http":
            if not self._check_port_available(self.host, self.port):
                raise RuntimeError(
                    f"Port {self.port} already in use. "
                    f"Choose a different port or stop the conflicting service."
                )

            logger.info("HTTP server listening on http://%s:%d", self.host, self.port)
            logger.info("SSE endpoint: http://%s:%d%s", self.host, self.port, SSE_PATH)
            try:
                uvicorn.run(self.http_app(), host=self.host, port=self.port, log_level="info")
            except Exception as e:
                raise RuntimeError(
                    f"Failed to start MCP server on {self.host}:{self.port}: {e}"
                ) from e
