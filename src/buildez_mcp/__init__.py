"""
Buildez MCP (Model Context Protocol) server.

Lets AI assistants build websites on the Buildez platform through a single
build_website tool and a create_website prompt.

Architecture:
- server.py: FastMCP registry and transport front-ends (stdio, HTTP/SSE)
- http_routes.py: health, descriptor and CORS for listener mode
- config.py: Configuration and the running-server record
- tools/: build_website tool, web ID resolution, prompts
- adapters/: Buildez API client and operation results
- cli/: buildez-mcp command line
"""

__version__ = "1.0.0"

__all__ = ["MCPServer", "MCPConfig", "ServerRecord", "ServerStateFile", "__version__"]

from .config import MCPConfig, ServerRecord, ServerStateFile
from .server import MCPServer
