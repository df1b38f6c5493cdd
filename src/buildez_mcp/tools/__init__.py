"""
MCP tool and prompt handlers for the Buildez server.

- build_tools: the build_website tool (plugin selection + build)
- web_id: web ID normalization and availability resolution
- prompts: the create_website prompt template
"""

from .build_tools import (
    BUILD_WEBSITE_DESCRIPTION,
    BUILD_WEBSITE_SCHEMA,
    build_website_operation,
    make_build_website_tool,
)
from .prompts import CREATE_WEBSITE_DESCRIPTION, create_website
from .web_id import generate_clean_web_id, get_available_web_id

__all__ = [
    "BUILD_WEBSITE_DESCRIPTION",
    "BUILD_WEBSITE_SCHEMA",
    "build_website_operation",
    "make_build_website_tool",
    "CREATE_WEBSITE_DESCRIPTION",
    "create_website",
    "generate_clean_web_id",
    "get_available_web_id",
]
