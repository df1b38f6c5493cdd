"""
Website build MCP tool.

Runs the full build chain against the Buildez API: AI plugin selection,
web ID reservation and website generation. The chain is strictly
sequential because the build call needs the plugin selection.
"""

import json
import logging
from typing import Annotated, Any, Dict, List, Optional

from fastmcp.exceptions import ToolError
from pydantic import Field

from buildez_mcp.adapters import BuildezAPI, OperationResult
from buildez_mcp.errors import BuildezError, InvalidArgumentError, UpstreamResponseError

from .web_id import generate_clean_web_id, get_available_web_id

logger = logging.getLogger(__name__)

DEFAULT_EDITOR_URL = "https://buildez.ai"

FALLBACK_WEB_ID = "website"
"""Base web ID used when a business name has no letters or digits."""

BUILD_INSTRUCTIONS = [
    "1. Open the Editor URL above",
    "2. Wait 1-2 minutes for AI to customize all content",
    "3. Review and edit text, images, colors as needed",
    "4. Click 'Publish' when ready",
]

BUILD_WEBSITE_DESCRIPTION = (
    "Build and deploy a complete website instantly. When user wants a website, "
    "ask ONLY two questions: 1) Business name? 2) Brief description of the "
    "business? Then immediately call this tool. Do not ask about colors, style, "
    "framework, or technology - the AI handles everything automatically."
)

# JSON Schema for build_website tool
BUILD_WEBSITE_SCHEMA = {
    "type": "object",
    "properties": {
        "businessName": {
            "type": "string",
            "description": "Business name",
        },
        "description": {
            "type": "string",
            "description": "Brief description of what the business does",
        },
    },
    "required": ["businessName", "description"],
}


def _validate_request(business_name: Optional[str], description: Optional[str]) -> None:
    if not business_name or not business_name.strip() or not description or not description.strip():
        raise InvalidArgumentError("Both businessName and description are required")


def _customizations(selection: Dict[str, Any]) -> Dict[str, Any]:
    """Map AI color/font suggestions onto build request fields."""
    suggestions = selection.get("colorFontSuggestions")
    if not suggestions:
        return {}

    colors = {key: suggestions.get(key) for key in ("primary", "secondary", "accent")}
    fonts = {key: suggestions.get(key) for key in ("headingFont", "bodyFont")}
    return {
        "customColors": {k: v for k, v in colors.items() if v is not None},
        "customFonts": {k: v for k, v in fonts.items() if v is not None},
    }


def _plugin_ids(selected_plugins: List[Any]) -> List[Any]:
    return [p.get("plugin") if isinstance(p, dict) else p for p in selected_plugins]


async def _build(
    api: BuildezAPI,
    business_name: str,
    description: str,
    editor_url: str,
) -> OperationResult:
    logger.info("Building website for: %s", business_name)

    logger.info("Step 1: Analyzing requirements and selecting plugins...")
    selection = await api.select_plugins(f"{business_name}: {description}", business_name)
    selected_plugins = selection.get("selectedPlugins")
    if not selected_plugins:
        raise UpstreamResponseError(
            selection.get("error") or "Failed to analyze requirements - no plugins returned",
            endpoint="/api/ai-builder",
        )
    website_type = selection.get("websiteType")
    logger.info("Selected %d plugins", len(selected_plugins))
    logger.info("Website type: %s", website_type)

    base_web_id = generate_clean_web_id(business_name) or FALLBACK_WEB_ID
    logger.info("Base web ID: %s", base_web_id)
    web_id = await get_available_web_id(api, base_web_id)
    logger.info("Final web ID: %s", web_id)

    logger.info("Step 2: Building website with AI customization...")
    build_response = await api.build_website({
        "selectedPlugins": selected_plugins,
        "websiteType": website_type,
        "explanation": (
            selection.get("enhancedPrompt")
            or selection.get("explanation")
            or description
        ),
        "projectName": business_name,
        "customWebId": web_id,
        **_customizations(selection),
    })
    if not build_response.get("success"):
        raise UpstreamResponseError(
            build_response.get("error") or "Failed to build website",
            endpoint="/api/build-website",
        )

    project_url = f"{editor_url.rstrip('/')}/editor/{web_id}"
    logger.info("Website built successfully! Editor URL: %s", project_url)

    return OperationResult.success_result(
        message=f'Website "{business_name}" created successfully!',
        data={
            "editorUrl": project_url,
            "projectId": web_id,
            "websiteType": website_type,
            "pluginsUsed": len(selected_plugins),
            "plugins": _plugin_ids(selected_plugins),
            "instructions": list(BUILD_INSTRUCTIONS),
        },
    )


async def build_website_operation(
    api: BuildezAPI,
    business_name: Optional[str],
    description: Optional[str],
    editor_url: str = DEFAULT_EDITOR_URL,
) -> OperationResult:
    """
    Build a website for a business and return its editor URL.

    Never raises: validation errors, API errors and timeouts are logged and
    returned as a failed OperationResult.

    Args:
        api: Buildez API client
        business_name: Business name (also used as project name and web ID source)
        description: Brief description of the business
        editor_url: Origin of the Buildez editor

    Returns:
        OperationResult with editorUrl, projectId, websiteType, pluginsUsed,
        plugins and instructions on success
    """
    try:
        _validate_request(business_name, description)
        return await _build(api, business_name, description, editor_url)
    except BuildezError as e:
        logger.error("Error: %s", e)
        return OperationResult.error_result(str(e))
    except Exception as e:
        logger.exception("Unexpected error while building website")
        return OperationResult.error_result(str(e) or type(e).__name__)


def make_build_website_tool(api: BuildezAPI, editor_url: str = DEFAULT_EDITOR_URL):
    """
    Create the build_website handler bound to an API client.

    The handler returns the result as indented JSON text. Failures are
    raised as ToolError so the client receives an error result carrying
    the same JSON. Both arguments default to None so missing ones reach
    the operation's own validation; register the handler with
    BUILD_WEBSITE_SCHEMA to advertise them as required.
    """

    async def build_website(
        businessName: Annotated[Optional[str], Field(description="Business name")] = None,
        description: Annotated[
            Optional[str], Field(description="Brief description of what the business does")
        ] = None,
    ):
        result = await build_website_operation(api, businessName, description, editor_url)
        text = json.dumps(result.to_dict(), indent=2, ensure_ascii=False)
        if not result.success:
            raise ToolError(text)
        return text

    return build_website
