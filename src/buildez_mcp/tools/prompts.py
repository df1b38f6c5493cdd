"""Prompt templates exposed to MCP clients."""

from typing import Annotated

from pydantic import Field

CREATE_WEBSITE_DESCRIPTION = "Build a complete website for your business"


def create_website(
    businessName: Annotated[str, Field(description="Your business name")],
    description: Annotated[
        str,
        Field(description="What does your business do? (services, location, target audience)"),
    ],
) -> str:
    """Render the user message that asks the assistant to build a website."""
    return f'Build a website for "{businessName}". Business description: {description}'
