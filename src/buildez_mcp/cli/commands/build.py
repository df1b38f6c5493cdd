"""One-shot build commands that run without an MCP client."""

import asyncio
import json

import typer
from rich.console import Console

from buildez_mcp.adapters import BuildezAPI
from buildez_mcp.cli.log import configure_logging
from buildez_mcp.config import MCPConfig, find_project_root
from buildez_mcp.tools import build_website_operation, generate_clean_web_id, get_available_web_id
from buildez_mcp.tools.build_tools import FALLBACK_WEB_ID

console = Console()
err_console = Console(stderr=True)


def _load_config() -> MCPConfig:
    try:
        return MCPConfig.load(find_project_root())
    except ValueError as e:
        err_console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(1)


def build(
    business_name: str = typer.Argument(..., help="Business name"),
    description: str = typer.Argument(..., help="Brief description of what the business does"),
    api_url: str = typer.Option(None, help="Buildez API base URL (overrides config)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """
    Build a website directly, the same way the build_website tool does.

    Examples:
        buildez-mcp build "Joe's Pizza" "family pizzeria in Boston"
    """
    configure_logging(verbose)
    config = _load_config()
    api = BuildezAPI(api_url or config.api_url, timeout=config.api_timeout)

    result = asyncio.run(
        build_website_operation(api, business_name, description, config.editor_url)
    )
    console.print_json(json.dumps(result.to_dict(), ensure_ascii=False))

    if not result.success:
        raise typer.Exit(1)


def slug(
    business_name: str = typer.Argument(..., help="Business name"),
    check: bool = typer.Option(False, "--check", help="Resolve availability against the Buildez API"),
    api_url: str = typer.Option(None, help="Buildez API base URL (overrides config)"),
):
    """
    Show the web ID a business name maps to.

    Examples:
        buildez-mcp slug "Joe's Pizza"
        buildez-mcp slug "Joe's Pizza" --check
    """
    web_id = generate_clean_web_id(business_name) or FALLBACK_WEB_ID

    if check:
        config = _load_config()
        api = BuildezAPI(api_url or config.api_url, timeout=config.api_timeout)
        web_id = asyncio.run(get_available_web_id(api, web_id))

    console.print(web_id, highlight=False)
