"""MCP server management commands."""

import signal
import sys

import httpx
import typer
from rich.console import Console
from rich.table import Table

from buildez_mcp.cli.log import configure_logging
from buildez_mcp.config import MCPConfig, ServerRecord, ServerStateFile, find_project_root
from buildez_mcp.server import MCPServer

app = typer.Typer(help="MCP server management")

# stdout belongs to the MCP protocol in stdio mode
console = Console(stderr=True)

HEALTH_TIMEOUT = 2.0


def _load_config(use_config_file: bool = True) -> MCPConfig:
    try:
        return MCPConfig.load(find_project_root(), use_config_file=use_config_file)
    except ValueError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(1)


def _release_on_signal(state: ServerStateFile):
    """Drop the server record when the process is terminated or interrupted."""
    def handle(signum, frame):
        console.print(
            f"\n[yellow]Received {signal.Signals(signum).name}, shutting down MCP server...[/yellow]"
        )
        state.release()
        sys.exit(0)

    for signum in (signal.SIGTERM, signal.SIGINT):
        signal.signal(signum, handle)


def _probe_health(url: str) -> str:
    """Ask a listener's /health route whether it is serving."""
    try:
        response = httpx.get(url, timeout=HEALTH_TIMEOUT)
    except httpx.HTTPError as e:
        return f"[red]unreachable[/red] ({type(e).__name__})"

    if response.status_code != 200:
        return f"[red]HTTP {response.status_code}[/red]"
    return "[green]ok[/green]"


@app.command()
def start(
    mode: str = typer.Option(None, help="Transport: stdio or http (overrides config)"),
    host: str = typer.Option(None, help="Listener host (http only, overrides config)"),
    port: int = typer.Option(None, help="Listener port (http only, overrides config)"),
    api_url: str = typer.Option(None, help="Buildez API base URL (overrides config)"),
    config_file: bool = typer.Option(True, help="Load from .buildez/mcp-config.yaml"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """
    Start the MCP server.

    Configuration is loaded from .buildez/mcp-config.yaml if it exists and
    from environment variables, which override the file. Command-line
    options override both. While it runs, the server keeps a record of its
    PID, mode and addresses in .buildez/mcp-server.yaml.

    Examples:
        # Start with stdio transport (uses config or defaults)
        buildez-mcp server start

        # Start the HTTP/SSE listener
        buildez-mcp server start --mode http --port 3001
    """
    configure_logging(verbose)
    config = _load_config(use_config_file=config_file)

    for name, value in (("mode", mode), ("host", host), ("port", port), ("api_url", api_url)):
        if value is not None:
            setattr(config, name, value)

    try:
        server = MCPServer(
            api_url=config.api_url,
            mode=config.mode,
            host=config.host,
            port=config.port,
            editor_url=config.editor_url,
            api_timeout=config.api_timeout,
        )
    except ValueError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(1)

    state = ServerStateFile(config.state_file)
    record = ServerRecord.for_current_process(config)
    try:
        state.claim(record)
    except RuntimeError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    _release_on_signal(state)

    console.print("[green]Starting MCP server...[/green]")
    console.print(f"Mode: {record.mode}")
    console.print(f"Buildez API: {record.api_url}")
    if record.port is not None:
        console.print(f"Listening on {record.host}:{record.port}")
    console.print(f"Server record: {state.path}")

    try:
        server.start()
    except RuntimeError as e:
        console.print(f"[red]Error starting server:[/red] {e}")
        raise typer.Exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Server stopped by user[/yellow]")
    finally:
        state.release()


@app.command()
def status():
    """
    Report the running MCP server.

    Reads the server record written by `server start`. In http mode the
    listener's /health route is queried as well.
    """
    config = _load_config()
    state = ServerStateFile(config.state_file)
    record = state.live_record()

    table = Table(title="MCP Server Status", show_header=False)
    table.add_column("Property", style="cyan")
    table.add_column("Value")

    if record is None:
        table.add_row("Status", "[red]Not running[/red]")
        table.add_row("Server record", str(state.path))
        console.print(table)
        raise typer.Exit(1)

    table.add_row("Status", "[green]Running[/green]")
    table.add_row("PID", str(record.pid))
    table.add_row("Mode", record.mode)
    table.add_row("Buildez API", record.api_url)
    if record.started_at:
        table.add_row("Started", record.started_at)
    if record.health_url is not None:
        table.add_row("Listening", f"{record.host}:{record.port}")
        table.add_row("Health", _probe_health(record.health_url))

    console.print(table)


@app.command()
def stop(
    timeout: int = typer.Option(10, help="Seconds to wait for graceful shutdown"),
):
    """
    Stop the MCP server gracefully.

    Sends SIGTERM to the recorded server process and waits for it to exit.
    """
    state = ServerStateFile(_load_config().state_file)

    console.print("[yellow]Stopping MCP server...[/yellow]")
    try:
        stopped = state.stop(timeout=timeout)
    except RuntimeError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    if not stopped:
        console.print(
            f"[red]Server did not stop within {timeout} seconds.[/red]\n"
            "[yellow]Consider increasing timeout or manually killing the process.[/yellow]"
        )
        raise typer.Exit(1)
    console.print("[green]Server stopped successfully[/green]")
