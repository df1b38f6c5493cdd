"""buildez-mcp command line interface."""

import typer

from buildez_mcp import __version__

from .commands import build, server

app = typer.Typer(
    name="buildez-mcp",
    help="Buildez MCP server: build websites from AI assistants",
    no_args_is_help=True,
)
app.add_typer(server.app, name="server")
app.command("build")(build.build)
app.command("slug")(build.slug)


@app.command()
def version():
    """Show the buildez-mcp version."""
    typer.echo(__version__)


def main():
    app()
