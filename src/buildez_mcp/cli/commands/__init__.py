"""Command groups for the buildez-mcp CLI."""
