"""Allow running the CLI with ``python -m buildez_mcp``."""

from buildez_mcp.cli import main

if __name__ == "__main__":
    main()
