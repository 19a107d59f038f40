"""Allow running todoist-mcp via ``python -m todoist_mcp``."""

from todoist_mcp.cli import main

if __name__ == "__main__":
    main()
