"""Transport front-ends: stdio lives in ``todoist_mcp.server``, HTTP here."""
